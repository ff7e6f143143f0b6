"""Shared schema types.

Partial updates distinguish three states for nullable fields:
omitted (leave unchanged), explicit null (clear), and a value (set).
Omission is represented by the UNSET sentinel, never by a magic string.
"""

from typing import Any, Final

from pydantic import BaseModel, Field


class Unset:
    """Marker type for a field that was not provided."""

    _instance: "Unset | None" = None

    def __new__(cls) -> "Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Final = Unset()


def fields_or_unset(model: BaseModel, *names: str) -> dict[str, Any]:
    """Map each named field to its value, or UNSET if the client omitted it.

    Relies on pydantic's model_fields_set, which records only fields present
    in the input (an explicit null counts as present).
    """
    return {name: getattr(model, name) if name in model.model_fields_set else UNSET for name in names}


class UploadPayload(BaseModel):
    """An inline file upload.

    `data` is base64, optionally wrapped as a data URL
    ("data:image/png;base64,..."). `content_type` may be omitted when the data
    URL carries one.
    """

    data: str = Field(..., min_length=1)
    content_type: str | None = None
    filename: str | None = Field(default=None, max_length=255)
