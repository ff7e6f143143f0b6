"""Bubble tree service layer.

All navigation-tree business logic lives here.
Routes may not contain domain logic or raw DB access - they must call these functions.

Tree invariants enforced at write time:
- A referenced parent must exist; null parent means root level
- A bubble is never its own parent
- Reparenting never creates a cycle (the new parent may not be a descendant)
- A referenced media asset must exist when it is attached

Deleting a bubble deletes its whole subtree. The descendant set is gathered
level by level with an explicit worklist, one query per depth, so deep trees
cost neither recursion depth nor one round-trip per node.

Known gap: descendant collection and the final delete are not isolated from
concurrent inserts, so a child created mid-delete can be left with a dangling
parent_bubble_id.
"""

from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from kiosk.db.models import Bubble, Media
from kiosk.db.session import transaction
from kiosk.errors import ApiErrorCode, InvalidRequestError, NotFoundError
from kiosk.logging import get_logger
from kiosk.schemas.bubble import BubbleOut
from kiosk.schemas.common import UNSET, Unset
from kiosk.schemas.media import MediaOut
from kiosk.services.media import media_exists

logger = get_logger(__name__)


# =============================================================================
# Helpers
# =============================================================================


def _bubble_not_found(message: str = "Bubble not found") -> NotFoundError:
    return NotFoundError(ApiErrorCode.E_BUBBLE_NOT_FOUND, message)


def get_bubble_or_404(db: Session, bubble_id: UUID) -> Bubble:
    """Get the bubble ORM row or raise NotFoundError."""
    bubble = db.get(Bubble, bubble_id)
    if bubble is None:
        raise _bubble_not_found()
    return bubble


def _bubble_exists(db: Session, bubble_id: UUID) -> bool:
    return db.execute(select(Bubble.id).where(Bubble.id == bubble_id)).first() is not None


def _to_out_many(db: Session, bubbles: list[Bubble]) -> list[BubbleOut]:
    """Serialize bubbles with media joined and child counts resolved.

    Uses one query for media and one for child counts regardless of list size.
    """
    if not bubbles:
        return []

    media_ids = {b.media_id for b in bubbles if b.media_id is not None}
    media_by_id: dict[UUID, Media] = {}
    if media_ids:
        rows = db.execute(select(Media).where(Media.id.in_(media_ids))).scalars().all()
        media_by_id = {m.id: m for m in rows}

    bubble_ids = [b.id for b in bubbles]
    count_rows = db.execute(
        select(Bubble.parent_bubble_id, func.count(Bubble.id))
        .where(Bubble.parent_bubble_id.in_(bubble_ids))
        .group_by(Bubble.parent_bubble_id)
    ).all()
    child_counts = {parent_id: count for parent_id, count in count_rows}

    result = []
    for bubble in bubbles:
        media = media_by_id.get(bubble.media_id) if bubble.media_id else None
        result.append(
            BubbleOut(
                id=bubble.id,
                title=bubble.title,
                parent_bubble_id=bubble.parent_bubble_id,
                media_id=bubble.media_id,
                media=MediaOut.model_validate(media) if media is not None else None,
                kind="leaf" if bubble.media_id is not None else "branch",
                child_count=child_counts.get(bubble.id, 0),
                created_at=bubble.created_at,
                updated_at=bubble.updated_at,
            )
        )
    return result


def _to_out(db: Session, bubble: Bubble) -> BubbleOut:
    return _to_out_many(db, [bubble])[0]


def collect_descendant_ids(db: Session, bubble_id: UUID) -> list[UUID]:
    """Collect the ids of all transitive descendants of a bubble.

    Breadth-first over parent_bubble_id, one IN query per tree level.
    A visited set guards against cycles already present in stored data.

    Returns:
        Descendant ids in breadth-first order (the bubble itself excluded).
    """
    descendants: list[UUID] = []
    visited: set[UUID] = {bubble_id}
    frontier: list[UUID] = [bubble_id]

    while frontier:
        children = db.execute(
            select(Bubble.id).where(Bubble.parent_bubble_id.in_(frontier))
        ).scalars().all()

        frontier = []
        for child_id in children:
            if child_id in visited:
                continue
            visited.add(child_id)
            descendants.append(child_id)
            frontier.append(child_id)

    return descendants


def _assert_not_descendant(db: Session, bubble_id: UUID, new_parent_id: UUID) -> None:
    """Reject a reparent that would place a bubble under its own subtree.

    Walks up from the proposed parent; reaching bubble_id means a cycle.
    """
    current: UUID | None = new_parent_id
    seen: set[UUID] = set()

    while current is not None and current not in seen:
        if current == bubble_id:
            raise InvalidRequestError(
                ApiErrorCode.E_BUBBLE_CYCLE,
                "A bubble cannot be moved under one of its own descendants",
            )
        seen.add(current)
        current = db.execute(
            select(Bubble.parent_bubble_id).where(Bubble.id == current)
        ).scalar_one_or_none()


# =============================================================================
# Operations
# =============================================================================


def create_bubble(
    db: Session,
    title: str,
    parent_bubble_id: UUID | None = None,
    media_id: UUID | None = None,
) -> BubbleOut:
    """Create a bubble.

    Args:
        db: Database session.
        title: Display title (trimmed, must be non-empty).
        parent_bubble_id: Parent bubble, or None for a root bubble.
        media_id: Media asset to attach, making this a leaf.

    Returns:
        The created bubble with media resolved.

    Raises:
        InvalidRequestError: If the title is empty after trimming.
        NotFoundError: If the parent bubble or media does not exist.
    """
    title = (title or "").strip()
    if not title:
        raise InvalidRequestError(ApiErrorCode.E_TITLE_REQUIRED, "Title is required")

    if parent_bubble_id is not None and not _bubble_exists(db, parent_bubble_id):
        raise _bubble_not_found("Parent bubble not found")

    if media_id is not None and not media_exists(db, media_id):
        raise NotFoundError(ApiErrorCode.E_MEDIA_NOT_FOUND, "Media not found")

    bubble = Bubble(title=title, parent_bubble_id=parent_bubble_id, media_id=media_id)
    with transaction(db):
        db.add(bubble)

    logger.info(
        "bubble_created",
        bubble_id=str(bubble.id),
        parent_bubble_id=str(parent_bubble_id) if parent_bubble_id else None,
    )
    return _to_out(db, bubble)


def get_bubble(db: Session, bubble_id: UUID) -> BubbleOut:
    """Get a single bubble with media resolved.

    Raises:
        NotFoundError: If the bubble does not exist.
    """
    return _to_out(db, get_bubble_or_404(db, bubble_id))


def list_bubbles(db: Session, parent_bubble_id: UUID | None | Unset = UNSET) -> list[BubbleOut]:
    """List bubbles.

    Args:
        parent_bubble_id: UNSET for every bubble, None for root bubbles only,
            or a bubble id for its direct children.

    Returns:
        Bubbles ordered by creation time with media joined.
    """
    query = select(Bubble).order_by(Bubble.created_at.asc(), Bubble.id.asc())
    if parent_bubble_id is None:
        query = query.where(Bubble.parent_bubble_id.is_(None))
    elif not isinstance(parent_bubble_id, Unset):
        query = query.where(Bubble.parent_bubble_id == parent_bubble_id)

    bubbles = list(db.execute(query).scalars().all())
    return _to_out_many(db, bubbles)


def update_bubble(
    db: Session,
    bubble_id: UUID,
    *,
    title: str | None | Unset = UNSET,
    parent_bubble_id: UUID | None | Unset = UNSET,
    media_id: UUID | None | Unset = UNSET,
) -> BubbleOut:
    """Update a bubble in place.

    Each relation field has three states: UNSET leaves it unchanged, None
    clears it (detach to root / remove media), a value sets it.

    A title that is empty after trimming leaves the current title unchanged.

    Raises:
        NotFoundError: If the bubble, new parent, or new media does not exist.
        InvalidRequestError: If the bubble would become its own parent or ancestor.
    """
    bubble = get_bubble_or_404(db, bubble_id)

    if not isinstance(parent_bubble_id, Unset) and parent_bubble_id is not None:
        if parent_bubble_id == bubble_id:
            raise InvalidRequestError(
                ApiErrorCode.E_BUBBLE_SELF_PARENT, "A bubble cannot be its own parent"
            )
        if parent_bubble_id != bubble.parent_bubble_id:
            if not _bubble_exists(db, parent_bubble_id):
                raise _bubble_not_found("Parent bubble not found")
            _assert_not_descendant(db, bubble_id, parent_bubble_id)

    if not isinstance(media_id, Unset) and media_id is not None and media_id != bubble.media_id:
        if not media_exists(db, media_id):
            raise NotFoundError(ApiErrorCode.E_MEDIA_NOT_FOUND, "Media not found")
        if bubble.media_id is None:
            child_count = db.execute(
                select(func.count(Bubble.id)).where(Bubble.parent_bubble_id == bubble_id)
            ).scalar_one()
            if child_count:
                logger.warning(
                    "media_attached_to_parent_bubble",
                    bubble_id=str(bubble_id),
                    child_count=child_count,
                )

    if isinstance(title, str) and title.strip():
        bubble.title = title.strip()
    if not isinstance(parent_bubble_id, Unset):
        bubble.parent_bubble_id = parent_bubble_id
    if not isinstance(media_id, Unset):
        bubble.media_id = media_id

    with transaction(db):
        db.add(bubble)

    logger.info("bubble_updated", bubble_id=str(bubble_id))
    return _to_out(db, bubble)


def delete_bubble(db: Session, bubble_id: UUID) -> int:
    """Delete a bubble and all of its transitive descendants.

    Descendants are removed in one batch, then the bubble itself. There is
    no compensation beyond the enclosing transaction's rollback.

    Returns:
        Number of bubbles deleted (descendants + 1).

    Raises:
        NotFoundError: If the bubble does not exist.
    """
    get_bubble_or_404(db, bubble_id)

    with transaction(db):
        descendant_ids = collect_descendant_ids(db, bubble_id)
        if descendant_ids:
            db.execute(
                delete(Bubble)
                .where(Bubble.id.in_(descendant_ids))
                .execution_options(synchronize_session=False)
            )
        db.execute(
            delete(Bubble)
            .where(Bubble.id == bubble_id)
            .execution_options(synchronize_session=False)
        )

    db.expunge_all()

    deleted_count = len(descendant_ids) + 1
    logger.info("bubble_deleted", bubble_id=str(bubble_id), deleted_count=deleted_count)
    return deleted_count
