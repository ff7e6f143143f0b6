"""Thin API launcher.

This is the uvicorn entrypoint. All application logic lives in the kiosk package.
Run with: uvicorn main:app --reload

Note: The app instance is created here (not in kiosk.app) so importing
create_app has no side effects and tests can build their own instances.
"""

from kiosk.app import add_request_id_middleware, create_app

app = create_app()
# Add request-id middleware LAST so it runs FIRST (outermost)
add_request_id_middleware(app)

__all__ = ["app"]
