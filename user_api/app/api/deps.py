"""
FastAPI dependencies.

Components are built once by ``create_app`` and stored on
``app.state``; endpoints reach them through these functions instead
of module-level globals.
"""

from fastapi import Request

from user_api.app.services.user_service import UserService


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service
