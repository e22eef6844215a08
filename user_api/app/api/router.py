"""
Top-level router for the ``/api`` prefix.

Aggregates the domain routers.  The health check is not part of this
router; it is mounted at the application root by ``main.create_app``.
"""

from fastapi import APIRouter

from .endpoints import users

router = APIRouter()

router.include_router(users.router, prefix="/users", tags=["users"])
