"""
Top-level package for the User API.

All functionality lives in submodules under ``app``; the application
factory is ``user_api.app.main.create_app``.
"""

__all__ = []
