"""
FastAPI dependencies shared by the routers
"""

from fastapi import Request

from cardano.config import Settings
from database.connection import get_session  # noqa: F401  (re-exported for routers)


def get_settings(request: Request) -> Settings:
    """Settings built once in create_app and kept on app.state"""
    return request.app.state.settings
