"""Request dependencies shared by the function routes"""

from fastapi import Request

from ..core.config import Settings, get_settings


def app_settings(request: Request) -> Settings:
    """Settings the app was built with, falling back to the environment"""
    return getattr(request.app.state, "settings", None) or get_settings()
