from __future__ import annotations

from typing import Optional

from fastapi import Request

from .ad import DirectoryConfig, open_session
from .services.checkauth import SessionFactory


def get_directory_config(request: Request) -> Optional[DirectoryConfig]:
    return getattr(request.app.state, "directory_config", None)


def get_session_factory() -> SessionFactory:
    return open_session
