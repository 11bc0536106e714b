"""Application service layer.

Stable import surface for routers:
    from app.services import ...
"""

from .verify import verify
from .checkauth import check_access

__all__ = [
    "verify",
    "check_access",
]
