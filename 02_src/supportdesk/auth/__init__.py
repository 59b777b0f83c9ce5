"""Authentication module."""

from .service import AuthService, IAuthService

__all__ = ["AuthService", "IAuthService"]
