"""SQLAlchemy models exposed for metadata creation and imports."""
from .session import UserSession
from .token import PasswordResetToken, RefreshToken
from .user import User, UserRole, UserStatus

__all__ = ["User", "UserRole", "UserStatus", "RefreshToken", "PasswordResetToken", "UserSession"]
