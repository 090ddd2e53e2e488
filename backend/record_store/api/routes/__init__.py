"""Route modules for the record store API."""
from . import password_reset_tokens, refresh_tokens, sessions, users

__all__ = ["users", "refresh_tokens", "sessions", "password_reset_tokens"]
