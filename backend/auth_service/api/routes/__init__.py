"""Route modules for the authentication API."""
from . import auth

__all__ = ["auth"]
