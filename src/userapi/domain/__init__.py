"""Domain models for the user API."""

from .users import User

__all__ = ["User"]
