"""Database models."""

from app.models.admins import admins, metadata

__all__ = [
    "admins",
    "metadata",
]
