"""Shared schemas for narfetch."""

from narfetch.schemas.narinfo import ArchiveLocation, NarInfo

__all__ = ["ArchiveLocation", "NarInfo"]
