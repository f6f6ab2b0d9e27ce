"""Repository layer - typed data access per model."""

from __future__ import annotations

from row_lite.repository.base import Repository

__all__ = [
    "Repository",
]
