# glacier/db/base.py
"""
Glacier • SQLAlchemy Base registry
==================================

Import all ORM models so their tables are registered on `Base.metadata`.
Used by Alembic autogeneration and by the repository tests.

Keep this file import-only; no runtime logic.
"""

from glacier.db.base_class import Base

from glacier.db.models.film import Film
from glacier.db.models.export import Export
from glacier.db.models.thumbnail import Thumbnail

__all__ = [
    "Base",
    "Film",
    "Export",
    "Thumbnail",
]
