from __future__ import annotations

"""
🎬 Glacier • Film
=================

The owning parent of every archived binary. Export download tokens name a
film id (`resourceId`); an export is downloadable with that token only when
its `film_id` matches.
"""

from typing import TYPE_CHECKING, List

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from glacier.db.base_class import Base, PKMixin, TimestampMixin

if TYPE_CHECKING:  # pragma: no cover
    from glacier.db.models.export import Export
    from glacier.db.models.thumbnail import Thumbnail


class Film(PKMixin, TimestampMixin, Base):
    """Catalog film entity (only what delivery needs)."""

    __tablename__ = "films"

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    exports: Mapped[List["Export"]] = relationship(
        back_populates="film",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    thumbnails: Mapped[List["Thumbnail"]] = relationship(
        back_populates="film",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
