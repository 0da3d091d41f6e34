from __future__ import annotations

"""
🖼️ Glacier • Thumbnail
======================

Public preview image of a film. Bytes live at `<GLACIER_PATH>/thumbs/<id>`.
"""

from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from glacier.db.base_class import Base, PKMixin, TimestampMixin

if TYPE_CHECKING:  # pragma: no cover
    from glacier.db.models.film import Film


class Thumbnail(PKMixin, TimestampMixin, Base):
    """Film thumbnail (public, cacheable)."""

    __tablename__ = "thumbnails"

    film_id: Mapped[int] = mapped_column(
        ForeignKey("films.id", ondelete="CASCADE"), nullable=False, index=True
    )
    mime: Mapped[Optional[str]] = mapped_column(String(127), nullable=True)
    width: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    height: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    __table_args__ = (
        CheckConstraint("(width IS NULL OR width > 0)", name="width_pos"),
        CheckConstraint("(height IS NULL OR height > 0)", name="height_pos"),
    )

    film: Mapped["Film"] = relationship(back_populates="thumbnails")
