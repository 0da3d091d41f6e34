from __future__ import annotations

"""
📦 Glacier • Export
===================

A downloadable rendition of a film. Bytes live at `<GLACIER_PATH>/exports/<id>`;
this row carries what the response needs: MIME type, the filename offered on
`?download`, and the owning film.
"""

from typing import TYPE_CHECKING, Optional

from sqlalchemy import BigInteger, CheckConstraint, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from glacier.db.base_class import Base, PKMixin, TimestampMixin

if TYPE_CHECKING:  # pragma: no cover
    from glacier.db.models.film import Film


class Export(PKMixin, TimestampMixin, Base):
    """Film export (token protected)."""

    __tablename__ = "exports"

    film_id: Mapped[int] = mapped_column(
        ForeignKey("films.id", ondelete="CASCADE"), nullable=False, index=True
    )
    filename: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    mime: Mapped[Optional[str]] = mapped_column(String(127), nullable=True)
    size: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True, doc="Bytes")

    __table_args__ = (
        CheckConstraint("(size IS NULL OR size >= 0)", name="size_nonneg"),
    )

    film: Mapped["Film"] = relationship(back_populates="exports")
