"""
Testimonial database model.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, id_column, utcnow

if TYPE_CHECKING:
    from .analyst import Analyst


class Testimonial(Base, TimestampMixin):
    """Testimonial given by an analyst."""

    __tablename__ = "testimonials"
    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_testimonials_rating"),
    )

    id: Mapped[str] = id_column()
    analyst_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("analysts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    text: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[str] = mapped_column(String(255), nullable=False)
    company: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    rating: Mapped[int] = mapped_column(Integer, default=5, nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    is_published: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    analyst: Mapped["Analyst"] = relationship(back_populates="testimonials")

    def __repr__(self) -> str:
        return f"<Testimonial(id={self.id}, analyst_id={self.analyst_id})>"
