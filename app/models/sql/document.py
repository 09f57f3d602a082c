"""Document SQLAlchemy model.

Only metadata lives here; the Markdown body is kept in the content store
under ``content_ref``.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional
from uuid import UUID, uuid4

from sqlalchemy import Boolean, DateTime, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.postgres import Base

if TYPE_CHECKING:
    from app.models.sql.feature import Feature
    from app.models.sql.user import User


class Document(Base):
    """Markdown document metadata."""

    __tablename__ = "documents"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    title: Mapped[str] = mapped_column(String(255), default="Untitled", nullable=False)
    status: Mapped[str] = mapped_column(String(50), default="draft", nullable=False)
    is_favorite: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    content_ref: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    feature_id: Mapped[Optional[UUID]] = mapped_column(
        ForeignKey("features.id", ondelete="CASCADE"), index=True, nullable=True
    )
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    # Relationships
    owner: Mapped["User"] = relationship("User", back_populates="documents")
    feature: Mapped[Optional["Feature"]] = relationship(
        "Feature", back_populates="documents"
    )

    def __repr__(self) -> str:
        return f"<Document(id={self.id}, title={self.title})>"
