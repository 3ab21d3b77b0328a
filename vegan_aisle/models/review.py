"""Review models."""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from vegan_aisle.database import Base
from vegan_aisle.models.mixins import TimestampMixin


class Review(Base, TimestampMixin):
    """A user's rating and comment for a product."""

    __tablename__ = "reviews"
    __table_args__ = (UniqueConstraint("user_id", "product_id", name="uq_review_user_product"),)

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(String(36), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    rating = Column(Integer, nullable=False, index=True)  # 1-5
    title = Column(String(200), nullable=True)
    comment = Column(Text, nullable=False)
    photo_urls = Column(JSON, nullable=False, default=list)
    status = Column(String(20), nullable=False, default="pending", index=True)
    trusted_contribution = Column(Boolean, nullable=False, default=False)
    needs_review = Column(Boolean, nullable=False, default=True)
    helpful_count = Column(Integer, nullable=False, default=0)
    reviewed_at = Column(DateTime(timezone=True), nullable=False)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    approved_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    author = relationship("User", foreign_keys=[user_id])
    helpful_votes = relationship(
        "ReviewHelpfulVote", back_populates="review", cascade="all, delete-orphan"
    )

    @property
    def author_name(self) -> str | None:
        return self.author.display_name if self.author else None


class ReviewHelpfulVote(Base, TimestampMixin):
    """One user's 'helpful' vote on a review."""

    __tablename__ = "review_helpful_votes"
    __table_args__ = (UniqueConstraint("review_id", "user_id", name="uq_helpful_vote"),)

    id = Column(Integer, primary_key=True, index=True)
    review_id = Column(Integer, ForeignKey("reviews.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    review = relationship("Review", back_populates="helpful_votes")
