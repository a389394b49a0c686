import enum
import uuid
from dataclasses import dataclass
from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime

from vidshare.db.base import Base


class LikeKind(str, enum.Enum):
    video = "video"
    comment = "comment"
    tweet = "tweet"


@dataclass(frozen=True)
class LikeTarget:
    """Exactly one liked entity: a video, a comment or a tweet."""

    kind: LikeKind
    id: uuid.UUID


class Like(Base):
    __tablename__ = "likes"
    __table_args__ = (
        UniqueConstraint("liked_by_id", "target_kind", "target_id", name="uq_likes_actor_target"),
        CheckConstraint("target_kind IN ('video', 'comment', 'tweet')", name="target_kind"),
        Index("ix_likes_target", "target_kind", "target_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    liked_by_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    target_kind: Mapped[str] = mapped_column(String(16), nullable=False)
    # Weak reference into videos/comments/tweets depending on target_kind
    target_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)

    @property
    def target(self) -> LikeTarget:
        return LikeTarget(LikeKind(self.target_kind), self.target_id)
