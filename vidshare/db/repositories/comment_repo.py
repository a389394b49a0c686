from uuid import UUID
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.db.store import execute, flush
from vidshare.models.comment import Comment


async def get_owned_comment(session: AsyncSession, comment_id: UUID, owner_id: UUID) -> Comment | None:
    result = await execute(
        session, select(Comment).where(Comment.id == comment_id, Comment.owner_id == owner_id)
    )
    return result.scalars().one_or_none()


async def create_comment(session: AsyncSession, owner_id: UUID, video_id: UUID, content: str) -> Comment:
    comment = Comment(owner_id=owner_id, video_id=video_id, content=content)
    session.add(comment)
    await flush(session)
    return comment


async def update_comment(session: AsyncSession, comment: Comment, content: str) -> Comment:
    comment.content = content
    await flush(session)
    return comment


async def delete_comment(session: AsyncSession, comment: Comment) -> None:
    await session.delete(comment)
    await flush(session)
