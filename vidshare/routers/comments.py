from uuid import UUID
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.db.session import get_db
from vidshare.db.repositories import comment_repo, video_repo
from vidshare.dependencies import get_current_user
from vidshare.errors import NotFound
from vidshare.models.user import User
from vidshare.schemas.comment import CommentBody, CommentPage, CommentResponse
from vidshare.services import graph_service

router = APIRouter()


@router.get("/{video_id}", response_model=CommentPage)
async def get_video_comments(
    video_id: UUID,
    page: int = Query(1),
    limit: int = Query(10),
    db: AsyncSession = Depends(get_db),
):
    return await graph_service.video_comments(db, video_id, page, limit)


@router.post("/{video_id}", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def add_comment(
    video_id: UUID,
    body: CommentBody,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    video = await video_repo.get_video_by_id(db, video_id)
    if not video:
        raise NotFound("Video not found")
    comment = await comment_repo.create_comment(db, current_user.id, video.id, body.content)
    await db.commit()
    return comment


@router.patch("/c/{comment_id}", response_model=CommentResponse)
async def update_comment(
    comment_id: UUID,
    body: CommentBody,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    comment = await comment_repo.get_owned_comment(db, comment_id, current_user.id)
    if not comment:
        raise NotFound("Comment not found")
    comment = await comment_repo.update_comment(db, comment, body.content)
    await db.commit()
    return comment


@router.delete("/c/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment(
    comment_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    comment = await comment_repo.get_owned_comment(db, comment_id, current_user.id)
    if not comment:
        raise NotFound("Comment not found")
    await comment_repo.delete_comment(db, comment)
    await db.commit()
