from uuid import UUID
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.db.session import get_db
from vidshare.db.repositories import tweet_repo
from vidshare.dependencies import get_current_user
from vidshare.errors import NotFound
from vidshare.models.user import User
from vidshare.schemas.tweet import TweetBody, TweetResponse, TweetWithOwner
from vidshare.services import graph_service

router = APIRouter()


@router.post("", response_model=TweetResponse, status_code=status.HTTP_201_CREATED)
async def create_tweet(
    body: TweetBody,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    tweet = await tweet_repo.create_tweet(db, current_user.id, body.content)
    await db.commit()
    return tweet


@router.get("/user/{user_id}", response_model=list[TweetWithOwner])
async def get_user_tweets(user_id: UUID, db: AsyncSession = Depends(get_db)):
    return await graph_service.user_tweets(db, user_id)


@router.patch("/{tweet_id}", response_model=TweetResponse)
async def update_tweet(
    tweet_id: UUID,
    body: TweetBody,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    tweet = await tweet_repo.get_owned_tweet(db, tweet_id, current_user.id)
    if not tweet:
        raise NotFound("Tweet not found")
    tweet = await tweet_repo.update_tweet(db, tweet, body.content)
    await db.commit()
    return tweet


@router.delete("/{tweet_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tweet(
    tweet_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    tweet = await tweet_repo.get_owned_tweet(db, tweet_id, current_user.id)
    if not tweet:
        raise NotFound("Tweet not found")
    await tweet_repo.delete_tweet(db, tweet)
    await db.commit()
