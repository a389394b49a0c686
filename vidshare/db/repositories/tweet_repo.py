from uuid import UUID
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.db.store import execute, flush
from vidshare.models.tweet import Tweet


async def get_owned_tweet(session: AsyncSession, tweet_id: UUID, owner_id: UUID) -> Tweet | None:
    result = await execute(session, select(Tweet).where(Tweet.id == tweet_id, Tweet.owner_id == owner_id))
    return result.scalars().one_or_none()


async def create_tweet(session: AsyncSession, owner_id: UUID, content: str) -> Tweet:
    tweet = Tweet(owner_id=owner_id, content=content)
    session.add(tweet)
    await flush(session)
    return tweet


async def update_tweet(session: AsyncSession, tweet: Tweet, content: str) -> Tweet:
    tweet.content = content
    await flush(session)
    return tweet


async def delete_tweet(session: AsyncSession, tweet: Tweet) -> None:
    await session.delete(tweet)
    await flush(session)
