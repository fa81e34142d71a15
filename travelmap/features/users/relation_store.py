import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from travelmap.core.database.models import FollowRow
from travelmap.core.types import UserId


class RelationStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def is_following(self, follower_id: UserId, following_id: UserId) -> bool:
        """Return whether `follower_id` follows `following_id`."""
        query = sa.select(FollowRow.id).where(FollowRow.follower_id == follower_id, FollowRow.following_id == following_id)
        result = await self.db.execute(query.exists().select())
        is_following: bool = result.scalar()  # type: ignore
        return is_following

    async def get_follower_count(self, user_id: UserId) -> int:
        query = sa.select(sa.func.count()).where(FollowRow.following_id == user_id)
        result = await self.db.execute(query)
        count: int = result.scalar()  # type: ignore
        return count

    async def follow_user(self, follower_id: UserId, following_id: UserId) -> None:
        if follower_id == following_id:
            raise ValueError("Cannot follow yourself")
        self.db.add(FollowRow(follower_id=follower_id, following_id=following_id))
        try:
            await self.db.commit()
        except IntegrityError:
            # Most likely we followed in another request between querying and inserting
            await self.db.rollback()

    async def unfollow_user(self, follower_id: UserId, following_id: UserId) -> bool:
        """Remove the follow, returning true if it existed."""
        query = sa.delete(FollowRow).where(FollowRow.follower_id == follower_id, FollowRow.following_id == following_id)
        result = await self.db.execute(query)
        await self.db.commit()
        did_delete: bool = result.rowcount > 0  # type: ignore
        return did_delete

    async def toggle_follow(self, follower_id: UserId, following_id: UserId) -> bool:
        """Flip the follow relation, returning whether `follower_id` now follows `following_id`."""
        if await self.is_following(follower_id, following_id):
            await self.unfollow_user(follower_id, following_id)
            return False
        await self.follow_user(follower_id, following_id)
        return True
