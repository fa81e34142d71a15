from typing import Optional

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from travelmap.core.database.helpers import eager_load_user_options
from travelmap.core.database.models import UserRow
from travelmap.core.types import UserId
from travelmap.features.users.entities import InternalUser


class UserStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user(self, user_id: Optional[UserId] = None, uid: Optional[str] = None) -> Optional[InternalUser]:
        query = sa.select(UserRow).options(*eager_load_user_options()).execution_options(populate_existing=True)
        if user_id:
            query = query.where(UserRow.id == user_id)
        if uid:
            query = query.where(UserRow.uid == uid)
        result = await self.db.execute(query)
        user: Optional[UserRow] = result.scalars().first()
        return InternalUser.model_validate(user) if user else None

    async def create_user(self, uid: str, display_name: str) -> InternalUser:
        """Register the Firebase user, raising a ValueError if they already exist."""
        user = UserRow(uid=uid, display_name=display_name)
        try:
            self.db.add(user)
            await self.db.commit()
            await self.db.refresh(user, ["id"])
        except IntegrityError:
            await self.db.rollback()
            raise ValueError("User already exists")
        created_user = await self.get_user(user_id=user.id)
        if created_user is None:
            raise ValueError("Created user but failed to retrieve it.")
        return created_user
