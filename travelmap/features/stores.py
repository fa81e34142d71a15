from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from travelmap.core.database.engine import get_db
from travelmap.features.pins.pin_store import PinStore
from travelmap.features.users.relation_store import RelationStore
from travelmap.features.users.user_store import UserStore


def get_pin_store(db: AsyncSession = Depends(get_db)):
    return PinStore(db=db)


def get_relation_store(db: AsyncSession = Depends(get_db)):
    return RelationStore(db=db)


def get_user_store(db: AsyncSession = Depends(get_db)):
    return UserStore(db=db)
