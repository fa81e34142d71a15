from sqlalchemy.orm import joinedload, selectinload, undefer

from travelmap.core.database.models import PinRow, UserRow


def eager_load_pin_options():
    """Return the options to eagerly load a pin's attributes."""
    return (
        joinedload(PinRow.user, innerjoin=True),
        selectinload(PinRow.photos),
        undefer(PinRow.like_count),
    )


def eager_load_user_options():
    """Return the options to eagerly load a user's public attributes."""
    return (
        undefer(UserRow.follower_count),
        undefer(UserRow.following_count),
    )
