"""
User service: lookups and creation for the User aggregate.

Projects reference users by id only; this module is the single place that
reads the ``users`` table.  Lookups return ``None`` on a miss and leave it
to the caller to decide whether that is an error.
"""
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import User
from app.schemas import UserCreate


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _user_to_dict(user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "display_name": user.display_name,
        "created_at": user.created_at.isoformat() if user.created_at else None,
    }


async def get_users(db: AsyncSession) -> list[dict]:
    """Return all users, newest first."""
    result = await db.execute(select(User).order_by(User.created_at.desc()))
    return [_user_to_dict(u) for u in result.scalars().all()]


async def get_user(db: AsyncSession, user_id: str) -> User | None:
    return await db.get(User, user_id)


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Case-insensitive lookup; ``create_user`` stores addresses lowercased."""
    result = await db.execute(
        select(User).where(func.lower(User.email) == normalize_email(email))
    )
    return result.scalar_one_or_none()


async def create_user(db: AsyncSession, data: UserCreate) -> dict:
    """
    Create a new user and return its serialised dict.

    The address is lowercased before insert so the unique constraint on
    ``email`` also rejects case variants; the router translates the
    integrity error into a 409.
    """
    user = User(email=normalize_email(data.email), display_name=data.display_name)
    if data.id:
        user.id = data.id
    db.add(user)
    await db.flush()
    return _user_to_dict(user)
