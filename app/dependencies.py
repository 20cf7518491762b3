from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models import Project, User
from app.services import project_service, user_service


async def get_acting_user(
    x_user_id: str | None = Header(
        None,
        description="Id of the user performing the request.",
    ),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Resolve the ``X-User-Id`` header to a User.

    This identifies the caller so writes can record who made them; it is
    not an authentication mechanism and grants no permissions.
    """
    if not x_user_id:
        raise HTTPException(status_code=401, detail="X-User-Id header required")
    user = await user_service.get_user(db, x_user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="Unknown acting user")
    return user


async def get_project_or_404(project_id: int, db: AsyncSession = Depends(get_db)) -> Project:
    """Path dependency yielding the ORM Project for ``{project_id}``."""
    return await project_service.get_project(db, project_id)
