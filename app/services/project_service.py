"""
Project service: business logic for the Project aggregate.

Design notes
------------
- Sections are stored on the project as an ordered id list and resolved
  through ``section_service`` whenever a full view is returned.  The
  resolution is all-or-nothing: a missing section fails the operation.
- ``team_users`` is kept duplicate-free by a scan-and-append in
  ``_updated_team_users``; every path that adds a member goes through it.
- ``Project.version`` is SQLAlchemy's ``version_id_col``.  A write against
  a row changed by another transaction raises ``StaleDataError`` at flush,
  surfaced here as ``ConflictError``.
- Invitations are persisted with a hashed, time-bounded token.  Accepting
  requires the plaintext token from the email; a caller-supplied address
  alone is never enough.
- Service functions flush but do not commit; the transaction boundary is
  owned by the ``get_db`` dependency in the router layer.
"""
import logging
import secrets
from datetime import datetime, timedelta, timezone
from hashlib import sha256
from urllib.parse import urlencode

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from app import mailer
from app.config import settings
from app.exceptions import BadRequestError, ConflictError, MailDeliveryError, NotFoundError
from app.models import Invitation, InvitationStatus, Project, Section, User, utc_now
from app.schemas import (
    AcceptInviteRequest,
    AssignUserProjectRequest,
    CreateProjectRequest,
    InviteUserProjectRequest,
    RespondInviteRequest,
)
from app.services import section_service, user_service

logger = logging.getLogger(__name__)

INVITE_SUBJECT = "Invite user to project"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _hash_token(token: str) -> str:
    return sha256(token.encode()).hexdigest()


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _updated_team_users(project: Project, member_id: str) -> list[str]:
    """Return a copy of the project's team with *member_id* appended once."""
    team_users = list(project.team_users or [])
    if not any(existing == member_id for existing in team_users):
        team_users.append(member_id)
    return team_users


def _project_to_dict(project: Project, sections: list[Section] | None = None) -> dict:
    """
    Serialise a Project.  When *sections* is given the resolved Section
    objects are embedded under ``sections`` (detail view).
    """
    data = {
        "id": project.id,
        "title": project.title,
        "description": project.description,
        "created_by": project.created_by,
        "team_users": list(project.team_users or []),
        "section_ids": list(project.section_ids or []),
        "version": project.version,
        "created_at": project.created_at.isoformat() if project.created_at else None,
        "updated_at": project.updated_at.isoformat() if project.updated_at else None,
    }
    if sections is not None:
        data["sections"] = [section_service.section_to_dict(s) for s in sections]
    return data


async def _flush(db: AsyncSession) -> None:
    try:
        await db.flush()
    except StaleDataError as exc:
        raise ConflictError("Project was modified by another request") from exc


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------

async def get_all_projects(db: AsyncSession) -> list[dict]:
    """Return every project, highest id first.  Sections stay as ids."""
    result = await db.execute(select(Project).order_by(Project.id.desc()))
    return [_project_to_dict(p) for p in result.scalars().all()]


async def get_project(db: AsyncSession, project_id: int) -> Project:
    """Return the Project ORM instance or raise NotFoundError."""
    result = await db.execute(select(Project).where(Project.id == project_id))
    project = result.scalar_one_or_none()
    if project is None:
        raise NotFoundError("Project not found")
    return project


async def get_project_detail(db: AsyncSession, project_id: int) -> dict:
    """Return the project with every section reference resolved."""
    project = await get_project(db, project_id)
    sections = await section_service.get_sections_by_ids(db, project.section_ids)
    return _project_to_dict(project, sections)


async def create_project(db: AsyncSession, data: CreateProjectRequest, user: User) -> dict:
    sections = await section_service.get_sections_by_ids(db, data.sections)

    project = Project(
        title=data.title,
        description=data.description,
        section_ids=[s.id for s in sections],
        team_users=[],
        created_by=user.id,
    )
    db.add(project)
    await db.flush()

    logger.info("Project %s created by %s", project.id, user.id)
    return _project_to_dict(project, sections)


async def update_project(
    db: AsyncSession, project: Project, data: CreateProjectRequest, user: User
) -> dict:
    """
    Merge *data* onto *project* and persist it.

    ``sections`` replaces the section list when present in the payload.
    ``created_by`` is set to the acting user on every update.
    A ``version`` that differs from the stored revision raises
    ConflictError before anything is written.
    """
    if data.version is not None and data.version != project.version:
        raise ConflictError(
            f"Project version is {project.version}, request was based on {data.version}"
        )

    section_ids = data.sections if "sections" in data.model_fields_set else project.section_ids
    sections = await section_service.get_sections_by_ids(db, section_ids)

    for field, value in data.model_dump(
        exclude_unset=True, exclude={"sections", "version"}
    ).items():
        setattr(project, field, value)
    project.section_ids = [s.id for s in sections]
    project.created_by = user.id

    await _flush(db)
    return _project_to_dict(project, sections)


async def delete_project(db: AsyncSession, project_id: int) -> dict:
    """Delete by primary key and report how many rows went away."""
    result = await db.execute(delete(Project).where(Project.id == project_id))
    affected = result.rowcount or 0
    if affected:
        logger.info("Project %s deleted", project_id)
    return {"affected": affected}


async def assign_member_to_project(
    db: AsyncSession,
    request: AssignUserProjectRequest,
    project: Project,
    user: User,
) -> dict:
    member = await user_service.get_user(db, request.user_id)
    if member is None:
        raise BadRequestError("User not found")

    team_users = _updated_team_users(project, member.id)
    sections = await section_service.get_sections_by_ids(db, project.section_ids)

    project.team_users = team_users
    project.created_by = user.id
    await _flush(db)
    return _project_to_dict(project, sections)


# ---------------------------------------------------------------------------
# Invitations
# ---------------------------------------------------------------------------

async def _find_invitation(db: AsyncSession, token: str) -> Invitation | None:
    result = await db.execute(
        select(Invitation).where(Invitation.token_hash == _hash_token(token))
    )
    return result.scalar_one_or_none()


async def _respond_to_invitation(
    db: AsyncSession, invitation: Invitation, accept: bool
) -> dict:
    """
    Move a pending invitation to accepted or rejected.

    An invitation past its expiry is marked expired instead and reported
    with ``status`` False.
    """
    if invitation.status != InvitationStatus.PENDING.value:
        raise BadRequestError(f"Invitation is already {invitation.status}")

    now = utc_now()
    if _as_utc(invitation.expires_at) <= now:
        invitation.status = InvitationStatus.EXPIRED.value
        await db.flush()
        logger.info("Invitation %s expired before it was answered", invitation.id)
        return {"status": False}

    if accept:
        member = await user_service.get_user_by_email(db, invitation.email)
        if member is None:
            raise BadRequestError("User not found")
        project = await get_project(db, invitation.project_id)
        project.team_users = _updated_team_users(project, member.id)
        invitation.status = InvitationStatus.ACCEPTED.value
    else:
        invitation.status = InvitationStatus.REJECTED.value

    invitation.responded_at = now
    await _flush(db)
    logger.info("Invitation %s %s", invitation.id, invitation.status)
    return {"status": True}


async def invite_user(
    db: AsyncSession, payload: InviteUserProjectRequest, user: User | None = None
) -> bool:
    """
    Create a pending invitation for an existing user and email them the
    accept link.

    The project is loaded first, so an unknown project raises
    NotFoundError even when the email is unknown too.  Any earlier pending
    invitation for the same project and address is expired.
    """
    member = await user_service.get_user_by_email(db, payload.email)
    project = await get_project_detail(db, payload.project_id)

    if member is None:
        raise BadRequestError("User not found")

    email = user_service.normalize_email(member.email)
    await db.execute(
        update(Invitation)
        .where(
            Invitation.project_id == project["id"],
            Invitation.email == email,
            Invitation.status == InvitationStatus.PENDING.value,
        )
        .values(status=InvitationStatus.EXPIRED.value)
    )

    token = secrets.token_urlsafe(32)
    invitation = Invitation(
        project_id=project["id"],
        email=email,
        token_hash=_hash_token(token),
        invited_by=user.id if user else None,
        expires_at=utc_now() + timedelta(days=settings.INVITE_EXPIRE_DAYS),
    )
    db.add(invitation)
    await db.flush()

    query = urlencode({"token": token, "projectId": project["id"], "email": member.email})
    accept_url = f"{settings.APP_URL}/invites/accept?{query}"

    try:
        await mailer.send_email(
            to=member.email,
            subject=INVITE_SUBJECT,
            html_body=mailer.render_invite_email(project["title"], accept_url),
            text=f"You are invited to join the {project['title']} project: {accept_url}",
        )
    except MailDeliveryError as exc:
        raise BadRequestError("Error sending email") from exc

    logger.info("Invitation %s sent to %s for project %s", invitation.id, member.email, project["id"])
    return True


async def accept_invite(db: AsyncSession, payload: AcceptInviteRequest) -> dict:
    """
    Accept an invitation on behalf of *payload.email*.

    Fails closed: an unknown address, a missing project, or a token that
    does not belong to this project and address all raise before the team
    is touched.
    """
    member = await user_service.get_user_by_email(db, payload.email)
    if member is None:
        raise BadRequestError("User not found")

    project = await get_project(db, payload.project_id)
    invitation = await _find_invitation(db, payload.token)
    if (
        invitation is None
        or invitation.project_id != project.id
        or invitation.email != user_service.normalize_email(payload.email)
    ):
        raise BadRequestError("Invalid invite token")

    return await _respond_to_invitation(db, invitation, accept=True)


async def accept_or_reject(db: AsyncSession, request: RespondInviteRequest) -> dict:
    """Answer an invitation identified only by its token."""
    invitation = await _find_invitation(db, request.token)
    if invitation is None:
        raise BadRequestError("Invalid invite token")
    return await _respond_to_invitation(db, invitation, accept=request.accept)
