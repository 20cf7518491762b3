from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.dependencies import get_acting_user, get_project_or_404
from app.models import Project, User
from app.schemas import (
    AcceptInviteRequest,
    AssignUserProjectRequest,
    CreateProjectRequest,
    DeleteResult,
    InviteUserProjectRequest,
    InviteUserProjectResponse,
    ProjectDetail,
    ProjectResponse,
    RespondInviteRequest,
)
from app.services import project_service

router = APIRouter(prefix="/api/v1/projects", tags=["projects"])

@router.get("", response_model=list[ProjectResponse])
async def list_projects(db: AsyncSession = Depends(get_db)):
    return await project_service.get_all_projects(db)

# Invitation routes are declared before "/{project_id}" so "invite" is never
# parsed as a project id.
@router.post("/invite", response_model=InviteUserProjectResponse)
async def invite_user(
    data: InviteUserProjectRequest,
    user: User = Depends(get_acting_user),
    db: AsyncSession = Depends(get_db),
):
    status = await project_service.invite_user(db, data, user)
    return {"status": status}

@router.post("/invite/accept", response_model=InviteUserProjectResponse)
async def accept_invite(data: AcceptInviteRequest, db: AsyncSession = Depends(get_db)):
    return await project_service.accept_invite(db, data)

@router.post("/invite/respond", response_model=InviteUserProjectResponse)
async def respond_to_invite(data: RespondInviteRequest, db: AsyncSession = Depends(get_db)):
    return await project_service.accept_or_reject(db, data)

@router.get("/{project_id}", response_model=ProjectDetail)
async def get_project(project_id: int, db: AsyncSession = Depends(get_db)):
    return await project_service.get_project_detail(db, project_id)

@router.post("", status_code=201, response_model=ProjectDetail)
async def create_project(
    data: CreateProjectRequest,
    user: User = Depends(get_acting_user),
    db: AsyncSession = Depends(get_db),
):
    return await project_service.create_project(db, data, user)

@router.put("/{project_id}", response_model=ProjectDetail)
async def update_project(
    data: CreateProjectRequest,
    project: Project = Depends(get_project_or_404),
    user: User = Depends(get_acting_user),
    db: AsyncSession = Depends(get_db),
):
    return await project_service.update_project(db, project, data, user)

@router.delete("/{project_id}", response_model=DeleteResult)
async def delete_project(project_id: int, db: AsyncSession = Depends(get_db)):
    return await project_service.delete_project(db, project_id)

@router.post("/{project_id}/members", response_model=ProjectDetail)
async def assign_member(
    data: AssignUserProjectRequest,
    project: Project = Depends(get_project_or_404),
    user: User = Depends(get_acting_user),
    db: AsyncSession = Depends(get_db),
):
    return await project_service.assign_member_to_project(db, data, project, user)
