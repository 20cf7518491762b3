from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime


# --- User ---

class UserBase(BaseModel):
    email: str = Field(max_length=255)
    display_name: str | None = None


class UserCreate(UserBase):
    id: str | None = Field(None, max_length=36)


class UserResponse(UserBase):
    id: str
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


# --- Section ---

class SectionBase(BaseModel):
    title: str = Field(max_length=300)
    content: str | None = None


class SectionCreate(SectionBase):
    pass


class SectionResponse(SectionBase):
    id: int
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


# --- Project ---

class CreateProjectRequest(BaseModel):
    """Body for both create and update; ``sections`` holds section ids."""

    title: str = Field(max_length=300)
    description: str | None = None
    sections: list[int] = []
    # Revision the client last read; only checked on update.
    version: int | None = None


class ProjectResponse(BaseModel):
    id: int
    title: str
    description: str | None
    created_by: str | None
    team_users: list[str] = []
    section_ids: list[int] = []
    version: int
    created_at: datetime
    updated_at: datetime | None = None


class ProjectDetail(ProjectResponse):
    sections: list[SectionResponse] = []


class DeleteResult(BaseModel):
    affected: int


# --- Membership / invitations ---

class AssignUserProjectRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")


class InviteUserProjectRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(max_length=255)
    project_id: int = Field(alias="projectId")


class AcceptInviteRequest(InviteUserProjectRequest):
    token: str = Field(min_length=1)


class RespondInviteRequest(BaseModel):
    token: str = Field(min_length=1)
    accept: bool


class InviteUserProjectResponse(BaseModel):
    status: bool
