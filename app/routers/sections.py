from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.schemas import SectionCreate, SectionResponse
from app.services import section_service

router = APIRouter(prefix="/api/v1/sections", tags=["sections"])

@router.get("", response_model=list[SectionResponse])
async def list_sections(db: AsyncSession = Depends(get_db)):
    return await section_service.get_sections(db)

@router.get("/{section_id}", response_model=SectionResponse)
async def get_section(section_id: int, db: AsyncSession = Depends(get_db)):
    return await section_service.get_section(db, section_id)

@router.post("", status_code=201, response_model=SectionResponse)
async def create_section(data: SectionCreate, db: AsyncSession = Depends(get_db)):
    return await section_service.create_section(db, data)
