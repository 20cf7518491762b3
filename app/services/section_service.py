"""
Section service: sections are owned here and only referenced by projects.
"""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotFoundError
from app.models import Section
from app.schemas import SectionCreate


def section_to_dict(section: Section) -> dict:
    return {
        "id": section.id,
        "title": section.title,
        "content": section.content,
        "created_at": section.created_at.isoformat() if section.created_at else None,
    }


async def get_sections(db: AsyncSession) -> list[dict]:
    result = await db.execute(select(Section).order_by(Section.id))
    return [section_to_dict(s) for s in result.scalars().all()]


async def get_section(db: AsyncSession, section_id: int) -> Section:
    section = await db.get(Section, section_id)
    if section is None:
        raise NotFoundError(f"Section {section_id} not found")
    return section


async def get_sections_by_ids(db: AsyncSession, section_ids: list[int]) -> list[Section]:
    """
    Resolve every id in *section_ids* to its Section, preserving order.

    One ``IN`` query replaces N per-id lookups (an AsyncSession cannot run
    statements concurrently).  The result is all-or-nothing: the first id
    without a row raises NotFoundError.
    """
    if not section_ids:
        return []

    result = await db.execute(select(Section).where(Section.id.in_(set(section_ids))))
    by_id = {s.id: s for s in result.scalars().all()}

    sections: list[Section] = []
    for section_id in section_ids:
        section = by_id.get(section_id)
        if section is None:
            raise NotFoundError(f"Section {section_id} not found")
        sections.append(section)
    return sections


async def create_section(db: AsyncSession, data: SectionCreate) -> dict:
    section = Section(title=data.title, content=data.content)
    db.add(section)
    await db.flush()
    return section_to_dict(section)
