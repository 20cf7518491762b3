"""Database seeder for local development of the project service."""
import asyncio
import argparse
import random
import time
from app.database import engine, session_factory, Base
from app.models import User, Section, Project

SECTION_TITLES = ["Backlog", "In progress", "Review", "Done", "Retrospective",
                  "Design", "QA", "Release notes", "Research"]

async def seed(small: bool = False):
    num_users = 5 if small else 50
    num_projects = 10 if small else 500

    print(f"Seeding: {num_users} users, {len(SECTION_TITLES)} sections, {num_projects} projects")
    start = time.perf_counter()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with session_factory() as session:
        sections = []
        for title in SECTION_TITLES:
            section = Section(title=title, content=f"Default content for {title.lower()}.")
            session.add(section)
            sections.append(section)
        await session.flush()
        print(f"  Created {len(sections)} sections")

        users = []
        for i in range(num_users):
            user = User(
                email=f"user_{i:04d}@example.com",
                display_name=f"User {i}",
            )
            session.add(user)
            users.append(user)
        await session.flush()
        print(f"  Created {len(users)} users")

        for i in range(num_projects):
            owner = random.choice(users)
            # Owner first, then 0-3 distinct teammates
            team = [owner.id] + [
                u.id for u in random.sample(users, k=min(3, len(users))) if u.id != owner.id
            ][: random.randint(0, 3)]
            session.add(Project(
                title=f"Project {i}",
                description=f"Seeded project number {i}.",
                created_by=owner.id,
                team_users=team,
                section_ids=[s.id for s in random.sample(sections, k=random.randint(1, 4))],
            ))
        await session.commit()

    elapsed = time.perf_counter() - start
    print(f"\nSeeding complete in {elapsed:.1f}s")


def main():
    parser = argparse.ArgumentParser(description="Seed the project database")
    parser.add_argument("--small", action="store_true", help="Use small dataset (10 projects)")
    args = parser.parse_args()
    asyncio.run(seed(small=args.small))


if __name__ == "__main__":
    main()
