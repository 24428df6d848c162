"""
create_tables.py
----------------
Create the box organizer schema (auth users, profiles, workspaces, members,
locations, boxes, QR codes) on DATABASE_URL.
Use this for local setup; production schema changes belong in migrations.

Usage:
    python create_tables.py            # create missing tables
    python create_tables.py --reset    # drop everything first (local data is lost)
"""

import argparse
import asyncio

from sqlalchemy.ext.asyncio import create_async_engine

from box_organizer.core.config import settings
from box_organizer.models import Base  # Imports all models so metadata is populated


async def create_all_tables(reset: bool = False) -> None:
    engine = create_async_engine(settings.DATABASE_URL, echo=settings.DEBUG)
    async with engine.begin() as conn:
        if reset:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()
    print(f"Tables ready: {', '.join(sorted(Base.metadata.tables))}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Create the box organizer database schema.")
    parser.add_argument("--reset", action="store_true", help="drop all tables before creating them")
    args = parser.parse_args()
    asyncio.run(create_all_tables(reset=args.reset))


if __name__ == "__main__":
    main()
