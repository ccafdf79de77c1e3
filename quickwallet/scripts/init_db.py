"""
Script to initialize database: create tables if they don't exist before migrations.
"""
import asyncio

from quickwallet.configuration.config import Base, dispose_engine, get_engine
from quickwallet.modules import entities  # noqa: F401


async def init_database():
    """Create all tables if they don't exist."""
    engine = get_engine()

    print("Creating tables if they don't exist...")
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)
    await dispose_engine()
    print("Tables created/verified successfully!")


if __name__ == "__main__":
    asyncio.run(init_database())
