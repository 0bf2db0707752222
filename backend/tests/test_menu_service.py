"""
Tests for the menu service against a throwaway SQLite database.
"""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.database import Base
from app.models.menu import Menu
from app.services.menu_service import DEBATE_MENU, MenuService


@pytest_asyncio.fixture
async def db(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'menus.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.mark.asyncio
async def test_active_menus_are_ordered_and_include_debate(db):
    db.add_all([
        Menu(name="Regex Tester", path="/regex", icon="🔍", display_order=3),
        Menu(name="Base64", path="/encode-decode", icon="🔐", display_order=1),
        Menu(name="Old Tool", path="/old", display_order=2, is_active=False),
        Menu(name="Cron", path="/cron", display_order=200),
    ])
    await db.commit()

    menus = await MenuService(db).get_active_menus()

    assert [m.path for m in menus] == ["/encode-decode", "/regex", "/ai-debate", "/cron"]
    assert all(m.is_active for m in menus)


@pytest.mark.asyncio
async def test_stored_debate_row_is_not_duplicated(db):
    db.add(Menu(name="Debate", path="/ai-debate", display_order=5))
    await db.commit()

    menus = await MenuService(db).get_active_menus()

    debate_entries = [m for m in menus if m.path == "/ai-debate"]
    assert len(debate_entries) == 1
    assert debate_entries[0].id != DEBATE_MENU.id


@pytest.mark.asyncio
async def test_empty_table_still_lists_debate(db):
    menus = await MenuService(db).get_active_menus()
    assert menus == [DEBATE_MENU]


@pytest.mark.asyncio
async def test_all_menus_include_inactive_rows(db):
    db.add_all([
        Menu(name="B", path="/b", display_order=2, is_active=False),
        Menu(name="A", path="/a", display_order=1),
    ])
    await db.commit()

    menus = await MenuService(db).get_all_menus()

    assert [m.path for m in menus] == ["/a", "/b"]
