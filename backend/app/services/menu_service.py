"""
Menu Service — Reads the navigation sidebar entries.

WHAT THIS DOES:
Returns the active menu rows in display order. The AI Debate page is always
listed, even before anyone has added a row for it, so it is merged in from
code when the table does not already contain its path.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.menu import Menu
from app.models.schemas import MenuResponse

logger = logging.getLogger(__name__)

# Built-in entry for the debate page (id -1: never stored in the table)
DEBATE_MENU = MenuResponse(
    id=-1,
    name="AI vs AI Debate",
    path="/ai-debate",
    icon="🤖",
    display_order=100,
    is_active=True,
)


class MenuService:
    """Service for menu lookups."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_all_menus(self) -> list[Menu]:
        """All rows, active or not, in display order."""
        result = await self.db.execute(
            select(Menu).order_by(Menu.display_order, Menu.id)
        )
        return list(result.scalars().all())

    async def get_active_menus(self) -> list[MenuResponse]:
        """
        Active entries for the sidebar, in display order.

        Returns:
            Active rows plus the built-in debate entry, sorted by display_order
        """
        result = await self.db.execute(
            select(Menu)
            .where(Menu.is_active.is_(True))
            .order_by(Menu.display_order, Menu.id)
        )
        menus = [MenuResponse.model_validate(row) for row in result.scalars().all()]

        if not any(menu.path == DEBATE_MENU.path for menu in menus):
            menus.append(DEBATE_MENU)

        # Stable sort keeps the id order for equal display_order values
        menus.sort(key=lambda menu: menu.display_order)
        logger.debug(f"Loaded {len(menus)} active menus")
        return menus


async def get_active_menus(db: AsyncSession) -> list[MenuResponse]:
    """Convenience function to list the sidebar entries."""
    service = MenuService(db)
    return await service.get_active_menus()
