"""
API Routes — shared endpoints used by every page.

ENDPOINTS:
- GET /api/menus → active navigation sidebar entries, in display order
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.schemas import MenuResponse
from app.services.menu_service import get_active_menus

router = APIRouter(prefix="/api", tags=["api"])


@router.get("/menus", response_model=list[MenuResponse])
async def list_menus(db: AsyncSession = Depends(get_db)) -> list[MenuResponse]:
    """
    Sidebar entries for page rendering.

    Example:
        GET /api/menus
        Returns [{"id": 1, "name": "Base64", "path": "/encode-decode", ...}, ...]
    """
    return await get_active_menus(db)
