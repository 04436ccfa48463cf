"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from dataclasses import asdict
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

if TYPE_CHECKING:
    from food_catalog.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/cache/stats", dependencies=[Depends(require_admin)])
async def cache_stats(request: Request) -> dict[str, object]:
    """Return food cache statistics."""
    container: AppContainer = request.app.state.container
    return asdict(container.maintenance_service.get_cache_stats())


@router.get("/cache/frequent", dependencies=[Depends(require_admin)])
async def frequent_foods(request: Request, limit: int = 20) -> dict[str, object]:
    """Return recently used foods."""
    container: AppContainer = request.app.state.container
    foods = container.maintenance_service.get_frequently_used(limit)
    return {
        "foods": [
            {
                "id": str(food.id),
                "name": food.name,
                "brand": food.brand,
                "barcode": food.barcode,
                "usage_count": food.usage_count,
                "updated_at": food.updated_at.isoformat() if food.updated_at else None,
            }
            for food in foods
        ]
    }


@router.post("/cache/cleanup", dependencies=[Depends(require_admin)])
async def cleanup_cache(request: Request) -> dict[str, int]:
    """Delete stale, never-used foods."""
    container: AppContainer = request.app.state.container
    return {"removed": container.maintenance_service.cleanup_old_cache()}
