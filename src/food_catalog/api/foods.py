"""Food lookup endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, HTTPException, Query, Request, status

if TYPE_CHECKING:
    from food_catalog.containers import AppContainer

router = APIRouter(prefix="/foods", tags=["foods"])


@router.get("/search")
async def search_foods(
    request: Request,
    query: str | None = Query(default=None, min_length=2, max_length=100),
    barcode: str | None = Query(default=None, min_length=8, max_length=13),
) -> dict[str, object]:
    """Search foods by name or barcode."""
    container: AppContainer = request.app.state.container
    if (query is None) == (barcode is None):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Provide exactly one of 'query' or 'barcode'",
        )
    if barcode is not None:
        result = await container.food_resolver.search_by_barcode(barcode)
        if result is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"No food found for barcode {barcode}",
            )
        return {"foods": [result.to_dict()]}
    results = await container.food_resolver.search_by_name(query or "")
    return {"foods": [result.to_dict() for result in results]}


@router.post("/{food_id}/mark-used")
async def mark_food_used(food_id: UUID, request: Request) -> dict[str, str]:
    """Record that a food was used."""
    container: AppContainer = request.app.state.container
    container.usage_tracker.mark_used(food_id)
    return {"status": "ok"}


@router.get("/health")
async def foods_health(request: Request) -> dict[str, object]:
    """Report external API connectivity and cache state."""
    container: AppContainer = request.app.state.container
    return await container.health_service.get_health_status()
