"""Supabase implementation for the food catalog."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from food_catalog.domain.foods import (
    DEFAULT_SERVING_SIZE,
    FoodRecord,
    FoodSource,
    NutritionFacts,
)
from food_catalog.services.food_store import FoodRepository

_TABLE = "foods"
_USAGE_FUNCTION = "increment_food_usage"


@dataclass
class SupabaseFoodRepository(FoodRepository):
    """Supabase-backed repository for the shared food catalog.

    The `foods` table carries a unique index on `barcode` and a unique
    constraint on `(name, brand)`; missing brands are stored as empty strings
    so the pair constraint applies. Usage bumps go through the
    `increment_food_usage` database function so concurrent calls never lose
    an increment.
    """

    client: Client

    def search_foods(self, query: str, limit: int) -> list[FoodRecord]:
        """Search foods by name or brand substring."""
        term = query.strip()
        if not term:
            return []
        pattern = _ilike_pattern(term)
        response = (
            self.client.table(_TABLE)
            .select("*")
            .or_(f"name.ilike.{pattern},brand.ilike.{pattern}")
            .order("name")
            .limit(limit)
            .execute()
        )
        return [_parse_food(row) for row in response.data or []]

    def get_by_barcode(self, barcode: str) -> FoodRecord | None:
        """Return a food by barcode, if present."""
        response = (
            self.client.table(_TABLE)
            .select("*")
            .eq("barcode", barcode)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_food(response.data[0])

    def get_by_name_brand(self, name: str, brand: str) -> FoodRecord | None:
        """Return a food by exact name and brand, if present."""
        response = (
            self.client.table(_TABLE)
            .select("*")
            .eq("name", name)
            .eq("brand", brand)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_food(response.data[0])

    def create_if_absent(self, payload: dict[str, object]) -> FoodRecord:
        """Insert a food, deferring to a concurrent writer on conflict."""
        on_conflict = "barcode" if payload.get("barcode") else "name,brand"
        try:
            response = (
                self.client.table(_TABLE)
                .upsert(payload, on_conflict=on_conflict, ignore_duplicates=True)
                .execute()
            )
        except Exception:
            existing = self._find_identity(payload)
            if existing is None:
                raise
            return existing
        if response.data:
            return _parse_food(response.data[0])
        existing = self._find_identity(payload)
        if existing is None:
            raise RuntimeError("Failed to create food entry")
        return existing

    def touch(self, food_id: UUID, used_at: datetime) -> None:
        """Increment the usage counter and refresh `updated_at` in one statement."""
        response = self.client.rpc(
            _USAGE_FUNCTION,
            {"p_food_id": str(food_id), "p_used_at": used_at.isoformat()},
        ).execute()
        if not response.data:
            raise LookupError(f"Food {food_id} not found")

    def list_used_since(self, cutoff: datetime, limit: int) -> list[FoodRecord]:
        """Return foods touched after the cutoff, most recent first."""
        response = (
            self.client.table(_TABLE)
            .select("*")
            .gt("updated_at", cutoff.isoformat())
            .order("updated_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_food(row) for row in response.data or []]

    def delete_unused_before(self, cutoff: datetime) -> int:
        """Delete never-used foods not touched since the cutoff."""
        response = (
            self.client.table(_TABLE)
            .delete()
            .lt("updated_at", cutoff.isoformat())
            .eq("usage_count", 0)
            .execute()
        )
        return len(response.data or [])

    def count_foods(self) -> int:
        """Return the total number of foods."""
        response = self.client.table(_TABLE).select("id", count="exact").execute()
        return int(response.count or 0)

    def count_used_since(self, cutoff: datetime) -> int:
        """Return the number of foods touched after the cutoff."""
        response = (
            self.client.table(_TABLE)
            .select("id", count="exact")
            .gt("updated_at", cutoff.isoformat())
            .execute()
        )
        return int(response.count or 0)

    def count_with_barcode(self) -> int:
        """Return the number of foods with a barcode."""
        response = (
            self.client.table(_TABLE)
            .select("id", count="exact")
            .neq("barcode", "")
            .execute()
        )
        return int(response.count or 0)

    def _find_identity(self, payload: dict[str, object]) -> FoodRecord | None:
        barcode = payload.get("barcode")
        if barcode:
            existing = self.get_by_barcode(str(barcode))
            if existing is not None:
                return existing
        return self.get_by_name_brand(
            str(payload.get("name", "")), str(payload.get("brand") or "")
        )


def _parse_food(row: dict[str, object]) -> FoodRecord:
    """Parse a food row into a domain model."""
    source_raw = row.get("source")
    try:
        source = FoodSource(source_raw)
    except ValueError:
        source = FoodSource.MANUAL
    return FoodRecord(
        id=UUID(str(row["id"])),
        name=str(row.get("name", "")),
        brand=row.get("brand") or None,
        barcode=row.get("barcode") or None,
        source=source,
        nutrition=NutritionFacts(
            calories=float(row.get("calories") or 0.0),
            protein=float(row.get("protein") or 0.0),
            carbs=float(row.get("carbs") or 0.0),
            fat=float(row.get("fat") or 0.0),
            fiber=float(row.get("fiber") or 0.0),
            sugar=float(row.get("sugar") or 0.0),
            sodium=float(row.get("sodium") or 0.0),
        ),
        serving_size=str(row.get("serving_size") or DEFAULT_SERVING_SIZE),
        image_url=row.get("image_url") or None,
        usage_count=int(row.get("usage_count") or 0),
        created_at=_parse_timestamp(row.get("created_at")),
        updated_at=_parse_timestamp(row.get("updated_at")),
    )


def _parse_timestamp(raw: object) -> datetime | None:
    if isinstance(raw, str) and raw:
        return datetime.fromisoformat(raw)
    return None


def _ilike_pattern(term: str) -> str:
    """Build a quoted PostgREST `ilike` substring pattern for a raw term.

    LIKE wildcards in the term are escaped so they match literally. PostgREST
    rewrites `*` to `%` before LIKE sees it, so a literal `*` becomes the
    single-character wildcard. Backslashes and double quotes are escaped for
    the quoted filter value.
    """
    like = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    like = like.replace("*", "_")
    quoted = like.replace("\\", "\\\\").replace('"', '\\"')
    return f'"*{quoted}*"'
