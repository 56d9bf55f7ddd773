"""Catalog lookup interface."""

from typing import Protocol

from nutri_planner.domain.catalog import CandidateItem, DietaryFilters, ItemKind
from nutri_planner.domain.errors import NotFound


class CatalogRepository(Protocol):
    """Read-only access to recipes and ingredients."""

    def find_by_category(
        self, tags: tuple[str, ...], filters: DietaryFilters | None, limit: int
    ) -> list[CandidateItem]:
        """Return recipes tagged with any of the given categories."""

    def find_by_group(
        self,
        kind: ItemKind,
        group_keys: tuple[str, ...],
        exclude_id: str,
        limit: int,
    ) -> list[CandidateItem]:
        """Return items of a kind sharing a group key, excluding one id."""

    def get_by_id(self, item_id: str) -> CandidateItem | None:
        """Return an item by id, if present."""


def require_item(catalog: CatalogRepository, item_id: str) -> CandidateItem:
    """Return an item or raise NotFound."""
    item = catalog.get_by_id(item_id)
    if item is None:
        raise NotFound("catalog item", item_id)
    return item
