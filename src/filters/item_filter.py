# src/filters/item_filter.py

"""Filtering and sorting of buying-list items."""

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from src.models.category import Category
from src.models.shopping_item import ShoppingItem

logger = logging.getLogger("buying_list.filters")

_PRIORITY_RANK: dict[str, int] = {"high": 3, "medium": 2, "low": 1}

SORT_FIELDS: tuple[str, ...] = (
    "name", "price", "priority", "date_added", "category", "order",
)


@dataclass
class ItemFilterOptions:
    """Criteria for narrowing the item list; empty fields match all."""

    category_ids: list[str] = field(default_factory=lambda: list[str]())
    status: list[str] = field(default_factory=lambda: list[str]())
    priority: list[str] = field(default_factory=lambda: list[str]())
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    tags: list[str] = field(default_factory=lambda: list[str]())
    search_term: str = ""


class ItemFilter:
    """Apply :class:`ItemFilterOptions` and sort orders to items."""

    @staticmethod
    def apply(
        items: list[ShoppingItem],
        options: ItemFilterOptions,
    ) -> list[ShoppingItem]:
        """Return the items matching every non-empty criterion."""
        kept = list(items)

        if options.category_ids:
            kept = [i for i in kept if i.category_id in options.category_ids]
        if options.status:
            kept = [i for i in kept if i.status in options.status]
        if options.priority:
            kept = [i for i in kept if i.priority in options.priority]
        if options.min_price is not None or options.max_price is not None:
            kept = [
                i for i in kept
                if ItemFilter._in_price_range(i, options)
            ]
        if options.tags:
            wanted = set(options.tags)
            kept = [i for i in kept if wanted.intersection(i.tags)]
        if options.search_term:
            term = options.search_term.lower()
            kept = [
                i for i in kept
                if term in i.name.lower()
                or term in i.description.lower()
                or term in i.notes.lower()
            ]

        dropped = len(items) - len(kept)
        if dropped:
            logger.debug("Item filter dropped %d items", dropped)
        return kept

    @staticmethod
    def _in_price_range(
        item: ShoppingItem, options: ItemFilterOptions,
    ) -> bool:
        # Items without any known price are never filtered out by price
        lowest = item.lowest_price()
        if lowest is None:
            return True
        if options.min_price is not None and lowest < options.min_price:
            return False
        if options.max_price is not None and lowest > options.max_price:
            return False
        return True

    @staticmethod
    def sort(
        items: list[ShoppingItem],
        sort_field: str,
        descending: bool = False,
        categories: list[Category] | None = None,
    ) -> list[ShoppingItem]:
        """Return *items* ordered by *sort_field*.

        Raises:
            ValueError: if *sort_field* is not one of ``SORT_FIELDS``.
        """
        if sort_field not in SORT_FIELDS:
            msg = f"Unknown sort field: {sort_field}"
            raise ValueError(msg)

        names = {c.id: c.name for c in categories or []}

        def key(item: ShoppingItem) -> object:
            if sort_field == "name":
                return item.name.casefold()
            if sort_field == "price":
                return item.lowest_price() or Decimal(0)
            if sort_field == "priority":
                return _PRIORITY_RANK.get(item.priority, 0)
            if sort_field == "date_added":
                return item.date_added
            if sort_field == "category":
                return names.get(item.category_id, "").casefold()
            return item.order

        return sorted(items, key=key, reverse=descending)  # type: ignore[arg-type]
