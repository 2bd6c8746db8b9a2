# src/storage/data_store.py

"""JSON-file store for items, categories and user settings."""

import copy
import json
import logging
import threading
import time
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any

from src.config.settings import Settings
from src.filters.item_filter import ItemFilter, ItemFilterOptions
from src.models.category import DEFAULT_CATEGORIES, Category
from src.models.shopping_item import ShoppingItem
from src.models.user_settings import UserSettings

logger = logging.getLogger("buying_list.storage")

# ShoppingItem attributes that update_item() refuses to overwrite
_IMMUTABLE_FIELDS: frozenset[str] = frozenset({"id", "date_added"})


def new_id(prefix: str) -> str:
    """Unique id such as ``item_1718000000000_3f9a1c2b7``."""
    millis = int(time.time() * 1000)
    return f"{prefix}_{millis}_{uuid.uuid4().hex[:9]}"


def _default_categories() -> list[Category]:
    return [
        Category(
            id=new_id("cat"),
            name=name,
            color=color,
            icon=icon,
            order=order,
            is_default=True,
        )
        for name, color, icon, order in DEFAULT_CATEGORIES
    ]


class DataStore:
    """Holds the buying list in memory and mirrors it to a JSON file.

    ``get_item`` hands out detached copies; changes only become visible
    to other readers through ``update_item``.
    """

    def __init__(self, data_path: Path | None = None) -> None:
        self.data_path: Path = data_path or Settings.DATA_PATH
        self.data_path.parent.mkdir(parents=True, exist_ok=True)
        self._items: list[ShoppingItem] = []
        self._categories: list[Category] = _default_categories()
        self._settings = UserSettings()
        # update_item may run on worker threads
        self._write_lock = threading.RLock()
        logger.debug("DataStore initialised, data_path=%s", self.data_path)

    # ── Persistence ──────────────────────────────────────

    def load(self) -> None:
        """Load the data file, falling back to defaults when absent."""
        if not self.data_path.exists():
            logger.info(
                "No data file at %s, using defaults", self.data_path,
            )
            return
        try:
            with open(self.data_path, encoding="utf-8") as f:
                raw: dict[str, Any] = json.load(f)
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning(
                "Failed to read %s, using defaults: %s",
                self.data_path,
                exc,
            )
            return
        self._apply(raw)
        logger.info(
            "Loaded %d items and %d categories from %s",
            len(self._items),
            len(self._categories),
            self.data_path,
        )

    def save(self) -> None:
        """Write the whole buying list to the data file."""
        with self._write_lock, open(
            self.data_path, "w", encoding="utf-8",
        ) as f:
            json.dump(self.to_dict(), f, ensure_ascii=False, indent=2)
        logger.debug("Saved buying list to %s", self.data_path)

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [i.to_dict() for i in self._items],
            "categories": [c.to_dict() for c in self._categories],
            "settings": self._settings.to_dict(),
            "version": Settings.DATA_VERSION,
        }

    def _apply(self, raw: dict[str, Any]) -> None:
        self._items = [
            ShoppingItem.from_dict(i) for i in raw.get("items", [])
        ]
        categories = [
            Category.from_dict(c) for c in raw.get("categories", [])
        ]
        self._categories = categories or _default_categories()
        self._settings = UserSettings.from_dict(raw.get("settings", {}))

    def export_data(self) -> str:
        """Return the buying list as pretty-printed JSON."""
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2)

    def import_data(self, payload: str) -> None:
        """Replace the buying list with *payload* and save it.

        Raises:
            ValueError: if *payload* is not a valid buying-list export.
        """
        try:
            raw = json.loads(payload)
            if not isinstance(raw, dict):
                msg = "top-level JSON value must be an object"
                raise TypeError(msg)
            self._apply(raw)
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
            logger.warning("Rejected data import: %s", exc)
            raise ValueError("Invalid data") from exc
        self.save()

    # ── Items ────────────────────────────────────────────

    def add_item(self, item: ShoppingItem) -> ShoppingItem:
        """Append *item*, assigning id, timestamps and order."""
        now = datetime.now()
        item.id = item.id or new_id("item")
        item.date_added = now
        item.date_modified = now
        item.order = len(self._items)
        self._items.append(copy.deepcopy(item))
        self.save()
        logger.info("Added item %s (%s)", item.id, item.name)
        return copy.deepcopy(item)

    def get_item(self, item_id: str) -> ShoppingItem | None:
        """Return a detached copy of the item, or ``None``."""
        for item in self._items:
            if item.id == item_id:
                return copy.deepcopy(item)
        return None

    def update_item(self, item_id: str, **fields: Any) -> bool:
        """Overwrite the given fields of an item and save.

        Returns ``False`` when the item does not exist.
        """
        with self._write_lock:
            for index, item in enumerate(self._items):
                if item.id != item_id:
                    continue
                updated = copy.deepcopy(item)
                for name, value in fields.items():
                    if (
                        name in _IMMUTABLE_FIELDS
                        or not hasattr(updated, name)
                    ):
                        msg = f"Cannot update field: {name}"
                        raise AttributeError(msg)
                    setattr(updated, name, copy.deepcopy(value))
                updated.date_modified = datetime.now()
                self._items[index] = updated
                self.save()
                return True
        logger.warning("update_item: unknown item %s", item_id)
        return False

    def delete_item(self, item_id: str) -> bool:
        """Remove an item; returns whether anything was deleted."""
        before = len(self._items)
        self._items = [i for i in self._items if i.id != item_id]
        if len(self._items) == before:
            return False
        self.save()
        return True

    def reorder_items(self, item_ids: list[str]) -> None:
        """Assign ``order`` from the position of each id in *item_ids*."""
        positions = {item_id: pos for pos, item_id in enumerate(item_ids)}
        now = datetime.now()
        for item in self._items:
            if item.id in positions:
                item.order = positions[item.id]
                item.date_modified = now
        self._items.sort(key=lambda i: i.order)
        self.save()

    def get_items(
        self,
        filter_options: ItemFilterOptions | None = None,
        sort_field: str | None = None,
        descending: bool = False,
    ) -> list[ShoppingItem]:
        """Return copies of all items, optionally filtered and sorted."""
        items = [copy.deepcopy(i) for i in self._items]
        if filter_options is not None:
            items = ItemFilter.apply(items, filter_options)
        if sort_field is not None:
            items = ItemFilter.sort(
                items, sort_field, descending, self._categories,
            )
        return items

    # ── Categories ───────────────────────────────────────

    def get_categories(self) -> list[Category]:
        return sorted(
            (copy.deepcopy(c) for c in self._categories),
            key=lambda c: c.order,
        )

    def get_category(self, category_id: str) -> Category | None:
        for category in self._categories:
            if category.id == category_id:
                return copy.deepcopy(category)
        return None

    def add_category(self, category: Category) -> Category:
        now = datetime.now()
        category.id = category.id or new_id("cat")
        category.date_created = now
        category.date_modified = now
        self._categories.append(copy.deepcopy(category))
        self.save()
        return category

    def update_category(self, category_id: str, **fields: Any) -> bool:
        for category in self._categories:
            if category.id == category_id:
                for name, value in fields.items():
                    setattr(category, name, value)
                category.date_modified = datetime.now()
                self.save()
                return True
        return False

    def delete_category(self, category_id: str) -> bool:
        """Delete a user category that no item uses."""
        category = self.get_category(category_id)
        if category is None or category.is_default:
            return False
        if any(i.category_id == category_id for i in self._items):
            logger.info(
                "Category %s still has items, not deleting", category_id,
            )
            return False
        self._categories = [
            c for c in self._categories if c.id != category_id
        ]
        self.save()
        return True

    # ── Settings ─────────────────────────────────────────

    def get_settings(self) -> UserSettings:
        return copy.deepcopy(self._settings)

    def update_settings(self, **fields: Any) -> UserSettings:
        for name, value in fields.items():
            if not hasattr(self._settings, name):
                msg = f"Unknown setting: {name}"
                raise AttributeError(msg)
            setattr(self._settings, name, value)
        self.save()
        return self.get_settings()
