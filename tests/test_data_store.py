# tests/test_data_store.py

"""Tests for the JSON-file buying list store."""

import json
import tempfile
import unittest
from decimal import Decimal
from pathlib import Path

from src.filters.item_filter import ItemFilterOptions
from src.models.category import DEFAULT_CATEGORIES, Category
from src.models.shopping_item import (
    PriceAlert,
    PricePoint,
    ShoppingItem,
    TrackedSource,
)
from src.storage.data_store import DataStore, new_id


class TestDataStore(unittest.TestCase):
    """Persistence, item CRUD, categories and settings."""

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "buying-list-data.json"
        self.store = DataStore(self.path)
        self.store.load()

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _add(self, name: str = "Kettle", **fields: object) -> ShoppingItem:
        return self.store.add_item(ShoppingItem(id="", name=name, **fields))  # type: ignore[arg-type]

    def test_new_id_format(self) -> None:
        value = new_id("item")
        prefix, millis, suffix = value.split("_")
        self.assertEqual(prefix, "item")
        self.assertTrue(millis.isdigit())
        self.assertEqual(len(suffix), 9)

    def test_defaults_when_file_missing(self) -> None:
        self.assertEqual(self.store.get_items(), [])
        self.assertEqual(
            len(self.store.get_categories()), len(DEFAULT_CATEGORIES),
        )

    def test_corrupt_file_falls_back_to_defaults(self) -> None:
        self.path.write_text("{not json", encoding="utf-8")
        store = DataStore(self.path)
        store.load()
        self.assertEqual(store.get_items(), [])

    def test_add_item_assigns_id_and_order(self) -> None:
        first = self._add("A")
        second = self._add("B")
        self.assertTrue(first.id.startswith("item_"))
        self.assertEqual((first.order, second.order), (0, 1))

    def test_round_trip_through_file(self) -> None:
        source = TrackedSource(
            id="s1",
            url="https://shop.example/p",
            name="Shop",
            selectors=[".price"],
            current_price=Decimal("1299.00"),
        )
        item = self._add(
            sources=[source],
            alerts=[PriceAlert("a1", "s1", Decimal("1000"))],
        )
        self.store.update_item(
            item.id,
            price_history=[
                PricePoint(item.date_added, Decimal("1299.00"), "s1"),
            ],
        )

        reloaded = DataStore(self.path)
        reloaded.load()
        got = reloaded.get_item(item.id)
        assert got is not None
        self.assertEqual(got.sources[0].current_price, Decimal("1299.00"))
        self.assertEqual(got.sources[0].selectors, [".price"])
        self.assertEqual(got.alerts[0].target_price, Decimal("1000"))
        self.assertEqual(len(got.price_history), 1)

    def test_persisted_record_shape(self) -> None:
        self._add(sources=[TrackedSource(id="s1", url="https://a")])
        raw = json.loads(self.path.read_text(encoding="utf-8"))
        self.assertEqual(
            set(raw), {"items", "categories", "settings", "version"},
        )
        record = raw["items"][0]["sources"][0]
        self.assertEqual(record["id"], "s1")
        self.assertNotIn("currentPrice", record)

    def test_get_item_returns_copy(self) -> None:
        item = self._add()
        copy_ = self.store.get_item(item.id)
        assert copy_ is not None
        copy_.name = "Changed"
        again = self.store.get_item(item.id)
        assert again is not None
        self.assertEqual(again.name, "Kettle")

    def test_update_item(self) -> None:
        item = self._add()
        self.assertTrue(self.store.update_item(item.id, notes="gift"))
        got = self.store.get_item(item.id)
        assert got is not None
        self.assertEqual(got.notes, "gift")
        self.assertGreaterEqual(got.date_modified, item.date_modified)

    def test_update_item_rejects_id_and_unknown_fields(self) -> None:
        item = self._add()
        with self.assertRaises(AttributeError):
            self.store.update_item(item.id, id="other")
        with self.assertRaises(AttributeError):
            self.store.update_item(item.id, colour="red")

    def test_update_unknown_item(self) -> None:
        self.assertFalse(self.store.update_item("missing", notes="x"))

    def test_delete_item(self) -> None:
        item = self._add()
        self.assertTrue(self.store.delete_item(item.id))
        self.assertFalse(self.store.delete_item(item.id))
        self.assertIsNone(self.store.get_item(item.id))

    def test_reorder_items(self) -> None:
        a = self._add("A")
        b = self._add("B")
        self.store.reorder_items([b.id, a.id])
        self.assertEqual(
            [i.name for i in self.store.get_items(sort_field="order")],
            ["B", "A"],
        )

    def test_get_items_with_filter(self) -> None:
        self._add("Kettle", tags=["kitchen"])
        self._add("Laptop", tags=["work"])
        items = self.store.get_items(ItemFilterOptions(tags=["work"]))
        self.assertEqual([i.name for i in items], ["Laptop"])

    def test_default_category_cannot_be_deleted(self) -> None:
        default = self.store.get_categories()[0]
        self.assertFalse(self.store.delete_category(default.id))

    def test_category_in_use_cannot_be_deleted(self) -> None:
        category = self.store.add_category(Category(id="", name="Gifts"))
        self._add(category_id=category.id)
        self.assertFalse(self.store.delete_category(category.id))

    def test_delete_user_category(self) -> None:
        category = self.store.add_category(Category(id="", name="Gifts"))
        self.assertTrue(self.store.update_category(category.id, color="#000"))
        self.assertTrue(self.store.delete_category(category.id))
        self.assertIsNone(self.store.get_category(category.id))

    def test_update_settings(self) -> None:
        settings = self.store.update_settings(notifications_enabled=False)
        self.assertFalse(settings.notifications_enabled)
        with self.assertRaises(AttributeError):
            self.store.update_settings(theme="dark")

    def test_export_import(self) -> None:
        self._add("Kettle")
        payload = self.store.export_data()

        other = DataStore(Path(self._tmp.name) / "other.json")
        other.import_data(payload)
        self.assertEqual([i.name for i in other.get_items()], ["Kettle"])
        self.assertTrue((Path(self._tmp.name) / "other.json").exists())

    def test_import_rejects_invalid_payload(self) -> None:
        with self.assertRaises(ValueError):
            self.store.import_data("[1, 2, 3]")
        with self.assertRaises(ValueError):
            self.store.import_data("not json")


if __name__ == "__main__":
    unittest.main()
