# tests/test_models.py

"""Tests for the persisted record shape of the data models."""

import unittest
from datetime import datetime
from decimal import Decimal

from src.models.category import Category
from src.models.extraction_result import ExtractionResult, ExtractionStage
from src.models.shopping_item import AlertCondition, ShoppingItem
from src.models.user_settings import UserSettings

RECORD = {
    "id": "item_1",
    "name": "سماعات",
    "categoryId": "cat_1",
    "sources": [{
        "id": "src_1",
        "name": "Store",
        "url": "https://store.example/p/1",
        "currency": "ر.س",
        "selectors": [".price"],
        "active": True,
        "currentPrice": 199.5,
        "lastUpdated": "2026-01-02T10:00:00",
    }],
    "priceHistory": [
        {"timestamp": "2026-01-02T10:00:00", "price": 199.5, "sourceId": "src_1"},
    ],
    "alerts": [{
        "id": "alert_1",
        "sourceId": "src_1",
        "targetPrice": 150,
        "condition": "below",
        "active": True,
    }],
    "priority": "high",
    "dateAdded": "2026-01-01T09:00:00",
    "dateModified": "2026-01-02T10:00:00",
}


class TestShoppingItem(unittest.TestCase):
    """Parsing and writing item records."""

    def test_from_dict(self) -> None:
        item = ShoppingItem.from_dict(RECORD)
        source = item.sources[0]
        self.assertEqual(source.current_price, Decimal("199.5"))
        self.assertEqual(source.last_updated, datetime(2026, 1, 2, 10))
        self.assertEqual(item.alerts[0].condition, AlertCondition.BELOW)
        self.assertEqual(item.price_history[0].source_id, "src_1")
        self.assertEqual(item.lowest_price(), Decimal("199.5"))

    def test_to_dict_keeps_camel_case_keys(self) -> None:
        record = ShoppingItem.from_dict(RECORD).to_dict()
        self.assertEqual(record["categoryId"], "cat_1")
        self.assertEqual(record["sources"][0]["currentPrice"], 199.5)
        self.assertEqual(record["alerts"][0]["targetPrice"], 150.0)
        self.assertNotIn("targetBudget", record)

    def test_find_source(self) -> None:
        item = ShoppingItem.from_dict(RECORD)
        self.assertIsNotNone(item.find_source("src_1"))
        self.assertIsNone(item.find_source("src_2"))


class TestOtherModels(unittest.TestCase):
    """Categories, settings and extraction results."""

    def test_category_defaults_when_fields_missing(self) -> None:
        category = Category.from_dict({"id": "c", "name": "Gifts"})
        self.assertFalse(category.is_default)
        self.assertEqual(category.to_dict()["parentId"], "")

    def test_user_settings_partial_record(self) -> None:
        settings = UserSettings.from_dict({"notifications_enabled": False})
        self.assertFalse(settings.notifications_enabled)
        self.assertEqual(settings.update_interval_ms, 3_600_000)

    def test_failure_result(self) -> None:
        result = ExtractionResult.failure("boom", source_id="s1")
        self.assertFalse(result.success)
        self.assertIsNone(result.price)
        self.assertEqual(result.stage, ExtractionStage.NONE)
        self.assertEqual(result.source_id, "s1")


if __name__ == "__main__":
    unittest.main()
