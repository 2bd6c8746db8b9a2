# src/models/shopping_item.py

"""Shopping item, tracked source, price point and alert models.

The ``to_dict`` / ``from_dict`` pairs define the persisted record shape
used by :class:`~src.storage.data_store.DataStore`.  Prices are kept as
:class:`~decimal.Decimal` in memory and written as JSON numbers.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any


class AlertCondition(str, Enum):
    """Comparison applied between a new price and an alert target."""

    BELOW = "below"
    ABOVE = "above"
    EQUAL = "equal"


def _to_decimal(value: Any) -> Decimal | None:
    if value is None:
        return None
    return Decimal(str(value))


def _to_datetime(value: Any) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(str(value))


def _price_out(value: Decimal | None) -> float | None:
    return float(value) if value is not None else None


@dataclass
class TrackedSource:
    """One website offering an item, with its own selectors and price."""

    id: str
    url: str
    name: str = ""
    selectors: list[str] = field(default_factory=lambda: list[str]())
    currency: str = "ر.س"
    current_price: Decimal | None = None
    last_updated: datetime | None = None
    active: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the persisted source record."""
        record: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "url": self.url,
            "currency": self.currency,
            "selectors": list(self.selectors),
            "active": self.active,
        }
        if self.current_price is not None:
            record["currentPrice"] = _price_out(self.current_price)
        if self.last_updated is not None:
            record["lastUpdated"] = self.last_updated.isoformat()
        return record

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TrackedSource":
        """Build a source from its persisted record."""
        return cls(
            id=str(data["id"]),
            url=str(data.get("url", "")),
            name=str(data.get("name", "")),
            selectors=[str(s) for s in data.get("selectors", [])],
            currency=str(data.get("currency", "ر.س")),
            current_price=_to_decimal(data.get("currentPrice")),
            last_updated=_to_datetime(data.get("lastUpdated")),
            active=bool(data.get("active", True)),
        )


@dataclass
class PricePoint:
    """A single price observation for a source at a point in time."""

    timestamp: datetime
    price: Decimal
    source_id: str

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the persisted history record."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "price": float(self.price),
            "sourceId": self.source_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PricePoint":
        """Build a price point from its persisted record."""
        return cls(
            timestamp=datetime.fromisoformat(str(data["timestamp"])),
            price=Decimal(str(data["price"])),
            source_id=str(data["sourceId"]),
        )


@dataclass
class PriceAlert:
    """One-shot alert on a source's price."""

    id: str
    source_id: str
    target_price: Decimal
    condition: AlertCondition = AlertCondition.BELOW
    active: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the persisted alert record."""
        return {
            "id": self.id,
            "sourceId": self.source_id,
            "targetPrice": float(self.target_price),
            "condition": self.condition.value,
            "active": self.active,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PriceAlert":
        """Build an alert from its persisted record."""
        return cls(
            id=str(data["id"]),
            source_id=str(data["sourceId"]),
            target_price=Decimal(str(data["targetPrice"])),
            condition=AlertCondition(data.get("condition", "below")),
            active=bool(data.get("active", True)),
        )


@dataclass
class ShoppingItem:
    """An item on the buying list, tracked across several sources."""

    id: str
    name: str
    category_id: str = ""
    description: str = ""
    sources: list[TrackedSource] = field(
        default_factory=lambda: list[TrackedSource]()
    )
    price_history: list[PricePoint] = field(
        default_factory=lambda: list[PricePoint]()
    )
    alerts: list[PriceAlert] = field(
        default_factory=lambda: list[PriceAlert]()
    )
    priority: str = "medium"    # "low", "medium", "high"
    status: str = "wishlist"    # "wishlist", "needed", "purchased"
    tags: list[str] = field(default_factory=lambda: list[str]())
    notes: str = ""
    date_added: datetime = field(default_factory=datetime.now)
    date_modified: datetime = field(default_factory=datetime.now)
    order: int = 0
    target_budget: Decimal | None = None
    quantity: int = 1

    def find_source(self, source_id: str) -> TrackedSource | None:
        """Return the source with *source_id*, if the item has one."""
        for source in self.sources:
            if source.id == source_id:
                return source
        return None

    def lowest_price(self) -> Decimal | None:
        """Lowest current price across all sources that have one."""
        prices = [
            s.current_price
            for s in self.sources
            if s.current_price is not None
        ]
        return min(prices) if prices else None

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the persisted item record."""
        record: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "categoryId": self.category_id,
            "sources": [s.to_dict() for s in self.sources],
            "priceHistory": [p.to_dict() for p in self.price_history],
            "alerts": [a.to_dict() for a in self.alerts],
            "priority": self.priority,
            "status": self.status,
            "tags": list(self.tags),
            "notes": self.notes,
            "dateAdded": self.date_added.isoformat(),
            "dateModified": self.date_modified.isoformat(),
            "order": self.order,
            "quantity": self.quantity,
        }
        if self.target_budget is not None:
            record["targetBudget"] = float(self.target_budget)
        return record

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ShoppingItem":
        """Build an item from its persisted record."""
        now = datetime.now()
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            category_id=str(data.get("categoryId", "")),
            description=str(data.get("description", "") or ""),
            sources=[
                TrackedSource.from_dict(s)
                for s in data.get("sources", [])
            ],
            price_history=[
                PricePoint.from_dict(p)
                for p in data.get("priceHistory", [])
            ],
            alerts=[
                PriceAlert.from_dict(a) for a in data.get("alerts", [])
            ],
            priority=str(data.get("priority", "medium")),
            status=str(data.get("status", "wishlist")),
            tags=[str(t) for t in data.get("tags", [])],
            notes=str(data.get("notes", "") or ""),
            date_added=_to_datetime(data.get("dateAdded")) or now,
            date_modified=_to_datetime(data.get("dateModified")) or now,
            order=int(data.get("order", 0)),
            target_budget=_to_decimal(data.get("targetBudget")),
            quantity=int(data.get("quantity", 1)),
        )
