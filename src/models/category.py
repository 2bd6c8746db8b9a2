# src/models/category.py

"""Category model and the default category set."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class Category:
    """A grouping for shopping items."""

    id: str
    name: str
    color: str = "#6b7280"
    icon: str = ""
    description: str = ""
    parent_id: str = ""
    order: int = 0
    is_default: bool = False
    date_created: datetime = field(default_factory=datetime.now)
    date_modified: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the persisted category record."""
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "icon": self.icon,
            "description": self.description,
            "parentId": self.parent_id,
            "order": self.order,
            "isDefault": self.is_default,
            "dateCreated": self.date_created.isoformat(),
            "dateModified": self.date_modified.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Category":
        """Build a category from its persisted record."""
        now = datetime.now().isoformat()
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            color=str(data.get("color", "#6b7280")),
            icon=str(data.get("icon", "") or ""),
            description=str(data.get("description", "") or ""),
            parent_id=str(data.get("parentId", "") or ""),
            order=int(data.get("order", 0)),
            is_default=bool(data.get("isDefault", False)),
            date_created=datetime.fromisoformat(
                str(data.get("dateCreated", now))
            ),
            date_modified=datetime.fromisoformat(
                str(data.get("dateModified", now))
            ),
        )


# (name, color, icon, order)
DEFAULT_CATEGORIES: list[tuple[str, str, str, int]] = [
    ("إلكترونيات", "#3b82f6", "📱", 1),
    ("ملابس", "#10b981", "👕", 2),
    ("طعام ومشروبات", "#f59e0b", "🍕", 3),
    ("منزل وحديقة", "#8b5cf6", "🏠", 4),
    ("كتب", "#06b6d4", "📚", 5),
    ("رياضة وترفيه", "#ef4444", "⚽", 6),
    ("صحة وجمال", "#ec4899", "💄", 7),
    ("أخرى", "#6b7280", "📦", 999),
]
