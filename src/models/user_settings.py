# src/models/user_settings.py

"""User-editable preferences persisted alongside the buying list."""

from dataclasses import asdict, dataclass
from typing import Any

from src.config.settings import Settings


@dataclass
class UserSettings:
    """Preferences the user can change at runtime."""

    update_interval_ms: int = Settings.DEFAULT_UPDATE_INTERVAL_MS
    notifications_enabled: bool = True
    default_currency: str = Settings.DEFAULT_CURRENCY

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserSettings":
        defaults = cls()
        return cls(
            update_interval_ms=int(
                data.get("update_interval_ms", defaults.update_interval_ms)
            ),
            notifications_enabled=bool(
                data.get(
                    "notifications_enabled",
                    defaults.notifications_enabled,
                )
            ),
            default_currency=str(
                data.get("default_currency", defaults.default_currency)
            ),
        )
