# src/services/alert_evaluator.py

"""One-shot price alert evaluation."""

import logging
from dataclasses import dataclass
from decimal import Decimal

from src.models.shopping_item import (
    AlertCondition,
    PriceAlert,
    ShoppingItem,
    TrackedSource,
)

logger = logging.getLogger("buying_list.alerts")

EQUAL_TOLERANCE = Decimal("0.01")


@dataclass
class NotificationRequest:
    """What the notifier should tell the user about a fired alert."""

    item_name: str
    source_name: str
    price: Decimal
    currency: str
    target_price: Decimal
    condition: AlertCondition

    @property
    def message(self) -> str:
        return (
            f"🛒 Price alert: {self.item_name}\n"
            f"{self.source_name}: {self.price} {self.currency}\n"
            f"Target: {self.target_price} {self.currency}"
        )


def condition_met(alert: PriceAlert, price: Decimal) -> bool:
    """Whether *price* satisfies the alert's condition."""
    if alert.condition is AlertCondition.BELOW:
        return price < alert.target_price
    if alert.condition is AlertCondition.ABOVE:
        return price > alert.target_price
    return abs(price - alert.target_price) < EQUAL_TOLERANCE


class AlertEvaluator:
    """Check a freshly extracted price against an item's alerts."""

    @staticmethod
    def evaluate(
        item: ShoppingItem,
        source: TrackedSource,
        price: Decimal,
    ) -> list[NotificationRequest]:
        """Fire matching active alerts of *source* and deactivate them.

        Mutates ``item.alerts`` in place; alerts that do not fire are
        left untouched.
        """
        requests: list[NotificationRequest] = []
        for alert in item.alerts:
            if not alert.active or alert.source_id != source.id:
                continue
            if not condition_met(alert, price):
                continue
            alert.active = False
            logger.info(
                "Alert %s fired for %s/%s: %s %s %s",
                alert.id,
                item.name,
                source.name or source.id,
                price,
                alert.condition.value,
                alert.target_price,
            )
            requests.append(NotificationRequest(
                item_name=item.name,
                source_name=source.name or source.url,
                price=price,
                currency=source.currency,
                target_price=alert.target_price,
                condition=alert.condition,
            ))
        return requests
