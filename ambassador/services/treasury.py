from __future__ import annotations

import logging
import threading
from decimal import Decimal

from ambassador.services.errors import NoFundsToWithdraw
from ambassador.services.unit_of_work import record_undo

logger = logging.getLogger(__name__)


class Treasury:
    """Fees retained by one component, held until the owner withdraws them."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._lock = threading.Lock()
        self._balance = Decimal("0")

    @property
    def balance(self) -> Decimal:
        with self._lock:
            return self._balance

    def collect(self, amount: Decimal) -> None:
        if amount <= 0:
            return
        self._adjust(amount)
        record_undo(lambda: self._adjust(-amount))

    def withdraw_all(self) -> Decimal:
        with self._lock:
            amount = self._balance
            if amount <= 0:
                raise NoFundsToWithdraw()
            self._balance = Decimal("0")
        record_undo(lambda: self._adjust(amount))
        logger.info("Treasury %s withdrawn amount=%s", self.name, amount)
        return amount

    def _adjust(self, amount: Decimal) -> None:
        with self._lock:
            self._balance += amount
