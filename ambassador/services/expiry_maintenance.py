from __future__ import annotations

import logging

from ambassador.core.metrics import SWEEP_DEACTIVATIONS
from ambassador.services.ambassador_registry import AmbassadorRegistry
from ambassador.services.errors import InvalidBatchSize
from ambassador.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class ExpiryMaintenance:
    """Bounded sweep that retires ambassadors whose term has ended.

    Anyone may trigger it: it only brings forward a cleanup that access
    checks already account for.  The batch runs as one unit of work;
    identities that do not qualify are skipped without error.
    """

    def __init__(
        self,
        *,
        registry: AmbassadorRegistry,
        uow: UnitOfWork,
        max_batch_size: int,
    ) -> None:
        self._registry = registry
        self._uow = uow
        self._max_batch_size = max_batch_size

    @property
    def max_batch_size(self) -> int:
        return self._max_batch_size

    def sweep(self, identities: list[str]) -> list[str]:
        """Deactivate and burn every expired, still-active identity listed.

        Returns the identities that were deactivated, in input order.
        """
        if len(identities) > self._max_batch_size:
            raise InvalidBatchSize(
                f"batch of {len(identities)} exceeds cap {self._max_batch_size}"
            )

        deactivated: list[str] = []
        with self._uow.atomic(*identities):
            for identity in identities:
                if self._registry.deactivate_expired(identity):
                    deactivated.append(identity)

        if deactivated:
            SWEEP_DEACTIVATIONS.labels(sweep="registry").inc(len(deactivated))
            logger.info("Expiry sweep deactivated identities=%s", deactivated)
        else:
            logger.debug("Expiry sweep found nothing to do in %d ids", len(identities))
        return deactivated
