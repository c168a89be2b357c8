"""Operation id allocation, unique across one document."""
from __future__ import annotations

import logging
from typing import Set

logger = logging.getLogger(__name__)


class OperationIdRegistry:
    def __init__(self) -> None:
        self._allocated: Set[str] = set()

    def reserve(self, candidate: str) -> str:
        """Return `candidate`, or `candidate_N` with the lowest free N >= 2."""
        operation_id = candidate
        counter = 1
        while operation_id in self._allocated:
            counter += 1
            operation_id = f"{candidate}_{counter}"
        if operation_id != candidate:
            logger.debug("operationId %r taken, using %r", candidate, operation_id)
        self._allocated.add(operation_id)
        return operation_id

    def __contains__(self, operation_id: object) -> bool:
        return operation_id in self._allocated

    def __len__(self) -> int:
        return len(self._allocated)


__all__ = ["OperationIdRegistry"]
