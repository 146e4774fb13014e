from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from washbook.application.exceptions import PreconditionError


class InFlightGuard:
    """Rejects a user action while its previous invocation is still running."""

    def __init__(self, operation: str) -> None:
        self._operation = operation
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    @contextmanager
    def hold(self) -> Iterator[None]:
        if self._busy:
            raise PreconditionError(f"{self._operation} is already in progress")
        self._busy = True
        try:
            yield
        finally:
            self._busy = False
