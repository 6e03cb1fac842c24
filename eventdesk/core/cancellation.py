"""Cooperative cancellation for remote calls and store commits."""
import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from eventdesk.core.errors import OperationCancelled

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CancellationToken:
    """A cancel signal passed explicitly into every suspending call.

    Operations check the token at fixed checkpoints (before a remote call,
    before committing to the store) and wrap remote awaits in ``run`` so a
    cancel also interrupts the in-flight request.
    """

    def __init__(self, name: str = "") -> None:
        self.name = name
        self.reason: str | None = None
        self._event = asyncio.Event()

    def __repr__(self) -> str:
        state = "cancelled" if self.cancelled else "active"
        return f"CancellationToken({self.name!r}, {state})"

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "cancelled") -> None:
        if self._event.is_set():
            return
        self.reason = reason
        self._event.set()

    def raise_if_cancelled(self, checkpoint: str = "") -> None:
        if self.cancelled:
            raise OperationCancelled(f"{self.name or 'operation'} {checkpoint}: {self.reason}".strip())

    async def run(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable`` unless the token fires first.

        If the token is cancelled while waiting, the underlying task is
        cancelled and ``OperationCancelled`` is raised.
        """
        self.raise_if_cancelled("before call")
        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            waiter.cancel()

        if task in done:
            return task.result()

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.debug(f"Cancelled call {self.name!r} finished with {e!r}")
        raise OperationCancelled(f"{self.name or 'operation'}: {self.reason}")
