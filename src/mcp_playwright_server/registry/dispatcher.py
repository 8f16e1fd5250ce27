"""
Name-based invocation of catalog operations.

Dispatcher.invoke() is the single boundary between the transport and the
operations: it resolves the name, coerces the arguments, injects the session
and the cancellation token, awaits the operation and converts the outcome to
a response envelope. Nothing but asyncio.CancelledError escapes it.
"""

import logging
import time
from typing import Any, Dict, Mapping, Optional

from ..cancellation import CancellationToken
from ..context import get_session
from ..decorators.envelope import failure_envelope, tool_envelope
from ..errors import OperationNotFound
from .catalog import Injection, OperationCatalog, OperationDescriptor
from .coercion import coerce_arguments

logger = logging.getLogger(__name__)


class Dispatcher:
    """
    Invokes operations from an OperationCatalog by name.

    Args:
        catalog: The operations this dispatcher can run.
        session: SessionManager injected into operations that declare one.
            Defaults to the process-wide session from context.get_session(),
            resolved on first use.
    """

    def __init__(self, catalog: OperationCatalog, session=None):
        self.catalog = catalog
        self._session = session

    @property
    def session(self):
        if self._session is None:
            self._session = get_session()
        return self._session

    async def invoke(
        self,
        name: str,
        arguments: Optional[Mapping[str, Any]] = None,
        cancellation: Optional[CancellationToken] = None,
    ) -> Dict[str, Any]:
        """
        Run operation `name` with raw JSON `arguments`.

        Returns:
            {"ok": True, "payload": ...} or {"ok": False, "message": "..."}.
            An unknown name, a coercion failure and an operation failure all
            produce a failure envelope; the operation is never called when
            coercion fails.
        """
        descriptor = self.catalog.get(name)
        if descriptor is None:
            logger.info("Rejected call to unknown operation %r", name)
            return failure_envelope(str(OperationNotFound(name)))

        if cancellation is None:
            cancellation = CancellationToken()

        logger.debug("Invoking %s with %r", name, arguments)
        started = time.monotonic()
        runner = tool_envelope(self._call, name=descriptor.name)
        envelope = await runner(descriptor, arguments, cancellation)
        logger.debug(
            "%s finished ok=%s in %.1f ms",
            name, envelope["ok"], (time.monotonic() - started) * 1000,
        )
        return envelope

    async def _call(
        self,
        descriptor: OperationDescriptor,
        arguments: Optional[Mapping[str, Any]],
        cancellation: CancellationToken,
    ) -> Any:
        needs_session = any(kind is Injection.SESSION for _, kind in descriptor.injected)
        session = self.session if needs_session else None
        bound = coerce_arguments(descriptor, arguments, cancellation=cancellation, session=session)
        return await descriptor.invocable(**bound)


__all__ = ["Dispatcher"]
