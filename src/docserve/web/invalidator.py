"""Out-of-band cache invalidation driven by a command queue.

The operator's reload signal is one producer for the queue. Anything else
that can reach the event loop may call :meth:`CacheInvalidator.notify`.
"""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import TYPE_CHECKING

from docserve.errors import ConfigError

if TYPE_CHECKING:
    from docserve.web.app import ServerContext

LOGGER = logging.getLogger(__name__)

RELOAD = "reload"
RELOAD_SIGNAL = getattr(signal, "SIGUSR1", None)


class CacheInvalidator:
    """Listens for maintenance commands and applies them to a server context."""

    def __init__(self, context: ServerContext, *, signum: int | None = RELOAD_SIGNAL) -> None:
        self.context = context
        self.signum = signum
        self._loop: asyncio.AbstractEventLoop | None = None
        self._queue: asyncio.Queue[str] | None = None
        self._task: asyncio.Task[None] | None = None
        self._signal_installed = False

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, *, install_signal_handler: bool = True) -> None:
        """Start listening on the running event loop."""
        if self.running:
            return
        self._loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue()
        self._task = self._loop.create_task(self._listen(), name="docserve-invalidator")
        if install_signal_handler:
            self._install_signal_handler()

    def _install_signal_handler(self) -> None:
        if self.signum is None:
            LOGGER.warning("Reload signal is not available on this platform")
            return
        assert self._loop is not None
        try:
            self._loop.add_signal_handler(self.signum, self.notify, RELOAD)
        except (NotImplementedError, RuntimeError, ValueError) as exc:
            LOGGER.warning("Could not install reload signal handler: %s", exc)
            return
        self._signal_installed = True
        LOGGER.debug("Listening for %s", signal.Signals(self.signum).name)

    def notify(self, command: str = RELOAD) -> None:
        """Queue ``command``. Safe to call from any thread."""
        if self._loop is None or self._queue is None:
            raise RuntimeError("Invalidator has not been started")
        self._loop.call_soon_threadsafe(self._queue.put_nowait, command)

    async def drain(self) -> None:
        """Wait until every queued command has been handled."""
        if self._queue is not None:
            await self._queue.join()

    async def stop(self) -> None:
        if self._signal_installed and self._loop is not None and self.signum is not None:
            self._loop.remove_signal_handler(self.signum)
            self._signal_installed = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def _listen(self) -> None:
        assert self._queue is not None
        while True:
            command = await self._queue.get()
            try:
                await self._dispatch(command)
            except Exception:
                LOGGER.exception("Maintenance command %r failed", command)
            finally:
                self._queue.task_done()

    async def _dispatch(self, command: str) -> None:
        if command == RELOAD:
            await self.invalidate()
        else:
            LOGGER.warning("Ignoring unknown maintenance command %r", command)

    async def invalidate(self) -> bool:
        """Reload the template, then clear the page cache.

        A template that fails to load leaves both the current template and
        the cached pages in place.
        """
        try:
            await asyncio.to_thread(self.context.templates.reload)
        except ConfigError:
            LOGGER.exception("Template reload failed; keeping the current template and cache")
            return False

        self.context.pages.clear()
        LOGGER.info("Template and page cache cleared.")
        return True
