"""
Base Probe

Every diagnostic probe extends ``BaseProbe``. The base class provides:

  - A standard ``run()`` lifecycle with structured logging
  - Failure absorption: any error inside a probe resolves to that probe's
    own fallback record, so callers always receive a complete result
"""
from __future__ import annotations

import abc
import asyncio
import logging
import time
from typing import Generic, TypeVar

import httpx
from pydantic import BaseModel

from .schemas import ScanTarget

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT", bound=BaseModel)


class BaseProbe(abc.ABC, Generic[ResultT]):
    """
    Abstract base class for the scanner probes.

    Subclasses must implement :meth:`_execute` and :meth:`fallback`.

    Lifecycle
    ---------
    ``run()``
      1. ``_execute()`` – fetch whatever the probe needs and score it
      2. on any exception, ``fallback()`` – the probe's worst-case record

    Usage example::

        class HeaderProbe(BaseProbe[SecurityHeaders]):
            NAME = "headers"

            async def _execute(self, target, client) -> SecurityHeaders:
                ...

            def fallback(self) -> SecurityHeaders:
                return SecurityHeaders.failed()
    """

    #: Override in subclasses with the probe's category name
    NAME: str = "unknown"

    def __init__(self) -> None:
        self._logger = logging.getLogger(f"probe.{self.NAME}")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def run(self, target: ScanTarget, client: httpx.AsyncClient) -> ResultT:
        """
        Execute the probe and return its result record.

        Never raises for probe-level failures; cancellation still
        propagates to the caller.
        """
        t0 = time.monotonic()
        self._logger.debug("Starting %s probe: target=%s", self.NAME, target.url)

        try:
            result = await self._execute(target, client)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self._logger.warning(
                "%s probe failed for %s: %s: %s",
                self.NAME, target.url, type(exc).__name__, exc,
            )
            result = self.fallback()

        self._logger.info(
            "%s probe complete: target=%s score=%s duration=%.3fs",
            self.NAME, target.url, result.score, time.monotonic() - t0,
        )
        return result

    # ------------------------------------------------------------------
    # Abstract methods (must implement in subclasses)
    # ------------------------------------------------------------------

    @abc.abstractmethod
    async def _execute(self, target: ScanTarget, client: httpx.AsyncClient) -> ResultT:
        """Perform the probe. Exceptions are converted to :meth:`fallback`."""

    @abc.abstractmethod
    def fallback(self) -> ResultT:
        """Return the record reported when the probe cannot complete."""
