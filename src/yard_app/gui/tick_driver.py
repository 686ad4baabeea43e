from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)


class TickDriver:
    """Keep calling ``tick`` through a Tk-style ``after`` scheduler while work is pending."""

    def __init__(
        self,
        schedule: Callable[[Callable[[], None]], Any],
        cancel: Callable[[Any], None],
        tick: Callable[[], Any],
        is_active: Callable[[], bool],
        on_frame: Callable[[], None] | None = None,
    ) -> None:
        self._schedule = schedule
        self._cancel = cancel
        self._tick = tick
        self._is_active = is_active
        self._on_frame = on_frame
        self._after_id: Any | None = None

    @property
    def running(self) -> bool:
        return self._after_id is not None

    def ensure_running(self) -> None:
        if self._after_id is None:
            self._after_id = self._schedule(self._run_once)

    def stop(self) -> None:
        if self._after_id is not None:
            self._cancel(self._after_id)
            self._after_id = None

    def _run_once(self) -> None:
        self._after_id = None
        self._tick()
        if self._on_frame is not None:
            try:
                self._on_frame()
            except Exception:
                logger.exception("Frame callback failed")
        if self._is_active():
            self._after_id = self._schedule(self._run_once)
