"""Periodic progress lines for the featurization batch."""

from __future__ import annotations

import logging
from typing import Optional


class StageProgress:
    """Log roughly ``steps`` percentage updates over ``total`` tasks."""

    def __init__(
        self,
        stage_name: str,
        total: int,
        logger: Optional[logging.Logger] = None,
        steps: int = 10,
    ) -> None:
        self.stage_name = stage_name
        self.total = total
        self.logger = logger or logging.getLogger("deepbbq")
        self.completed = 0
        self._step: Optional[int] = max(1, total // max(1, steps)) if total > 0 else None
        self._next_log = self._step or 0

    def increment(self, count: int = 1) -> None:
        if self._step is None:
            return
        self.completed = min(self.total, self.completed + count)
        if self.completed >= self.total:
            self._emit()
            self._step = None
        elif self.completed >= self._next_log:
            self._emit()
            self._next_log = self.completed + self._step

    def _emit(self) -> None:
        self.logger.info(
            "[%s] %d/%d tasks (%.0f%%)",
            self.stage_name,
            self.completed,
            self.total,
            100.0 * self.completed / self.total,
        )
