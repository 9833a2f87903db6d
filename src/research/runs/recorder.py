#!/usr/bin/env python3
"""
Write-through recording of run state.

The recorder wraps the single in-memory ResearchRun owned by the controller;
every mutation goes through the run's own checked methods and is followed by
a full snapshot save to the RunStore. Terminal transitions are applied to a
copy and only adopted once the store has accepted the snapshot, so the run
the controller sees is never terminal while the stored one is still open.
"""

import copy
import logging
from typing import Callable, Optional

from ..database.base import RunStore
from ..models.run import ResearchRun, RunResults, LogLevel

logger = logging.getLogger(__name__)


class RunRecorder:
    """Persists every change to a research run."""

    def __init__(self, run: ResearchRun, store: RunStore):
        self.run = run
        self.store = store

    @property
    def run_id(self) -> str:
        return self.run.run_id

    def save(self) -> None:
        self.store.save(self.run)

    def advance(self, step: int, message: str) -> None:
        self.run.advance(step, message)
        logger.info(f"[{self.run_id}] Step {step}/{self.run.progress.total_steps}: {message}")
        self.save()

    def log(self, level: LogLevel, message: str, step: Optional[str] = None) -> None:
        self.run.add_log(level, message, step)
        self.save()

    def _finish(self, transition: Callable[[ResearchRun], None]) -> None:
        finished = copy.deepcopy(self.run)
        transition(finished)
        self.store.save(finished)
        self.run = finished

    def complete(self, results: RunResults) -> None:
        self._finish(lambda run: run.mark_completed(results))
        logger.info(f"[{self.run_id}] Research run completed in {self.run.duration_ms} ms")

    def fail(self, error: str) -> None:
        self._finish(lambda run: run.mark_failed(error, step='execution'))
        logger.info(f"[{self.run_id}] Research run marked failed")
