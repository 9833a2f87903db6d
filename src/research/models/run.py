#!/usr/bin/env python3
"""
Research run data model.

A ResearchRun is the audit record of one pipeline execution. All mutation goes
through its methods, which enforce the run's lifecycle rules: a single
terminal transition, monotone progress and append-only errors and logs.
"""

import re
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field

from .article import parse_datetime_safe
from .research_config import ResearchConfig, RunType, resolve_research_config
from ..exceptions import InvalidRunTransitionError

TOTAL_STEPS = 6
DEFAULT_MAX_RETRIES = 3


class RunStatus(str, Enum):
    SCHEDULED = 'scheduled'
    RUNNING = 'running'
    COMPLETED = 'completed'
    FAILED = 'failed'
    CANCELLED = 'cancelled'

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({RunStatus.COMPLETED, RunStatus.FAILED, RunStatus.CANCELLED})


class LogLevel(str, Enum):
    INFO = 'info'
    WARN = 'warn'
    ERROR = 'error'
    DEBUG = 'debug'


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def step_key(message: str) -> str:
    """Log step identifier for a progress message ("Fetching articles" -> "fetching_articles")."""
    return re.sub(r'\s+', '_', message.strip().lower())


@dataclass
class RunProgress:
    total_steps: int = TOTAL_STEPS
    completed_steps: int = 0
    current_step: str = ""
    percentage: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_steps': self.total_steps,
            'completed_steps': self.completed_steps,
            'current_step': self.current_step,
            'percentage': self.percentage
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RunProgress':
        return cls(
            total_steps=data.get('total_steps', TOTAL_STEPS),
            completed_steps=data.get('completed_steps', 0),
            current_step=data.get('current_step', '') or '',
            percentage=data.get('percentage', 0)
        )


@dataclass
class RunResults:
    topics_found: int = 0
    topics_processed: int = 0
    topics_updated: int = 0
    new_topics: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            'topics_found': self.topics_found,
            'topics_processed': self.topics_processed,
            'topics_updated': self.topics_updated,
            'new_topics': self.new_topics
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RunResults':
        return cls(
            topics_found=data.get('topics_found', 0),
            topics_processed=data.get('topics_processed', 0),
            topics_updated=data.get('topics_updated', 0),
            new_topics=data.get('new_topics', 0)
        )


@dataclass(frozen=True)
class RunError:
    """A fatal condition recorded on the run."""
    step: str
    error: str
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {'step': self.step, 'error': self.error, 'timestamp': self.timestamp.isoformat()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RunError':
        return cls(
            step=data.get('step', ''),
            error=data.get('error', ''),
            timestamp=parse_datetime_safe(data.get('timestamp')) or utc_now()
        )


@dataclass(frozen=True)
class RunLog:
    level: LogLevel
    message: str
    timestamp: datetime
    step: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'level': self.level.value,
            'message': self.message,
            'timestamp': self.timestamp.isoformat(),
            'step': self.step
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RunLog':
        return cls(
            level=LogLevel(data.get('level', 'info')),
            message=data.get('message', ''),
            timestamp=parse_datetime_safe(data.get('timestamp')) or utc_now(),
            step=data.get('step')
        )


@dataclass
class ResearchRun:
    """Audit record of one research run."""
    config: ResearchConfig
    run_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: RunStatus = RunStatus.SCHEDULED
    type: RunType = RunType.MANUAL
    progress: RunProgress = field(default_factory=RunProgress)
    results: RunResults = field(default_factory=RunResults)
    errors: List[RunError] = field(default_factory=list)
    logs: List[RunLog] = field(default_factory=list)
    retry_count: int = 0
    max_retries: int = DEFAULT_MAX_RETRIES
    retried_from: Optional[str] = None
    triggered_by: Optional[str] = None
    user_id: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration_ms: Optional[int] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def _touch(self) -> None:
        self.updated_at = utc_now()

    def _require_open(self, action: str) -> None:
        if self.is_terminal:
            raise InvalidRunTransitionError(self.run_id, f"cannot {action}: run is already {self.status.value}")

    def start(self, now: Optional[datetime] = None) -> None:
        """Move a scheduled run to running."""
        if self.status != RunStatus.SCHEDULED:
            raise InvalidRunTransitionError(self.run_id, f"cannot start a run in status {self.status.value}")
        self.status = RunStatus.RUNNING
        self.start_time = now or utc_now()
        self._touch()

    def advance(self, step: int, message: str) -> RunLog:
        """
        Record that a pipeline step was reached.

        Args:
            step: Step number (1..total_steps)
            message: Human readable step label

        Returns:
            The info log appended for this step
        """
        self._require_open('advance progress')
        if step < self.progress.completed_steps:
            raise InvalidRunTransitionError(
                self.run_id, f"progress cannot go back from step {self.progress.completed_steps} to {step}"
            )
        if step > self.progress.total_steps:
            raise InvalidRunTransitionError(
                self.run_id, f"step {step} exceeds total steps {self.progress.total_steps}"
            )

        self.progress.completed_steps = step
        self.progress.current_step = message
        self.progress.percentage = round(step / self.progress.total_steps * 100)
        return self.add_log(LogLevel.INFO, message, step_key(message))

    def add_log(self, level: LogLevel, message: str, step: Optional[str] = None) -> RunLog:
        entry = RunLog(level=LogLevel(level), message=message, timestamp=utc_now(), step=step)
        self.logs.append(entry)
        self._touch()
        return entry

    def add_error(self, step: str, error: str) -> RunError:
        entry = RunError(step=step, error=error, timestamp=utc_now())
        self.errors.append(entry)
        self._touch()
        return entry

    def _finish(self, status: RunStatus, now: Optional[datetime]) -> None:
        self._require_open(f"mark {status.value}")
        self.status = status
        self.end_time = now or utc_now()
        start = self.start_time or self.created_at
        self.duration_ms = max(0, int((self.end_time - start).total_seconds() * 1000))
        self._touch()

    def mark_completed(self, results: RunResults, now: Optional[datetime] = None) -> None:
        self._finish(RunStatus.COMPLETED, now)
        self.results = results
        self.progress.completed_steps = self.progress.total_steps
        self.progress.percentage = 100

    def mark_failed(self, error: str, step: str = 'execution', now: Optional[datetime] = None) -> None:
        self._require_open('mark failed')
        self.add_error(step, error)
        self._finish(RunStatus.FAILED, now)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'run_id': self.run_id,
            'status': self.status.value,
            'type': self.type.value,
            'config': self.config.to_dict(),
            'progress': self.progress.to_dict(),
            'results': self.results.to_dict(),
            'errors': [entry.to_dict() for entry in self.errors],
            'logs': [entry.to_dict() for entry in self.logs],
            'retry_count': self.retry_count,
            'max_retries': self.max_retries,
            'retried_from': self.retried_from,
            'triggered_by': self.triggered_by,
            'user_id': self.user_id,
            'start_time': self.start_time.isoformat() if self.start_time else None,
            'end_time': self.end_time.isoformat() if self.end_time else None,
            'duration_ms': self.duration_ms,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat()
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ResearchRun':
        """Create ResearchRun from a stored document."""
        return cls(
            run_id=data['run_id'],
            status=RunStatus(data.get('status', 'scheduled')),
            type=RunType(data.get('type', 'manual')),
            config=resolve_research_config(data.get('config') or {}),
            progress=RunProgress.from_dict(data.get('progress') or {}),
            results=RunResults.from_dict(data.get('results') or {}),
            errors=[RunError.from_dict(item) for item in data.get('errors') or []],
            logs=[RunLog.from_dict(item) for item in data.get('logs') or []],
            retry_count=data.get('retry_count', 0),
            max_retries=data.get('max_retries', DEFAULT_MAX_RETRIES),
            retried_from=data.get('retried_from'),
            triggered_by=data.get('triggered_by'),
            user_id=data.get('user_id'),
            start_time=parse_datetime_safe(data.get('start_time')),
            end_time=parse_datetime_safe(data.get('end_time')),
            duration_ms=data.get('duration_ms'),
            created_at=parse_datetime_safe(data.get('created_at')) or utc_now(),
            updated_at=parse_datetime_safe(data.get('updated_at')) or utc_now()
        )

    def __repr__(self):
        return f"ResearchRun(run_id='{self.run_id}', status={self.status.value}, step={self.progress.completed_steps})"
