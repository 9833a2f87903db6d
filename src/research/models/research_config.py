#!/usr/bin/env python3
"""
Research run configuration.

Every field a run accepts, its default, and the pure function that resolves
caller overrides into the immutable snapshot stored on the run.
"""

from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from .article import parse_datetime_safe
from ..exceptions import ConfigurationError

DEFAULT_LOOKBACK_DAYS = 7
DEFAULT_MIN_RELEVANCE_SCORE = 30
DEFAULT_MAX_TOPICS = 10
DEFAULT_MIN_TOPICS = 4


class RunType(str, Enum):
    """Provenance tag of a run. Does not change pipeline behavior."""
    MANUAL = 'manual'
    SCHEDULED = 'scheduled'
    WEBHOOK = 'webhook'
    MODEL_DRIVEN = 'model-driven'
    RETRY = 'retry'


@dataclass(frozen=True)
class DateRange:
    """Inclusive article publication window."""
    start: datetime
    end: datetime

    def contains(self, moment: Optional[datetime]) -> bool:
        if moment is None:
            return False
        return _as_utc(self.start) <= _as_utc(moment) <= _as_utc(self.end)

    def to_dict(self) -> Dict[str, str]:
        return {'from': self.start.isoformat(), 'to': self.end.isoformat()}

    @classmethod
    def from_value(cls, value: Any) -> 'DateRange':
        if isinstance(value, DateRange):
            return value
        if not isinstance(value, Mapping):
            raise ConfigurationError('date_range', f"expected a mapping with 'from' and 'to', got {type(value).__name__}")

        start = parse_datetime_safe(value.get('from', value.get('start')))
        end = parse_datetime_safe(value.get('to', value.get('end')))
        if start is None or end is None:
            raise ConfigurationError('date_range', "both 'from' and 'to' must be valid timestamps")
        return cls(start=_as_utc(start), end=_as_utc(end))

    @classmethod
    def last_days(cls, days: int, now: Optional[datetime] = None) -> 'DateRange':
        now = now or datetime.now(timezone.utc)
        return cls(start=now - timedelta(days=days), end=now)


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


@dataclass(frozen=True)
class ResearchConfig:
    """Resolved configuration snapshot of one research run."""
    date_range: DateRange
    sources: List[str] = field(default_factory=list)
    categories: List[str] = field(default_factory=list)
    min_relevance_score: float = DEFAULT_MIN_RELEVANCE_SCORE
    max_topics: int = DEFAULT_MAX_TOPICS
    min_topics: int = DEFAULT_MIN_TOPICS
    keywords: List[str] = field(default_factory=list)
    generate_analysis: bool = True
    update_database: bool = True
    type: RunType = RunType.MANUAL
    user_id: Optional[str] = None

    def with_type(self, run_type: RunType) -> 'ResearchConfig':
        return replace(self, type=run_type)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'date_range': self.date_range.to_dict(),
            'sources': list(self.sources),
            'categories': list(self.categories),
            'min_relevance_score': self.min_relevance_score,
            'max_topics': self.max_topics,
            'min_topics': self.min_topics,
            'keywords': list(self.keywords),
            'generate_analysis': self.generate_analysis,
            'update_database': self.update_database,
            'type': self.type.value,
            'user_id': self.user_id
        }


CONFIG_FIELDS = frozenset(f.name for f in fields(ResearchConfig))


def resolve_research_config(overrides: Union[Mapping[str, Any], ResearchConfig, None] = None,
                            now: Optional[datetime] = None) -> ResearchConfig:
    """
    Merge caller overrides over the documented defaults.

    Args:
        overrides: Partial configuration (any subset of ResearchConfig fields)
        now: Reference time for the default date range

    Returns:
        Validated ResearchConfig

    Raises:
        ConfigurationError: On unknown keys or invalid values
    """
    if isinstance(overrides, ResearchConfig):
        overrides = overrides.to_dict()
    overrides = dict(overrides or {})

    unknown = sorted(set(overrides) - CONFIG_FIELDS)
    if unknown:
        raise ConfigurationError(', '.join(unknown), 'unknown research configuration key')

    # Explicit None means "use the default"
    overrides = {key: value for key, value in overrides.items() if value is not None}

    if 'date_range' in overrides:
        date_range = DateRange.from_value(overrides['date_range'])
    else:
        date_range = DateRange.last_days(DEFAULT_LOOKBACK_DAYS, now)

    try:
        run_type = RunType(overrides.get('type', RunType.MANUAL))
    except ValueError:
        raise ConfigurationError('type', f"unknown run type '{overrides.get('type')}'")

    try:
        config = ResearchConfig(
            date_range=date_range,
            sources=[str(source) for source in overrides.get('sources', [])],
            categories=list(overrides.get('categories', [])),
            min_relevance_score=float(overrides.get('min_relevance_score', DEFAULT_MIN_RELEVANCE_SCORE)),
            max_topics=int(overrides.get('max_topics', DEFAULT_MAX_TOPICS)),
            min_topics=int(overrides.get('min_topics', DEFAULT_MIN_TOPICS)),
            keywords=[str(keyword) for keyword in overrides.get('keywords', [])],
            generate_analysis=bool(overrides.get('generate_analysis', True)),
            update_database=bool(overrides.get('update_database', True)),
            type=run_type,
            user_id=overrides.get('user_id')
        )
    except (TypeError, ValueError) as e:
        raise ConfigurationError('research_config', str(e))

    _validate(config)
    return config


def _validate(config: ResearchConfig) -> None:
    if config.date_range.start > config.date_range.end:
        raise ConfigurationError('date_range', "'from' must not be after 'to'")
    if not 0 <= config.min_relevance_score <= 100:
        raise ConfigurationError('min_relevance_score', 'must be between 0 and 100')
    if config.max_topics < 1:
        raise ConfigurationError('max_topics', 'must be at least 1')
    if config.min_topics < 0:
        raise ConfigurationError('min_topics', 'must not be negative')
