#!/usr/bin/env python3
"""
Storage interfaces for runs, topics and sources.

Two implementations exist: in-memory stores (default, used by tests) and
PostgreSQL services over psycopg.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..models.run import ResearchRun
from ..models.source import NewsSource
from ..models.topic import TrendingTopic

TOPIC_SORT_FIELDS = ('relevance_score', 'frequency', 'last_updated', 'first_detected', 'topic')
RUN_SORT_FIELDS = ('created_at', 'updated_at', 'start_time', 'end_time', 'duration_ms')


@dataclass
class TopicFilters:
    """Filters for listing trending topics."""
    limit: int = 20
    category: Optional[str] = None
    min_relevance_score: float = 0
    is_active: Optional[bool] = True
    sort_by: str = 'relevance_score'
    descending: bool = True


@dataclass
class RunFilters:
    """Filters for listing research runs."""
    limit: int = 10
    status: Optional[str] = None
    type: Optional[str] = None
    sort_by: str = 'created_at'
    descending: bool = True


class RunStore(ABC):
    """Durable ResearchRun documents keyed by run_id."""

    @abstractmethod
    def save(self, run: ResearchRun) -> None:
        """Insert or replace the full run snapshot."""

    @abstractmethod
    def get(self, run_id: str) -> Optional[ResearchRun]:
        pass

    @abstractmethod
    def list_runs(self, filters: RunFilters) -> List[ResearchRun]:
        pass

    @abstractmethod
    def status_counts(self, since: Optional[datetime] = None) -> Dict[str, int]:
        """Number of runs per status, optionally only runs created since a time."""


class TopicStore(ABC):
    """Trending topic records, unique by topic key."""

    @abstractmethod
    def get(self, topic_id: str) -> Optional[TrendingTopic]:
        pass

    @abstractmethod
    def get_by_topic(self, topic: str) -> Optional[TrendingTopic]:
        pass

    @abstractmethod
    def save(self, topic: TrendingTopic) -> TrendingTopic:
        """Upsert by topic key (last write wins). Returns the stored record with its id."""

    @abstractmethod
    def list_topics(self, filters: TopicFilters) -> List[TrendingTopic]:
        pass

    @abstractmethod
    def update_research_data(self, topic: str, research_data: Dict[str, Any],
                             generated_at: datetime, confidence_score: Optional[float]) -> bool:
        """Attach analysis sections to the topic record. False if the topic does not exist."""

    @abstractmethod
    def deactivate(self, topic_id: str) -> Optional[TrendingTopic]:
        pass

    @abstractmethod
    def topic_stats(self, since: Optional[datetime] = None) -> Dict[str, Any]:
        """Totals, active count, averages and category counts."""


class SourceStore(ABC):
    """Configured news sources, unique by name."""

    @abstractmethod
    def list_sources(self, active_only: bool = False) -> List[NewsSource]:
        pass

    @abstractmethod
    def get_by_name(self, name: str) -> Optional[NewsSource]:
        pass

    @abstractmethod
    def save(self, source: NewsSource) -> NewsSource:
        """Upsert by name. Returns the stored record with its id."""

    @abstractmethod
    def record_fetch(self, name: str, success: bool, fetched_at: datetime) -> None:
        """Bump the success or error counter and stamp last_fetched."""
