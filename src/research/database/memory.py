#!/usr/bin/env python3
"""
In-memory storage backend.

Keeps deep copies of records so callers never share mutable state with the
store. Each store guards its maps with a lock.
"""

import copy
import logging
import threading
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from .base import RunStore, TopicStore, SourceStore, RunFilters, TopicFilters
from ..models.run import ResearchRun
from ..models.source import NewsSource
from ..models.topic import TrendingTopic

logger = logging.getLogger(__name__)


def _sort_key(value: Any):
    # None sorts first ascending, last descending
    return (value is not None, value)


class InMemoryRunStore(RunStore):

    def __init__(self):
        self._runs: Dict[str, ResearchRun] = {}
        self._lock = threading.Lock()

    def save(self, run: ResearchRun) -> None:
        with self._lock:
            self._runs[run.run_id] = copy.deepcopy(run)

    def get(self, run_id: str) -> Optional[ResearchRun]:
        with self._lock:
            run = self._runs.get(run_id)
            return copy.deepcopy(run) if run else None

    def list_runs(self, filters: RunFilters) -> List[ResearchRun]:
        with self._lock:
            runs = [copy.deepcopy(run) for run in self._runs.values()]

        if filters.status:
            runs = [run for run in runs if run.status.value == filters.status]
        if filters.type:
            runs = [run for run in runs if run.type.value == filters.type]

        runs.sort(key=lambda run: _sort_key(getattr(run, filters.sort_by)), reverse=filters.descending)
        return runs[:filters.limit]

    def status_counts(self, since: Optional[datetime] = None) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        with self._lock:
            for run in self._runs.values():
                if since and run.created_at < since:
                    continue
                counts[run.status.value] = counts.get(run.status.value, 0) + 1
        return counts


class InMemoryTopicStore(TopicStore):

    def __init__(self):
        self._topics: Dict[str, TrendingTopic] = {}
        self._lock = threading.Lock()

    def _find_by_id(self, topic_id: str) -> Optional[TrendingTopic]:
        for topic in self._topics.values():
            if topic.id == topic_id:
                return topic
        return None

    def get(self, topic_id: str) -> Optional[TrendingTopic]:
        with self._lock:
            topic = self._find_by_id(topic_id)
            return copy.deepcopy(topic) if topic else None

    def get_by_topic(self, topic: str) -> Optional[TrendingTopic]:
        with self._lock:
            record = self._topics.get(topic)
            return copy.deepcopy(record) if record else None

    def save(self, topic: TrendingTopic) -> TrendingTopic:
        with self._lock:
            existing = self._topics.get(topic.topic)
            stored = copy.deepcopy(topic)
            if existing is not None:
                stored.id = existing.id
                stored.first_detected = existing.first_detected or stored.first_detected
            stored.id = stored.id or str(uuid.uuid4())
            self._topics[stored.topic] = stored
            return copy.deepcopy(stored)

    def list_topics(self, filters: TopicFilters) -> List[TrendingTopic]:
        with self._lock:
            topics = [copy.deepcopy(topic) for topic in self._topics.values()]

        if filters.is_active is not None:
            topics = [topic for topic in topics if topic.is_active == filters.is_active]
        if filters.category:
            topics = [topic for topic in topics if topic.category == filters.category]
        topics = [topic for topic in topics if topic.relevance_score >= filters.min_relevance_score]

        topics.sort(key=lambda topic: _sort_key(getattr(topic, filters.sort_by)), reverse=filters.descending)
        return topics[:filters.limit]

    def update_research_data(self, topic: str, research_data: Dict[str, Any],
                             generated_at: datetime, confidence_score: Optional[float]) -> bool:
        with self._lock:
            record = self._topics.get(topic)
            if record is None:
                return False
            record.research_data = copy.deepcopy(research_data)
            record.generated_at = generated_at
            record.confidence_score = confidence_score
            return True

    def deactivate(self, topic_id: str) -> Optional[TrendingTopic]:
        with self._lock:
            record = self._find_by_id(topic_id)
            if record is None:
                return None
            record.is_active = False
            return copy.deepcopy(record)

    def topic_stats(self, since: Optional[datetime] = None) -> Dict[str, Any]:
        with self._lock:
            topics = list(self._topics.values())
            total = len(topics)
            return {
                'total_topics': total,
                'active_topics': sum(1 for topic in topics if topic.is_active),
                'avg_relevance_score': sum(topic.relevance_score for topic in topics) / total if total else 0,
                'avg_frequency': sum(topic.frequency for topic in topics) / total if total else 0,
                'categories': sorted({topic.category for topic in topics}),
                'recent_topics': sum(
                    1 for topic in topics
                    if since is None or (topic.first_detected and topic.first_detected >= since)
                )
            }


class InMemorySourceStore(SourceStore):

    def __init__(self, sources: Optional[List[NewsSource]] = None):
        self._sources: Dict[str, NewsSource] = {}
        self._lock = threading.Lock()
        for source in sources or []:
            self.save(source)

    def list_sources(self, active_only: bool = False) -> List[NewsSource]:
        with self._lock:
            return [
                copy.deepcopy(source) for source in self._sources.values()
                if source.is_active or not active_only
            ]

    def get_by_name(self, name: str) -> Optional[NewsSource]:
        with self._lock:
            source = self._sources.get(name)
            return copy.deepcopy(source) if source else None

    def save(self, source: NewsSource) -> NewsSource:
        with self._lock:
            stored = copy.deepcopy(source)
            existing = self._sources.get(source.name)
            stored.id = stored.id or (existing.id if existing else None) or str(uuid.uuid4())
            self._sources[stored.name] = stored
            return copy.deepcopy(stored)

    def record_fetch(self, name: str, success: bool, fetched_at: datetime) -> None:
        with self._lock:
            source = self._sources.get(name)
            if source is None:
                logger.warning(f"Cannot record fetch for unknown source: {name}")
                return
            if success:
                source.success_count += 1
            else:
                source.error_count += 1
            source.last_fetched = fetched_at
