#!/usr/bin/env python3
"""
Read-side operations over stored topics, runs and sources.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Mapping, Optional

from ..database.base import RunStore, TopicStore, SourceStore, TopicFilters, RunFilters, TOPIC_SORT_FIELDS, RUN_SORT_FIELDS
from ..exceptions import TopicNotFoundError, RunNotFoundError, ValidationError
from ..models.run import ResearchRun
from ..models.source import NewsSource
from ..models.topic import TrendingTopic

logger = logging.getLogger(__name__)

STATS_WINDOW_DAYS = 30

DEFAULT_SOURCES = [
    {
        'name': 'NewsAPI.org',
        'url': 'https://newsapi.org',
        'type': 'newsapi',
        'category': 'national',
        'reliability_score': 85,
        'api_endpoint': 'https://newsapi.org/v2/everything',
        'rate_limit': {'requests': 100, 'period_minutes': 60},
    },
    {
        'name': 'The Hindu',
        'url': 'https://www.thehindu.com',
        'type': 'thehindu',
        'category': 'national',
        'reliability_score': 90,
        'api_endpoint': 'https://www.thehindu.com',
        'rate_limit': {'requests': 10, 'period_minutes': 60},
    },
    {
        'name': 'Press Information Bureau',
        'url': 'https://pib.gov.in',
        'type': 'pib',
        'category': 'government',
        'reliability_score': 95,
        'api_endpoint': 'https://pib.gov.in',
        'rate_limit': {'requests': 30, 'period_minutes': 60},
    },
]
DEFAULT_FETCH_CONFIG = {'timeout': 30, 'retries': 3, 'retry_delay': 1.0}


class ResearchQueries:
    """Query and maintenance operations for the research stores."""

    def __init__(self, run_store: RunStore, topic_store: TopicStore, source_store: SourceStore):
        self.run_store = run_store
        self.topic_store = topic_store
        self.source_store = source_store

    def get_trending_topics(self, filters: Optional[TopicFilters] = None) -> List[TrendingTopic]:
        """
        List stored trending topics.

        Args:
            filters: Limit, category, minimum relevance, active flag and sort order

        Returns:
            Matching topics, sorted and limited
        """
        filters = filters or TopicFilters()
        if filters.sort_by not in TOPIC_SORT_FIELDS:
            raise ValidationError('sort_by', f"must be one of: {', '.join(TOPIC_SORT_FIELDS)}")
        return self.topic_store.list_topics(filters)

    def get_topic_analysis(self, topic_id: str) -> Dict[str, Any]:
        """
        Stored analysis of one topic.

        Returns:
            Dict with topic, metadata, sources and analysis (None until generated)

        Raises:
            TopicNotFoundError: If no topic has this id
        """
        topic = self.topic_store.get(topic_id)
        if topic is None:
            raise TopicNotFoundError(topic_id)

        return {
            'topic': topic.topic,
            'metadata': {
                'category': topic.category,
                'gs_papers': list(topic.gs_papers),
                'relevance_score': topic.relevance_score,
                'frequency': topic.frequency,
                'source_count': topic.source_count,
                'first_detected': topic.first_detected.isoformat() if topic.first_detected else None,
                'last_updated': topic.last_updated.isoformat() if topic.last_updated else None,
                'generated_at': topic.generated_at.isoformat() if topic.generated_at else None
            },
            'sources': [source.to_dict() for source in topic.sources],
            'analysis': topic.research_data
        }

    def get_research_history(self, filters: Optional[RunFilters] = None) -> List[ResearchRun]:
        """List past runs, newest first by default."""
        filters = filters or RunFilters()
        if filters.sort_by not in RUN_SORT_FIELDS:
            raise ValidationError('sort_by', f"must be one of: {', '.join(RUN_SORT_FIELDS)}")
        return self.run_store.list_runs(filters)

    def get_research_run(self, run_id: str) -> ResearchRun:
        run = self.run_store.get(run_id)
        if run is None:
            raise RunNotFoundError(run_id)
        return run

    def get_research_stats(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Aggregate topic and run statistics.

        Returns:
            Dict with topics, research_runs (counts by status) and recent_activity
        """
        now = now or datetime.now(timezone.utc)
        since = now - timedelta(days=STATS_WINDOW_DAYS)

        topic_stats = self.topic_store.topic_stats(since)
        run_counts = self.run_store.status_counts()
        recent_runs = self.run_store.status_counts(since)

        return {
            'topics': {
                'total_topics': topic_stats.get('total_topics', 0),
                'active_topics': topic_stats.get('active_topics', 0),
                'avg_relevance_score': topic_stats.get('avg_relevance_score', 0),
                'avg_frequency': topic_stats.get('avg_frequency', 0),
                'categories': topic_stats.get('categories', [])
            },
            'research_runs': run_counts,
            'recent_activity': {
                'runs_last_30_days': sum(recent_runs.values()),
                'topics_last_30_days': topic_stats.get('recent_topics', 0)
            }
        }

    def deactivate_topic(self, topic_id: str) -> TrendingTopic:
        """Soft-delete a topic. Raises TopicNotFoundError if it does not exist."""
        topic = self.topic_store.deactivate(topic_id)
        if topic is None:
            raise TopicNotFoundError(topic_id)
        logger.info(f"Deactivated topic '{topic.topic}' ({topic_id})")
        return topic

    def list_sources(self, active_only: bool = False) -> List[NewsSource]:
        return self.source_store.list_sources(active_only)

    def save_source(self, data: Mapping[str, Any]) -> NewsSource:
        """
        Create or replace a news source, keyed by name.

        Raises:
            ValidationError: If a required field is missing or invalid
        """
        source = NewsSource.from_dict(dict(data))
        stored = self.source_store.save(source)
        logger.info(f"Saved news source '{stored.name}' ({stored.type})")
        return stored

    def seed_sources(self, newsapi_key: Optional[str] = None) -> List[NewsSource]:
        """
        Upsert the default development sources.

        Args:
            newsapi_key: Key stored on the NewsAPI source

        Returns:
            The stored sources
        """
        seeded = []
        for template in DEFAULT_SOURCES:
            data = dict(template, fetch_config=dict(DEFAULT_FETCH_CONFIG), is_active=True)
            if data['type'] == 'newsapi':
                data['api_key'] = newsapi_key
            seeded.append(self.save_source(data))

        logger.info(f"Seeded {len(seeded)} news sources")
        return seeded
