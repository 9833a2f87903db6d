#!/usr/bin/env python3
"""
Trending Topic Database Service

Handles all database operations related to trending topics. Topics are
unique by topic key; concurrent writers resolve last-write-wins.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import psycopg
from psycopg import sql
from psycopg.types.json import Jsonb

from .base import TopicStore, TopicFilters, TOPIC_SORT_FIELDS
from ..exceptions import DatabaseOperationError, ValidationError
from ..models.topic import TrendingTopic

logger = logging.getLogger(__name__)


def _row_to_topic(row: Dict[str, Any]) -> TrendingTopic:
    data = dict(row)
    data['id'] = str(data['id'])
    return TrendingTopic.from_dict(data)


class TopicService(TopicStore):
    """Service for trending topic database operations."""

    def __init__(self, connection_manager):
        self.connection_manager = connection_manager

    def get(self, topic_id: str) -> Optional[TrendingTopic]:
        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute("SELECT * FROM trending_topics WHERE id::text = %s", (topic_id,))
                row = cursor.fetchone()
        except psycopg.Error as e:
            logger.error(f"Failed to load topic {topic_id}: {e}")
            raise DatabaseOperationError('get', 'trending_topics', e) from e
        return _row_to_topic(row) if row else None

    def get_by_topic(self, topic: str) -> Optional[TrendingTopic]:
        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute("SELECT * FROM trending_topics WHERE topic = %s", (topic,))
                row = cursor.fetchone()
        except psycopg.Error as e:
            logger.error(f"Failed to load topic '{topic}': {e}")
            raise DatabaseOperationError('get', 'trending_topics', e) from e
        return _row_to_topic(row) if row else None

    def save(self, topic: TrendingTopic) -> TrendingTopic:
        """
        Upsert a topic by its key.

        Args:
            topic: Topic with the merged values to store

        Returns:
            Stored topic including database id and timestamps
        """
        now = datetime.now(timezone.utc)
        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute("""
                    INSERT INTO trending_topics (
                        topic, frequency, relevance_score, category, gs_papers, sources,
                        source_count, reasoning, first_detected, last_updated, is_active,
                        research_data, generated_at, confidence_score
                    ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                    ON CONFLICT (topic) DO UPDATE SET
                        frequency = EXCLUDED.frequency,
                        relevance_score = EXCLUDED.relevance_score,
                        category = EXCLUDED.category,
                        gs_papers = EXCLUDED.gs_papers,
                        sources = EXCLUDED.sources,
                        source_count = EXCLUDED.source_count,
                        reasoning = EXCLUDED.reasoning,
                        last_updated = EXCLUDED.last_updated,
                        is_active = EXCLUDED.is_active,
                        research_data = COALESCE(EXCLUDED.research_data, trending_topics.research_data),
                        generated_at = COALESCE(EXCLUDED.generated_at, trending_topics.generated_at),
                        confidence_score = COALESCE(EXCLUDED.confidence_score, trending_topics.confidence_score)
                    RETURNING *
                """, (
                    topic.topic,
                    topic.frequency,
                    topic.relevance_score,
                    topic.category,
                    list(topic.gs_papers),
                    Jsonb([source.to_dict() for source in topic.sources]),
                    topic.source_count,
                    topic.reasoning,
                    topic.first_detected or now,
                    topic.last_updated or now,
                    topic.is_active,
                    Jsonb(topic.research_data) if topic.research_data is not None else None,
                    topic.generated_at,
                    topic.confidence_score
                ))
                row = cursor.fetchone()
        except psycopg.Error as e:
            logger.error(f"Failed to save topic '{topic.topic}': {e}")
            raise DatabaseOperationError('upsert', 'trending_topics', e) from e

        return _row_to_topic(row)

    def list_topics(self, filters: TopicFilters) -> List[TrendingTopic]:
        if filters.sort_by not in TOPIC_SORT_FIELDS:
            raise ValidationError('sort_by', f"must be one of {', '.join(TOPIC_SORT_FIELDS)}")

        conditions = [sql.SQL("relevance_score >= %s")]
        params: List[Any] = [filters.min_relevance_score]
        if filters.is_active is not None:
            conditions.append(sql.SQL("is_active = %s"))
            params.append(filters.is_active)
        if filters.category:
            conditions.append(sql.SQL("category = %s"))
            params.append(filters.category)
        params.append(filters.limit)

        query = sql.SQL("SELECT * FROM trending_topics WHERE {conditions} ORDER BY {sort} {direction} LIMIT %s").format(
            conditions=sql.SQL(" AND ").join(conditions),
            sort=sql.Identifier(filters.sort_by),
            direction=sql.SQL("DESC NULLS LAST" if filters.descending else "ASC NULLS FIRST")
        )

        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute(query, params)
                rows = cursor.fetchall()
        except psycopg.Error as e:
            logger.error(f"Failed to list topics: {e}")
            raise DatabaseOperationError('list', 'trending_topics', e) from e

        return [_row_to_topic(row) for row in rows]

    def update_research_data(self, topic: str, research_data: Dict[str, Any],
                             generated_at: datetime, confidence_score: Optional[float]) -> bool:
        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute("""
                    UPDATE trending_topics
                    SET research_data = %s, generated_at = %s, confidence_score = %s
                    WHERE topic = %s
                """, (Jsonb(research_data), generated_at, confidence_score, topic))
                return cursor.rowcount > 0
        except psycopg.Error as e:
            logger.error(f"Failed to store research data for '{topic}': {e}")
            raise DatabaseOperationError('update', 'trending_topics', e) from e

    def deactivate(self, topic_id: str) -> Optional[TrendingTopic]:
        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute("""
                    UPDATE trending_topics SET is_active = FALSE
                    WHERE id::text = %s
                    RETURNING *
                """, (topic_id,))
                row = cursor.fetchone()
        except psycopg.Error as e:
            logger.error(f"Failed to deactivate topic {topic_id}: {e}")
            raise DatabaseOperationError('deactivate', 'trending_topics', e) from e
        return _row_to_topic(row) if row else None

    def topic_stats(self, since: Optional[datetime] = None) -> Dict[str, Any]:
        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute("""
                    SELECT
                        COUNT(*) AS total_topics,
                        COUNT(*) FILTER (WHERE is_active) AS active_topics,
                        COALESCE(AVG(relevance_score), 0) AS avg_relevance_score,
                        COALESCE(AVG(frequency), 0) AS avg_frequency,
                        COALESCE(ARRAY_AGG(DISTINCT category) FILTER (WHERE category IS NOT NULL), '{}') AS categories,
                        COUNT(*) FILTER (WHERE %s::timestamptz IS NULL OR first_detected >= %s) AS recent_topics
                    FROM trending_topics
                """, (since, since))
                row = cursor.fetchone()
        except psycopg.Error as e:
            logger.error(f"Failed to compute topic statistics: {e}")
            raise DatabaseOperationError('stats', 'trending_topics', e) from e

        return {
            'total_topics': row['total_topics'],
            'active_topics': row['active_topics'],
            'avg_relevance_score': float(row['avg_relevance_score']),
            'avg_frequency': float(row['avg_frequency']),
            'categories': sorted(row['categories']),
            'recent_topics': row['recent_topics']
        }
