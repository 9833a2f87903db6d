#!/usr/bin/env python3
"""
News Source Database Service

Stores configured news sources and their fetch counters.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import psycopg
from psycopg.types.json import Jsonb

from .base import SourceStore
from ..exceptions import DatabaseOperationError
from ..models.source import NewsSource

logger = logging.getLogger(__name__)


def _row_to_source(row: Dict[str, Any]) -> NewsSource:
    data = dict(row)
    data['id'] = str(data['id'])
    return NewsSource.from_dict(data)


class SourceService(SourceStore):
    """Service for news source database operations."""

    def __init__(self, connection_manager):
        self.connection_manager = connection_manager

    def list_sources(self, active_only: bool = False) -> List[NewsSource]:
        try:
            with self.connection_manager.get_cursor() as cursor:
                if active_only:
                    cursor.execute("SELECT * FROM news_sources WHERE is_active ORDER BY reliability_score DESC, name")
                else:
                    cursor.execute("SELECT * FROM news_sources ORDER BY reliability_score DESC, name")
                rows = cursor.fetchall()
        except psycopg.Error as e:
            logger.error(f"Failed to list news sources: {e}")
            raise DatabaseOperationError('list', 'news_sources', e) from e
        return [_row_to_source(row) for row in rows]

    def get_by_name(self, name: str) -> Optional[NewsSource]:
        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute("SELECT * FROM news_sources WHERE name = %s", (name,))
                row = cursor.fetchone()
        except psycopg.Error as e:
            logger.error(f"Failed to load news source '{name}': {e}")
            raise DatabaseOperationError('get', 'news_sources', e) from e
        return _row_to_source(row) if row else None

    def save(self, source: NewsSource) -> NewsSource:
        data = source.to_dict(include_secrets=True)
        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute("""
                    INSERT INTO news_sources (
                        name, url, type, category, reliability_score, api_endpoint, api_key,
                        headers, rate_limit, fetch_config, is_active, updated_at
                    ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                    ON CONFLICT (name) DO UPDATE SET
                        url = EXCLUDED.url,
                        type = EXCLUDED.type,
                        category = EXCLUDED.category,
                        reliability_score = EXCLUDED.reliability_score,
                        api_endpoint = EXCLUDED.api_endpoint,
                        api_key = COALESCE(EXCLUDED.api_key, news_sources.api_key),
                        headers = EXCLUDED.headers,
                        rate_limit = EXCLUDED.rate_limit,
                        fetch_config = EXCLUDED.fetch_config,
                        is_active = EXCLUDED.is_active,
                        updated_at = EXCLUDED.updated_at
                    RETURNING *
                """, (
                    source.name, source.url, source.type, source.category, source.reliability_score,
                    source.api_endpoint, source.api_key, Jsonb(data['headers']),
                    Jsonb(data['rate_limit']), Jsonb(data['fetch_config']), source.is_active,
                    datetime.now(timezone.utc)
                ))
                row = cursor.fetchone()
        except psycopg.Error as e:
            logger.error(f"Failed to save news source '{source.name}': {e}")
            raise DatabaseOperationError('upsert', 'news_sources', e) from e

        logger.info(f"Saved news source: {source.name}")
        return _row_to_source(row)

    def record_fetch(self, name: str, success: bool, fetched_at: datetime) -> None:
        counter = 'success_count' if success else 'error_count'
        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute(f"""
                    UPDATE news_sources
                    SET {counter} = {counter} + 1, last_fetched = %s
                    WHERE name = %s
                """, (fetched_at, name))
        except psycopg.Error as e:
            logger.error(f"Failed to record fetch for '{name}': {e}")
            raise DatabaseOperationError('update', 'news_sources', e) from e
