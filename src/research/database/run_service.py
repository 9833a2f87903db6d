#!/usr/bin/env python3
"""
Research Run Database Service

PostgreSQL storage of ResearchRun documents. Nested run state (config,
progress, results, errors, logs) lives in JSONB columns and every save writes
the full snapshot.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional

import psycopg
from psycopg import sql
from psycopg.types.json import Jsonb

from .base import RunStore, RunFilters, RUN_SORT_FIELDS
from ..exceptions import DatabaseOperationError, ValidationError
from ..models.run import ResearchRun

logger = logging.getLogger(__name__)

RUN_COLUMNS = (
    'run_id', 'status', 'type', 'config', 'progress', 'results', 'errors', 'logs',
    'retry_count', 'max_retries', 'retried_from', 'triggered_by', 'user_id',
    'start_time', 'end_time', 'duration_ms', 'created_at', 'updated_at'
)


class RunService(RunStore):
    """Service for research run database operations."""

    def __init__(self, connection_manager):
        """
        Initialize run service.

        Args:
            connection_manager: Database connection manager instance
        """
        self.connection_manager = connection_manager

    def save(self, run: ResearchRun) -> None:
        data = run.to_dict()
        values = (
            run.run_id, run.status.value, run.type.value,
            Jsonb(data['config']), Jsonb(data['progress']), Jsonb(data['results']),
            Jsonb(data['errors']), Jsonb(data['logs']),
            run.retry_count, run.max_retries, run.retried_from, run.triggered_by, run.user_id,
            run.start_time, run.end_time, run.duration_ms, run.created_at, run.updated_at
        )
        updates = sql.SQL(', ').join(
            sql.SQL("{col} = EXCLUDED.{col}").format(col=sql.Identifier(column))
            for column in RUN_COLUMNS if column not in ('run_id', 'created_at')
        )
        query = sql.SQL("""
            INSERT INTO research_runs ({columns}) VALUES ({placeholders})
            ON CONFLICT (run_id) DO UPDATE SET {updates}
        """).format(
            columns=sql.SQL(', ').join(map(sql.Identifier, RUN_COLUMNS)),
            placeholders=sql.SQL(', ').join(sql.Placeholder() * len(RUN_COLUMNS)),
            updates=updates
        )

        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute(query, values)
            logger.debug(f"Saved research run {run.run_id} ({run.status.value})")
        except psycopg.Error as e:
            logger.error(f"Failed to save research run {run.run_id}: {e}")
            raise DatabaseOperationError('save', 'research_runs', e) from e

    def get(self, run_id: str) -> Optional[ResearchRun]:
        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute("SELECT * FROM research_runs WHERE run_id = %s", (run_id,))
                row = cursor.fetchone()
        except psycopg.Error as e:
            logger.error(f"Failed to load research run {run_id}: {e}")
            raise DatabaseOperationError('get', 'research_runs', e) from e

        return ResearchRun.from_dict(dict(row)) if row else None

    def list_runs(self, filters: RunFilters) -> List[ResearchRun]:
        if filters.sort_by not in RUN_SORT_FIELDS:
            raise ValidationError('sort_by', f"must be one of {', '.join(RUN_SORT_FIELDS)}")

        conditions = []
        params = []
        if filters.status:
            conditions.append(sql.SQL("status = %s"))
            params.append(filters.status)
        if filters.type:
            conditions.append(sql.SQL("type = %s"))
            params.append(filters.type)

        where = sql.SQL("WHERE ") + sql.SQL(" AND ").join(conditions) if conditions else sql.SQL("")
        query = sql.SQL("SELECT * FROM research_runs {where} ORDER BY {sort} {direction} LIMIT %s").format(
            where=where,
            sort=sql.Identifier(filters.sort_by),
            direction=sql.SQL("DESC NULLS LAST" if filters.descending else "ASC NULLS FIRST")
        )
        params.append(filters.limit)

        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute(query, params)
                rows = cursor.fetchall()
        except psycopg.Error as e:
            logger.error(f"Failed to list research runs: {e}")
            raise DatabaseOperationError('list', 'research_runs', e) from e

        return [ResearchRun.from_dict(dict(row)) for row in rows]

    def status_counts(self, since: Optional[datetime] = None) -> Dict[str, int]:
        try:
            with self.connection_manager.get_cursor() as cursor:
                if since:
                    cursor.execute("""
                        SELECT status, COUNT(*) AS count FROM research_runs
                        WHERE created_at >= %s GROUP BY status
                    """, (since,))
                else:
                    cursor.execute("SELECT status, COUNT(*) AS count FROM research_runs GROUP BY status")
                return {row['status']: row['count'] for row in cursor.fetchall()}
        except psycopg.Error as e:
            logger.error(f"Failed to count research runs: {e}")
            raise DatabaseOperationError('count', 'research_runs', e) from e
