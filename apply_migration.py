#!/usr/bin/env python3
"""
Apply the research engine schema to the PostgreSQL database in DATABASE_URL.
"""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

from research.config import get_config
from research.database.connection_manager import ConnectionManager

MIGRATION_PATH = os.path.join(os.path.dirname(__file__), "database", "migrations", "001_research_engine.sql")


def apply_migration() -> bool:
    """Apply the research engine migration."""
    if not os.path.exists(MIGRATION_PATH):
        print(f"Migration file not found: {MIGRATION_PATH}")
        return False

    with open(MIGRATION_PATH, 'r', encoding='utf-8') as f:
        migration_sql = f.read()

    print("Database Migration: research_runs, trending_topics, news_sources")
    print("=" * 60)

    config = get_config()
    with ConnectionManager(config.database) as manager:
        with manager.transaction() as cursor:
            cursor.execute(migration_sql)

    print("✅ Migration applied")
    return True


if __name__ == "__main__":
    success = apply_migration()
    sys.exit(0 if success else 1)
