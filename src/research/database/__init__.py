#!/usr/bin/env python3
"""
Database package for the research engine.

Store interfaces plus in-memory and PostgreSQL implementations. The psycopg
backed services are imported lazily by the container so the in-memory
backend works without a database driver configured.
"""

from .base import RunStore, TopicStore, SourceStore, RunFilters, TopicFilters
from .memory import InMemoryRunStore, InMemoryTopicStore, InMemorySourceStore

__all__ = [
    'RunStore',
    'TopicStore',
    'SourceStore',
    'RunFilters',
    'TopicFilters',
    'InMemoryRunStore',
    'InMemoryTopicStore',
    'InMemorySourceStore'
]
