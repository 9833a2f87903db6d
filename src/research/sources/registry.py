#!/usr/bin/env python3
"""
Fetcher registry.

Maps a source record's type id to the fetcher class that reads it.
"""

import logging
from typing import Dict, List, Type

from .base import BaseNewsFetcher
from .newsapi import NewsAPIFetcher
from .rss import TheHinduFetcher, PIBFetcher, IndianExpressFetcher
from ..models.source import NewsSource

logger = logging.getLogger(__name__)


class FetcherRegistry:
    """Registry of fetcher classes keyed by source type."""

    def __init__(self):
        self._fetchers: Dict[str, Type[BaseNewsFetcher]] = {}

    def register_fetcher(self, source_type: str, fetcher_class: Type[BaseNewsFetcher]) -> None:
        self._fetchers[source_type] = fetcher_class
        logger.debug(f"Registered fetcher for source type: {source_type}")

    def has_fetcher(self, source_type: str) -> bool:
        return source_type in self._fetchers

    def create_fetcher(self, source: NewsSource, **kwargs) -> BaseNewsFetcher:
        """
        Instantiate the fetcher for a source.

        Args:
            source: Source record
            **kwargs: Passed through to the fetcher constructor

        Raises:
            KeyError: If no fetcher handles the source's type
        """
        fetcher_class = self._fetchers.get(source.type)
        if fetcher_class is None:
            available = list(self._fetchers.keys())
            raise KeyError(f"No fetcher for source type '{source.type}'. Available: {available}")
        return fetcher_class(source, **kwargs)

    def list_source_types(self) -> List[str]:
        return list(self._fetchers.keys())


def build_default_registry() -> FetcherRegistry:
    registry = FetcherRegistry()
    registry.register_fetcher('newsapi', NewsAPIFetcher)
    registry.register_fetcher('thehindu', TheHinduFetcher)
    registry.register_fetcher('pib', PIBFetcher)
    registry.register_fetcher('indianexpress', IndianExpressFetcher)
    return registry
