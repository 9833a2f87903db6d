#!/usr/bin/env python3
"""
Sequential article collection across configured sources.

Sources are read one after another with a fixed pause between them. A source
whose fetch raises is recorded as a failure and the loop moves on. A source
with no registered fetcher, or whose rate limit budget is spent, is skipped.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional

from .base import BaseNewsFetcher
from .rate_limiter import RateLimiterPool
from .registry import FetcherRegistry, build_default_registry
from .samples import get_sample_articles
from ..database.base import SourceStore
from ..exceptions import RateLimitExceededError
from ..models.article import Article
from ..models.research_config import ResearchConfig
from ..models.source import NewsSource

logger = logging.getLogger(__name__)


@dataclass
class SourceOutcome:
    """What happened to one source during collection."""
    source: str
    status: str  # fetched, failed, skipped
    articles: int = 0
    error: Optional[str] = None


@dataclass
class CollectionResult:
    articles: List[Article] = field(default_factory=list)
    outcomes: List[SourceOutcome] = field(default_factory=list)
    used_samples: bool = False

    @property
    def failures(self) -> List[SourceOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status != 'fetched']


class SourceCollector:
    """Fetches articles from every active source in order."""

    def __init__(self, source_store: SourceStore, registry: Optional[FetcherRegistry] = None,
                 limiter_pool: Optional[RateLimiterPool] = None, delay_ms: int = 500,
                 sleep: Callable[[float], None] = time.sleep, **fetcher_options):
        """
        Initialize collector.

        Args:
            source_store: Where source records and their counters live
            registry: Source type to fetcher mapping
            limiter_pool: Per-source token buckets
            delay_ms: Pause between two sources
            sleep: Sleep function (replaced in tests)
            **fetcher_options: Passed to every fetcher (user_agent, timezone, session)
        """
        self.source_store = source_store
        self.registry = registry or build_default_registry()
        self.limiter_pool = limiter_pool or RateLimiterPool(sleep=sleep)
        self.delay_ms = delay_ms
        self._sleep = sleep
        self.fetcher_options = fetcher_options

    def resolve_sources(self, allow_list: Optional[List[str]] = None) -> List[NewsSource]:
        """Active sources, restricted to allow_list (ids or names) when given."""
        sources = self.source_store.list_sources(active_only=True)
        if allow_list:
            wanted = set(allow_list)
            sources = [source for source in sources if source.id in wanted or source.name in wanted]
        return sources

    def create_fetcher(self, source: NewsSource) -> BaseNewsFetcher:
        return self.registry.create_fetcher(
            source,
            rate_limiter=self.limiter_pool.for_source(source),
            sleep=self._sleep,
            **self.fetcher_options
        )

    def collect(self, config: ResearchConfig) -> CollectionResult:
        """
        Fetch articles for the config's window and keywords.

        Args:
            config: Resolved research configuration

        Returns:
            CollectionResult with articles in source order and one outcome per source
        """
        result = CollectionResult()
        sources = self.resolve_sources(config.sources)

        if not sources:
            logger.warning("No news sources configured. Using sample articles for development/testing.")
            result.articles = get_sample_articles(config.date_range)
            result.used_samples = True
            return result

        for index, source in enumerate(sources):
            if index > 0 and self.delay_ms:
                self._sleep(self.delay_ms / 1000)

            if not self.registry.has_fetcher(source.type):
                logger.warning(f"No fetcher available for source type: {source.type} ({source.name})")
                result.outcomes.append(SourceOutcome(
                    source=source.name, status='skipped', error=f"no fetcher for source type '{source.type}'"
                ))
                continue

            try:
                fetcher = self.create_fetcher(source)
                articles = fetcher.fetch_current_affairs(
                    config.date_range.start, config.date_range.end, list(config.keywords)
                )
            except RateLimitExceededError as e:
                logger.warning(f"Skipping {source.name}: {e}")
                result.outcomes.append(SourceOutcome(source=source.name, status='skipped', error=str(e)))
                continue
            except Exception as e:
                logger.error(f"Error fetching from {source.name}: {e}")
                self.source_store.record_fetch(source.name, False, datetime.now(timezone.utc))
                result.outcomes.append(SourceOutcome(source=source.name, status='failed', error=str(e)))
                continue

            self.source_store.record_fetch(source.name, True, datetime.now(timezone.utc))
            result.articles.extend(articles)
            result.outcomes.append(SourceOutcome(source=source.name, status='fetched', articles=len(articles)))
            logger.info(f"Fetched {len(articles)} articles from {source.name}")

        return result
