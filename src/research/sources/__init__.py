"""
News source fetchers.

Provides the fetcher interface, concrete publisher adapters and the
sequential collector used by research runs.
"""

from .base import BaseNewsFetcher, matches_keywords
from .newsapi import NewsAPIFetcher
from .rss import RSSNewsFetcher, TheHinduFetcher, PIBFetcher, IndianExpressFetcher
from .rate_limiter import TokenBucket, RateLimiterPool
from .registry import FetcherRegistry, build_default_registry
from .collector import SourceCollector, CollectionResult, SourceOutcome
from .samples import get_sample_articles

__all__ = [
    'BaseNewsFetcher',
    'matches_keywords',
    'NewsAPIFetcher',
    'RSSNewsFetcher',
    'TheHinduFetcher',
    'PIBFetcher',
    'IndianExpressFetcher',
    'TokenBucket',
    'RateLimiterPool',
    'FetcherRegistry',
    'build_default_registry',
    'SourceCollector',
    'CollectionResult',
    'SourceOutcome',
    'get_sample_articles'
]
