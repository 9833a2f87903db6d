#!/usr/bin/env python3
"""
NewsAPI.org fetcher.

Queries the /v2/everything endpoint for English articles in the window,
ordered by relevancy.
"""

import logging
from datetime import datetime
from typing import List, Optional

from .base import BaseNewsFetcher
from ..exceptions import SourceParseError
from ..models.article import Article, parse_datetime_safe

logger = logging.getLogger(__name__)

DEFAULT_QUERY = 'India politics economy OR government policy OR international relations'
PAGE_SIZE = 100


class NewsAPIFetcher(BaseNewsFetcher):
    """Fetches news from NewsAPI.org."""

    def build_params(self, date_from: datetime, date_to: datetime,
                     keywords: Optional[List[str]] = None) -> dict:
        return {
            'q': ' OR '.join(keywords) if keywords else DEFAULT_QUERY,
            'from': date_from.date().isoformat(),
            'to': date_to.date().isoformat(),
            'language': 'en',
            'sortBy': 'relevancy',
            'pageSize': str(PAGE_SIZE)
        }

    def fetch_current_affairs(self, date_from: datetime, date_to: datetime,
                              keywords: Optional[List[str]] = None) -> List[Article]:
        params = self.build_params(date_from, date_to, keywords)

        def fetch() -> List[Article]:
            response = self.make_request(params=params)
            try:
                payload = response.json()
            except ValueError as e:
                raise SourceParseError(self.name, 'json', e) from e
            return self.parse_articles(payload)

        articles = self.retry_operation(fetch)
        logger.info(f"Fetched {len(articles)} articles from {self.name}")
        return articles

    def parse_articles(self, payload: dict) -> List[Article]:
        """Convert a NewsAPI response body into Article objects."""
        if payload.get('status') == 'error':
            raise SourceParseError(self.name, 'response', ValueError(payload.get('message', 'NewsAPI error')))

        articles = []
        for item in payload.get('articles') or []:
            source = item.get('source') or {}
            articles.append(Article(
                title=item.get('title') or '',
                description=item.get('description') or '',
                content=item.get('content') or '',
                url=item.get('url') or '',
                source=source.get('name') or self.name,
                published_at=parse_datetime_safe(item.get('publishedAt')),
                author=item.get('author')
            ))
        return articles
