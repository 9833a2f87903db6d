#!/usr/bin/env python3
"""
Base classes for news fetchers.

A fetcher is built around one configured NewsSource record and returns
normalized Article objects for a date window and keyword list.
"""

import logging
import time
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, TypeVar

import pytz
import requests

from ..exceptions import RateLimitExceededError, SourceConnectionError
from ..models.article import Article
from ..models.research_config import DateRange
from ..models.source import NewsSource
from .rate_limiter import TokenBucket

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = 'UPSC-Mentor-Current-Affairs-Agent/1.0'

T = TypeVar('T')


def matches_keywords(text: str, keywords: List[str]) -> bool:
    """True when no keywords are given or any keyword occurs in text (case-insensitive)."""
    if not keywords:
        return True
    lower_text = (text or "").lower()
    return any(keyword.lower() in lower_text for keyword in keywords)


class BaseNewsFetcher(ABC):
    """
    Abstract base class for all news fetchers.

    Implementations provide fetch_current_affairs; the base class supplies an
    HTTP session, rate limited requests and retry with linear backoff.
    """

    def __init__(self, source: NewsSource, session: Optional[requests.Session] = None,
                 rate_limiter: Optional[TokenBucket] = None,
                 user_agent: str = DEFAULT_USER_AGENT, timezone: str = 'Asia/Kolkata',
                 sleep: Callable[[float], None] = time.sleep):
        """
        Initialize fetcher.

        Args:
            source: Source record this fetcher reads from
            session: Optional shared requests session
            rate_limiter: Token bucket consulted before every request
            user_agent: User-Agent header sent with requests
            timezone: Local timezone for parsed publication dates
            sleep: Sleep function used between retries
        """
        self.source = source
        self.rate_limiter = rate_limiter
        self.local_tz = pytz.timezone(timezone)
        self._sleep = sleep
        self.session = session or requests.Session()
        self.session.headers.update({'User-Agent': user_agent})
        self.session.headers.update(source.headers)

    @property
    def name(self) -> str:
        return self.source.name

    @abstractmethod
    def fetch_current_affairs(self, date_from: datetime, date_to: datetime,
                              keywords: Optional[List[str]] = None) -> List[Article]:
        """
        Fetch articles published inside the window.

        Args:
            date_from: Window start (inclusive)
            date_to: Window end (inclusive)
            keywords: Optional keyword filter, any match keeps an article

        Returns:
            List of normalized articles

        Raises:
            SourceError: If the source cannot be read
        """
        pass

    def make_request(self, url: Optional[str] = None, params: Optional[Dict[str, Any]] = None,
                     headers: Optional[Dict[str, str]] = None) -> requests.Response:
        """
        Issue one HTTP request against the source, honoring its rate limit.

        Args:
            url: Absolute URL, defaults to the source's api_endpoint
            params: Query parameters
            headers: Extra headers for this request

        Returns:
            Successful response

        Raises:
            SourceConnectionError: On network failure or non-2xx status
            RateLimitExceededError: If the next token is further away than the request timeout
        """
        url = url or self.source.api_endpoint
        params = dict(params or {})
        if self.source.api_key:
            params.setdefault('apiKey', self.source.api_key)

        if self.rate_limiter is not None:
            self.rate_limiter.acquire(max_wait=self.source.fetch_config.timeout)

        try:
            logger.debug(f"Requesting {url} for {self.name}")
            response = self.session.request(
                self.source.fetch_config.method,
                url,
                params=params,
                headers=headers,
                timeout=self.source.fetch_config.timeout
            )
            response.raise_for_status()
            return response
        except requests.RequestException as e:
            raise SourceConnectionError(self.name, url, e) from e

    def retry_operation(self, operation: Callable[[], T], max_retries: Optional[int] = None,
                        delay: Optional[float] = None) -> T:
        """
        Run operation, retrying on any exception with linear backoff.

        A rate limit refusal is raised without retrying.

        Args:
            operation: Zero-argument callable
            max_retries: Attempts in total (defaults to the source's fetch config)
            delay: Base delay in seconds; attempt N waits delay * N

        Returns:
            The operation's result

        Raises:
            The last exception once all attempts fail
        """
        max_retries = max(1, max_retries or self.source.fetch_config.retries)
        delay = self.source.fetch_config.retry_delay if delay is None else delay

        last_error: Optional[Exception] = None
        for attempt in range(1, max_retries + 1):
            try:
                return operation()
            except RateLimitExceededError:
                raise
            except Exception as e:
                last_error = e
                logger.warning(f"{self.name} attempt {attempt}/{max_retries} failed: {e}")
                if attempt < max_retries:
                    self._sleep(delay * attempt)

        raise last_error

    def filter_articles(self, articles: List[Article], date_from: datetime, date_to: datetime,
                        keywords: Optional[List[str]] = None) -> List[Article]:
        """Keep articles inside the window that match the keywords (title and description)."""
        window = DateRange(start=date_from, end=date_to)
        return [
            article for article in articles
            if window.contains(article.published_at)
            and matches_keywords(f"{article.title} {article.description}", keywords or [])
        ]
