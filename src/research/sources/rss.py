#!/usr/bin/env python3
"""
RSS based fetchers for Indian news publishers.

Feeds are downloaded through the rate limited session, parsed with
feedparser and cleaned of HTML with BeautifulSoup. Dates are converted to the
configured local timezone before window filtering.
"""

import logging
from datetime import datetime
from typing import List, Optional

import feedparser
import pytz
from bs4 import BeautifulSoup
from dateutil import parser as date_parser

from .base import BaseNewsFetcher
from ..exceptions import SourceParseError
from ..models.article import Article

logger = logging.getLogger(__name__)


def strip_html(html: Optional[str]) -> str:
    if not html:
        return ""
    return BeautifulSoup(html, 'html.parser').get_text(" ", strip=True)


class RSSNewsFetcher(BaseNewsFetcher):
    """Base class for feed-driven publishers."""

    FEED_URLS: List[str] = []
    SOURCE_LABEL = ""

    def get_feed_urls(self) -> List[str]:
        return list(self.FEED_URLS)

    def fetch_current_affairs(self, date_from: datetime, date_to: datetime,
                              keywords: Optional[List[str]] = None) -> List[Article]:
        articles: List[Article] = []
        for feed_url in self.get_feed_urls():
            feed = self.retry_operation(lambda url=feed_url: self.fetch_feed(url))
            articles.extend(self.parse_feed_entries(feed))

        matching = self.filter_articles(articles, date_from, date_to, keywords)
        logger.info(f"Found {len(matching)} matching articles out of {len(articles)} from {self.name}")
        return matching

    def fetch_feed(self, url: str) -> feedparser.FeedParserDict:
        response = self.make_request(url, headers={'Accept': 'application/rss+xml'})
        feed = feedparser.parse(response.content)

        if feed.bozo and not feed.entries:
            raise SourceParseError(self.name, 'rss', feed.bozo_exception)
        if feed.bozo:
            logger.warning(f"Feed parsing warning for {url}: {feed.bozo_exception}")
        return feed

    def parse_published_date(self, entry) -> Optional[datetime]:
        """Parse published date from feed entry, converted to the local timezone."""
        for field_name in ('published', 'updated', 'created'):
            date_str = entry.get(field_name)
            if not date_str:
                continue
            try:
                dt = date_parser.parse(date_str)
            except (ValueError, OverflowError) as e:
                logger.debug(f"Failed to parse date '{date_str}': {e}")
                continue
            if dt.tzinfo is None:
                dt = pytz.utc.localize(dt)
            return dt.astimezone(self.local_tz)

        parsed = entry.get('published_parsed')
        if parsed:
            return pytz.utc.localize(datetime(*parsed[:6])).astimezone(self.local_tz)
        return None

    def parse_feed_entries(self, feed: feedparser.FeedParserDict) -> List[Article]:
        """Parse entries from a feed into Article objects."""
        articles = []
        for entry in feed.entries:
            description = strip_html(entry.get('summary') or entry.get('description'))
            content = description
            if entry.get('content'):
                content = strip_html(entry['content'][0].get('value')) or description

            articles.append(Article(
                title=strip_html(entry.get('title')),
                description=description,
                content=content,
                url=entry.get('link', ''),
                source=self.SOURCE_LABEL or self.name,
                published_at=self.parse_published_date(entry),
                author=entry.get('author')
            ))
        return articles


class TheHinduFetcher(RSSNewsFetcher):
    FEED_URLS = [
        'https://www.thehindu.com/news/national/feeder/default.rss',
        'https://www.thehindu.com/news/international/feeder/default.rss'
    ]
    SOURCE_LABEL = 'The Hindu'


class PIBFetcher(RSSNewsFetcher):
    """Press Information Bureau press releases."""
    FEED_URLS = ['https://pib.gov.in/RssMain.aspx?ModId=6&Lang=1&Regid=3']
    SOURCE_LABEL = 'Press Information Bureau'


class IndianExpressFetcher(RSSNewsFetcher):
    """Indian Express editorials."""
    FEED_URLS = ['https://indianexpress.com/section/opinion/editorials/feed/']
    SOURCE_LABEL = 'Indian Express'
