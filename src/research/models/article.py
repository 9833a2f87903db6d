#!/usr/bin/env python3
"""
Article data model.

Represents a news article fetched from one of the configured sources.
"""

from datetime import datetime
from typing import Dict, Any, Optional
from dataclasses import dataclass

from dateutil import parser as date_parser


def parse_datetime_safe(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if not value:
        return None
    try:
        return date_parser.parse(value)
    except (ValueError, OverflowError, TypeError):
        return None


@dataclass
class Article:
    """A single news article in the normalized shape every fetcher returns."""
    title: str
    url: str
    source: str
    published_at: Optional[datetime] = None
    description: str = ""
    content: str = ""
    category: Optional[str] = None
    relevance_score: Optional[float] = None
    author: Optional[str] = None

    def __post_init__(self):
        """Clean data after initialization."""
        self.title = (self.title or "").strip()
        self.url = (self.url or "").strip()
        self.source = (self.source or "").strip()
        self.description = (self.description or "").strip()
        self.content = (self.content or "").strip()
        if isinstance(self.author, str):
            self.author = self.author.strip() or None

    @property
    def text(self) -> str:
        """Title, description and content joined for keyword matching."""
        return f"{self.title} {self.description} {self.content}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'title': self.title,
            'description': self.description,
            'content': self.content,
            'url': self.url,
            'source': self.source,
            'published_at': self.published_at.isoformat() if self.published_at else None,
            'category': self.category,
            'relevance_score': self.relevance_score,
            'author': self.author
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Article':
        """Create Article from dictionary."""
        return cls(
            title=data.get('title', ''),
            url=data.get('url', ''),
            source=data.get('source', ''),
            published_at=parse_datetime_safe(data.get('published_at')),
            description=data.get('description', '') or '',
            content=data.get('content', '') or '',
            category=data.get('category'),
            relevance_score=data.get('relevance_score'),
            author=data.get('author')
        )

    def __repr__(self):
        return f"Article(title='{self.title[:50]}...', source='{self.source}')"
