#!/usr/bin/env python3
"""
Trending topic data models.

A trending topic is identified by its topic key (the lower-cased phrase the
detector extracted) and carries the sources it was seen in plus, once
generated, the structured research data.
"""

from datetime import datetime
from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field

from .article import parse_datetime_safe

CATEGORIES = [
    'Politics', 'Economy', 'International Relations', 'Science & Technology',
    'Environment', 'Society', 'Governance', 'Defense', 'Other'
]

GS_PAPERS = ['GS-I', 'GS-II', 'GS-III', 'GS-IV']


@dataclass
class TopicSource:
    """One article reference backing a trending topic."""
    name: str
    url: str
    publish_date: Optional[datetime] = None
    snippet: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'url': self.url,
            'publish_date': self.publish_date.isoformat() if self.publish_date else None,
            'snippet': self.snippet
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TopicSource':
        return cls(
            name=data.get('name', ''),
            url=data.get('url', ''),
            publish_date=parse_datetime_safe(data.get('publish_date')),
            snippet=data.get('snippet', '') or ''
        )


@dataclass
class TrendingTopic:
    """A detected trending subject, scored and categorized."""
    topic: str
    frequency: int = 1
    relevance_score: float = 0.0
    category: str = 'Other'
    gs_papers: List[str] = field(default_factory=list)
    sources: List[TopicSource] = field(default_factory=list)
    source_count: int = 0
    mentions: List[Dict[str, Any]] = field(default_factory=list)
    reasoning: str = ""

    # Persistence fields
    id: Optional[str] = None
    first_detected: Optional[datetime] = None
    last_updated: Optional[datetime] = None
    is_active: bool = True
    research_data: Optional[Dict[str, Any]] = None
    generated_at: Optional[datetime] = None
    confidence_score: Optional[float] = None

    def __post_init__(self):
        """Validate and clean data."""
        self.relevance_score = max(0.0, min(100.0, float(self.relevance_score)))
        if self.category not in CATEGORIES:
            self.category = 'Other'
        if not self.source_count:
            self.source_count = len(self.sources)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'topic': self.topic,
            'frequency': self.frequency,
            'relevance_score': self.relevance_score,
            'category': self.category,
            'gs_papers': list(self.gs_papers),
            'sources': [source.to_dict() for source in self.sources],
            'source_count': self.source_count,
            'reasoning': self.reasoning,
            'first_detected': self.first_detected.isoformat() if self.first_detected else None,
            'last_updated': self.last_updated.isoformat() if self.last_updated else None,
            'is_active': self.is_active,
            'research_data': self.research_data,
            'generated_at': self.generated_at.isoformat() if self.generated_at else None,
            'confidence_score': self.confidence_score
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TrendingTopic':
        """Create TrendingTopic from dictionary."""
        return cls(
            id=data.get('id'),
            topic=data['topic'],
            frequency=data.get('frequency', 1),
            relevance_score=data.get('relevance_score', 0.0) or 0.0,
            category=data.get('category') or 'Other',
            gs_papers=list(data.get('gs_papers') or []),
            sources=[TopicSource.from_dict(item) for item in data.get('sources') or []],
            source_count=data.get('source_count', 0) or 0,
            reasoning=data.get('reasoning', '') or '',
            first_detected=parse_datetime_safe(data.get('first_detected')),
            last_updated=parse_datetime_safe(data.get('last_updated')),
            is_active=data.get('is_active', True),
            research_data=data.get('research_data'),
            generated_at=parse_datetime_safe(data.get('generated_at')),
            confidence_score=data.get('confidence_score')
        )

    def __repr__(self):
        return f"TrendingTopic(topic='{self.topic}', frequency={self.frequency}, relevance={self.relevance_score})"
