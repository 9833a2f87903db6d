#!/usr/bin/env python3
"""
News source data model.

A configured provider plus the fetch settings its adapter runs with.
"""

from datetime import datetime
from typing import Dict, Any, Optional
from dataclasses import dataclass, field

from .article import parse_datetime_safe
from ..exceptions import ValidationError

REQUIRED_SOURCE_FIELDS = ['name', 'url', 'type', 'api_endpoint']


@dataclass
class RateLimit:
    """Allowed request count per period (minutes)."""
    requests: int = 100
    period_minutes: int = 60


@dataclass
class FetchConfig:
    """Per-source HTTP settings."""
    method: str = 'GET'
    timeout: int = 30
    retries: int = 3
    retry_delay: float = 1.0


@dataclass
class NewsSource:
    """A configured news/content provider."""
    name: str
    url: str
    type: str
    api_endpoint: str
    id: Optional[str] = None
    category: str = 'national'
    reliability_score: int = 50
    api_key: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)
    rate_limit: RateLimit = field(default_factory=RateLimit)
    fetch_config: FetchConfig = field(default_factory=FetchConfig)
    is_active: bool = True
    last_fetched: Optional[datetime] = None
    error_count: int = 0
    success_count: int = 0

    def __post_init__(self):
        if not 0 <= self.reliability_score <= 100:
            raise ValidationError('reliability_score', 'must be between 0 and 100')

    def to_dict(self, include_secrets: bool = False) -> Dict[str, Any]:
        """Convert to dictionary. The API key is left out unless asked for."""
        data = {
            'id': self.id,
            'name': self.name,
            'url': self.url,
            'type': self.type,
            'category': self.category,
            'reliability_score': self.reliability_score,
            'api_endpoint': self.api_endpoint,
            'headers': dict(self.headers),
            'rate_limit': {
                'requests': self.rate_limit.requests,
                'period_minutes': self.rate_limit.period_minutes
            },
            'fetch_config': {
                'method': self.fetch_config.method,
                'timeout': self.fetch_config.timeout,
                'retries': self.fetch_config.retries,
                'retry_delay': self.fetch_config.retry_delay
            },
            'is_active': self.is_active,
            'last_fetched': self.last_fetched.isoformat() if self.last_fetched else None,
            'error_count': self.error_count,
            'success_count': self.success_count
        }
        if include_secrets:
            data['api_key'] = self.api_key
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'NewsSource':
        """Create NewsSource from dictionary, checking required fields."""
        missing = [name for name in REQUIRED_SOURCE_FIELDS if not data.get(name)]
        if missing:
            raise ValidationError(', '.join(missing), 'required field missing')

        rate_limit = data.get('rate_limit') or {}
        fetch_config = data.get('fetch_config') or {}

        return cls(
            id=data.get('id'),
            name=data['name'],
            url=data['url'],
            type=data['type'],
            api_endpoint=data['api_endpoint'],
            category=data.get('category', 'national'),
            reliability_score=int(data.get('reliability_score', 50)),
            api_key=data.get('api_key'),
            headers=dict(data.get('headers') or {}),
            rate_limit=RateLimit(
                requests=int(rate_limit.get('requests', 100)),
                period_minutes=int(rate_limit.get('period_minutes', 60))
            ),
            fetch_config=FetchConfig(
                method=fetch_config.get('method', 'GET'),
                timeout=int(fetch_config.get('timeout', 30)),
                retries=int(fetch_config.get('retries', 3)),
                retry_delay=float(fetch_config.get('retry_delay', 1.0))
            ),
            is_active=data.get('is_active', True),
            last_fetched=parse_datetime_safe(data.get('last_fetched')),
            error_count=data.get('error_count', 0),
            success_count=data.get('success_count', 0)
        )
