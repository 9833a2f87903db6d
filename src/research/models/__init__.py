"""Data models for the research engine."""

from .article import Article, parse_datetime_safe
from .topic import TrendingTopic, TopicSource, CATEGORIES, GS_PAPERS
from .analysis import AnalysisResult, RESEARCH_DATA_FIELDS
from .source import NewsSource, RateLimit, FetchConfig, REQUIRED_SOURCE_FIELDS
from .research_config import DateRange, ResearchConfig, RunType, resolve_research_config
from .run import (
    ResearchRun, RunStatus, RunProgress, RunResults, RunError, RunLog, LogLevel,
    TOTAL_STEPS, TERMINAL_STATUSES
)

__all__ = [
    'Article', 'parse_datetime_safe',
    'TrendingTopic', 'TopicSource', 'CATEGORIES', 'GS_PAPERS',
    'AnalysisResult', 'RESEARCH_DATA_FIELDS',
    'NewsSource', 'RateLimit', 'FetchConfig', 'REQUIRED_SOURCE_FIELDS',
    'DateRange', 'ResearchConfig', 'RunType', 'resolve_research_config',
    'ResearchRun', 'RunStatus', 'RunProgress', 'RunResults', 'RunError', 'RunLog', 'LogLevel',
    'TOTAL_STEPS', 'TERMINAL_STATUSES'
]
