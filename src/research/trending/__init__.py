"""Trending topic detection."""

from .detector import TrendingDetector, DetectionOptions, DEFAULT_MIN_FREQUENCY, fallback_relevance_score
from .keywords import UPSC_KEYWORDS, extract_topics_from_text, categorize_topic, map_to_gs_papers

__all__ = [
    'TrendingDetector',
    'DetectionOptions',
    'DEFAULT_MIN_FREQUENCY',
    'fallback_relevance_score',
    'UPSC_KEYWORDS',
    'extract_topics_from_text',
    'categorize_topic',
    'map_to_gs_papers'
]
