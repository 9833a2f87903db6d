#!/usr/bin/env python3
"""
Trending topic detection.

Extracts keyword phrases from articles, counts how many articles mention each
phrase, scores the frequent ones for UPSC relevance (LLM when available,
frequency heuristic otherwise) and classifies the survivors.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from .keywords import UPSC_KEYWORDS, extract_topics_from_text, categorize_topic, map_to_gs_papers
from ..database.base import TopicStore
from ..models.article import Article
from ..models.research_config import DateRange, DEFAULT_MIN_RELEVANCE_SCORE, DEFAULT_MAX_TOPICS
from ..models.topic import TrendingTopic, TopicSource

logger = logging.getLogger(__name__)

DEFAULT_MIN_FREQUENCY = 3
FALLBACK_SCORE_CAP = 80
DEFAULT_AI_SCORE = 50


def fallback_relevance_score(frequency: int) -> float:
    return float(min(frequency * 10, FALLBACK_SCORE_CAP))


@dataclass
class DetectionOptions:
    """Thresholds for one detection pass."""
    date_range: Optional[DateRange] = None
    min_relevance_score: float = DEFAULT_MIN_RELEVANCE_SCORE
    max_topics: int = DEFAULT_MAX_TOPICS
    min_frequency: Optional[int] = None


class TrendingDetector:
    """Detects and persists trending topics."""

    def __init__(self, topic_store: Optional[TopicStore] = None, llm_client=None,
                 keywords: Optional[List[str]] = None, min_frequency: int = DEFAULT_MIN_FREQUENCY,
                 clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)):
        """
        Initialize detector.

        Args:
            topic_store: Store used by persist
            llm_client: Object with score_topic_relevance(topics, articles); None uses fallback scoring
            keywords: Keyword list for phrase extraction
            min_frequency: Frequency threshold when options do not set one
            clock: Source of "now" for persisted timestamps
        """
        self.topic_store = topic_store
        self.llm_client = llm_client
        self.keywords = keywords or UPSC_KEYWORDS
        self.min_frequency = min_frequency
        self._clock = clock

    def detect(self, articles: List[Article], options: Optional[DetectionOptions] = None) -> List[TrendingTopic]:
        """
        Analyze articles and detect trending topics.

        Args:
            articles: Articles to analyze
            options: Detection thresholds

        Returns:
            Topics sorted by relevance (descending), at most options.max_topics
        """
        options = options or DetectionOptions()
        min_frequency = options.min_frequency if options.min_frequency is not None else self.min_frequency

        if options.date_range is not None:
            # Undated articles are kept; only known-out-of-window ones are dropped
            articles = [
                article for article in articles
                if article.published_at is None or options.date_range.contains(article.published_at)
            ]

        topic_frequency = self.extract_topics_from_articles(articles)
        frequent = [
            {'topic': topic, **data}
            for topic, data in topic_frequency.items()
            if data['frequency'] >= min_frequency
        ]
        logger.debug(
            f"{len(topic_frequency)} candidate topics, {len(frequent)} with frequency >= {min_frequency}"
        )
        if not frequent:
            return []

        scored = self.calculate_relevance_scores(frequent, articles)
        trending = [item for item in scored if item['relevance_score'] >= options.min_relevance_score]
        trending.sort(key=lambda item: item['relevance_score'], reverse=True)
        trending = trending[:options.max_topics]

        topics = self.categorize_topics(trending)
        logger.info(
            f"Detected {len(topics)} trending topics "
            f"(min_relevance={options.min_relevance_score}, min_frequency={min_frequency})"
        )
        return topics

    def extract_topics_from_articles(self, articles: List[Article]) -> Dict[str, Dict[str, Any]]:
        """
        Count topic phrases across articles.

        Returns:
            Mapping topic -> {'frequency', 'sources', 'mentions', 'source_count'}, sources unique by URL
        """
        topic_frequency: Dict[str, Dict[str, Any]] = {}

        for article in articles:
            for topic in extract_topics_from_text(article.text.lower(), self.keywords):
                entry = topic_frequency.setdefault(topic, {'frequency': 0, 'sources': [], 'mentions': []})
                entry['frequency'] += 1
                entry['sources'].append(TopicSource(
                    name=article.source,
                    url=article.url,
                    publish_date=article.published_at,
                    snippet=article.description or article.title
                ))
                entry['mentions'].append({'title': article.title, 'date': article.published_at})

        for entry in topic_frequency.values():
            seen = set()
            unique = []
            for source in entry['sources']:
                if source.url not in seen:
                    seen.add(source.url)
                    unique.append(source)
            entry['sources'] = unique
            entry['source_count'] = len(unique)

        return topic_frequency

    def calculate_relevance_scores(self, topics: List[Dict[str, Any]],
                                   articles: List[Article]) -> List[Dict[str, Any]]:
        """Attach relevance_score and reasoning to every topic."""
        if self.llm_client is None:
            logger.info("OpenAI client not configured, using fallback scoring")
            return [
                {**topic,
                 'relevance_score': fallback_relevance_score(topic['frequency']),
                 'reasoning': 'Fallback scoring based on frequency (API key not configured)'}
                for topic in topics
            ]

        try:
            scores = self.llm_client.score_topic_relevance(
                [{'topic': topic['topic'], 'frequency': topic['frequency']} for topic in topics],
                articles
            )
        except Exception as e:
            logger.error(f"Error calculating relevance scores: {e}")
            return [
                {**topic,
                 'relevance_score': fallback_relevance_score(topic['frequency']),
                 'reasoning': 'Fallback scoring based on frequency'}
                for topic in topics
            ]

        by_topic = {item.get('topic'): item for item in scores}
        scored = []
        for topic in topics:
            score = by_topic.get(topic['topic'], {})
            relevance = score.get('relevance_score')
            scored.append({
                **topic,
                'relevance_score': relevance if relevance is not None else DEFAULT_AI_SCORE,
                'reasoning': score.get('reasoning') or 'AI analysis not available'
            })
        return scored

    def categorize_topics(self, topics: List[Dict[str, Any]]) -> List[TrendingTopic]:
        categorized = []
        for item in topics:
            category = categorize_topic(item['topic'])
            categorized.append(TrendingTopic(
                topic=item['topic'],
                frequency=item['frequency'],
                relevance_score=item['relevance_score'],
                category=category,
                gs_papers=map_to_gs_papers(category),
                sources=item['sources'],
                source_count=item['source_count'],
                mentions=item['mentions'],
                reasoning=item['reasoning']
            ))
        return categorized

    def persist(self, topics: List[TrendingTopic]) -> Dict[str, int]:
        """
        Upsert detected topics by topic key.

        Existing records get frequency added, relevance raised to the max of
        old and new, category and GS papers replaced and sources unioned by URL.

        Returns:
            {'created': int, 'updated': int}
        """
        if self.topic_store is None:
            raise RuntimeError("TrendingDetector.persist requires a topic store")

        created = 0
        updated = 0
        now = self._clock()

        for topic in topics:
            existing = self.topic_store.get_by_topic(topic.topic)

            if existing is None:
                topic.first_detected = now
                topic.last_updated = now
                saved = self.topic_store.save(topic)
                topic.id = saved.id
                created += 1
                continue

            known_urls = {source.url for source in existing.sources}
            existing.sources.extend(source for source in topic.sources if source.url not in known_urls)
            existing.frequency += topic.frequency
            existing.relevance_score = max(existing.relevance_score, topic.relevance_score)
            existing.category = topic.category
            existing.gs_papers = list(topic.gs_papers)
            existing.source_count = len(existing.sources)
            existing.last_updated = now
            saved = self.topic_store.save(existing)
            topic.id = saved.id
            updated += 1

        logger.info(f"Persisted trending topics: {created} created, {updated} updated")
        return {'created': created, 'updated': updated}
