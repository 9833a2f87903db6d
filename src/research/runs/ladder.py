#!/usr/bin/env python3
"""
Threshold relaxation ladder.

When baseline detection yields fewer than min_topics topics, detection is
re-run over the same articles with progressively looser thresholds. The
result of the last attempt made is used as is; attempts are never merged.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from ..models.article import Article
from ..models.research_config import ResearchConfig
from ..models.topic import TrendingTopic
from ..trending.detector import DetectionOptions

logger = logging.getLogger(__name__)

RELAXED_SCORE_FLOOR = 10
RELAXED_SCORE_STEP = 10
RELAXED_FREQUENCY = 2
FLOOR_FREQUENCY = 1


@dataclass(frozen=True)
class LadderAttempt:
    number: int
    min_relevance_score: float
    min_frequency: Optional[int]  # None means the detector default


def build_attempts(baseline_score: float) -> List[LadderAttempt]:
    relaxed = max(RELAXED_SCORE_FLOOR, baseline_score - RELAXED_SCORE_STEP)
    return [
        LadderAttempt(1, baseline_score, None),
        LadderAttempt(2, relaxed, None),
        LadderAttempt(3, relaxed, RELAXED_FREQUENCY),
        LadderAttempt(4, RELAXED_SCORE_FLOOR, FLOOR_FREQUENCY),
    ]


@dataclass
class LadderResult:
    topics: List[TrendingTopic]
    attempts: List[LadderAttempt]

    @property
    def final_attempt(self) -> LadderAttempt:
        return self.attempts[-1]


def detect_with_relaxation(detect: Callable[[List[Article], DetectionOptions], List[TrendingTopic]],
                           articles: List[Article], config: ResearchConfig,
                           on_attempt: Optional[Callable[[LadderAttempt, int], None]] = None) -> LadderResult:
    """
    Run detection, relaxing thresholds until min_topics is reached or the floor is hit.

    Args:
        detect: The detector's detect callable
        articles: Articles every attempt runs over
        config: Run configuration (baseline score, max/min topics, date range)
        on_attempt: Called with each attempt and its topic count

    Returns:
        LadderResult with the last attempt's topics and every attempt made
    """
    made: List[LadderAttempt] = []
    topics: List[TrendingTopic] = []

    for attempt in build_attempts(config.min_relevance_score):
        options = DetectionOptions(
            date_range=config.date_range,
            min_relevance_score=attempt.min_relevance_score,
            max_topics=config.max_topics,
            min_frequency=attempt.min_frequency
        )
        topics = detect(articles, options)
        made.append(attempt)
        logger.info(
            f"Detection attempt {attempt.number}: {len(topics)} topics "
            f"(min_relevance={attempt.min_relevance_score}, min_frequency={attempt.min_frequency or 'default'})"
        )
        if on_attempt:
            on_attempt(attempt, len(topics))
        if len(topics) >= config.min_topics:
            break

    if len(topics) < config.min_topics:
        logger.warning(f"Only {len(topics)} topics after relaxation floor (min_topics={config.min_topics})")

    return LadderResult(topics=topics, attempts=made)
