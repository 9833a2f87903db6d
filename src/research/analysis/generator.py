#!/usr/bin/env python3
"""
Structured UPSC analysis generation.

Every topic yields an AnalysisResult: the LLM analysis on success, otherwise
the fallback template tagged with success=False and the error. A failure for
one topic never affects the others in a batch.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from .fallback import build_fallback_analysis
from .schemas import REQUIRED_ANALYSIS_FIELDS
from ..exceptions import AnalysisValidationError
from ..models.analysis import AnalysisResult
from ..models.topic import TrendingTopic

logger = logging.getLogger(__name__)

NO_API_KEY_ERROR = 'AI analysis not available (API key not configured)'


class AnalysisGenerator:
    """Generates analyses for trending topics, in bounded parallel batches."""

    def __init__(self, llm_client=None, sleep: Callable[[float], None] = time.sleep,
                 clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)):
        """
        Initialize generator.

        Args:
            llm_client: Object with generate_topic_analysis(topic); None always uses the fallback
            sleep: Sleep function used between batches
            clock: Source of generated_at timestamps
        """
        self.llm_client = llm_client
        self._sleep = sleep
        self._clock = clock

    def _metadata(self, topic: TrendingTopic) -> Dict[str, Any]:
        return {
            'topic': topic.topic,
            'category': topic.category,
            'gs_papers': list(topic.gs_papers),
            'relevance_score': topic.relevance_score,
            'generated_at': self._clock(),
            'source_count': len(topic.sources)
        }

    def fallback_result(self, topic: TrendingTopic, error: str) -> AnalysisResult:
        metadata = self._metadata(topic)
        metadata['error'] = error
        return AnalysisResult(
            success=False,
            analysis=build_fallback_analysis(topic),
            metadata=metadata,
            error=error
        )

    def generate(self, topic: TrendingTopic) -> AnalysisResult:
        """
        Generate the analysis of one topic.

        Args:
            topic: Topic to analyze

        Returns:
            AnalysisResult, never raises for LLM or validation failures
        """
        if self.llm_client is None:
            logger.info(f"OpenAI client not configured, using fallback analysis for '{topic.topic}'")
            return self.fallback_result(topic, NO_API_KEY_ERROR)

        try:
            analysis, llm_metadata = self.llm_client.generate_topic_analysis(topic)
            missing = [name for name in REQUIRED_ANALYSIS_FIELDS if not analysis.get(name)]
            if missing:
                raise AnalysisValidationError(missing)
        except Exception as e:
            logger.error(f"Error generating analysis for '{topic.topic}': {e}")
            return self.fallback_result(topic, str(e))

        metadata = self._metadata(topic)
        metadata.update(llm_metadata or {})
        return AnalysisResult(success=True, analysis=analysis, metadata=metadata)

    def batch_generate(self, topics: List[TrendingTopic], concurrency: int = 2,
                       delay_ms: int = 2000) -> List[AnalysisResult]:
        """
        Generate analyses for many topics.

        Topics are dispatched in chunks of `concurrency`; the next chunk starts
        `delay_ms` after the previous one finished.

        Args:
            topics: Topics to analyze
            concurrency: Worker count and chunk size
            delay_ms: Pause between chunks

        Returns:
            One result per topic, in input order
        """
        if not topics:
            return []

        concurrency = max(1, concurrency)
        results: List[Optional[AnalysisResult]] = [None] * len(topics)

        with ThreadPoolExecutor(max_workers=concurrency, thread_name_prefix='analysis') as executor:
            for start in range(0, len(topics), concurrency):
                chunk = topics[start:start + concurrency]
                futures = [(start + offset, executor.submit(self.generate, topic))
                           for offset, topic in enumerate(chunk)]

                for index, future in futures:
                    try:
                        results[index] = future.result()
                    except Exception as e:
                        logger.error(f"Analysis worker failed for '{topics[index].topic}': {e}", exc_info=True)
                        results[index] = self.fallback_result(topics[index], str(e))

                logger.info(f"Processed analysis batch {start // concurrency + 1} ({len(chunk)} topics)")
                if start + concurrency < len(topics) and delay_ms:
                    self._sleep(delay_ms / 1000)

        return results
