#!/usr/bin/env python3
"""
Research run controller.

Drives one research run through its six steps (fetch, detect, persist topics,
generate analyses, persist analyses, finalize) and records status, progress,
logs and errors on the run as it goes. Also implements retry of a finished
run.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from .ladder import detect_with_relaxation, LadderAttempt
from .recorder import RunRecorder
from ..analysis.generator import AnalysisGenerator
from ..database.base import RunStore, TopicStore
from ..exceptions import (
    NoArticlesFetchedError, RunNotFoundError, RunAlreadyRunningError, RetryLimitExceededError
)
from ..models.analysis import AnalysisResult
from ..models.article import Article
from ..models.research_config import ResearchConfig, RunType, resolve_research_config
from ..models.run import ResearchRun, RunResults, RunStatus, LogLevel, DEFAULT_MAX_RETRIES
from ..models.topic import TrendingTopic
from ..sources.collector import SourceCollector
from ..trending.detector import TrendingDetector

logger = logging.getLogger(__name__)

FETCH_STEP = 'fetching_articles'


@dataclass
class ResearchOutcome:
    """Result of a successful research run."""
    run_id: str
    articles_fetched: int
    topics: List[TrendingTopic] = field(default_factory=list)
    analyses: List[AnalysisResult] = field(default_factory=list)
    database_updates: Dict[str, int] = field(default_factory=lambda: {'created': 0, 'updated': 0})
    duration_ms: int = 0
    success: bool = True

    def to_dict(self) -> Dict[str, Any]:
        analyses = [result.to_dict() for result in self.analyses]
        return {
            'success': self.success,
            'run_id': self.run_id,
            'summary': {
                'articles_fetched': self.articles_fetched,
                'trending_topics_detected': len(self.topics),
                'analyses_generated': len(self.analyses),
                'database_updates': dict(self.database_updates),
                'duration_ms': self.duration_ms
            },
            'data': {
                'trending_topics': [topic.to_dict() for topic in self.topics],
                'analyses': [item['analysis'] for item in analyses],
                'metadata': [item['metadata'] for item in analyses]
            }
        }


class RunController:
    """Single owner of research run execution."""

    def __init__(self, run_store: RunStore, topic_store: TopicStore, collector: SourceCollector,
                 detector: TrendingDetector, generator: AnalysisGenerator,
                 analysis_concurrency: int = 2, analysis_delay_ms: int = 2000,
                 max_retries: int = DEFAULT_MAX_RETRIES):
        """
        Initialize controller.

        Args:
            run_store: Where run snapshots are saved
            topic_store: Where generated analyses are attached to topics
            collector: Sequential source fetcher
            detector: Trending topic detector
            generator: Analysis generator
            analysis_concurrency: Parallel analysis workers
            analysis_delay_ms: Pause between analysis batches
            max_retries: Retry budget given to new runs
        """
        self.run_store = run_store
        self.topic_store = topic_store
        self.collector = collector
        self.detector = detector
        self.generator = generator
        self.analysis_concurrency = analysis_concurrency
        self.analysis_delay_ms = analysis_delay_ms
        self.max_retries = max_retries

    def execute_research(self, config: Union[Mapping[str, Any], ResearchConfig, None] = None,
                         retried_from: Optional[str] = None, retry_count: int = 0,
                         triggered_by: Optional[str] = None) -> ResearchOutcome:
        """
        Execute a complete research run.

        Args:
            config: Configuration overrides (see resolve_research_config)
            retried_from: run_id of the run this one retries
            retry_count: Retry depth of the new run
            triggered_by: Free-form provenance (CLI, scheduler, ...)

        Returns:
            ResearchOutcome of the completed run

        Raises:
            ConfigurationError: If the configuration is invalid (no run is created)
            Any exception that made the run fail, after the run was marked failed
        """
        config = resolve_research_config(config)

        run = ResearchRun(
            config=config,
            type=config.type,
            max_retries=self.max_retries,
            retry_count=retry_count,
            retried_from=retried_from,
            triggered_by=triggered_by,
            user_id=config.user_id
        )
        run.start()
        run.add_log(LogLevel.INFO, 'Research run started', 'initialization')
        recorder = RunRecorder(run, self.run_store)
        recorder.save()
        logger.info(f"Started research run {run.run_id} ({config.type.value})")

        try:
            recorder.advance(1, 'Fetching articles from news sources')
            articles = self.fetch_articles_from_sources(config, recorder)
            if not articles:
                raise NoArticlesFetchedError()

            recorder.advance(2, 'Analyzing articles for trending topics')
            topics = self._detect_topics(articles, config, recorder)

            db_updates = {'created': 0, 'updated': 0}
            if config.update_database and topics:
                recorder.advance(3, 'Updating trending topics database')
                db_updates = self.detector.persist(topics)

            analyses: List[AnalysisResult] = []
            if config.generate_analysis and topics:
                recorder.advance(4, 'Generating UPSC structured analyses')
                analyses = self.generator.batch_generate(
                    topics, concurrency=self.analysis_concurrency, delay_ms=self.analysis_delay_ms
                )
                fallbacks = sum(1 for result in analyses if not result.success)
                if fallbacks:
                    recorder.log(
                        LogLevel.WARN,
                        f"{fallbacks} of {len(analyses)} analyses used the fallback template",
                        'generating_upsc_structured_analyses'
                    )

                if config.update_database:
                    recorder.advance(5, 'Saving analyses to database')
                    self.save_analyses_to_database(analyses)

            recorder.advance(6, 'Research completed successfully')
            recorder.complete(RunResults(
                topics_found=len(topics),
                topics_processed=len(analyses),
                topics_updated=db_updates.get('updated', 0),
                new_topics=db_updates.get('created', 0)
            ))

        except Exception as e:
            logger.error(f"Research run {run.run_id} failed: {e}", exc_info=True)
            if not recorder.run.is_terminal:
                try:
                    recorder.fail(str(e))
                except Exception as record_error:
                    logger.error(f"Could not record failure of run {run.run_id}: {record_error}")
            raise

        return ResearchOutcome(
            run_id=run.run_id,
            articles_fetched=len(articles),
            topics=topics,
            analyses=analyses,
            database_updates=db_updates,
            duration_ms=recorder.run.duration_ms or 0
        )

    def _detect_topics(self, articles: List[Article], config: ResearchConfig,
                       recorder: RunRecorder) -> List[TrendingTopic]:
        def on_attempt(attempt: LadderAttempt, count: int) -> None:
            if attempt.number > 1:
                recorder.log(
                    LogLevel.INFO,
                    f"Relaxed detection thresholds (attempt {attempt.number}): "
                    f"min_relevance={attempt.min_relevance_score}, "
                    f"min_frequency={attempt.min_frequency or 'default'} -> {count} topics",
                    'analyzing_articles_for_trending_topics'
                )

        return detect_with_relaxation(self.detector.detect, articles, config, on_attempt).topics

    def fetch_articles_from_sources(self, config: Union[Mapping[str, Any], ResearchConfig],
                                    recorder: Optional[RunRecorder] = None) -> List[Article]:
        """
        Fetch articles from every active source (or the config's allow-list).

        Failing and unsupported sources are skipped; when a recorder is given
        each skip is recorded as a warn log on the run.

        Returns:
            Articles in source order
        """
        if not isinstance(config, ResearchConfig):
            config = resolve_research_config(config)

        result = self.collector.collect(config)

        if recorder is not None:
            if result.used_samples:
                recorder.log(LogLevel.INFO, 'No news sources configured, using sample articles', FETCH_STEP)
            for outcome in result.failures:
                recorder.log(LogLevel.WARN, f"Skipped source {outcome.source}: {outcome.error}", FETCH_STEP)

        logger.info(f"Fetched {len(result.articles)} articles from {len(result.outcomes)} sources")
        return result.articles

    def save_analyses_to_database(self, analyses: List[AnalysisResult]) -> int:
        """
        Attach successful analyses to their topic records (matched by topic key).

        Returns:
            Number of topics updated
        """
        saved = 0
        for result in analyses:
            if not result.success:
                continue
            if self.topic_store.update_research_data(
                result.topic,
                result.research_data(),
                result.metadata.get('generated_at'),
                result.metadata.get('relevance_score')
            ):
                saved += 1
            else:
                logger.warning(f"No topic record for analysis of '{result.topic}'")
        return saved

    def retry_research(self, run_id: str, triggered_by: Optional[str] = None) -> ResearchOutcome:
        """
        Start a new run with the configuration of a finished one.

        Args:
            run_id: Run to retry

        Returns:
            ResearchOutcome of the new run

        Raises:
            RunNotFoundError: Unknown run_id
            RunAlreadyRunningError: Run is still running
            RetryLimitExceededError: Retry budget exhausted
        """
        original = self.run_store.get(run_id)
        if original is None:
            raise RunNotFoundError(run_id)
        if original.status == RunStatus.RUNNING:
            raise RunAlreadyRunningError(run_id)
        if original.retry_count >= original.max_retries:
            raise RetryLimitExceededError(run_id, original.retry_count, original.max_retries)

        logger.info(f"Retrying research run {run_id} (retry {original.retry_count + 1}/{original.max_retries})")
        return self.execute_research(
            original.config.with_type(RunType.RETRY),
            retried_from=run_id,
            retry_count=original.retry_count + 1,
            triggered_by=triggered_by
        )
