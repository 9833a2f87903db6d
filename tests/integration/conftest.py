import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from research.analysis.generator import AnalysisGenerator  # noqa: E402
from research.analysis.fallback import build_fallback_analysis  # noqa: E402
from research.database.memory import InMemoryRunStore, InMemorySourceStore, InMemoryTopicStore  # noqa: E402
from research.models.article import Article  # noqa: E402
from research.models.source import NewsSource  # noqa: E402
from research.models.topic import TrendingTopic, TopicSource  # noqa: E402
from research.runs.controller import RunController  # noqa: E402
from research.sources.collector import SourceCollector  # noqa: E402
from research.sources.rate_limiter import RateLimiterPool  # noqa: E402
from research.sources.registry import FetcherRegistry  # noqa: E402
from research.trending.detector import TrendingDetector  # noqa: E402


def no_sleep(seconds: float) -> None:
    del seconds


class FakeClock:
    """Monotonic clock whose sleep advances time instead of blocking."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class ScriptedFetcher:
    """Fetcher stand-in returning canned articles, or raising a canned error."""

    def __init__(self, source: NewsSource, articles: Optional[List[Article]] = None,
                 error: Optional[Exception] = None) -> None:
        self.source = source
        self.articles = list(articles or [])
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def fetch_current_affairs(self, date_from, date_to, keywords=None) -> List[Article]:
        self.calls.append({"date_from": date_from, "date_to": date_to, "keywords": keywords})
        if self.error is not None:
            raise self.error
        return list(self.articles)


class ScriptedFetcherFactory:
    """Registered in place of a fetcher class; hands out scripted fetchers per source name."""

    def __init__(self) -> None:
        self.articles: Dict[str, List[Article]] = {}
        self.errors: Dict[str, Exception] = {}
        self.created: List[ScriptedFetcher] = []

    def __call__(self, source: NewsSource, **kwargs) -> ScriptedFetcher:
        fetcher = ScriptedFetcher(source, self.articles.get(source.name), self.errors.get(source.name))
        self.created.append(fetcher)
        return fetcher


class ScriptedDetector:
    """Detector stand-in returning one scripted topic list per detect call."""

    def __init__(self, results: Iterable[List[TrendingTopic]], persist_result: Optional[Dict[str, int]] = None) -> None:
        self.results = list(results)
        self.calls: List[Any] = []
        self.persisted: List[List[TrendingTopic]] = []
        self.persist_result = persist_result or {"created": 0, "updated": 0}

    def detect(self, articles, options=None) -> List[TrendingTopic]:
        self.calls.append(options)
        index = min(len(self.calls), len(self.results)) - 1
        return list(self.results[index])

    def persist(self, topics: List[TrendingTopic]) -> Dict[str, int]:
        self.persisted.append(list(topics))
        return dict(self.persist_result)


class FakeOpenAIClient:
    """Records calls and returns complete analyses unless told to fail for a topic."""

    def __init__(self, failing_topics: Iterable[str] = (), scores: Optional[Dict[str, float]] = None,
                 score_error: Optional[Exception] = None) -> None:
        self.failing_topics = set(failing_topics)
        self.scores = scores or {}
        self.score_error = score_error
        self.analysis_calls: List[str] = []
        self.score_calls: List[List[Dict[str, Any]]] = []

    def generate_topic_analysis(self, topic: TrendingTopic):
        self.analysis_calls.append(topic.topic)
        if topic.topic in self.failing_topics:
            raise RuntimeError(f"model refused {topic.topic}")
        analysis = build_fallback_analysis(topic)
        analysis["why_in_news"] = f"{topic.topic} is in the news"
        return analysis, {"model": "fake-model", "usage": {"total_tokens": 42}}

    def score_topic_relevance(self, topics: List[Dict[str, Any]], articles: List[Article]):
        self.score_calls.append(list(topics))
        if self.score_error is not None:
            raise self.score_error
        return [
            {"topic": item["topic"], "relevance_score": self.scores[item["topic"]], "reasoning": "scored"}
            for item in topics if item["topic"] in self.scores
        ]


def make_article(title: str, url: str, source: str = "Test Source", days_ago: float = 1,
                 description: str = "", content: str = "",
                 now: Optional[datetime] = None) -> Article:
    now = now or datetime.now(timezone.utc)
    return Article(
        title=title,
        url=url,
        source=source,
        published_at=now - timedelta(days=days_ago),
        description=description,
        content=content,
    )


def make_topic(name: str, relevance: float = 60, frequency: int = 3, category: str = "Economy",
               gs_papers: Optional[List[str]] = None) -> TrendingTopic:
    return TrendingTopic(
        topic=name,
        frequency=frequency,
        relevance_score=relevance,
        category=category,
        gs_papers=gs_papers or ["GS-III"],
        sources=[TopicSource(name="Test Source", url=f"https://example.com/{name.replace(' ', '-')}")],
    )


def make_source(name: str, source_type: str = "scripted", **overrides) -> NewsSource:
    data = {
        "name": name,
        "url": f"https://{name.lower().replace(' ', '')}.example.com",
        "type": source_type,
        "api_endpoint": f"https://{name.lower().replace(' ', '')}.example.com/api",
    }
    data.update(overrides)
    return NewsSource.from_dict(data)


@pytest.fixture
def article_factory():
    return make_article


@pytest.fixture
def topic_factory():
    return make_topic


@pytest.fixture
def source_factory():
    return make_source


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_openai_client_factory():
    def _factory(failing_topics: Iterable[str] = (), scores: Optional[Dict[str, float]] = None,
                 score_error: Optional[Exception] = None) -> FakeOpenAIClient:
        return FakeOpenAIClient(failing_topics, scores, score_error)

    return _factory


@pytest.fixture
def scripted_detector_factory():
    def _factory(*results: List[TrendingTopic], persist_result: Optional[Dict[str, int]] = None) -> ScriptedDetector:
        return ScriptedDetector(results, persist_result)

    return _factory


@pytest.fixture
def run_store() -> InMemoryRunStore:
    return InMemoryRunStore()


@pytest.fixture
def topic_store() -> InMemoryTopicStore:
    return InMemoryTopicStore()


@pytest.fixture
def source_store() -> InMemorySourceStore:
    return InMemorySourceStore()


@pytest.fixture
def fetcher_factory() -> ScriptedFetcherFactory:
    return ScriptedFetcherFactory()


@pytest.fixture
def registry(fetcher_factory) -> FetcherRegistry:
    registry = FetcherRegistry()
    registry.register_fetcher("scripted", fetcher_factory)
    return registry


@pytest.fixture
def collector(source_store, registry) -> SourceCollector:
    return SourceCollector(
        source_store,
        registry=registry,
        limiter_pool=RateLimiterPool(sleep=no_sleep),
        delay_ms=500,
        sleep=no_sleep,
    )


@pytest.fixture
def build_controller(run_store, topic_store, collector) -> Callable[..., RunController]:
    def factory(detector=None, generator=None, **kwargs) -> RunController:
        return RunController(
            run_store=run_store,
            topic_store=topic_store,
            collector=collector,
            detector=detector or TrendingDetector(topic_store=topic_store),
            generator=generator or AnalysisGenerator(llm_client=FakeOpenAIClient(), sleep=no_sleep),
            analysis_concurrency=kwargs.pop("analysis_concurrency", 2),
            analysis_delay_ms=kwargs.pop("analysis_delay_ms", 0),
            **kwargs,
        )

    return factory
