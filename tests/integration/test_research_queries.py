from datetime import datetime, timedelta, timezone

import pytest

from research.database.base import TopicFilters, RunFilters
from research.exceptions import TopicNotFoundError, RunNotFoundError, ValidationError
from research.models.research_config import resolve_research_config, RunType
from research.models.run import ResearchRun, RunResults, RunStatus
from research.runs.queries import ResearchQueries, DEFAULT_SOURCES

NOW = datetime(2024, 3, 15, tzinfo=timezone.utc)


@pytest.fixture
def queries(run_store, topic_store, source_store):
    return ResearchQueries(run_store, topic_store, source_store)


@pytest.fixture
def stored_topics(topic_store, topic_factory):
    specs = [
        ("union budget allocation", 82, 6, "Economy"),
        ("state election results", 64, 4, "Politics"),
        ("india china diplomacy", 45, 2, "International Relations"),
        ("fiscal deficit target", 25, 1, "Economy"),
    ]
    stored = []
    for name, relevance, frequency, category in specs:
        topic = topic_factory(name, relevance=relevance, frequency=frequency, category=category)
        topic.first_detected = NOW - timedelta(days=3)
        topic.last_updated = NOW - timedelta(days=1)
        stored.append(topic_store.save(topic))
    return stored


def make_run(run_store, status, created_at, run_type=RunType.MANUAL):
    run = ResearchRun(config=resolve_research_config({}), type=run_type, created_at=created_at)
    run.start(now=created_at)
    if status == RunStatus.COMPLETED:
        run.mark_completed(RunResults(topics_found=4), now=created_at + timedelta(minutes=2))
    elif status == RunStatus.FAILED:
        run.mark_failed("No articles fetched from any source", now=created_at + timedelta(minutes=1))
    run_store.save(run)
    return run


def test_trending_topics_default_to_active_by_relevance(queries, stored_topics, topic_store):
    topic_store.deactivate(stored_topics[1].id)

    topics = queries.get_trending_topics()

    assert [topic.topic for topic in topics] == [
        "union budget allocation", "india china diplomacy", "fiscal deficit target"
    ]


def test_trending_topic_filters(queries, stored_topics):
    economy = queries.get_trending_topics(TopicFilters(category="Economy"))
    relevant = queries.get_trending_topics(TopicFilters(min_relevance_score=50))
    by_frequency = queries.get_trending_topics(TopicFilters(sort_by="frequency", descending=False, limit=2))

    assert [topic.topic for topic in economy] == ["union budget allocation", "fiscal deficit target"]
    assert [topic.topic for topic in relevant] == ["union budget allocation", "state election results"]
    assert [topic.frequency for topic in by_frequency] == [1, 2]


def test_trending_topics_reject_unknown_sort(queries):
    with pytest.raises(ValidationError):
        queries.get_trending_topics(TopicFilters(sort_by="popularity"))


def test_topic_analysis_before_and_after_generation(queries, stored_topics, topic_store):
    topic = stored_topics[0]

    pending = queries.get_topic_analysis(topic.id)
    assert pending["topic"] == "union budget allocation"
    assert pending["analysis"] is None
    assert pending["metadata"]["gs_papers"] == ["GS-III"]
    assert pending["metadata"]["generated_at"] is None
    assert pending["sources"][0]["url"] == "https://example.com/union-budget-allocation"

    topic_store.update_research_data(topic.topic, {"why_in_news": "Budget tabled"}, NOW, 82)
    ready = queries.get_topic_analysis(topic.id)

    assert ready["analysis"] == {"why_in_news": "Budget tabled"}
    assert ready["metadata"]["generated_at"] == NOW.isoformat()


def test_unknown_topic(queries):
    with pytest.raises(TopicNotFoundError):
        queries.get_topic_analysis("does-not-exist")
    with pytest.raises(TopicNotFoundError):
        queries.deactivate_topic("does-not-exist")


def test_deactivate_topic_hides_it_from_default_listing(queries, stored_topics):
    deactivated = queries.deactivate_topic(stored_topics[0].id)

    assert deactivated.is_active is False
    assert "union budget allocation" not in [topic.topic for topic in queries.get_trending_topics()]
    everything = queries.get_trending_topics(TopicFilters(is_active=None))
    assert len(everything) == 4


def test_research_history_newest_first_with_filters(queries, run_store):
    older = make_run(run_store, RunStatus.COMPLETED, NOW - timedelta(days=2))
    newer = make_run(run_store, RunStatus.FAILED, NOW - timedelta(days=1), RunType.SCHEDULED)

    history = queries.get_research_history()
    failed = queries.get_research_history(RunFilters(status="failed"))
    manual = queries.get_research_history(RunFilters(type="manual"))

    assert [run.run_id for run in history] == [newer.run_id, older.run_id]
    assert [run.run_id for run in failed] == [newer.run_id]
    assert [run.run_id for run in manual] == [older.run_id]
    with pytest.raises(ValidationError):
        queries.get_research_history(RunFilters(sort_by="status"))


def test_get_research_run(queries, run_store):
    run = make_run(run_store, RunStatus.COMPLETED, NOW)

    assert queries.get_research_run(run.run_id).results.topics_found == 4
    with pytest.raises(RunNotFoundError):
        queries.get_research_run("missing")


def test_research_stats(queries, run_store, stored_topics):
    make_run(run_store, RunStatus.COMPLETED, NOW - timedelta(days=1))
    make_run(run_store, RunStatus.COMPLETED, NOW - timedelta(days=2))
    make_run(run_store, RunStatus.FAILED, NOW - timedelta(days=45))

    stats = queries.get_research_stats(now=NOW)

    assert stats["topics"]["total_topics"] == 4
    assert stats["topics"]["active_topics"] == 4
    assert stats["topics"]["avg_relevance_score"] == pytest.approx(54)
    assert stats["topics"]["avg_frequency"] == pytest.approx(3.25)
    assert stats["topics"]["categories"] == ["Economy", "International Relations", "Politics"]
    assert stats["research_runs"] == {"completed": 2, "failed": 1}
    assert stats["recent_activity"] == {"runs_last_30_days": 2, "topics_last_30_days": 4}


def test_save_source_requires_fields(queries):
    with pytest.raises(ValidationError):
        queries.save_source({"name": "Half configured", "url": "https://example.com"})


def test_save_source_upserts_by_name(queries):
    data = {"name": "Wire", "url": "https://wire.example.com", "type": "rss",
            "api_endpoint": "https://wire.example.com/feed"}
    first = queries.save_source(data)
    second = queries.save_source(dict(data, reliability_score=70))

    assert first.id == second.id
    assert [source.reliability_score for source in queries.list_sources()] == [70]


def test_seed_sources(queries):
    seeded = queries.seed_sources(newsapi_key="secret-key")

    assert [source.name for source in seeded] == [template["name"] for template in DEFAULT_SOURCES]
    newsapi = next(source for source in seeded if source.type == "newsapi")
    assert newsapi.api_key == "secret-key"
    assert newsapi.rate_limit.requests == 100
    assert all(source.fetch_config.retries == 3 for source in seeded)

    queries.seed_sources()
    assert len(queries.list_sources(active_only=True)) == len(DEFAULT_SOURCES)
