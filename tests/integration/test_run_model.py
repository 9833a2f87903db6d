from datetime import datetime, timedelta, timezone

import pytest

from research.exceptions import InvalidRunTransitionError
from research.models.research_config import resolve_research_config
from research.models.run import ResearchRun, RunResults, RunStatus, LogLevel, step_key

START = datetime(2024, 3, 15, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def run() -> ResearchRun:
    research_run = ResearchRun(config=resolve_research_config({}, now=START))
    research_run.start(now=START)
    return research_run


def test_new_run_is_scheduled_until_started():
    research_run = ResearchRun(config=resolve_research_config({}))

    assert research_run.status == RunStatus.SCHEDULED
    assert research_run.start_time is None
    assert research_run.progress.total_steps == 6

    research_run.start()
    assert research_run.status == RunStatus.RUNNING
    assert research_run.start_time is not None


def test_start_twice_is_rejected(run):
    with pytest.raises(InvalidRunTransitionError):
        run.start()


def test_advance_updates_progress_and_logs_step(run):
    entry = run.advance(2, "Analyzing articles for trending topics")

    assert run.progress.completed_steps == 2
    assert run.progress.current_step == "Analyzing articles for trending topics"
    assert run.progress.percentage == 33
    assert entry.level == LogLevel.INFO
    assert entry.step == "analyzing_articles_for_trending_topics"
    assert run.logs[-1] is entry


def test_progress_never_goes_backwards(run):
    run.advance(3, "Updating trending topics database")

    with pytest.raises(InvalidRunTransitionError):
        run.advance(2, "Analyzing articles for trending topics")

    assert run.progress.completed_steps == 3


def test_progress_cannot_exceed_total(run):
    with pytest.raises(InvalidRunTransitionError):
        run.advance(7, "Beyond the pipeline")


def test_completion_sets_end_time_duration_and_full_progress(run):
    run.advance(1, "Fetching articles from news sources")
    run.mark_completed(RunResults(topics_found=5, topics_processed=5), now=START + timedelta(seconds=2.5))

    assert run.status == RunStatus.COMPLETED
    assert run.end_time == START + timedelta(seconds=2.5)
    assert run.duration_ms == 2500
    assert run.progress.percentage == 100
    assert run.results.topics_found == 5
    assert run.errors == []


def test_failure_appends_execution_error_and_finishes(run):
    run.mark_failed("No articles fetched from any source", now=START + timedelta(seconds=1))

    assert run.status == RunStatus.FAILED
    assert len(run.errors) == 1
    assert run.errors[0].step == "execution"
    assert run.errors[0].error == "No articles fetched from any source"
    assert run.duration_ms == 1000


@pytest.mark.parametrize("finish", [
    lambda r: r.mark_completed(RunResults()),
    lambda r: r.mark_failed("boom"),
])
def test_terminal_run_rejects_every_further_transition(run, finish):
    finish(run)
    status = run.status
    end_time = run.end_time

    with pytest.raises(InvalidRunTransitionError):
        run.mark_completed(RunResults())
    with pytest.raises(InvalidRunTransitionError):
        run.mark_failed("again")
    with pytest.raises(InvalidRunTransitionError):
        run.advance(6, "Research completed successfully")

    assert run.status == status
    assert run.end_time == end_time
    assert status.is_terminal


def test_end_time_is_unset_while_running(run):
    run.advance(4, "Generating UPSC structured analyses")

    assert run.end_time is None
    assert run.duration_ms is None


def test_run_document_round_trip(run):
    run.advance(1, "Fetching articles from news sources")
    run.add_log(LogLevel.WARN, "Skipped source Broken: timeout", "fetching_articles")
    run.retried_from = "original-run"
    run.retry_count = 1
    run.mark_failed("boom")

    restored = ResearchRun.from_dict(run.to_dict())

    assert restored.run_id == run.run_id
    assert restored.status == RunStatus.FAILED
    assert restored.retried_from == "original-run"
    assert restored.retry_count == 1
    assert [entry.level for entry in restored.logs] == [LogLevel.INFO, LogLevel.WARN]
    assert restored.errors[0].step == "execution"
    assert restored.config == run.config
    assert restored.duration_ms == run.duration_ms


def test_step_key_normalizes_message():
    assert step_key("Saving analyses to database") == "saving_analyses_to_database"
