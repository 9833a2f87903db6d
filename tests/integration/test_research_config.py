from datetime import datetime, timedelta, timezone

import pytest

from research.exceptions import ConfigurationError
from research.models.research_config import (
    DateRange, ResearchConfig, RunType, resolve_research_config,
    DEFAULT_MIN_RELEVANCE_SCORE, DEFAULT_MAX_TOPICS, DEFAULT_MIN_TOPICS
)

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


def test_defaults_cover_every_field():
    """Test that an empty override yields the documented defaults."""
    config = resolve_research_config(None, now=NOW)

    assert config.date_range == DateRange(NOW - timedelta(days=7), NOW)
    assert config.sources == []
    assert config.categories == []
    assert config.keywords == []
    assert config.min_relevance_score == DEFAULT_MIN_RELEVANCE_SCORE == 30
    assert config.max_topics == DEFAULT_MAX_TOPICS == 10
    assert config.min_topics == DEFAULT_MIN_TOPICS == 4
    assert config.generate_analysis is True
    assert config.update_database is True
    assert config.type == RunType.MANUAL


def test_overrides_replace_only_named_fields():
    """Test partial overrides keep defaults for everything else."""
    config = resolve_research_config({"max_topics": 3, "keywords": ["budget"], "type": "scheduled"}, now=NOW)

    assert config.max_topics == 3
    assert config.keywords == ["budget"]
    assert config.type == RunType.SCHEDULED
    assert config.min_topics == 4
    assert config.min_relevance_score == 30


def test_explicit_none_means_default():
    config = resolve_research_config({"min_relevance_score": None, "sources": None}, now=NOW)

    assert config.min_relevance_score == 30
    assert config.sources == []


def test_unknown_key_is_rejected():
    with pytest.raises(ConfigurationError) as excinfo:
        resolve_research_config({"maxTopics": 5})

    assert "maxTopics" in str(excinfo.value)


@pytest.mark.parametrize("overrides", [
    {"min_relevance_score": 101},
    {"min_relevance_score": -1},
    {"max_topics": 0},
    {"min_topics": -2},
    {"date_range": {"from": "2024-03-10", "to": "2024-03-01"}},
    {"date_range": {"from": "not a date", "to": "2024-03-01"}},
    {"date_range": "last week"},
    {"type": "nightly"},
])
def test_invalid_values_are_rejected(overrides):
    with pytest.raises(ConfigurationError):
        resolve_research_config(overrides, now=NOW)


def test_date_range_accepts_iso_strings():
    config = resolve_research_config({"date_range": {"from": "2024-03-01", "to": "2024-03-08T12:00:00Z"}})

    assert config.date_range.start == datetime(2024, 3, 1, tzinfo=timezone.utc)
    assert config.date_range.end == datetime(2024, 3, 8, 12, tzinfo=timezone.utc)


def test_date_range_contains_is_inclusive_and_rejects_undated():
    window = DateRange(datetime(2024, 3, 1, tzinfo=timezone.utc), datetime(2024, 3, 8, tzinfo=timezone.utc))

    assert window.contains(window.start)
    assert window.contains(window.end)
    assert not window.contains(window.end + timedelta(seconds=1))
    assert not window.contains(None)


def test_config_round_trips_through_dict_for_storage():
    """Test the stored snapshot resolves back to an equal config."""
    original = resolve_research_config({"keywords": ["isro"], "min_topics": 2, "user_id": "u-1"}, now=NOW)

    restored = resolve_research_config(original.to_dict())

    assert restored == original


def test_with_type_returns_a_copy():
    config = resolve_research_config({"type": "webhook"}, now=NOW)
    retry = config.with_type(RunType.RETRY)

    assert retry.type == RunType.RETRY
    assert config.type == RunType.WEBHOOK
    assert isinstance(retry, ResearchConfig)
