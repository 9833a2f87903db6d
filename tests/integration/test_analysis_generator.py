import pytest

from research.analysis.generator import AnalysisGenerator, NO_API_KEY_ERROR
from research.analysis.schemas import REQUIRED_ANALYSIS_FIELDS, get_schema_by_type
from research.models.analysis import RESEARCH_DATA_FIELDS


class IncompleteClient:
    def generate_topic_analysis(self, topic):
        return {"why_in_news": "only this"}, {"model": "fake-model"}


def test_successful_analysis_carries_metadata(fake_openai_client_factory, topic_factory):
    generator = AnalysisGenerator(llm_client=fake_openai_client_factory())
    topic = topic_factory("union budget allocation", relevance=72)

    result = generator.generate(topic)

    assert result.success is True
    assert result.error is None
    assert result.analysis["why_in_news"] == "union budget allocation is in the news"
    assert result.metadata["topic"] == "union budget allocation"
    assert result.metadata["relevance_score"] == 72
    assert result.metadata["model"] == "fake-model"
    assert result.metadata["source_count"] == 1
    assert set(result.research_data()) == set(RESEARCH_DATA_FIELDS)


def test_missing_client_yields_tagged_fallback(topic_factory):
    result = AnalysisGenerator(llm_client=None).generate(topic_factory("state election results"))

    assert result.success is False
    assert result.error == NO_API_KEY_ERROR
    assert result.metadata["error"] == NO_API_KEY_ERROR
    assert all(result.analysis.get(name) for name in REQUIRED_ANALYSIS_FIELDS)


def test_incomplete_llm_response_is_replaced_by_fallback(topic_factory):
    result = AnalysisGenerator(llm_client=IncompleteClient()).generate(topic_factory("state election results"))

    assert result.success is False
    assert "background" in result.error
    assert result.analysis["mains_points"]["body"]["way_forward"]


@pytest.mark.parametrize("failing_index", [0, 2, 4])
def test_one_failing_topic_never_affects_the_batch(fake_openai_client_factory, topic_factory, failing_index):
    topics = [topic_factory(f"topic number {i}") for i in range(5)]
    client = fake_openai_client_factory(failing_topics={topics[failing_index].topic})
    generator = AnalysisGenerator(llm_client=client, sleep=lambda seconds: None)

    results = generator.batch_generate(topics, concurrency=2, delay_ms=0)

    assert len(results) == 5
    assert [result.success for result in results] == [i != failing_index for i in range(5)]
    assert [result.topic for result in results] == [topic.topic for topic in topics]
    assert "model refused" in results[failing_index].error


def test_batches_pause_between_chunks(fake_openai_client_factory, topic_factory):
    pauses = []
    generator = AnalysisGenerator(llm_client=fake_openai_client_factory(), sleep=pauses.append)

    results = generator.batch_generate([topic_factory(f"topic number {i}") for i in range(5)],
                                       concurrency=2, delay_ms=1500)

    assert len(results) == 5
    assert pauses == [1.5, 1.5]


def test_empty_batch():
    assert AnalysisGenerator().batch_generate([]) == []


def test_schemas_are_strict_objects():
    analysis = get_schema_by_type("analysis")
    relevance = get_schema_by_type("relevance")

    assert set(REQUIRED_ANALYSIS_FIELDS) <= set(analysis["required"])
    assert analysis["additionalProperties"] is False
    assert "scores" in relevance["properties"]
    with pytest.raises(ValueError):
        get_schema_by_type("summary")
