from research.models.research_config import resolve_research_config
from research.runs.ladder import build_attempts, detect_with_relaxation, LadderAttempt


def test_attempt_parameters():
    assert build_attempts(30) == [
        LadderAttempt(1, 30, None),
        LadderAttempt(2, 20, None),
        LadderAttempt(3, 20, 2),
        LadderAttempt(4, 10, 1),
    ]


def test_relaxed_score_never_drops_below_floor():
    attempts = build_attempts(15)

    assert attempts[1].min_relevance_score == 10
    assert attempts[2].min_relevance_score == 10


def test_stops_at_first_attempt_reaching_min_topics(scripted_detector_factory, topic_factory):
    two = [topic_factory("a"), topic_factory("b")]
    five = [topic_factory(name) for name in "abcde"]
    detector = scripted_detector_factory(two, two, five, [topic_factory("never used")])
    config = resolve_research_config({"min_topics": 4})
    seen = []

    result = detect_with_relaxation(detector.detect, [], config, lambda attempt, count: seen.append((attempt.number, count)))

    assert [topic.topic for topic in result.topics] == list("abcde")
    assert result.final_attempt.number == 3
    assert seen == [(1, 2), (2, 2), (3, 5)]
    assert [(options.min_relevance_score, options.min_frequency) for options in detector.calls] == [
        (30, None), (20, None), (20, 2)
    ]


def test_baseline_success_makes_a_single_attempt(scripted_detector_factory, topic_factory):
    detector = scripted_detector_factory([topic_factory(name) for name in "abcd"])

    result = detect_with_relaxation(detector.detect, [], resolve_research_config({}))

    assert len(detector.calls) == 1
    assert len(result.topics) == 4


def test_last_attempt_result_is_used_even_when_short(scripted_detector_factory, topic_factory):
    detector = scripted_detector_factory(
        [topic_factory("a"), topic_factory("b"), topic_factory("c")],
        [topic_factory("a")],
        [],
        [topic_factory("z")],
    )

    result = detect_with_relaxation(detector.detect, [], resolve_research_config({"min_topics": 4}))

    assert len(detector.calls) == 4
    assert [topic.topic for topic in result.topics] == ["z"]
    assert detector.calls[-1].min_relevance_score == 10
    assert detector.calls[-1].min_frequency == 1


def test_every_attempt_keeps_max_topics_and_window(scripted_detector_factory):
    detector = scripted_detector_factory([])
    config = resolve_research_config({"max_topics": 7})

    detect_with_relaxation(detector.detect, [], config)

    assert {options.max_topics for options in detector.calls} == {7}
    assert {options.date_range for options in detector.calls} == {config.date_range}
