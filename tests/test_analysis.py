from docmate.enrichment.analysis import (
    ai_key_points,
    analyze_locally,
    assess_difficulty,
    compute_stats,
    local_summary,
    parse_ai_analysis,
    top_words,
)


SAMPLE = (
    "The water cycle describes how water moves through the environment every single day.\n\n"
    "Evaporation is an important step because it lifts water vapour into the atmosphere above us. "
    "Condensation then forms clouds, and precipitation returns the water to the ground below. "
    "Rivers carry water back to the oceans where the whole cycle begins again."
)


def test_compute_stats():
    stats = compute_stats(SAMPLE)
    assert stats.words == 54
    assert stats.sentences == 4
    assert stats.paragraphs == 2
    assert stats.reading_time_minutes == 1
    assert stats.difficulty == "Beginner"


def test_difficulty_levels():
    assert assess_difficulty("") == "Beginner"
    long_words = " ".join(["extraordinarily"] * 25) + "."
    assert assess_difficulty(long_words) == "Advanced"
    medium_words = " ".join(["sentence"] * 18) + "."
    assert assess_difficulty(medium_words) == "Intermediate"


def test_local_summary_picks_first_and_last_sentences():
    summary = local_summary(SAMPLE)
    assert summary.startswith("The water cycle describes")
    assert summary.endswith("where the whole cycle begins again.")
    assert local_summary("Too short.") == "This document contains limited analyzable content."


def test_top_words_ignores_stop_words_and_short_words():
    words = top_words("Water, water everywhere! The water and the rain.", min_length=3, ignore={"the"}, limit=2)
    assert words == ["water", "everywhere"]


def test_analyze_locally_handles_empty_input():
    result = analyze_locally("", "Empty")
    assert result.label == "Empty"
    assert result.provider == "local"
    assert result.stats.words == 0
    assert result.stats.reading_time_minutes == 0
    assert result.summary
    assert result.key_points == []
    assert result.main_topics == []


def test_analyze_locally_key_points_and_topics():
    result = analyze_locally(SAMPLE, "Water")
    assert any("important" in point for point in result.key_points)
    assert "water" in result.main_topics


def test_ai_key_points_falls_back_without_bullets():
    assert ai_key_points("Plain paragraph without bullets.") == ["AI analysis provided comprehensive insights"]
    assert ai_key_points("* one\n• two\n3. three") == ["one", "two", "three"]


def test_parse_ai_analysis_truncates_summary():
    response = "word " * 200
    result = parse_ai_analysis(response, "Body text.", "Label", "openai")
    assert result.summary.endswith("...")
    assert len(result.summary) == 503
    assert result.main_topics == []
