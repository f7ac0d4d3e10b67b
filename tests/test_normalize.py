"""Normalizer, boilerplate filter and word-count tests."""

from src.extraction.normalize import (
    clean_whitespace,
    dedupe,
    estimate_read_time,
    filter_candidates,
    is_boilerplate,
    normalize,
    word_count,
)

PREFIXES = ("menu", "subscribe", "sign up", "log in", "follow", "cookie")


def test_clean_whitespace_collapses_runs():
    assert clean_whitespace("  Hello \n\t world   again ") == "Hello world again"


def test_dedupe_is_case_insensitive_and_keeps_first():
    result = dedupe(["Breaking news today", "Other text", "BREAKING NEWS TODAY"])
    assert result == ["Breaking news today", "Other text"]


def test_normalize_dedupes_after_whitespace_cleanup():
    result = normalize(
        [
            "Breaking news: the river flooded the town.",
            "  breaking   news: the river flooded the town.  ",
            "The mayor called an emergency meeting at noon.",
        ]
    )
    assert result.paragraphs == [
        "Breaking news: the river flooded the town.",
        "The mayor called an emergency meeting at noon.",
    ]


def test_normalize_min_length_applies_after_collapse():
    # Raw length passes the threshold, collapsed length does not.
    padded = "short   \n\n   words   here"
    result = normalize([padded, "A long enough paragraph to keep around."], min_chars=20)
    assert result.paragraphs == ["A long enough paragraph to keep around."]


def test_normalize_drops_empty_and_whitespace_only():
    result = normalize(["", "   \n ", "This paragraph has real content in it."])
    assert result.paragraphs == ["This paragraph has real content in it."]


def test_content_joined_with_blank_line():
    result = normalize(["First paragraph of the article.", "Second paragraph of the article."])
    assert result.content == "First paragraph of the article.\n\nSecond paragraph of the article."


def test_word_count_matches_content_tokens():
    result = normalize(["One two three four five six.", "Seven eight nine ten eleven twelve."])
    assert result.word_count == 12
    assert result.word_count == len([w for w in result.content.split() if w])


def test_word_count_ignores_extra_whitespace():
    assert word_count("  a  b\n\nc ") == 3


def test_read_time_rounds_up():
    assert estimate_read_time(1) == "1 min read"
    assert estimate_read_time(200) == "1 min read"
    assert estimate_read_time(201) == "2 min read"
    assert estimate_read_time(1000) == "5 min read"


def test_normalize_read_time_uses_words_per_minute():
    text = " ".join(["word"] * 150)
    result = normalize([text], words_per_minute=100)
    assert result.estimated_read_time == "2 min read"


def test_is_boilerplate_prefix_match():
    assert is_boilerplate("Sign up for our newsletter", PREFIXES)
    assert is_boilerplate("  MENU Home About Contact", PREFIXES)
    assert not is_boilerplate("The committee will sign up volunteers next week", PREFIXES)


def test_is_boilerplate_only_looks_at_window():
    text = "A" * 40 + " subscribe"
    assert not is_boilerplate(text, PREFIXES, window=30)


def test_is_boilerplate_copyright_sign():
    assert is_boilerplate("© 2024 Example Media. All rights reserved.", PREFIXES)


def test_filter_candidates_applies_length_and_denylist():
    kept = filter_candidates(
        [
            "Sign up for our newsletter to get more stories",
            "Too short",
            "The real story starts here and keeps going for a while.",
        ],
        min_chars=20,
        prefixes=PREFIXES,
    )
    assert kept == ["The real story starts here and keeps going for a while."]


def test_filter_candidates_denylist_is_configurable():
    kept = filter_candidates(
        ["Advertisement: buy our amazing product now"],
        min_chars=10,
        prefixes=("advertisement",),
    )
    assert kept == []
