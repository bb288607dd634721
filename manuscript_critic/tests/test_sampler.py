"""
Unit tests for content sampling.

Tests cover:
- Pass-through of text within budget
- Excerpt length bound and window clamping for long text
- Section markers and word counting
"""

import pytest

from manuscript_critic.core.sampler import (
    BEGINNING_MARKER,
    ENDING_MARKER,
    MARKER_OVERHEAD,
    MIDDLE_MARKER,
    budget_chars,
    count_words,
    is_sampled,
    plan_windows,
    sample_manuscript,
)


class TestSampleManuscript:
    """Tests for sample_manuscript."""

    @pytest.mark.parametrize("length", [0, 1, 39, 40])
    def test_text_within_budget_is_unchanged(self, length):
        text = "x" * length
        assert sample_manuscript(text, token_budget=10) == text

    def test_long_text_is_bounded(self):
        text = "".join(chr(ord("a") + i % 26) for i in range(10_000))
        token_budget = 100
        excerpt = sample_manuscript(text, token_budget)

        window = budget_chars(token_budget) // 3
        assert len(excerpt) <= 3 * window + MARKER_OVERHEAD
        assert len(excerpt) <= budget_chars(token_budget) + MARKER_OVERHEAD

    def test_long_text_has_labelled_sections_in_order(self):
        text = "A" * 500 + "M" * 500 + "Z" * 500
        excerpt = sample_manuscript(text, token_budget=30)

        assert excerpt.startswith(BEGINNING_MARKER)
        assert excerpt.index(BEGINNING_MARKER) < excerpt.index(MIDDLE_MARKER) < excerpt.index(ENDING_MARKER)

        beginning = excerpt.split(MIDDLE_MARKER)[0]
        ending = excerpt.split(ENDING_MARKER)[1]
        assert set(beginning.replace(BEGINNING_MARKER, "").strip()) == {"A"}
        assert set(ending.strip()) == {"Z"}
        assert "M" * 40 in excerpt.split(MIDDLE_MARKER)[1].split(ENDING_MARKER)[0]

    def test_is_deterministic(self):
        text = "word " * 5000
        assert sample_manuscript(text, 200) == sample_manuscript(text, 200)

    def test_rejects_non_positive_budget(self):
        with pytest.raises(ValueError):
            sample_manuscript("text", token_budget=0)


class TestPlanWindows:
    """Tests for window planning."""

    @pytest.mark.parametrize("text_length", [41, 100, 1000, 123457])
    def test_windows_stay_within_text(self, text_length):
        for window in plan_windows(text_length, token_budget=10):
            assert 0 <= window.start <= window.end <= text_length

    def test_window_sizes(self):
        beginning, middle, ending = plan_windows(1000, token_budget=30)

        assert (beginning.start, beginning.end) == (0, 40)
        assert (middle.start, middle.end) == (480, 520)
        assert (ending.start, ending.end) == (960, 1000)

    def test_middle_window_is_centred(self):
        _, middle, _ = plan_windows(10_001, token_budget=75)
        centre = (middle.start + middle.end) / 2
        assert abs(centre - 10_001 / 2) <= 1

    def test_windows_clamp_when_budget_exceeds_text(self):
        beginning, middle, ending = plan_windows(10, token_budget=100)

        assert (beginning.start, beginning.end) == (0, 10)
        assert middle.start == 0 and middle.end == 10
        assert (ending.start, ending.end) == (0, 10)


class TestHelpers:
    """Tests for budget and word-count helpers."""

    def test_budget_chars_uses_four_chars_per_token(self):
        assert budget_chars(50_000) == 200_000

    def test_is_sampled(self):
        assert not is_sampled("x" * 40, 10)
        assert is_sampled("x" * 41, 10)

    def test_count_words_splits_on_any_whitespace(self):
        assert count_words("one  two\nthree\tfour ") == 4
        assert count_words("   ") == 0
