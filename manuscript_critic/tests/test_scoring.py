"""
Unit tests for score normalization.
"""

import logging

import pytest

from manuscript_critic.core.scoring import clamp_score, normalize_overall_score, normalize_scores
from manuscript_critic.models import CANONICAL_CATEGORIES


class TestNormalizeScores:
    """Tests for normalize_scores."""

    def test_missing_categories_get_neutral_default(self, caplog):
        scores = normalize_scores({"pacing": 95})

        assert set(scores) == set(CANONICAL_CATEGORIES)
        assert len(scores) == 15
        assert "humor" in caplog.text
        assert scores["pacing"] == 95
        assert all(value == 70 for key, value in scores.items() if key != "pacing")

    @pytest.mark.parametrize("raw,expected", [(150, 100), (-20, 0), (100, 100), (0, 0), (72.6, 73)])
    def test_values_are_clamped_and_rounded(self, raw, expected):
        assert normalize_scores({"pacing": raw})["pacing"] == expected

    @pytest.mark.parametrize("raw", ["high", None, True, [80], {"value": 80}, float("nan")])
    def test_non_numeric_values_become_default(self, raw):
        assert normalize_scores({"dialogue": raw})["dialogue"] == 70

    def test_extra_keys_are_preserved(self):
        scores = normalize_scores({"humor": 88, "suspense": 140})

        assert scores["humor"] == 88
        assert scores["suspense"] == 100
        assert set(CANONICAL_CATEGORIES) <= set(scores)

    def test_extra_non_numeric_keys_are_dropped(self, caplog):
        with caplog.at_level(logging.WARNING, logger="manuscript_critic.core.scoring"):
            scores = normalize_scores({"humor": "lots"})
        assert "humor" not in scores
        assert len(scores) == 15
        assert "humor" in caplog.text

    @pytest.mark.parametrize("raw", [None, [], "scores", 42])
    def test_non_dict_input_gives_all_defaults(self, raw):
        scores = normalize_scores(raw)
        assert scores == {category: 70 for category in CANONICAL_CATEGORIES}


class TestOverallScore:
    """Tests for overall score and clamp helpers."""

    @pytest.mark.parametrize("raw,expected", [(85, 85), (101, 100), (-1, 0), ("85", 70), (None, 70)])
    def test_normalize_overall_score(self, raw, expected):
        assert normalize_overall_score(raw) == expected

    def test_clamp_score_custom_range(self):
        assert clamp_score(12, low=-10, high=10, default=0) == 10
        assert clamp_score("x", low=-10, high=10, default=0) == 0
        assert clamp_score("x", default=None) is None
