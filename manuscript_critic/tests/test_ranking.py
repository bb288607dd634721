"""
Unit tests for issue and priority-action ranking.

Tests cover:
- Position-derived issue ids
- Stable severity ordering
- Priority clamping and stable ordering of actions
- Dropping entries that fail validation
"""

from manuscript_critic.core.ranking import (
    assign_issue_ids,
    parse_issues,
    parse_priority_actions,
    rank_issues,
    rank_priority_actions,
)
from manuscript_critic.models import FeedbackSeverity, ImpactLevel


def _issue(severity, title, **extra):
    return {
        "type": "repetition",
        "severity": severity,
        "category": "prose_quality",
        "title": title,
        "description": f"{title} description",
        **extra,
    }


class TestIssueIds:
    """Tests for assign_issue_ids."""

    def test_ids_follow_position(self):
        issues = assign_issue_ids([_issue("minor", "a"), _issue("minor", "a")])
        assert [issue["id"] for issue in issues] == ["issue-0", "issue-1"]

    def test_model_supplied_id_is_replaced(self):
        issues = assign_issue_ids([_issue("minor", "a", id="dup"), _issue("minor", "b", id="dup")])
        assert [issue["id"] for issue in issues] == ["issue-0", "issue-1"]

    def test_non_object_entries_keep_their_index(self):
        issues = assign_issue_ids(["junk", _issue("minor", "a")])
        assert [issue["id"] for issue in issues] == ["issue-1"]

    def test_non_list_input(self):
        assert assign_issue_ids(None) == []
        assert assign_issue_ids({"issues": []}) == []


class TestRankIssues:
    """Tests for parse_issues and rank_issues."""

    def test_severity_order_is_stable(self):
        raw = [
            _issue("minor", "first minor"),
            _issue("critical", "first critical"),
            _issue("moderate", "moderate"),
            _issue("critical", "second critical"),
            _issue("suggestion", "suggestion"),
        ]
        ranked = rank_issues(parse_issues(raw))

        assert [issue.severity for issue in ranked] == [
            FeedbackSeverity.CRITICAL,
            FeedbackSeverity.CRITICAL,
            FeedbackSeverity.MODERATE,
            FeedbackSeverity.MINOR,
            FeedbackSeverity.SUGGESTION,
        ]
        assert [issue.title for issue in ranked[:2]] == ["first critical", "second critical"]
        assert [issue.id for issue in ranked[:2]] == ["issue-1", "issue-3"]

    def test_ids_are_unique(self):
        ranked = rank_issues(parse_issues([_issue("minor", "same")] * 4))
        ids = [issue.id for issue in ranked]
        assert len(set(ids)) == len(ids) == 4

    def test_invalid_issue_is_dropped_after_ids_assigned(self):
        raw = [_issue("minor", "ok"), _issue("catastrophic", "bad severity"), _issue("critical", "ok too")]
        issues = parse_issues(raw)

        assert [issue.id for issue in issues] == ["issue-0", "issue-2"]

    def test_enum_values_are_normalized(self):
        issues = parse_issues([_issue("Critical", "a", type="Plot Hole", category="Plot Structure")])

        assert issues[0].severity == FeedbackSeverity.CRITICAL
        assert issues[0].type.value == "plot_hole"
        assert issues[0].category.value == "plot_structure"

    def test_location_and_optional_fields(self):
        issues = parse_issues([
            _issue("minor", "a", location={"paragraphIndex": 3}, excerpt="the the", autoFixAvailable=True),
            _issue("minor", "b", location="chapter 2", suggestion=None),
        ])

        assert issues[0].location.paragraph_index == 3
        assert issues[0].excerpt == "the the"
        assert issues[0].auto_fix_available is True
        assert issues[1].location.paragraph_index is None
        assert issues[1].suggestion is None

    def test_bad_location_field_keeps_issue(self):
        issues = parse_issues([
            _issue("critical", "a", type="cliche", location={"chapterTitle": "One", "paragraphIndex": "third"}),
        ])

        assert len(issues) == 1
        assert issues[0].severity == FeedbackSeverity.CRITICAL
        assert issues[0].location.chapter_title == "One"
        assert issues[0].location.paragraph_index is None


class TestPriorityActions:
    """Tests for parse_priority_actions and rank_priority_actions."""

    def test_sorted_by_priority_and_stable(self):
        raw = [
            {"priority": 3, "action": "c"},
            {"priority": 1, "action": "a1"},
            {"priority": 2, "action": "b"},
            {"priority": 1, "action": "a2"},
        ]
        ranked = rank_priority_actions(parse_priority_actions(raw))
        assert [action.action for action in ranked] == ["a1", "a2", "b", "c"]

    def test_priority_is_clamped(self):
        actions = parse_priority_actions([
            {"priority": 0, "action": "low"},
            {"priority": 9, "action": "high"},
            {"priority": "urgent", "action": "text"},
        ])
        assert [action.priority for action in actions] == [1, 5, 5]

    def test_invalid_levels_fall_back_to_medium(self):
        actions = parse_priority_actions([
            {"priority": 1, "action": "x", "impact": "HIGH", "effort": "enormous", "category": ""},
        ])
        assert actions[0].impact == ImpactLevel.HIGH
        assert actions[0].effort == ImpactLevel.MEDIUM
        assert actions[0].category is None

    def test_action_without_text_is_dropped(self):
        actions = parse_priority_actions([{"priority": 1}, {"priority": 2, "action": "keep"}, "junk"])
        assert [action.action for action in actions] == ["keep"]

    def test_affected_areas_alias(self):
        actions = parse_priority_actions([{"priority": 1, "action": "x", "affectedAreas": ["chapter 1"]}])
        assert actions[0].affected_areas == ["chapter 1"]
