"""
Issue and priority-action ranking.

Issue identifiers are derived from the position in the extracted list, not
from content, so near-duplicate issues stay distinguishable. Issues sort by
severity (critical first) and actions by priority (1 first); both sorts are
stable, so ties keep the model's order.
"""

import logging
from typing import Any, Dict, Iterable, List

from pydantic import ValidationError as SchemaValidationError

from ..models import SEVERITY_RANK, IssueLocation, PriorityAction, SpecificIssue
from .scoring import clamp_score

logger = logging.getLogger(__name__)

LOWEST_PRIORITY = 5


def issue_id(index: int) -> str:
    return f"issue-{index}"


def _lowercase(item: Dict[str, Any], fields: Iterable[str]) -> None:
    for name in fields:
        value = item.get(name)
        if isinstance(value, str):
            item[name] = value.strip().lower().replace(" ", "_")


def assign_issue_ids(raw_issues: Any) -> List[Dict[str, Any]]:
    """
    Give each raw issue the id "issue-<index>" of its position in the reply.

    Non-object entries are skipped but still consume their index, so ids stay
    unique and positional.
    """
    if not isinstance(raw_issues, list):
        return []

    identified = []
    for index, raw in enumerate(raw_issues):
        if not isinstance(raw, dict):
            logger.warning(f"[assign_issue_ids] Skipping non-object issue at index {index}")
            continue
        identified.append({**raw, "id": issue_id(index)})
    return identified


def _field_is_valid(model_cls, key: str, value: Any) -> bool:
    try:
        model_cls.model_validate({key: value})
    except SchemaValidationError:
        return False
    return True


def parse_location(raw_location: Any, owner_id: str) -> IssueLocation:
    """
    Best-effort issue location.

    Fields that fail validation are dropped individually; the issue itself is
    never lost over a bad location.
    """
    # Free-text locations ("chapter 3") are not structured enough to keep
    if not isinstance(raw_location, dict):
        return IssueLocation()

    location = {key: value for key, value in raw_location.items() if value is not None}
    try:
        return IssueLocation.model_validate(location)
    except SchemaValidationError:
        pass

    kept = {key: value for key, value in location.items() if _field_is_valid(IssueLocation, key, value)}
    dropped = sorted(set(location) - set(kept))
    logger.warning(f"[parse_location] Dropping location field(s) {dropped} of {owner_id}")
    return IssueLocation.model_validate(kept)


def parse_issues(raw_issues: Any) -> List[SpecificIssue]:
    """Validate raw issues into SpecificIssue records, dropping invalid ones."""
    issues = []
    for raw in assign_issue_ids(raw_issues):
        raw = {key: value for key, value in raw.items() if value is not None}
        _lowercase(raw, ("type", "severity", "category"))
        raw["location"] = parse_location(raw.get("location"), raw["id"])
        try:
            issues.append(SpecificIssue.model_validate(raw))
        except SchemaValidationError as e:
            logger.warning(f"[parse_issues] Dropping {raw['id']}: {e.error_count()} validation error(s)")
    return issues


def rank_issues(issues: List[SpecificIssue]) -> List[SpecificIssue]:
    """Order issues critical > significant > moderate > minor > suggestion."""
    return sorted(issues, key=lambda issue: SEVERITY_RANK[issue.severity])


def parse_priority_actions(raw_actions: Any) -> List[PriorityAction]:
    """Validate raw actions, clamping priority to [1, 5]."""
    if not isinstance(raw_actions, list):
        return []

    actions = []
    for index, raw in enumerate(raw_actions):
        if not isinstance(raw, dict):
            logger.warning(f"[parse_priority_actions] Skipping non-object action at index {index}")
            continue
        item = dict(raw)
        _lowercase(item, ("category", "impact", "effort"))
        item["priority"] = clamp_score(item.get("priority"), low=1, high=LOWEST_PRIORITY, default=LOWEST_PRIORITY)
        for level in ("impact", "effort"):
            if item.get(level) not in ("low", "medium", "high"):
                item.pop(level, None)
        if item.get("category") in ("", None):
            item.pop("category", None)
        try:
            actions.append(PriorityAction.model_validate(item))
        except SchemaValidationError as e:
            logger.warning(f"[parse_priority_actions] Dropping action {index}: {e.error_count()} validation error(s)")
    return actions


def rank_priority_actions(actions: List[PriorityAction]) -> List[PriorityAction]:
    """Order actions by ascending priority, 1 first."""
    return sorted(actions, key=lambda action: action.priority)
