"""
Rule Validation - Drop rows that violate user-declared predicates

Only rules with action 'remove' change the output. Violations of 'flag'
rules are collected as RuleViolation records so callers can show them;
'transform' rules and the 'pattern' condition have no effect.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Sequence, Tuple

from ..dataset import Row, TabularDataset, parse_number
from ..models import RuleAction, RuleCondition, ValidationRule
from .stage_base import BaseStage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuleViolation:
    """A flagged cell. row_index is the position in the stage's input."""

    row_index: int
    rule_id: str
    column: str
    condition: str
    value: Any

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def violates(rule: ValidationRule, value: Any) -> bool:
    """
    Check one cell against one rule.

    Numeric conditions parse both the cell and the rule value; if either
    side does not parse, the rule is not violated. 'equals' and
    'not-equals' compare the raw values exactly.

    Args:
        rule: Rule to check
        value: Cell value

    Returns:
        True if the cell violates the rule
    """
    condition = rule.condition

    if condition == RuleCondition.EQUALS:
        return value != rule.value
    if condition == RuleCondition.NOT_EQUALS:
        return value == rule.value
    if condition == RuleCondition.PATTERN:
        return False

    number = parse_number(value)
    if number is None:
        return False

    if condition == RuleCondition.RANGE:
        low, high = (parse_number(v) for v in rule.value)
        return (low is not None and number < low) or (high is not None and number > high)

    threshold = parse_number(rule.value)
    if threshold is None:
        return False
    if condition == RuleCondition.GREATER_THAN:
        return number <= threshold
    if condition == RuleCondition.LESS_THAN:
        return number >= threshold
    return False


class ValidationRuleEngine(BaseStage):
    """
    Apply an ordered rule list row by row.

    Usage:
        engine = ValidationRuleEngine()
        rows, flags = engine.evaluate(dataset, rules)
    """

    name = "rules"

    def evaluate(
        self,
        dataset: TabularDataset,
        rules: Sequence[ValidationRule]
    ) -> Tuple[List[Row], List[RuleViolation]]:
        """
        Filter rows and collect flags.

        Args:
            dataset: Input snapshot
            rules: Rules in evaluation order

        Returns:
            (kept rows, violations of 'flag' rules on kept rows)
        """
        self.check_columns(dataset, [r.column for r in rules])
        self._warn_inert_rules(rules)

        rows: List[Row] = []
        flags: List[RuleViolation] = []
        removed_by: Dict[str, int] = {}

        for i, row in enumerate(dataset.rows):
            row_flags = []
            keep = True

            for rule in rules:
                if not violates(rule, row[rule.column]):
                    continue
                if rule.action == RuleAction.REMOVE:
                    removed_by[rule.label] = removed_by.get(rule.label, 0) + 1
                    keep = False
                    break
                if rule.action == RuleAction.FLAG:
                    row_flags.append(
                        RuleViolation(i, rule.label, rule.column, rule.condition.value, row[rule.column])
                    )

            if keep:
                rows.append(dict(row))
                flags.extend(row_flags)

        self.log_operation(
            len(dataset), len(rows), 0,
            {"removed_by_rule": removed_by, "flagged": len(flags)},
        )
        return rows, flags

    def apply(self, dataset: TabularDataset, rules: Sequence[ValidationRule]) -> List[Row]:
        rows, _ = self.evaluate(dataset, rules)
        return rows

    @staticmethod
    def _warn_inert_rules(rules: Sequence[ValidationRule]) -> None:
        patterns = [r.label for r in rules if r.condition == RuleCondition.PATTERN]
        if patterns:
            logger.warning(f"Pattern rules are not evaluated: {patterns}")
        transforms = [r.label for r in rules if r.action == RuleAction.TRANSFORM]
        if transforms:
            logger.debug(f"Transform rule actions have no effect: {transforms}")
