"""
Policy evaluator for plangate.

Evaluation order:
    1. Zero-change pre-check   summary says nothing changes -> no approval,
                               no line is looked at
    2. Fold over change lines  parse -> classify -> resolve verdict -> audit
    3. Short-circuit           first REQUIRE_APPROVAL ends the run
    4. Completion              every line passed -> no approval

Any malformed or unclassifiable line aborts the run with an exception. The
evaluator never turns bad input into "no approval".
"""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from plangate.core.exceptions import UnclassifiableLineError
from plangate.core.models import EvaluationResult, LineDecision, Verdict
from plangate.core.parser import (
    is_zero_change_summary,
    iter_change_lines,
    number_lines,
    parse_change_line,
)
from plangate.policy.policy import PolicySet
from plangate.policy.rules import decide

logger = logging.getLogger("plangate.policy")

NumberedLines = Sequence[Tuple[int, str]]


class PolicyEvaluator:
    """
    Decides whether a plan needs human approval before apply.

    One evaluator can serve many runs; it holds nothing but the policy.
    """

    def __init__(self, policy: PolicySet):
        self.policy = policy

    def evaluate(
        self,
        lines: Union[Iterable[str], NumberedLines],
        summary: Optional[str] = None,
    ) -> EvaluationResult:
        """
        Evaluate change lines against the policy.

        Args:
            lines:   change lines in plan order, either plain strings or
                     (line_number, line) pairs.
            summary: plan summary text used for the zero-change pre-check.

        Raises:
            MalformedLineError:      a line lacks a resource path or type.
            UnclassifiableLineError: a line names no known action.
        """
        policy_hash = self.policy.policy_hash

        if summary is not None and is_zero_change_summary(summary):
            logger.info("No changes detected, nothing to approve")
            return EvaluationResult(
                approval_required= False,
                reason=            "no changes detected",
                zero_change=       True,
                policy_hash=       policy_hash,
            )

        numbered = _numbered(lines)
        if not numbered:
            logger.warning(
                "Plan reports changes but contains no change lines, approval required"
            )
            return EvaluationResult(
                approval_required= True,
                reason=            "no change lines found in a plan that reports changes",
                policy_hash=       policy_hash,
            )

        decisions: List[LineDecision] = []
        for line_number, line in numbered:
            decision = self._evaluate_line(line_number, line)
            decisions.append(decision)

            if decision.requires_approval:
                return EvaluationResult(
                    approval_required= True,
                    reason=            decision.message,
                    decisions=         tuple(decisions),
                    triggered_by=      decision,
                    policy_hash=       policy_hash,
                )

        return EvaluationResult(
            approval_required= False,
            reason=            f"all {len(decisions)} change(s) allowed by policy",
            decisions=         tuple(decisions),
            policy_hash=       policy_hash,
        )

    def evaluate_plan(self, plan_text: str, summary: Optional[str] = None) -> EvaluationResult:
        """
        Evaluate a full rendered plan.

        Change lines are the "will be" / "must be" lines of plan_text. The
        summary defaults to the plan text itself, which carries the
        "Plan: N to add, ..." line.
        """
        if summary is None:
            summary = plan_text
        return self.evaluate(list(iter_change_lines(plan_text)), summary=summary)

    def _evaluate_line(self, line_number: int, line: str) -> LineDecision:
        change = parse_change_line(line, line_number)
        decision = decide(change, self.policy)

        if decision.verdict is Verdict.UNDETERMINED:
            raise UnclassifiableLineError(
                "change line names none of destroyed, replaced, updated, created",
                line_number, line,
            )

        if decision.requires_approval:
            logger.warning(decision.message)
        else:
            logger.info(decision.message)
        return decision


def _numbered(lines) -> List[Tuple[int, str]]:
    items = list(lines)
    if items and not isinstance(items[0], str):
        return [(int(n), line) for n, line in items]
    return number_lines(items)


def evaluate_plan(
    plan_text: str,
    policy: PolicySet,
    summary: Optional[str] = None,
) -> EvaluationResult:
    """Convenience wrapper: evaluate plan_text with a one-off evaluator."""
    return PolicyEvaluator(policy).evaluate_plan(plan_text, summary=summary)
