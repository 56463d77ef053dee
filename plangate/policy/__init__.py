"""
plangate Policy Engine

Decides whether a plan needs human approval before it is applied.

Components:
- PolicySet: always-unsafe / always-safe resource types (YAML or dict)
- rules: per-line verdict table
- PolicyEvaluator: ordered evaluation with short-circuit on first unsafe line
"""

from plangate.policy.evaluator import PolicyEvaluator, evaluate_plan
from plangate.policy.policy import PolicySet, load_policy
from plangate.policy.rules import decide, resolve_verdict

__all__ = [
    "PolicySet",
    "load_policy",
    "PolicyEvaluator",
    "evaluate_plan",
    "decide",
    "resolve_verdict",
]
