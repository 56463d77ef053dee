"""
plangate/__init__.py

plangate: approval gate for infrastructure plans

Reads the change lines of a rendered Terraform plan, checks each changed
resource type against always-unsafe / always-safe lists, and decides whether
a human must approve the plan before it is applied. The first unsafe change
ends the evaluation.
"""

__version__ = "0.1.0"

from plangate.core.exceptions import (
    MalformedLineError,
    PlanGateError,
    PlanRenderError,
    PolicyConfigError,
    UnclassifiableLineError,
)
from plangate.core.models import (
    ChangeAction,
    EvaluationResult,
    LineDecision,
    MatchSource,
    ResourceChangeLine,
    Verdict,
)
from plangate.core.parser import parse_change_line
from plangate.policy import PolicyEvaluator, PolicySet, evaluate_plan, load_policy

__all__ = [
    # Model
    "ChangeAction",
    "EvaluationResult",
    "LineDecision",
    "MatchSource",
    "ResourceChangeLine",
    "Verdict",
    # Policy
    "PolicyEvaluator",
    "PolicySet",
    "evaluate_plan",
    "load_policy",
    "parse_change_line",
    # Errors
    "PlanGateError",
    "MalformedLineError",
    "UnclassifiableLineError",
    "PolicyConfigError",
    "PlanRenderError",
]
