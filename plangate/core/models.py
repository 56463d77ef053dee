"""
plangate/core/models.py

Data model for one evaluation run.

    ResourceChangeLine  one parsed "will be" / "must be" line of a plan
    LineDecision        the verdict reached for one line, with its audit message
    EvaluationResult    the terminal outcome; approval_required is the only
                        value published to the pipeline

Every type here is immutable. A run derives fresh change lines from the plan
text, folds them into a single EvaluationResult, and stops.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class ChangeAction(Enum):
    """Planned action on a resource, as named in the plan text"""
    DESTROYED = "destroyed"
    REPLACED  = "replaced"
    UPDATED   = "updated"
    CREATED   = "created"
    UNKNOWN   = "unknown"

    @property
    def is_destructive(self) -> bool:
        return self in (ChangeAction.DESTROYED, ChangeAction.REPLACED)


# Classification priority. First keyword found in a line wins.
ACTION_PRIORITY: Tuple[ChangeAction, ...] = (
    ChangeAction.DESTROYED,
    ChangeAction.REPLACED,
    ChangeAction.UPDATED,
    ChangeAction.CREATED,
)


class Verdict(Enum):
    """Per-line outcome. UNDETERMINED is never a valid end state."""
    REQUIRE_APPROVAL = "require_approval"
    NO_APPROVAL      = "no_approval"
    UNDETERMINED     = "undetermined"


class MatchSource(Enum):
    """Which part of the policy decided a line"""
    ALWAYS_UNSAFE = "always_unsafe"
    ALWAYS_SAFE   = "always_safe"
    UNHANDLED     = "unhandled"
    CREATE        = "create"
    NONE          = "none"


@dataclass(frozen=True)
class ResourceChangeLine:
    """One change line of a rendered plan."""
    line_number:   int
    raw:           str
    resource_path: str
    resource_type: str
    action:        ChangeAction


@dataclass(frozen=True)
class LineDecision:
    change:  ResourceChangeLine
    verdict: Verdict
    source:  MatchSource
    message: str

    @property
    def requires_approval(self) -> bool:
        return self.verdict is Verdict.REQUIRE_APPROVAL

    def to_dict(self) -> dict:
        return {
            "line_number":   self.change.line_number,
            "resource_path": self.change.resource_path,
            "resource_type": self.change.resource_type,
            "action":        self.change.action.value,
            "verdict":       self.verdict.value,
            "source":        self.source.value,
            "message":       self.message,
        }


@dataclass(frozen=True)
class EvaluationResult:
    """
    Terminal outcome of one plan evaluation.

    decisions holds only the lines that were actually evaluated: when a line
    requires approval the run stops there and triggered_by points at it.
    """
    approval_required: bool
    reason:            str
    decisions:         Tuple[LineDecision, ...] = field(default_factory=tuple)
    triggered_by:      Optional[LineDecision] = None
    zero_change:       bool = False
    policy_hash:       Optional[str] = None

    def __bool__(self) -> bool:
        return self.approval_required

    def to_dict(self) -> dict:
        return {
            "approval_required": self.approval_required,
            "reason":            self.reason,
            "zero_change":       self.zero_change,
            "lines_evaluated":   len(self.decisions),
            "triggered_by":      self.triggered_by.to_dict() if self.triggered_by else None,
            "policy_hash":       self.policy_hash,
            "decisions":         [d.to_dict() for d in self.decisions],
        }
