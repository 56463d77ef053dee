"""
Per-line verdict rules.

    action      always_unsafe      always_safe    unhandled
    ---------   ----------------   ------------   ----------------
    created     (not consulted)    -              no approval
    updated     require approval   no approval    no approval
    replaced    require approval   no approval    require approval
    destroyed   require approval   no approval    require approval
    unknown     undetermined

Unhandled destructive actions need approval; unhandled in-place updates do not.
"""

from typing import Tuple

from plangate.core.models import (
    ChangeAction,
    LineDecision,
    MatchSource,
    ResourceChangeLine,
    Verdict,
)
from plangate.policy.policy import PolicySet


_ACTION_NOUN = {
    ChangeAction.DESTROYED: "deleted",
    ChangeAction.REPLACED:  "replaced",
    ChangeAction.UPDATED:   "updated in place",
}

_ACTION_VERB = {
    ChangeAction.DESTROYED: "destroy",
    ChangeAction.REPLACED:  "replace",
    ChangeAction.UPDATED:   "update",
}


def resolve_verdict(
    change: ResourceChangeLine,
    policy: PolicySet,
) -> Tuple[Verdict, MatchSource]:
    """Return the verdict for one change line and the policy part that decided it."""
    action = change.action

    if action is ChangeAction.CREATED:
        return Verdict.NO_APPROVAL, MatchSource.CREATE

    if action is ChangeAction.UNKNOWN:
        return Verdict.UNDETERMINED, MatchSource.NONE

    source = policy.lookup(change.resource_type)
    if source is MatchSource.ALWAYS_UNSAFE:
        return Verdict.REQUIRE_APPROVAL, source
    if source is MatchSource.ALWAYS_SAFE:
        return Verdict.NO_APPROVAL, source

    if action.is_destructive:
        return Verdict.REQUIRE_APPROVAL, MatchSource.UNHANDLED
    return Verdict.NO_APPROVAL, MatchSource.UNHANDLED


def audit_message(change: ResourceChangeLine, verdict: Verdict, source: MatchSource) -> str:
    """Human-readable audit line: path, action, outcome and why."""
    path = change.resource_path

    if source is MatchSource.CREATE:
        return f"Approval not required for {path}: resource is planned to be created"

    if verdict is Verdict.UNDETERMINED:
        return f"Cannot determine the planned action for {path}"

    noun = _ACTION_NOUN[change.action]
    verb = _ACTION_VERB[change.action]
    rtype = change.resource_type

    if source is MatchSource.ALWAYS_UNSAFE:
        return (
            f"Approval required on {path}: resource is planned to be {noun}, "
            f"and {rtype} is always unsafe to {verb} without approval"
        )
    if source is MatchSource.ALWAYS_SAFE:
        return (
            f"Approval not required for {path}: resource is planned to be {noun}, "
            f"but {rtype} is marked safe to {verb} without approval"
        )
    if verdict is Verdict.REQUIRE_APPROVAL:
        return (
            f"Approval required on {path}: resource is planned to be {noun}, "
            f"and {rtype} is unhandled by policy"
        )
    return (
        f"Approval not required for {path}: resource is planned to be {noun}, "
        f"{rtype} is unhandled by policy and normal policies apply"
    )


def decide(change: ResourceChangeLine, policy: PolicySet) -> LineDecision:
    verdict, source = resolve_verdict(change, policy)
    return LineDecision(
        change=  change,
        verdict= verdict,
        source=  source,
        message= audit_message(change, verdict, source),
    )
