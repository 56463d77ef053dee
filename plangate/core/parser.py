"""
plangate/core/parser.py

Plan text parsing. No policy knowledge lives here.

A rendered plan (terraform show -no-color) announces each change as

    # module.networking.aws_security_group_rule.inbound will be destroyed
    # aws_instance.web must be replaced

Token 2 is the resource path. The resource type is the second-to-last
dot-delimited segment of that path. The action is the first keyword found,
checked in ACTION_PRIORITY order.
"""

import re
from typing import Iterable, Iterator, List, Tuple

from plangate.core.exceptions import MalformedLineError
from plangate.core.models import ACTION_PRIORITY, ChangeAction, ResourceChangeLine


# Markers the pipeline step used to pick change lines out of the plan
CHANGE_LINE_MARKERS: Tuple[str, ...] = ("will be", "must be")

_ZERO_CHANGE_RE = re.compile(r"\b0 to add, 0 to change, 0 to destroy\b")
_NO_CHANGES_RE  = re.compile(r"^\s*No changes\.", re.MULTILINE)


def classify_action(line: str) -> ChangeAction:
    """Return the first action keyword found in line, or UNKNOWN."""
    for action in ACTION_PRIORITY:
        if action.value in line:
            return action
    return ChangeAction.UNKNOWN


def split_resource_path(resource_path: str) -> str:
    """
    Return the resource type of a dotted resource path.

    module.net.aws_security_group_rule.x  ->  aws_security_group_rule
    aws_instance.web[0]                  ->  aws_instance
    """
    segments = resource_path.split(".")
    if len(segments) < 2 or not segments[-2]:
        raise ValueError(f"resource path has no type segment: {resource_path!r}")
    return segments[-2]


def parse_change_line(line: str, line_number: int = 1) -> ResourceChangeLine:
    """
    Parse one change line into a ResourceChangeLine.

    Raises:
        MalformedLineError: fewer than two tokens, or a resource path with
            fewer than two dot-delimited segments.
    """
    tokens = line.split()
    if len(tokens) < 2:
        raise MalformedLineError(
            "change line has no resource path token", line_number, line,
        )

    resource_path = tokens[1]
    try:
        resource_type = split_resource_path(resource_path)
    except ValueError as e:
        raise MalformedLineError(str(e), line_number, line) from e

    return ResourceChangeLine(
        line_number=   line_number,
        raw=           line,
        resource_path= resource_path,
        resource_type= resource_type,
        action=        classify_action(line),
    )


def iter_change_lines(plan_text: str) -> Iterator[Tuple[int, str]]:
    """
    Yield (line_number, line) for every change line of a rendered plan.

    Line numbers are 1-based positions in plan_text, so audit messages can
    point back at the rendered plan.
    """
    for number, line in enumerate(plan_text.splitlines(), start=1):
        if any(marker in line for marker in CHANGE_LINE_MARKERS):
            yield number, line


def is_zero_change_summary(summary: str) -> bool:
    """True when the plan summary reports nothing to add, change or destroy."""
    if not summary:
        return False
    return bool(_ZERO_CHANGE_RE.search(summary) or _NO_CHANGES_RE.search(summary))


def number_lines(lines: Iterable[str]) -> List[Tuple[int, str]]:
    return list(enumerate(lines, start=1))
