"""
Shared fixtures: a small policy and a builder for rendered plan text.
"""

import logging
from pathlib import Path
from typing import List, Optional

import pytest

from plangate.policy.policy import PolicySet

EXAMPLES_DIR = Path(__file__).resolve().parent.parent / "examples"


PLAN_HEADER = """\
Terraform used the selected providers to generate the following execution
plan. Resource actions are indicated with the following symbols:
  + create
  ~ update in-place
  - destroy
-/+ destroy and then create replacement

Terraform will perform the following actions:
"""


def build_plan(change_lines: List[str], summary: Optional[str] = None) -> str:
    """
    Render plan text the way `terraform show -no-color` lays it out.

    Each change line gets a short resource body underneath, so the parser has
    to skip non-change lines.
    """
    body = [PLAN_HEADER]
    for line in change_lines:
        body.append(f"  {line}")
        body.append('  ~ resource "x" "y" {')
        body.append('        id = "abc-123"')
        body.append("    }")
        body.append("")
    if summary is None:
        summary = f"Plan: 0 to add, {len(change_lines)} to change, 0 to destroy."
    body.append(summary)
    return "\n".join(body) + "\n"


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """CLI runs call setup_logging(); undo its root level and handler."""
    root = logging.getLogger()
    level = root.level
    handlers = list(root.handlers)
    yield
    root.setLevel(level)
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)


@pytest.fixture
def policy() -> PolicySet:
    """aws_instance is always unsafe, aws_security_group_rule is always safe."""
    return PolicySet(
        always_unsafe={"aws_instance"},
        always_safe={"aws_security_group_rule"},
    )


@pytest.fixture
def policy_file(tmp_path) -> Path:
    path = tmp_path / "policy.yaml"
    path.write_text(
        "always_unsafe:\n"
        "  - aws_instance\n"
        "always_safe:\n"
        "  - aws_security_group_rule\n",
        encoding="utf-8",
    )
    return path
