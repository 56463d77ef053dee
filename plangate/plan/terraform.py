"""
Plan-to-text rendering.

plangate reads the human-readable plan, not the JSON plan format. A binary
plan written by `terraform plan -out plan.out` is rendered with

    terraform show -no-color plan.out

Already-rendered text can be read from a file or stdin instead.
"""

import logging
import subprocess
import sys
from pathlib import Path
from typing import Optional, Union

from plangate.core.exceptions import PlanRenderError

logger = logging.getLogger(__name__)

DEFAULT_TERRAFORM_BIN = "terraform"
DEFAULT_TIMEOUT_SECONDS = 300.0


def render_plan(
    plan_file: Union[str, Path],
    terraform_bin: str = DEFAULT_TERRAFORM_BIN,
    timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
    cwd: Optional[Union[str, Path]] = None,
) -> str:
    """
    Render a binary plan file to plain text with `terraform show -no-color`.

    Raises:
        PlanRenderError: binary missing, timeout, or non-zero exit.
    """
    command = [terraform_bin, "show", "-no-color", str(plan_file)]
    logger.info("rendering plan: %s", " ".join(command))

    try:
        completed = subprocess.run(
            command,
            check=False,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            timeout=timeout,
            cwd=str(cwd) if cwd else None,
        )
    except FileNotFoundError as e:
        raise PlanRenderError(
            "terraform binary not found", {"terraform_bin": terraform_bin},
        ) from e
    except subprocess.TimeoutExpired as e:
        raise PlanRenderError(
            "terraform show timed out", {"timeout_seconds": timeout},
        ) from e
    except OSError as e:
        raise PlanRenderError(
            "terraform binary could not be run",
            {"terraform_bin": terraform_bin, "error": e},
        ) from e

    stdout = (completed.stdout or b"").decode("utf-8", errors="replace")
    if completed.returncode != 0:
        stderr = (completed.stderr or b"").decode("utf-8", errors="replace").strip()
        raise PlanRenderError(
            "terraform show failed",
            {"exit_code": completed.returncode, "stderr": stderr[:500]},
        )
    return stdout


def read_plan_text(source: Union[str, Path]) -> str:
    """Read rendered plan text from a file path, or from stdin when source is '-'."""
    if str(source) == "-":
        try:
            return sys.stdin.buffer.read().decode("utf-8", errors="replace")
        except OSError as e:
            raise PlanRenderError("plan text unreadable", {"path": "<stdin>", "error": e}) from e

    path = Path(source)
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError as e:
        raise PlanRenderError("plan text not found", {"path": str(path)}) from e
    except OSError as e:
        raise PlanRenderError("plan text unreadable", {"path": str(path), "error": e}) from e
