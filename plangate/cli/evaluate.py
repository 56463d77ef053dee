"""
plangate/cli/evaluate.py

plangate evaluate — plan approval gate
======================================

Decides whether a Terraform plan needs human approval before apply, and
publishes the answer as the pipeline output variable `approvalRequired`.

Usage:
    plangate evaluate plan.txt --policy policy.yaml              Rendered plan text
    terraform show -no-color plan.out | plangate evaluate -      Plan text on stdin
    plangate evaluate --plan-file plan.out --policy policy.yaml  Render via terraform
    plangate evaluate plan.txt --ci azure                        Azure Pipelines output
    plangate evaluate plan.txt --ci github                       GitHub Actions output
    plangate evaluate plan.txt --format json                     Machine-readable JSON
    plangate evaluate plan.txt --unsafe aws_db_instance          Extend the policy

With --ci azure or --ci github, CI log commands (##[section], ##vso[...])
are written to stdout after the report. Use --ci none when stdout must hold
only the JSON document.

Exit codes:
    0  Decision made (approval required or not), or the plan has no changes
    1  Evaluation aborted (malformed or unclassifiable change line, bad policy,
       plan could not be read). approvalRequired is published as true.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click

from plangate.ci.publish import DEFAULT_VARIABLE_NAME, PUBLISHERS, get_publisher
from plangate.core.exceptions import PlanGateError, PlanLineError
from plangate.core.log import setup_logging
from plangate.core.models import EvaluationResult
from plangate.plan.terraform import DEFAULT_TERRAFORM_BIN, read_plan_text, render_plan
from plangate.policy.evaluator import PolicyEvaluator
from plangate.policy.policy import PolicySet, load_policy

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@click.command(name="evaluate")
@click.argument("plan_text", type=click.Path(allow_dash=True), required=False)
@click.option(
    "--plan-file",
    type=click.Path(dir_okay=False),
    default=None,
    metavar="PATH",
    help="Binary plan (terraform plan -out) to render with `terraform show -no-color`.",
)
@click.option(
    "--terraform-bin",
    envvar="PLANGATE_TERRAFORM_BIN",
    default=DEFAULT_TERRAFORM_BIN,
    show_default=True,
    help="Terraform executable used with --plan-file.",
)
@click.option(
    "--policy", "policy_file",
    envvar="PLANGATE_POLICY",
    type=click.Path(dir_okay=False),
    default=None,
    metavar="PATH",
    help="YAML policy with always_unsafe / always_safe resource types.",
)
@click.option(
    "--unsafe", "extra_unsafe",
    multiple=True,
    metavar="TYPE",
    help="Add a resource type to the always-unsafe list. Repeatable.",
)
@click.option(
    "--safe", "extra_safe",
    multiple=True,
    metavar="TYPE",
    help="Add a resource type to the always-safe list. Repeatable.",
)
@click.option(
    "--ci",
    envvar="PLANGATE_CI",
    type=click.Choice(sorted(PUBLISHERS), case_sensitive=False),
    default="none",
    show_default=True,
    help="Where to publish the output variable.",
)
@click.option(
    "--variable-name",
    default=DEFAULT_VARIABLE_NAME,
    show_default=True,
    help="Name of the published output variable.",
)
@click.option(
    "--format", "fmt",
    type=click.Choice(["human", "json", "compact"], case_sensitive=False),
    default="human",
    show_default=True,
    help=(
        "Report format: human (default), json (automation), compact (one line). "
        "With --ci azure the ##vso command line follows the report on stdout."
    ),
)
@click.option(
    "--quiet",
    is_flag=True,
    default=False,
    help="No report. Only the output variable and errors are written.",
)
@click.option(
    "--log-level",
    envvar="PLANGATE_LOG_LEVEL",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="INFO",
    show_default=True,
    help="Audit log verbosity (written to stderr).",
)
def evaluate_command(
    plan_text:     Optional[str],
    plan_file:     Optional[str],
    terraform_bin: str,
    policy_file:   Optional[str],
    extra_unsafe:  Tuple[str, ...],
    extra_safe:    Tuple[str, ...],
    ci:            str,
    variable_name: str,
    fmt:           str,
    quiet:         bool,
    log_level:     str,
) -> None:
    """
    Decide whether a plan needs approval before apply.

    PLAN_TEXT is rendered plan text (`terraform show -no-color`), or '-' for
    stdin. Use --plan-file instead to render a binary plan.

    \b
    Examples:
      plangate evaluate plan.txt --policy policy.yaml --ci azure
      plangate evaluate --plan-file plan.out --policy policy.yaml
      plangate evaluate plan.txt --format json --ci none
    """
    if (plan_text is None) == (plan_file is None):
        raise click.UsageError("Give exactly one of PLAN_TEXT or --plan-file.")

    setup_logging(log_level)
    fmt = fmt.lower()

    # json and compact reports suppress ##[section] lines; the ##vso export
    # still follows the report on stdout
    publisher = get_publisher(
        ci, variable_name=variable_name, quiet=quiet or fmt in ("json", "compact"),
    )

    try:
        policy = load_policy(
            Path(policy_file) if policy_file else None,
            unsafe=extra_unsafe,
            safe=extra_safe,
        )
        if plan_file is not None:
            text = render_plan(plan_file, terraform_bin=terraform_bin)
        else:
            text = read_plan_text(plan_text)
        result = PolicyEvaluator(policy).evaluate_plan(text)
    except PlanGateError as e:
        _abort(e, publisher, fmt, quiet)
    except Exception as e:
        logger.exception("Unexpected error during evaluation")
        _abort(
            PlanGateError(f"Unexpected error: {e}", {"error_type": type(e).__name__}),
            publisher, fmt, quiet,
        )

    if not quiet:
        if fmt == "json":
            _output_json(result, policy)
        elif fmt == "compact":
            _output_compact(result)
        else:
            _output_human(result, policy)

    if result.zero_change:
        publisher.section("No changes detected, terraform apply will not run")
        publisher.set_output(False)
    else:
        publisher.publish_decision(result.approval_required)

    sys.exit(0)


# ── Human output ──────────────────────────────────────────────────────────────

def _output_human(result: EvaluationResult, policy: PolicySet) -> None:
    click.echo()
    click.echo(click.style("  plangate  ·  plan approval check", bold=True))
    click.echo(f"  {'Policy':<12} {policy.source}  [{result.policy_hash[:12]}]")
    click.echo(
        f"  {'Lists':<12} {len(policy.always_unsafe)} always-unsafe, "
        f"{len(policy.always_safe)} always-safe"
    )

    if result.zero_change:
        click.echo(f"  {'Changes':<12} none")
    else:
        click.echo(f"  {'Evaluated':<12} {len(result.decisions)} change line(s)")

    if result.triggered_by is not None:
        click.echo(f"  {'Triggered by':<12} {result.triggered_by.change.resource_path}")

    verdict = (
        click.style("APPROVAL REQUIRED", fg="red", bold=True)
        if result.approval_required
        else click.style("NO APPROVAL REQUIRED", fg="green", bold=True)
    )
    click.echo(f"  {'Verdict':<12} {verdict}")
    click.echo(f"  {'Reason':<12} {result.reason}")
    click.echo()


# ── JSON output ───────────────────────────────────────────────────────────────

def _output_json(result: EvaluationResult, policy: PolicySet) -> None:
    out = {
        "plangate_evaluate": {
            "policy": {
                "source": policy.source,
                **policy.to_dict(),
            },
            **result.to_dict(),
        }
    }
    click.echo(json.dumps(out, indent=2))


# ── Compact output ────────────────────────────────────────────────────────────

def _output_compact(result: EvaluationResult) -> None:
    """
    Single-line output for shell pipelines and audit logs.

    Format:
        NOCHANGE  0 line(s)
        CLEAR     4 line(s)
        REQUIRED  2 line(s)  module.app.aws_instance.web
    """
    if result.zero_change:
        status = "NOCHANGE"
    elif result.approval_required:
        status = "REQUIRED"
    else:
        status = "CLEAR"

    line = f"{status:<8}  {len(result.decisions)} line(s)"
    if result.triggered_by is not None:
        line += f"  {result.triggered_by.change.resource_path}"
    click.echo(line)


# ── Error output ──────────────────────────────────────────────────────────────

def _abort(error: PlanGateError, publisher, fmt: str, quiet: bool) -> None:
    """Report the error, publish approvalRequired=true and exit 1."""
    logger.error("%s: %s", type(error).__name__, error)
    _emit_error(error, fmt, quiet)
    publisher.publish_failure(str(error))
    sys.exit(1)


def _emit_error(error: PlanGateError, fmt: str, quiet: bool) -> None:
    """Emit error in the report format. Never raises."""
    if quiet:
        return
    if fmt == "json":
        payload = {
            "error":             str(error),
            "error_type":        type(error).__name__,
            "approval_required": True,
        }
        if isinstance(error, PlanLineError):
            payload["line_number"] = error.line_number
        click.echo(json.dumps({"plangate_evaluate": payload}))
    else:
        click.echo(
            click.style(f"\n  ERROR: {error}\n", fg="red"),
            err=True,
        )
