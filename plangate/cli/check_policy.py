"""
plangate check-policy — validate a policy file before a pipeline relies on it.

Exit codes:
    0  Policy loads and the two lists are disjoint
    1  Policy is missing, malformed, or lists a type as both safe and unsafe
"""

import json
import sys
from typing import Optional, Tuple

import click

from plangate.cli.evaluate import LOG_LEVELS
from plangate.core.exceptions import PolicyConfigError
from plangate.core.log import setup_logging
from plangate.policy.policy import PolicySet


@click.command(name="check-policy")
@click.argument("policy_file", envvar="PLANGATE_POLICY", type=click.Path(dir_okay=False))
@click.option("--unsafe", "extra_unsafe", multiple=True, metavar="TYPE",
              help="Add a resource type to the always-unsafe list. Repeatable.")
@click.option("--safe", "extra_safe", multiple=True, metavar="TYPE",
              help="Add a resource type to the always-safe list. Repeatable.")
@click.option("--json", "as_json", is_flag=True, default=False,
              help="Print the effective policy as JSON.")
@click.option("--log-level", envvar="PLANGATE_LOG_LEVEL",
              type=click.Choice(LOG_LEVELS, case_sensitive=False),
              default="WARNING", show_default=True,
              help="Log verbosity (written to stderr).")
def check_policy_command(
    policy_file:  str,
    extra_unsafe: Tuple[str, ...],
    extra_safe:   Tuple[str, ...],
    as_json:      bool,
    log_level:    str,
) -> None:
    """
    Validate POLICY_FILE and print the effective resource type lists.
    """
    setup_logging(log_level)

    policy: Optional[PolicySet] = None
    try:
        policy = PolicySet.from_yaml(policy_file).extend(unsafe=extra_unsafe, safe=extra_safe)
    except PolicyConfigError as e:
        if as_json:
            click.echo(json.dumps({"valid": False, "error": str(e)}))
        else:
            click.echo(click.style(f"INVALID  {e}", fg="red"), err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps({
            "valid":       True,
            "source":      policy.source,
            "policy_hash": policy.policy_hash,
            **policy.to_dict(),
        }, indent=2))
        return

    click.echo(click.style("VALID", fg="green") + f"  {policy.source}")
    click.echo(f"  policy hash    {policy.policy_hash}")
    click.echo(f"  always unsafe  {', '.join(sorted(policy.always_unsafe)) or '-'}")
    click.echo(f"  always safe    {', '.join(sorted(policy.always_safe)) or '-'}")
