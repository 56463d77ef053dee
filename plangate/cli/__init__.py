"""
plangate/cli/__init__.py

plangate CLI — root Click command group.

This file is the sole entry point for the `plangate` terminal command.
It is registered in pyproject.toml as:

    [project.scripts]
    plangate = "plangate.cli:cli"

Each subcommand lives in its own module and is added below.
"""

import click

from plangate.cli.check_policy import check_policy_command
from plangate.cli.evaluate import evaluate_command


@click.group()
@click.version_option(package_name="plangate")
def cli() -> None:
    """
    plangate — approval gate for infrastructure plans.

    \b
    Commands:
      evaluate      Decide whether a plan needs approval before apply.
      check-policy  Validate a policy file.

    \b
    Quick start:
      terraform show -no-color plan.out > plan.txt
      plangate evaluate plan.txt --policy policy.yaml --ci azure
      plangate check-policy policy.yaml
    """
    pass


cli.add_command(evaluate_command)
cli.add_command(check_policy_command)
