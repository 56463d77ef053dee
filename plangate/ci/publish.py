"""
Publishing the approval decision to the orchestrating pipeline.

Targets:
    azure   Azure Pipelines logging commands
                ##[section]<text>
                ##[error]<text>
                ##vso[task.setvariable variable=<name>;isOutput=true]<true|false>
    github  GitHub Actions: <name>=<true|false> appended to $GITHUB_OUTPUT,
            errors as ::error:: workflow commands
    none    plain text, no variable export

The value is always the lowercase string "true" or "false".
"""

import logging
import os
from pathlib import Path
from typing import Dict, Optional, Type

import click

logger = logging.getLogger(__name__)

DEFAULT_VARIABLE_NAME = "approvalRequired"

BANNER = "*" * 40


def _bool_str(value: bool) -> str:
    return "true" if value else "false"


class Publisher:
    """Plain publisher: human-readable lines, no variable export."""

    name = "none"

    def __init__(self, variable_name: str = DEFAULT_VARIABLE_NAME, quiet: bool = False):
        self.variable_name = variable_name
        self.quiet = quiet

    def section(self, text: str) -> None:
        if not self.quiet:
            click.echo(text)

    def error(self, text: str) -> None:
        click.echo(text, err=True)

    def set_output(self, value: bool) -> None:
        logger.debug("not exporting %s=%s (no CI target)", self.variable_name, _bool_str(value))

    def publish_decision(self, approval_required: bool) -> None:
        """Announce the decision and export the output variable."""
        headline = (
            "Approval will be required"
            if approval_required
            else "Approval will not be required"
        )
        if not self.quiet:
            click.echo(BANNER)
        self.section(headline)
        if not self.quiet:
            click.echo(BANNER)
        self.set_output(approval_required)

    def publish_failure(self, message: str) -> None:
        """Report an aborted run. The exported value is always true."""
        self.error(f"Something has gone wrong, can't determine: {message}")
        self.error("Exiting, approval will be required to apply")
        self.set_output(True)


class AzurePipelinesPublisher(Publisher):

    name = "azure"

    def section(self, text: str) -> None:
        if not self.quiet:
            click.echo(f"##[section]{text}")

    def error(self, text: str) -> None:
        click.echo(f"##[error]{text}")

    def set_output(self, value: bool) -> None:
        click.echo(
            f"##vso[task.setvariable variable={self.variable_name};isOutput=true]"
            f"{_bool_str(value)}"
        )


class GitHubActionsPublisher(Publisher):

    name = "github"

    def __init__(
        self,
        variable_name: str = DEFAULT_VARIABLE_NAME,
        quiet: bool = False,
        output_path: Optional[str] = None,
    ):
        super().__init__(variable_name, quiet)
        self.output_path = output_path or os.environ.get("GITHUB_OUTPUT")

    def error(self, text: str) -> None:
        click.echo(f"::error::{text}")

    def set_output(self, value: bool) -> None:
        if not self.output_path:
            logger.warning(
                "GITHUB_OUTPUT is not set, %s=%s was not exported",
                self.variable_name, _bool_str(value),
            )
            return
        with open(Path(self.output_path), "a", encoding="utf-8") as f:
            f.write(f"{self.variable_name}={_bool_str(value)}\n")


PUBLISHERS: Dict[str, Type[Publisher]] = {
    Publisher.name:               Publisher,
    AzurePipelinesPublisher.name: AzurePipelinesPublisher,
    GitHubActionsPublisher.name:  GitHubActionsPublisher,
}


def get_publisher(
    target: str,
    variable_name: str = DEFAULT_VARIABLE_NAME,
    quiet: bool = False,
) -> Publisher:
    try:
        cls = PUBLISHERS[target.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown CI target '{target}'. Expected one of: {', '.join(sorted(PUBLISHERS))}"
        ) from None
    return cls(variable_name=variable_name, quiet=quiet)
