from plangate.ci.publish import (
    DEFAULT_VARIABLE_NAME,
    AzurePipelinesPublisher,
    GitHubActionsPublisher,
    Publisher,
    get_publisher,
)

__all__ = [
    "DEFAULT_VARIABLE_NAME",
    "AzurePipelinesPublisher",
    "GitHubActionsPublisher",
    "Publisher",
    "get_publisher",
]
