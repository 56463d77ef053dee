import logging
import sys

_ALLOWED_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}

_FORMAT = "%(asctime)sZ %(levelname)s %(name)s %(message)s"
_DATEFMT = "%Y-%m-%dT%H:%M:%S"


def setup_logging(level: str = "INFO", name: str = "plangate") -> logging.Logger:
    """
    Configure process-wide logging for the CLI.

    Log records go to stderr. stdout is reserved for CI log commands and
    report output.
    """
    normalized_level = level.upper()
    if normalized_level not in _ALLOWED_LEVELS:
        allowed = ", ".join(sorted(_ALLOWED_LEVELS))
        raise ValueError(f"Invalid log level '{level}'. Expected one of: {allowed}")

    root = logging.getLogger()
    root.setLevel(getattr(logging, normalized_level))

    # Re-running inside one process (tests, CliRunner) must not stack handlers
    for handler in list(root.handlers):
        if getattr(handler, "_plangate", False):
            root.removeHandler(handler)

    sh = logging.StreamHandler(sys.stderr)
    sh.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT))
    sh._plangate = True
    root.addHandler(sh)

    return logging.getLogger(name)
