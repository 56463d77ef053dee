"""
plangate Exception Hierarchy

All exceptions inherit from PlanGateError for easy catching.
Every error is fail-safe: the CLI treats it as "approval required".
"""

from typing import Optional


class PlanGateError(Exception):
    """Base exception for all plangate errors"""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class PlanLineError(PlanGateError):
    """Raised when a single change line cannot be evaluated"""

    def __init__(self, message: str, line_number: int, line: str):
        super().__init__(message, {"line": line_number, "text": repr(line.strip())})
        self.line_number = line_number
        self.line = line


class MalformedLineError(PlanLineError):
    """Raised when a change line lacks the expected token/segment structure"""
    pass


class UnclassifiableLineError(PlanLineError):
    """Raised when a change line matches none of the action keywords"""
    pass


class PolicyConfigError(PlanGateError):
    """Raised when the policy configuration is unreadable or inconsistent"""
    pass


class PlanRenderError(PlanGateError):
    """Raised when the plan cannot be read or rendered to text"""
    pass
