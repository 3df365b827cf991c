"""Structured error types with recovery suggestions.

The analysis core raises only ``InvalidThresholds``; the remaining
types belong to the loading and CLI layers around it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(Enum):
    """Categories of errors for organization and handling."""

    CONFIGURATION = "configuration"  # Invalid thresholds, bad config file
    INPUT = "input"  # Unreadable or malformed component records
    CANCELLED = "cancelled"  # Cooperative cancellation
    RUNTIME = "runtime"  # Unexpected errors


@dataclass
class DedupError(Exception):
    """Base class for structured errors with recovery suggestions.

    Attributes:
        category: Error category for grouping.
        message: Human-readable error message.
        suggestion: Optional actionable recovery suggestion.
        details: Optional additional details dict.
        exit_code: Exit code to use when this error terminates the CLI.
    """

    category: ErrorCategory
    message: str
    suggestion: str | None = None
    details: dict[str, Any] | None = field(default_factory=dict)
    exit_code: int = 1

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def format(self, use_color: bool = True) -> str:
        """Format the error for display.

        Args:
            use_color: Whether to include ANSI color codes.

        Returns:
            Formatted error string with suggestion if available.
        """
        red = "\033[91m" if use_color else ""
        cyan = "\033[96m" if use_color else ""
        dim = "\033[2m" if use_color else ""
        reset = "\033[0m" if use_color else ""

        lines = [f"{red}Error:{reset} {self.message}"]

        if self.suggestion:
            lines.append(f"{cyan}Suggestion:{reset} {self.suggestion}")

        if self.details:
            for key, value in self.details.items():
                lines.append(f"{dim}  {key}: {value}{reset}")

        return "\n".join(lines)

    def __str__(self) -> str:
        return self.format(use_color=False)


class InvalidThresholds(DedupError):
    """A similarity threshold is outside its valid range."""

    def __init__(self, field_name: str, value: Any, expected: str):
        super().__init__(
            category=ErrorCategory.CONFIGURATION,
            message=f"Invalid threshold {field_name}={value!r}: expected {expected}",
            suggestion=f"Set {field_name} to a value {expected}",
            details={"field": field_name, "value": value},
            exit_code=2,
        )
        self.field_name = field_name
        self.value = value


class ConfigFileError(DedupError):
    """Error reading or parsing a configuration file."""

    def __init__(
        self,
        message: str,
        config_file: str | None = None,
        suggestion: str | None = None,
    ):
        super().__init__(
            category=ErrorCategory.CONFIGURATION,
            message=message,
            suggestion=suggestion
            or "Check your configuration file syntax and required fields",
            details={"config_file": config_file} if config_file else None,
            exit_code=2,
        )


class InputError(DedupError):
    """Error reading component records."""

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        suggestion: str | None = None,
    ):
        super().__init__(
            category=ErrorCategory.INPUT,
            message=message,
            suggestion=suggestion
            or "Provide a JSON array, a {\"components\": [...]} object, or JSON Lines",
            details={"file": file_path} if file_path else None,
            exit_code=1,
        )


class AnalysisCancelled(DedupError):
    """Raised when a caller cancels a running analysis."""

    def __init__(self, stage: str):
        super().__init__(
            category=ErrorCategory.CANCELLED,
            message=f"Analysis cancelled during {stage}",
            details={"stage": stage},
            exit_code=130,
        )
        self.stage = stage
