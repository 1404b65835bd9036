"""Domain exceptions for the rules engine.

Defines domain-level exceptions for rule evaluation failures. They are
independent of infrastructure concerns; an API layer maps error_code to
HTTP status (validation -> 4xx, automation failures -> 5xx).
"""

from typing import Any


class ScrumflowException(Exception):
    """Base exception for all scrumflow errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, rule_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for an error response body."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(ScrumflowException):
    """Raised when input validation fails (e.g. a malformed state change event)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class ResourceNotFoundException(ScrumflowException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class RuleConfigurationException(ScrumflowException):
    """Raised when a rule's configuration cannot be executed.

    Examples: an attached template was deleted, or belongs to another
    project. Reported for the affected rule only.
    """

    def __init__(self, rule_id: str, reason: str, **details_extra: Any) -> None:
        """Initialize with the rule and a human-readable reason.

        Args:
            rule_id: Rule whose configuration is inconsistent.
            reason: What is wrong with it.
            **details_extra: Optional keys merged into details (e.g. template_id).
        """
        super().__init__(
            f"Rule {rule_id} is misconfigured: {reason}",
            "RULE_CONFIGURATION_ERROR",
            {"rule_id": rule_id, "reason": reason, **details_extra},
        )


class AutomationException(ScrumflowException):
    """Raised when one or more rules failed to persist during an evaluation.

    The triggering state change is already committed; this is an automation
    failure, not a transition failure. Rules that succeeded stay committed.

    Attributes:
        results: Ordered rule results for the whole evaluation call.
        failures: (rule_id, error message) for each persistence failure;
            rule_id is None when configuration could not be loaded at all.
    """

    def __init__(
        self,
        origin_type: str,
        origin_id: str,
        results: list[Any],
        failures: list[tuple[str | None, str]],
    ) -> None:
        self.results = results
        self.failures = failures
        super().__init__(
            f"Automation failed for {origin_type} {origin_id}: "
            f"{len(failures)} rule(s) could not be applied",
            "AUTOMATION_FAILED",
            {
                "origin_type": origin_type,
                "origin_id": origin_id,
                "failed_rule_ids": [rule_id for rule_id, _ in failures if rule_id],
            },
        )


class SqlNotConfiguredException(ScrumflowException):
    """Raised when an operation requires the database but none is configured."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a SQL database that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )


class UnsupportedDatabaseException(ScrumflowException):
    """Raised when the configured database cannot provide the ledger's atomic insert."""

    def __init__(self, dialect: str) -> None:
        super().__init__(
            f"Database dialect {dialect!r} is not supported; "
            "use PostgreSQL (or SQLite for tests).",
            "SERVICE_UNAVAILABLE",
            {"dialect": dialect},
        )
