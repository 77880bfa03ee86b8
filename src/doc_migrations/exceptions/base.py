"""
Base Exception Classes

Root of the migration engine's error hierarchy. Every error carries a
machine-readable code and a context dict, and is logged once when it is
constructed.
"""

import logging
from typing import Any

logger = logging.getLogger(__name__)


class MigrationEngineError(Exception):
    """
    Base exception class for all migration engine errors.

    The user-facing message is resolved on access, so subclasses may build it
    from attributes they set after calling this constructor.
    """

    default_user_message = "A schema migration error occurred."

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
        user_message: str | None = None,
        log_level: int = logging.ERROR,
    ):
        """
        Args:
            message: Technical description of the failure
            error_code: Code for programmatic handling (defaults to the class name)
            context: Debugging details, e.g. version, collection or document type
            user_message: Overrides the class's default user-facing message
            log_level: Level the error is logged at on construction
        """
        super().__init__(message)
        self.error_code = error_code or type(self).__name__
        self.context = dict(context) if context else {}
        self.log_level = log_level
        self._user_message = user_message

        details = f" | Context: {self.context}" if self.context else ""
        logger.log(log_level, f"[{self.error_code}] {message}{details}")

    @property
    def user_message(self) -> str:
        return self._user_message or self._get_default_user_message()

    def _get_default_user_message(self) -> str:
        return self.default_user_message

    def to_dict(self) -> dict[str, Any]:
        """Error report for hosts that surface migration failures."""
        return {
            "error": self.error_code,
            "message": str(self),
            "user_message": self.user_message,
            "context": self.context,
        }

    def with_context(self, **kwargs: Any) -> "MigrationEngineError":
        """Attach extra context; returns self for chaining."""
        self.context.update(kwargs)
        return self


class ValidationError(MigrationEngineError):
    """Raised when an argument or registration fails validation."""

    def __init__(self, message: str, field: str | None = None, value: Any = None, **kwargs: Any):
        context = kwargs.pop("context", {})
        if field:
            context["field"] = field
        if value is not None:
            context["value"] = str(value)

        super().__init__(message, context=context, **kwargs)
        self.field = field
        self.value = value

    def _get_default_user_message(self) -> str:
        if self.field:
            return f"Invalid value provided for field '{self.field}'"
        return "Invalid input provided"


class InvalidArgumentError(ValidationError):
    """Raised when a registration receives an unusable argument, such as an empty name or a version below 1."""


class ConfigurationError(MigrationEngineError):
    """Raised when settings or engine wiring are invalid."""

    default_user_message = "Migration engine configuration error."

    def __init__(self, message: str, config_key: str | None = None, **kwargs: Any):
        context = kwargs.pop("context", {})
        if config_key:
            context["config_key"] = config_key

        super().__init__(message, context=context, **kwargs)
        self.config_key = config_key
