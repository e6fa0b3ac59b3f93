"""Validation gate applied by tool handlers before calling BookStack.

Behaviour depends on two switches:

- disabled: parameters pass through untouched.
- enabled and strict: invalid parameters raise a ``validation_error``.
- enabled and non-strict: invalid parameters are reported as a structured
  warning and passed through untouched.

An unknown schema name is a programming error and always raises.
"""

from __future__ import annotations

from typing import Any

import pydantic

from ..errors import format_validation_errors
from ..errors import validation_error
from ..exceptions import SchemaNotFoundError
from ..logger_config import ErrorCategory
from ..logger_config import log_structured_error
from .schemas import SCHEMAS


class ValidationHandler:
    """Validate raw tool arguments against named schemas."""

    def __init__(self, enabled: bool = True, strict_mode: bool = False):
        self.enabled = enabled
        self.strict_mode = strict_mode

    def validate_params(self, params: dict[str, Any] | None, schema_name: str) -> dict[str, Any]:
        """Validate ``params`` against the schema registered as ``schema_name``.

        Args:
            params: Raw arguments from the client.
            schema_name: Key in ``SCHEMAS``.

        Returns:
            The coerced parameters with defaults applied, or the raw
            parameters when validation is disabled or soft-failed.

        Raises:
            SchemaNotFoundError: If no schema is registered under the name.
            BookStackError: In strict mode, when the parameters are invalid.
        """
        raw = params if params is not None else {}
        if not self.enabled:
            return raw

        schema = SCHEMAS.get(schema_name)
        if schema is None:
            raise SchemaNotFoundError(schema_name)

        try:
            model = schema.model_validate(raw)
        except pydantic.ValidationError as e:
            issues = format_validation_errors(e)
            if self.strict_mode:
                raise validation_error(issues) from e
            log_structured_error(
                category=ErrorCategory.WARNING,
                message=f"Validation warning for {schema_name}",
                operation="parameter_validation",
                context={"schema": schema_name, "validation": issues},
            )
            return raw

        return model.model_dump(mode="json", exclude_none=True)

    def validate_required(self, params: dict[str, Any], required_fields: list[str]) -> None:
        if not self.enabled:
            return

        missing = [field for field in required_fields if params.get(field) is None]
        if missing:
            raise validation_error(
                [{"field": field, "message": "Field required"} for field in missing],
                message=f"Missing required fields: {', '.join(missing)}",
            )

    def validate_id(self, value: Any, field: str = "id") -> int:
        """Coerce an entity ID to a positive integer.

        With validation disabled the value is converted without checks.
        """
        if not self.enabled:
            return int(value)

        try:
            return SCHEMAS["id"].model_validate({"id": value}).id
        except pydantic.ValidationError as e:
            issues = [{**issue, "field": field} for issue in format_validation_errors(e)]
            raise validation_error(issues) from e

    def available_schemas(self) -> list[str]:
        return list(SCHEMAS)
