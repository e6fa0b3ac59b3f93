"""Parameter validation for BookStack tool calls."""

from .schemas import SCHEMAS
from .validator import ValidationHandler

__all__ = ["SCHEMAS", "ValidationHandler"]
