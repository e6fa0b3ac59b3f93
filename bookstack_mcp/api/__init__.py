"""BookStack REST API access."""

from .client import BookStackClient
from .client import EndpointDescriptor
from .retry import RetryPolicy

__all__ = ["BookStackClient", "EndpointDescriptor", "RetryPolicy"]
