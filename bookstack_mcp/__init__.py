"""BookStack MCP server.

Exposes a BookStack wiki's REST API to MCP clients as tools and resources.
"""

__version__ = "1.0.0"
