"""MCP server for publishing articles and image messages to WeChat Official Accounts."""

__version__ = "0.1.0"
