"""Tool-level errors mapped to JSON-RPC error objects."""

# JSON-RPC 2.0 에러 코드
PARSE_ERROR = -32700
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class ToolError(Exception):
    """Base class for failures reported back to the MCP caller."""

    code = INTERNAL_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigError(ToolError):
    """Required environment configuration is missing."""


class ValidationError(ToolError):
    """Tool arguments are missing or malformed."""

    code = INVALID_PARAMS


class UnknownToolError(ToolError):
    """The requested tool is not registered."""

    code = INVALID_PARAMS


class ToolExecutionError(ToolError):
    """A collaborator failed while the tool was running."""
