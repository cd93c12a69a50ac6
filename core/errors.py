"""
Tool Error Taxonomy

Every failure that can surface from a tool invocation is one of the error
kinds below. The HTTP layer turns them into a JSON error response carrying the
message, the kind and the matching status code.
"""

from typing import Any, Dict, Optional


class ToolError(Exception):
    """Base exception for all tool invocation errors."""

    kind = "tool_error"
    status_code = 400

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "kind": self.kind}


class MissingCredentialError(ToolError):
    """No Authorization header was sent with the request."""

    kind = "missing_credential"
    status_code = 401


class MalformedCredentialError(ToolError):
    """The Authorization header is not of the form 'Bearer <token>'."""

    kind = "malformed_credential"
    status_code = 401


class MalformedRangeError(ToolError):
    """An A1 range reference could not be parsed."""

    kind = "malformed_range"
    status_code = 400


class SheetNotFoundError(ToolError):
    """No sheet with the requested title exists in the spreadsheet."""

    kind = "sheet_not_found"
    status_code = 404


class UnknownToolError(ToolError):
    kind = "unknown_tool"
    status_code = 404


class MissingToolNameError(ToolError):
    kind = "missing_tool_name"
    status_code = 400


class InvalidArgumentsError(ToolError):
    """Tool arguments do not satisfy the tool's input schema."""

    kind = "invalid_arguments"
    status_code = 400


class PayloadTooLargeError(ToolError):
    kind = "payload_too_large"
    status_code = 413


class ExternalServiceError(ToolError):
    """
    Pass-through failure from Google or the network.

    Permission, quota and transport failures are not told apart; the message
    of the underlying error is kept as-is.
    """

    kind = "external_service_error"
    status_code = 502
