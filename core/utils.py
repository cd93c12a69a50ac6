import functools
import logging

from googleapiclient.errors import HttpError

from core.errors import ExternalServiceError, ToolError

logger = logging.getLogger(__name__)


def _http_error_message(error: HttpError) -> str:
    """Prefer Google's own error reason over the raw request dump."""
    reason = getattr(error, "reason", None)
    if reason:
        return reason
    return str(error)


def handle_http_errors(tool_name: str):
    """
    A decorator to translate failures inside a tool handler into ToolErrors.

    ToolErrors raised by the handler (validation, lookups) pass through untouched.
    Google API HttpErrors are logged and re-raised as ExternalServiceError carrying
    the upstream status code. Anything else is logged with its traceback and
    re-raised as a generic ExternalServiceError.

    Args:
        tool_name (str): The name of the tool being decorated (e.g., 'sheets.get_values').
    """

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except ToolError:
                raise
            except HttpError as error:
                status = error.resp.status if error.resp is not None else None
                message = _http_error_message(error)
                logger.error(f"API error in {tool_name} (status {status}): {error}")
                raise ExternalServiceError(
                    message, status_code=int(status) if status else None
                ) from error
            except Exception as e:
                logger.exception(f"An unexpected error occurred in {tool_name}: {e}")
                raise ExternalServiceError(str(e) or type(e).__name__) from e

        return wrapper

    return decorator
