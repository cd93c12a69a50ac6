"""
Console and file log formatting for the tool server.

Console lines carry a short ASCII tag naming the subsystem that logged them
(e.g. `[SHEETS]`, `[DISPATCH]`) and are coloured by level when the stream is a
terminal. File logging is opt-in through SHEETS_TOOLS_LOG_FILE.
"""
import logging
import os
import re
import sys
from typing import Optional

# Most specific logger name wins: 'gsheets.a1_range' before 'gsheets'
SUBSYSTEM_TAGS = {
    'core.tool_registry': '[REGISTRY]',
    'core.dispatch': '[DISPATCH]',
    'core.server': '[HTTP]',
    'core.utils': '[TOOLS]',
    'auth.credentials': '[CREDS]',
    'auth.google_auth': '[OAUTH]',
    'auth': '[AUTH]',
    'gsheets.a1_range': '[A1]',
    'gsheets': '[SHEETS]',
    'gdrive': '[DRIVE]',
    'uvicorn': '[SERVER]',
}

LEVEL_COLORS = {
    logging.DEBUG: '\033[36m',
    logging.INFO: '\033[32m',
    logging.WARNING: '\033[33m',
    logging.ERROR: '\033[31m',
    logging.CRITICAL: '\033[35m',
}
RESET = '\033[0m'

FILE_LOG_FORMAT = (
    '%(asctime)s - %(name)s - %(levelname)s - %(process)d - %(threadName)s '
    '[%(module)s.%(funcName)s:%(lineno)d] - %(message)s'
)

_INVOKED_RE = re.compile(r"^\[([\w.]+)\] Invoked\. (.*)$")
_COMPLETED_RE = re.compile(r"^\[dispatch\] ([\w.]+) completed$")


def subsystem_tag(logger_name: str, level_name: str) -> str:
    """Tag for a logger, falling back to the level name for unknown loggers."""
    name = logger_name
    while name:
        if name in SUBSYSTEM_TAGS:
            return SUBSYSTEM_TAGS[name]
        name = name.rpartition('.')[0]
    return f'[{level_name}]'


class EnhancedLogFormatter(logging.Formatter):
    """Formats records as '<TAG> message', optionally coloured by level."""

    def __init__(self, use_colors: bool = True, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        tag = subsystem_tag(record.name, record.levelname)
        message = self._enhance_message(record.getMessage())

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            message = f"{message}\n{record.exc_text}"

        if not self.use_colors:
            return f"{tag} {message}"
        color = LEVEL_COLORS.get(record.levelno, '')
        return f"{tag} {color}{message}{RESET}"

    def _enhance_message(self, message: str) -> str:
        """Shorten the high-volume per-call messages."""
        match = _INVOKED_RE.match(message)
        if match:
            tool_name, details = match.groups()
            return f"{tool_name} <- {details}"

        match = _COMPLETED_RE.match(message)
        if match:
            return f"Tool {match.group(1)} finished"

        if message.startswith("Enabled services: "):
            return f"Tool filtering complete: serving {message.split(': ', 1)[1]}"

        return message


def _is_console_handler(handler: logging.Handler) -> bool:
    return (
        isinstance(handler, logging.StreamHandler)
        and not isinstance(handler, logging.FileHandler)
        and handler.stream in (sys.stderr, sys.stdout)
    )


def setup_enhanced_logging(log_level: int = logging.INFO, use_colors: Optional[bool] = None) -> None:
    """
    Install EnhancedLogFormatter on the root logger's console handlers.

    Args:
        log_level: Root logger level.
        use_colors: Force colours on or off. Defaults to on when stderr is a terminal.
    """
    if use_colors is None:
        use_colors = sys.stderr.isatty()
    formatter = EnhancedLogFormatter(use_colors=use_colors)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    console_handlers = [h for h in root_logger.handlers if _is_console_handler(h)]
    if not console_handlers:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        root_logger.addHandler(console_handler)
        console_handlers = [console_handler]

    for handler in console_handlers:
        handler.setFormatter(formatter)


def configure_file_logging(log_file_path: Optional[str] = None, logger_name: Optional[str] = None) -> bool:
    """
    Attach a DEBUG-level file handler with the detailed FILE_LOG_FORMAT.

    Args:
        log_file_path: Target file. Defaults to SHEETS_TOOLS_LOG_FILE.
        logger_name: Logger to attach to (defaults to root logger).

    Returns:
        bool: True if file logging was configured, False if skipped or failed.
    """
    target_logger = logging.getLogger(logger_name)
    log_file_path = log_file_path or os.getenv("SHEETS_TOOLS_LOG_FILE")
    if not log_file_path:
        target_logger.debug("File logging disabled (SHEETS_TOOLS_LOG_FILE not set)")
        return False

    try:
        file_handler = logging.FileHandler(log_file_path, mode='a')
    except OSError as e:
        sys.stderr.write(f"CRITICAL: Failed to set up file logging to '{log_file_path}': {e}\n")
        return False

    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
    target_logger.addHandler(file_handler)
    target_logger.debug(f"Detailed file logging configured to: {log_file_path}")
    return True
