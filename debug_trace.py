"""
debug_trace.py

Trace output for the Qt layer and start-up wiring of the logging tree.
Enabled from the ``[debug]`` settings section (or ``configure(True)``).
"""

import logging
import sys
import traceback
from datetime import datetime
from functools import wraps

# Set by configure(); off until settings are loaded
DEBUG_TRACE = False

# Set to True to trace pointer-move events (very verbose)
TRACE_POINTER = False

# Log file (None for stderr only)
LOG_FILE = None

_log_file = None


def configure(enabled: bool, log_file: str = ""):
    """Turn tracing on or off and choose the trace file."""
    global DEBUG_TRACE, LOG_FILE
    close_log()
    DEBUG_TRACE = bool(enabled)
    LOG_FILE = log_file or None


def _get_log_file():
    global _log_file
    if LOG_FILE and _log_file is None:
        try:
            _log_file = open(LOG_FILE, "w", encoding="utf-8")
        except OSError as e:
            print(f"[debug_trace] cannot open {LOG_FILE}: {e}", file=sys.stderr)
    return _log_file


def trace(msg: str, category: str = "INFO"):
    """Print a trace message with timestamp."""
    if not DEBUG_TRACE:
        return
    if category == "POINTER" and not TRACE_POINTER:
        return

    timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
    line = f"[{timestamp}] [{category}] {msg}"

    print(line, file=sys.stderr, flush=True)

    log_file = _get_log_file()
    if log_file:
        try:
            log_file.write(line + "\n")
            log_file.flush()
        except OSError:
            pass


def trace_exception(msg: str = "Exception"):
    """Print exception info."""
    if not DEBUG_TRACE:
        return
    trace(f"{msg}: {traceback.format_exc()}", "ERROR")


def trace_call(category: str = "CALL"):
    """Decorator to trace function calls."""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if not DEBUG_TRACE:
                return func(*args, **kwargs)
            func_name = func.__qualname__
            trace(f">>> {func_name}", category)
            try:
                result = func(*args, **kwargs)
                trace(f"<<< {func_name}", category)
                return result
            except Exception as e:
                trace(f"!!! {func_name} raised {type(e).__name__}: {e}", "ERROR")
                raise
        return wrapper
    return decorator


class TraceHandler(logging.Handler):
    """Forwards standard ``logging`` records to :func:`trace`."""

    def emit(self, record):
        try:
            trace(f"{record.name}: {record.getMessage()}", record.levelname)
        except Exception:
            self.handleError(record)


def configure_logging(enabled: bool = None):
    """Route the ``logging`` tree through the trace sinks.

    With tracing on, everything from DEBUG up is traced; otherwise only
    warnings reach stderr through the default last-resort handler.
    """
    if enabled is None:
        enabled = DEBUG_TRACE
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, TraceHandler):
            root.removeHandler(handler)
    if enabled:
        root.addHandler(TraceHandler())
        root.setLevel(logging.DEBUG)
    else:
        root.setLevel(logging.WARNING)


def close_log():
    """Close log file."""
    global _log_file
    if _log_file:
        try:
            _log_file.close()
        except OSError:
            pass
        _log_file = None
