"""Side-channel error detection from the agent CLI's log files."""

from agentwire.logwatch.models import LogError
from agentwire.logwatch.rules import ERROR_RULES, ErrorMatch, ErrorRule, classify_line
from agentwire.logwatch.watcher import LogWatcher

__all__ = [
    "ERROR_RULES",
    "ErrorMatch",
    "ErrorRule",
    "LogError",
    "LogWatcher",
    "classify_line",
]
