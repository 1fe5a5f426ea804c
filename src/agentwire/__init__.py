"""agentwire — stream coordination for long-running agent CLI subprocesses."""

__version__ = "0.1.0"
