"""Command line interface.

Run directly with:
    python -m perf_monitor.ui.cli snapshot

The CLI is not exported here so importing perf_monitor.ui stays cheap.
"""

__all__: list[str] = []
