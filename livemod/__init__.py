"""
livemod - Live-reloading module host

Keep reusable functions in plain source files on a search path, import them
into a long-lived interactive session, and pick up every edit before the next
statement runs without restarting the session.
"""

__version__ = "0.1.0"
