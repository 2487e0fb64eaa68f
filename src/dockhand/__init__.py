"""
dockhand

Drive a container engine through its command line: create containers, copy
files in and out of them idempotently, run commands, and clean up.
"""

__version__ = "0.1.0"
