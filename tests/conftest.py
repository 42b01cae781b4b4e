"""
Shared test configuration.
"""

import os

# Keep test runs from writing log files
os.environ.setdefault("LOG_TO_FILE", "false")
