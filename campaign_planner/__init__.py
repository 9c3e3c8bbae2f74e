"""
Package marker for the campaign planner client.
It groups the acquisition pipeline, the selection store, and the session glue under one import path.
Most functionality lives in the subpackages; this file intentionally stays lightweight.
"""

__version__ = "0.1.0"
