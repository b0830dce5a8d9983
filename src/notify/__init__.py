"""Run notification layer.

This module sends the run summary webhook and the daily reload triggers.
Every call is best-effort and reports an outcome instead of raising.
"""
