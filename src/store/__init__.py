"""Storage layer.

This module talks to the tracking and destination account stores and
persists the run statistics history.
"""
