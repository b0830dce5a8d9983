"""Promotion run orchestration.

This module wires ingestion, tracking, distribution, statistics, and
notifications into one scheduled run.
"""
