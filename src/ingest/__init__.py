"""Account ingestion layer.

This module reads newly created accounts from export files or measures
tracking store growth, and keeps the dedup ledger and counter files.
"""
