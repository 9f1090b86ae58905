"""Upstream integration pipeline.

This package fetches pinned upstream releases, decides whether a
transformation is needed and records durable integration state.
"""
