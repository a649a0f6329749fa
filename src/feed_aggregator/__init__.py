"""
Feed Aggregator - grouped RSS/Atom aggregation service.

Fetches the feeds of a named group with bounded concurrency, normalizes
Atom, RSS 2.0 and RSS 1.0 entries, merges them newest-first and serves the
result with weak ETags from a key-value cache.
"""

__version__ = "0.1.0"
