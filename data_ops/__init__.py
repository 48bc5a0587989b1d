"""
Data operations package for uploaded tabular files.

Provides delimited-text parsing, column-to-series extraction, LTTB
downsampling, the in-memory file registry, and concurrent batch loading.
"""
