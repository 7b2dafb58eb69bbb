"""Data-acquisition and enrichment pipeline: normalize, fetch, merge."""
