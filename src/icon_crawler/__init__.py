"""
Institution website crawler.

Feeds resolved PDDikti profiles through a bounded producer/worker pipeline
that fetches each home page, extracts its favicon links and appends the
results to an NDJSON file.
"""

__version__ = "1.0.0"
