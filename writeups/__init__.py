"""
Two exploratory write-ups: captive cetacean mortality and word use in
Lincoln's letters.

Each analysis is a linear pipeline of plain functions over pandas frames.
The public entrypoint is ``writeups.run.main``.
"""

__all__ = [
    "config",
    "ingest",
    "cetaceans",
    "summaries",
    "survival",
    "letters",
    "sentiment",
    "trends",
    "plots",
    "report",
    "manifest",
]
