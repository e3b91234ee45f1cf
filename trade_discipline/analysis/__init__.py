"""
Journal performance analysis.
"""

from .performance_summary import (
    JournalSummary,
    journal_to_frame,
    load_journal_csv,
    summarize_frame,
    summarize_journal,
)

__all__ = [
    "JournalSummary",
    "journal_to_frame",
    "load_journal_csv",
    "summarize_frame",
    "summarize_journal",
]
