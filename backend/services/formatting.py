"""Display helpers for answers and their sources."""
from typing import List, Optional

from models.answer import Citation
from config import MAX_SOURCES, SNIPPET_LENGTH


def truncate_snippet(text: Optional[str], limit: int = SNIPPET_LENGTH) -> str:
    """
    Shorten a snippet for the console.

    Args:
        text: Snippet text, may be missing
        limit: Maximum number of characters kept

    Returns:
        "N/A" for missing text, the text itself if it fits, otherwise the
        first ``limit`` characters followed by "..."
    """
    if limit <= 0:
        raise ValueError("limit must be positive")

    if not text or not text.strip():
        return "N/A"

    text = " ".join(text.split())
    if len(text) <= limit:
        return text

    return text[:limit] + "..."


def format_sources(
    citations: List[Citation],
    max_sources: int = MAX_SOURCES,
    snippet_length: int = SNIPPET_LENGTH
) -> List[str]:
    """
    Render the first sources of an answer as console lines.

    Args:
        citations: Relevant sources in answer order
        max_sources: Number of sources shown
        snippet_length: Maximum characters of each excerpt

    Returns:
        Two lines per source: its name and an excerpt of its best partition
    """
    lines = []
    for citation in citations[:max_sources]:
        first = citation.partitions[0].text if citation.partitions else None
        lines.append(f"  • Source: {citation.source_name}")
        lines.append(f"    Excerpt: {truncate_snippet(first, snippet_length)}")
    return lines
