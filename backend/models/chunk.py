"""Chunk data models."""
from dataclasses import dataclass, field
from typing import Dict

@dataclass
class Chunk:
    """Represents one indexed partition of a document."""
    chunk_id: str  # UUID, Qdrant only accepts UUIDs or integers as point ids
    text: str
    document_id: str
    document_name: str
    page_number: int
    partition_number: int
    token_count: int = 0
    tags: Dict[str, str] = field(default_factory=dict)

@dataclass
class ScoredChunk:
    """Chunk with relevance score from retrieval."""
    chunk: Chunk
    relevance_score: float  # 0.0 to 1.0
