"""Data models for the PDF RAG chat."""
from .document import Document, Page
from .chunk import Chunk, ScoredChunk
from .conversation import ConversationLog, Role, Turn
from .answer import AskOutcome, Citation, ImportOutcome, MemoryAnswer, Partition
from .errors import BackendUnavailable, ErrorDetail, InvalidArgument, InvalidInput, MemoryServiceError

__all__ = [
    "Document",
    "Page",
    "Chunk",
    "ScoredChunk",
    "ConversationLog",
    "Role",
    "Turn",
    "AskOutcome",
    "Citation",
    "ImportOutcome",
    "MemoryAnswer",
    "Partition",
    "BackendUnavailable",
    "ErrorDetail",
    "InvalidArgument",
    "InvalidInput",
    "MemoryServiceError",
]
