"""Answer and outcome models returned by the memory services."""
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class Partition:
    """A matched piece of a source document."""
    text: str
    relevance: float
    partition_number: int
    page_number: int


@dataclass
class Citation:
    """A source document together with the partitions that matched."""
    document_id: str
    source_name: str
    partitions: List[Partition] = field(default_factory=list)


@dataclass
class MemoryAnswer:
    """Generated answer plus the sources it was grounded on."""
    question: str
    result: str
    relevant_sources: List[Citation] = field(default_factory=list)

    @property
    def no_result(self) -> bool:
        return not self.relevant_sources


@dataclass
class AskOutcome:
    """Result of one chat round-trip: an answer, or the reason there is none."""
    ok: bool
    answer: Optional[MemoryAnswer] = None
    reason: Optional[str] = None

    @classmethod
    def success(cls, answer: MemoryAnswer) -> "AskOutcome":
        return cls(ok=True, answer=answer)

    @classmethod
    def failure(cls, reason: str) -> "AskOutcome":
        return cls(ok=False, reason=reason)


@dataclass
class ImportOutcome:
    """Result of importing a document into the memory store."""
    ok: bool
    document_id: Optional[str] = None
    reason: Optional[str] = None
