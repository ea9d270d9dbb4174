"""Conversation data models."""
from dataclasses import dataclass, field
from enum import Enum
from typing import List


class Role(str, Enum):
    """Who produced a turn."""
    USER = "User"
    ASSISTANT = "Assistant"


@dataclass(frozen=True)
class Turn:
    """Represents a single attributed utterance in a conversation."""
    role: Role
    text: str


@dataclass
class ConversationLog:
    """Append-only, chronologically ordered history of a chat session."""
    turns: List[Turn] = field(default_factory=list)

    def append(self, turn: Turn) -> None:
        self.turns.append(turn)

    def recent(self, count: int) -> List[Turn]:
        """Return the last ``count`` turns, oldest first."""
        if count <= 0:
            return []
        return list(self.turns[-count:])

    def __len__(self) -> int:
        return len(self.turns)
