"""Conversation manager for multi-turn conversation support."""
import logging
from typing import Optional

from models.conversation import ConversationLog, Role, Turn
from models.errors import InvalidArgument
from config import MAX_HISTORY_TURNS

logger = logging.getLogger(__name__)


class ConversationManager:
    """Keeps the turns of one chat session and renders the recent ones as context."""

    def __init__(self, log: Optional[ConversationLog] = None):
        """
        Initialize the conversation manager.

        Args:
            log: Existing conversation log to continue (defaults to a new, empty one)
        """
        self.log = log if log is not None else ConversationLog()

    def record_user_turn(self, text: str) -> None:
        """
        Append a user utterance to the log.

        Args:
            text: Raw user text, accepted as is
        """
        self.log.append(Turn(role=Role.USER, text=text))
        logger.debug(f"Recorded user turn ({len(self.log)} turns in log)")

    def record_assistant_turn(self, text: str) -> None:
        """
        Append an assistant answer to the log.

        Only call this once the backend actually answered; a failed request
        leaves the preceding user turn unpaired.

        Args:
            text: Generated answer text
        """
        self.log.append(Turn(role=Role.ASSISTANT, text=text))
        logger.debug(f"Recorded assistant turn ({len(self.log)} turns in log)")

    def render_context(self, max_turns: int = MAX_HISTORY_TURNS) -> str:
        """
        Get formatted conversation history for the next query.

        The window counts turns, not tokens, so long turns are passed
        through untouched.

        Args:
            max_turns: Maximum number of recent turns to include

        Returns:
            "<Role>: <text>" lines joined by newlines, oldest first, or an
            empty string when the log is empty

        Raises:
            InvalidArgument: If max_turns is not a positive integer
        """
        if isinstance(max_turns, bool) or not isinstance(max_turns, int):
            raise InvalidArgument(f"max_turns must be an integer, got {max_turns!r}")

        if max_turns < 0 or (max_turns == 0 and len(self.log) > 0):
            raise InvalidArgument(f"max_turns must be positive, got {max_turns}")

        turns = self.log.recent(max_turns)
        if not turns:
            return ""

        return "\n".join(f"{turn.role.value}: {turn.text}" for turn in turns)
