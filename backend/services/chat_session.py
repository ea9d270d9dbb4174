"""One interactive chat over an imported document."""
import logging
from typing import Dict, Optional

from models.answer import AskOutcome, ImportOutcome
from models.conversation import Role
from models.errors import MemoryServiceError
from services.conversation_manager import ConversationManager
from services.memory_service import MemoryService
from config import DOCUMENT_TAGS, INDEX_NAME, MAX_HISTORY_TURNS, MIN_RELEVANCE

logger = logging.getLogger(__name__)


class ChatSession:
    """Owns the conversation of one session and turns questions into memory queries."""

    def __init__(
        self,
        memory: MemoryService,
        index: str = INDEX_NAME,
        min_relevance: float = MIN_RELEVANCE,
        max_history_turns: int = MAX_HISTORY_TURNS,
        conversation: Optional[ConversationManager] = None
    ):
        """
        Initialize a chat session.

        Args:
            memory: Memory facade used for imports and questions
            index: Index the document lives in
            min_relevance: Relevance threshold passed to every question
            max_history_turns: Number of previous turns sent along with a question
            conversation: Conversation to continue (defaults to a new one)
        """
        self.memory = memory
        self.index = index
        self.min_relevance = min_relevance
        self.max_history_turns = max_history_turns
        self.conversation = conversation or ConversationManager()

    def import_pdf(self, file_path: Optional[str], tags: Optional[Dict[str, str]] = None) -> ImportOutcome:
        """
        Import a PDF into the session's index.

        Args:
            file_path: Path as typed by the user
            tags: Tags stored with the document (defaults to the upload tags)

        Returns:
            ImportOutcome with the document id, or the reason the import failed
        """
        try:
            document_id = self.memory.import_document(
                file_path or "",
                index=self.index,
                tags=tags if tags is not None else dict(DOCUMENT_TAGS)
            )
        except MemoryServiceError as e:
            logger.warning(
                f"Import failed: {e}",
                extra={"error_code": e.error.code, "error_details": e.error.details}
            )
            return ImportOutcome(ok=False, reason=str(e))

        return ImportOutcome(ok=True, document_id=document_id)

    def build_query(self, question: str) -> str:
        """Prefix a question with the rendered recent history."""
        context = self.conversation.render_context(self.max_history_turns)
        line = f"{Role.USER.value}: {question}"
        return f"{context}\n{line}" if context else line

    def ask(self, question: str) -> AskOutcome:
        """
        Run one question/answer round-trip.

        The user turn is recorded before the backend is called; the
        assistant turn only once an answer arrived.

        Args:
            question: The user's question

        Returns:
            AskOutcome carrying the answer, or the reason there is none
        """
        if not question or not question.strip():
            return AskOutcome.failure("Question cannot be empty")

        query = self.build_query(question)
        self.conversation.record_user_turn(question)

        try:
            answer = self.memory.ask(query, index=self.index, min_relevance=self.min_relevance)
        except MemoryServiceError as e:
            logger.warning(
                f"Question failed: {e}",
                extra={"error_code": e.error.code, "error_details": e.error.details}
            )
            return AskOutcome.failure(str(e))

        self.conversation.record_assistant_turn(answer.result)
        return AskOutcome.success(answer)
