"""Console entry point: import a PDF and chat about its content."""
import logging
import sys
from typing import Optional

from config import (
    CHAT_MODEL,
    EMBEDDING_MODEL,
    LOG_FILE,
    LOG_LEVEL,
    MAX_SOURCES,
    OLLAMA_URL,
    QDRANT_URL,
    SNIPPET_LENGTH,
)
from logger import setup_logging
from services.chat_session import ChatSession
from services.formatting import format_sources
from services.memory_service import MemoryService

logger = logging.getLogger(__name__)

EXIT_COMMAND = "exit"


def read_line(prompt: str = "") -> Optional[str]:
    """Read one line from the console, None once input is closed."""
    try:
        return input(prompt)
    except (EOFError, KeyboardInterrupt):
        print()
        return None


def print_remediation_hints(error: Exception) -> None:
    """Explain how to bring up Qdrant and Ollama after a failed startup."""
    print(f"Error: {error}")
    print(f"Make sure Qdrant is running at {QDRANT_URL} and Ollama at {OLLAMA_URL}.")
    print("The following models must be pulled with ollama:")
    print(f"  ollama pull {EMBEDDING_MODEL}")
    print(f"  ollama pull {CHAT_MODEL}")


def import_pdf_file(session: ChatSession) -> bool:
    """
    Ask for a PDF path and import the file.

    Returns:
        True if the document was imported
    """
    print("Please enter the path to the PDF file:")
    path = read_line()

    if path is None or not path.strip():
        print("Invalid path. Skipping import.")
        return False

    print(f"Importing PDF file: {path.strip()}")
    try:
        outcome = session.import_pdf(path)
    except Exception as e:
        logger.error(f"Unexpected import error: {e}", exc_info=True)
        print(f"Import failed: {e}")
        return False

    if not outcome.ok:
        print(f"Import failed: {outcome.reason}")
        return False

    print(f"PDF imported and indexed as '{outcome.document_id}'!")
    return True


def start_chat(session: ChatSession) -> None:
    """Run the question/answer loop until the user leaves."""
    print("\nAsk questions about your PDF! (Type 'exit' to quit)")
    print("Example: 'What is the document about?' or 'Summarize the content'")
    print("-" * 70)

    while True:
        question = read_line("\nYou: ")

        if question is None or not question.strip() or question.strip().lower() == EXIT_COMMAND:
            print("Goodbye!")
            break

        question = question.strip()
        print(f"Searching for: '{question}'")

        try:
            outcome = session.ask(question)
        except Exception as e:
            logger.error(f"Unexpected error while answering: {e}", exc_info=True)
            print(f"Request failed: {e}")
            continue

        if not outcome.ok:
            print(f"Request failed: {outcome.reason}")
            continue

        answer = outcome.answer
        print(f"AI: {answer.result}")

        if answer.relevant_sources:
            print("\nRelevant sections of the PDF:")
            for line in format_sources(answer.relevant_sources, MAX_SOURCES, SNIPPET_LENGTH):
                print(line)
            print()
        else:
            print("\nNo relevant sections found. Try rephrasing your question.")


def main() -> int:
    """Main chat program."""
    setup_logging(LOG_LEVEL, LOG_FILE)

    print("RAG chat with a PDF document using Qdrant/Ollama")
    print("=" * 50)

    try:
        print("Connecting to Qdrant and Ollama...")
        memory = MemoryService()
        memory.connect()
    except Exception as e:
        logger.error(f"Startup failed: {e}", exc_info=True)
        print_remediation_hints(e)
        return 0

    session = ChatSession(memory)
    import_pdf_file(session)
    start_chat(session)
    return 0


if __name__ == "__main__":
    sys.exit(main())
