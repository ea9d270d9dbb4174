"""Memory facade: document ingestion and question answering over an index."""
import logging
from typing import Dict, List, Optional

from models.answer import Citation, MemoryAnswer, Partition
from models.chunk import ScoredChunk
from models.errors import InvalidInput
from services.chunking_engine import ChunkingEngine
from services.document_loader import DocumentLoader
from services.embedding_model import EmbeddingModel
from services.llm_client import LLMClient
from services.retrieval_engine import RetrievalEngine
from services.vector_store import VectorStore
from config import ANSWER_TOKENS, CHAT_MAX_TOKEN_TOTAL, EMPTY_ANSWER, INDEX_NAME, MIN_RELEVANCE

logger = logging.getLogger(__name__)


class MemoryService:
    """Imports documents into a vector index and answers questions from it."""

    def __init__(
        self,
        embedding_model: Optional[EmbeddingModel] = None,
        vector_store: Optional[VectorStore] = None,
        llm_client: Optional[LLMClient] = None,
        document_loader: Optional[DocumentLoader] = None,
        chunking_engine: Optional[ChunkingEngine] = None,
        max_token_total: int = CHAT_MAX_TOKEN_TOTAL,
        answer_tokens: int = ANSWER_TOKENS
    ):
        """
        Wire the memory services together.

        Every collaborator can be injected; the defaults talk to the
        Ollama and Qdrant servers from the configuration.

        Args:
            embedding_model: Embedding model client
            vector_store: Vector store client
            llm_client: Chat model client
            document_loader: PDF loader
            chunking_engine: Text splitter
            max_token_total: Context size of the chat model
            answer_tokens: Tokens reserved for the generated answer
        """
        self.embedding_model = embedding_model or EmbeddingModel()
        self.vector_store = vector_store or VectorStore(self.embedding_model)
        self.llm_client = llm_client or LLMClient()
        self.document_loader = document_loader or DocumentLoader()
        self.chunking_engine = chunking_engine or ChunkingEngine()
        self.retrieval_engine = RetrievalEngine(self.vector_store, self.embedding_model)
        self.max_token_total = max_token_total
        self.answer_tokens = answer_tokens

    def connect(self) -> None:
        """
        Verify that every backend answers before the session starts.

        Raises:
            BackendUnavailable: If Qdrant, the embedding model or the chat model is unavailable
        """
        logger.info("Checking Qdrant and Ollama...")
        self.vector_store.ping()
        dimension = self.embedding_model.dimension
        self.llm_client.ping()
        logger.info(f"Backends ready (embedding size {dimension})")

    def import_document(
        self,
        file_path: str,
        document_id: Optional[str] = None,
        index: str = INDEX_NAME,
        tags: Optional[Dict[str, str]] = None
    ) -> str:
        """
        Parse, chunk, embed and index a PDF.

        Importing a document id that is already in the index replaces its
        previous chunks. The old chunks stay in place if embedding fails.

        Args:
            file_path: Path to the PDF
            document_id: Optional id, derived from the file name if omitted
            index: Target index name
            tags: Key/value tags stored with every chunk

        Returns:
            The id the document was stored under

        Raises:
            InvalidInput: If the file is missing, unreadable or has no text
            BackendUnavailable: If embedding or storage fails
        """
        document = self.document_loader.load_pdf(file_path, document_id)

        if document.is_empty:
            raise InvalidInput(
                f"{document.filename} contains no extractable text",
                {"file_path": document.source_path}
            )

        chunks = self.chunking_engine.chunk_document(document, tags)

        self.vector_store.ensure_index(index)
        self.vector_store.replace_document(index, document.document_id, chunks)

        logger.info(
            f"Imported {document.filename} as {document.document_id} "
            f"into {index}: {document.total_pages} pages, {len(chunks)} chunks"
        )
        return document.document_id

    def ask(
        self,
        question: str,
        index: str = INDEX_NAME,
        min_relevance: float = MIN_RELEVANCE
    ) -> MemoryAnswer:
        """
        Answer a question from the chunks stored in an index.

        Args:
            question: Question text, possibly prefixed with chat history
            index: Index to search
            min_relevance: Chunks scoring below this threshold are ignored

        Returns:
            MemoryAnswer with the generated text and the cited sources

        Raises:
            InvalidInput: If the question is blank
            BackendUnavailable: If retrieval or generation fails
        """
        if not question or not question.strip():
            raise InvalidInput("Question cannot be empty")

        matches = self.retrieval_engine.retrieve(question, index, min_relevance=min_relevance)
        used = self._select_facts(question, matches)

        if not used:
            logger.info("No relevant facts found, skipping generation")
            return MemoryAnswer(question=question, result=EMPTY_ANSWER)

        prompt = LLMClient.build_prompt(
            question,
            [match.chunk.text for match in used],
            empty_answer=EMPTY_ANSWER
        )
        response = self.llm_client.generate(prompt, max_tokens=self.answer_tokens)

        return MemoryAnswer(
            question=question,
            result=response.text or EMPTY_ANSWER,
            relevant_sources=self._group_citations(used)
        )

    def _select_facts(self, question: str, matches: List[ScoredChunk]) -> List[ScoredChunk]:
        """Keep the best matches that fit in the prompt next to the question and answer."""
        empty_prompt = LLMClient.build_prompt(question, [], empty_answer=EMPTY_ANSWER)
        budget = self.max_token_total - self.answer_tokens - self.chunking_engine.count_tokens(empty_prompt)

        selected = []
        for match in matches:
            # "==== " prefix plus newline
            cost = (match.chunk.token_count or self.chunking_engine.count_tokens(match.chunk.text)) + 3
            if cost > budget:
                logger.debug(f"Token budget exhausted after {len(selected)} facts")
                break
            budget -= cost
            selected.append(match)

        return selected

    @staticmethod
    def _group_citations(matches: List[ScoredChunk]) -> List[Citation]:
        """Group matches by document, documents in order of their best match."""
        citations: Dict[str, Citation] = {}

        for match in matches:
            chunk = match.chunk
            citation = citations.get(chunk.document_id)
            if citation is None:
                citation = Citation(document_id=chunk.document_id, source_name=chunk.document_name)
                citations[chunk.document_id] = citation

            citation.partitions.append(Partition(
                text=chunk.text,
                relevance=match.relevance_score,
                partition_number=chunk.partition_number,
                page_number=chunk.page_number
            ))

        return list(citations.values())
