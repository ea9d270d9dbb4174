"""Retrieval engine for orchestrating query embedding and chunk retrieval."""
import logging
from typing import List
from models.chunk import ScoredChunk
from services.vector_store import VectorStore
from services.embedding_model import EmbeddingModel
from config import MAX_MATCHES, MIN_RELEVANCE

logger = logging.getLogger(__name__)


class RetrievalEngine:
    """Orchestrate query embedding and chunk retrieval with a relevance threshold."""

    def __init__(self, vector_store: VectorStore, embedding_model: EmbeddingModel):
        """
        Initialize the retrieval engine.

        Args:
            vector_store: VectorStore instance for similarity search
            embedding_model: EmbeddingModel instance for query embedding
        """
        self.vector_store = vector_store
        self.embedding_model = embedding_model
        logger.info("Initialized RetrievalEngine")

    def retrieve(
        self,
        query: str,
        index: str,
        min_relevance: float = MIN_RELEVANCE,
        top_k: int = MAX_MATCHES
    ) -> List[ScoredChunk]:
        """
        Retrieve chunks relevant to a query.

        1. Embed the query
        2. Search the index for the top_k nearest chunks
        3. Drop chunks scoring below min_relevance
        4. Return the rest, best first

        Args:
            query: Question, possibly prefixed with chat history
            index: Index to search
            min_relevance: Threshold in [0, 1]
            top_k: Maximum number of chunks to retrieve

        Returns:
            List of scored chunks, empty for an empty query or unknown index

        Raises:
            ValueError: If min_relevance is outside [0, 1]
            BackendUnavailable: If embedding or search fails
        """
        if not 0.0 <= min_relevance <= 1.0:
            raise ValueError("min_relevance must be between 0 and 1")

        if not query or not query.strip():
            logger.warning("Empty query string provided, returning empty results")
            return []

        if not self.vector_store.index_exists(index):
            logger.info(f"Index {index} does not exist yet, nothing to retrieve")
            return []

        logger.debug(f"Embedding query: {query[:100]}...")
        query_embedding = self.embedding_model.embed_text(query)

        scored_chunks = self.vector_store.search(
            index,
            query_embedding,
            top_k=top_k,
            min_relevance=min_relevance
        )

        # Qdrant applies the threshold already; clamped scores can still sit on the edge
        relevant = [chunk for chunk in scored_chunks if chunk.relevance_score >= min_relevance]
        relevant.sort(key=lambda chunk: chunk.relevance_score, reverse=True)

        if relevant:
            logger.info(
                f"Retrieved {len(relevant)} chunks "
                f"(top score: {relevant[0].relevance_score:.3f}, threshold: {min_relevance:.2f})"
            )
        else:
            logger.info(f"No chunks above relevance threshold {min_relevance}")

        return relevant
