"""Vector store implementation using Qdrant."""
import logging
from typing import List, Optional
from qdrant_client import QdrantClient, models

from models.chunk import Chunk, ScoredChunk
from models.errors import BackendUnavailable
from services.embedding_model import EmbeddingModel
from config import QDRANT_URL, QDRANT_API_KEY, REQUEST_TIMEOUT

logger = logging.getLogger(__name__)


class VectorStore:
    """Store chunk embeddings and run similarity search, one Qdrant collection per index."""

    def __init__(
        self,
        embedding_model: EmbeddingModel,
        qdrant_url: str = QDRANT_URL,
        qdrant_api_key: Optional[str] = QDRANT_API_KEY,
        batch_size: int = 10
    ):
        """
        Initialize the vector store with a Qdrant client.

        Args:
            embedding_model: EmbeddingModel instance for generating embeddings
            qdrant_url: Qdrant server URL
            qdrant_api_key: Optional Qdrant API key
            batch_size: Number of chunks embedded and upserted per request

        Raises:
            ValueError: If the Qdrant URL is missing
        """
        if not qdrant_url:
            raise ValueError("QDRANT_URL environment variable is required")

        self.embedding_model = embedding_model
        self.batch_size = batch_size
        self.client = QdrantClient(url=qdrant_url, api_key=qdrant_api_key, timeout=int(REQUEST_TIMEOUT))

        logger.info(f"Initialized VectorStore at {qdrant_url}")

    def ping(self) -> None:
        """
        Check that Qdrant answers.

        Raises:
            BackendUnavailable: If the server cannot be reached
        """
        try:
            self.client.get_collections()
        except Exception as e:
            logger.error(f"Qdrant not reachable: {str(e)}")
            raise BackendUnavailable(f"Cannot reach Qdrant: {str(e)}")

    def index_exists(self, index: str) -> bool:
        try:
            return self.client.collection_exists(index)
        except Exception as e:
            error_msg = f"Failed to look up index {index}: {str(e)}"
            logger.error(error_msg)
            raise BackendUnavailable(error_msg, {"index": index})

    def ensure_index(self, index: str) -> None:
        """
        Create the collection backing an index if it does not exist yet.

        Args:
            index: Index (collection) name

        Raises:
            BackendUnavailable: If Qdrant or the embedding model fails
        """
        try:
            if self.client.collection_exists(index):
                return

            dimension = self.embedding_model.dimension
            self.client.create_collection(
                collection_name=index,
                vectors_config=models.VectorParams(size=dimension, distance=models.Distance.COSINE)
            )
            self.client.create_payload_index(
                collection_name=index,
                field_name="document_id",
                field_schema=models.PayloadSchemaType.KEYWORD
            )
            logger.info(f"Created index {index} with vector size {dimension}")
        except BackendUnavailable:
            raise
        except Exception as e:
            error_msg = f"Failed to prepare index {index}: {str(e)}"
            logger.error(error_msg)
            raise BackendUnavailable(error_msg, {"index": index})

    def replace_document(self, index: str, document_id: str, chunks: List[Chunk]) -> None:
        """
        Store the chunks of a document, replacing any it had in the index.

        Every chunk is embedded before the index is touched, so a failing
        model server leaves the previous copy of the document in place.
        Chunks are embedded in batches so a large PDF does not end up in a
        single huge request to the model server. If an upsert fails midway,
        the partially written document is removed again.

        Args:
            index: Index (collection) name
            document_id: Document the chunks belong to
            chunks: List of Chunk objects to store

        Raises:
            ValueError: If chunks list is empty
            BackendUnavailable: If embedding or the database operation fails
        """
        if not chunks:
            raise ValueError("Chunks list cannot be empty")

        logger.info(f"Embedding {len(chunks)} chunks of {document_id}...")
        batches = [
            self._embed_points(chunks[start:start + self.batch_size])
            for start in range(0, len(chunks), self.batch_size)
        ]

        self.delete_document(index, document_id)

        for points in batches:
            try:
                self.client.upsert(collection_name=index, points=points, wait=True)
            except Exception as e:
                error_msg = f"Failed to add chunks to index {index}: {str(e)}"
                logger.error(error_msg)
                self._discard_partial(index, document_id)
                raise BackendUnavailable(error_msg, {"index": index, "document_id": document_id})

        logger.info(f"Successfully added {len(chunks)} chunks of {document_id} to index {index}")

    def _embed_points(self, batch: List[Chunk]) -> List[models.PointStruct]:
        embeddings = self.embedding_model.embed_batch([chunk.text for chunk in batch])

        return [
            models.PointStruct(
                id=chunk.chunk_id,
                vector=embedding,
                payload={
                    "text": chunk.text,
                    "document_id": chunk.document_id,
                    "document_name": chunk.document_name,
                    "page_number": chunk.page_number,
                    "partition_number": chunk.partition_number,
                    "token_count": chunk.token_count,
                    "tags": chunk.tags
                }
            )
            for chunk, embedding in zip(batch, embeddings)
        ]

    def _discard_partial(self, index: str, document_id: str) -> None:
        """Remove a half-written document; the upsert error is what gets reported."""
        try:
            self.delete_document(index, document_id)
        except BackendUnavailable as e:
            logger.error(f"Could not remove partial copy of {document_id} from index {index}: {str(e)}")

    def delete_document(self, index: str, document_id: str) -> None:
        """
        Remove every chunk of a document from an index.

        Args:
            index: Index (collection) name
            document_id: Document whose chunks are removed

        Raises:
            BackendUnavailable: If the database operation fails
        """
        try:
            self.client.delete(
                collection_name=index,
                points_selector=models.FilterSelector(
                    filter=models.Filter(
                        must=[
                            models.FieldCondition(
                                key="document_id",
                                match=models.MatchValue(value=document_id)
                            )
                        ]
                    )
                ),
                wait=True
            )
            logger.info(f"Removed previous chunks of {document_id} from index {index}")
        except Exception as e:
            error_msg = f"Failed to delete document {document_id}: {str(e)}"
            logger.error(error_msg)
            raise BackendUnavailable(error_msg, {"index": index, "document_id": document_id})

    def search(
        self,
        index: str,
        query_embedding: List[float],
        top_k: int = 5,
        min_relevance: float = 0.0
    ) -> List[ScoredChunk]:
        """
        Find most similar chunks to query using cosine similarity.

        Args:
            index: Index (collection) name
            query_embedding: Embedding vector for user query
            top_k: Number of chunks to retrieve
            min_relevance: Matches scoring below this are dropped by Qdrant

        Returns:
            List of ScoredChunk objects, best first, scores clamped to [0, 1]

        Raises:
            ValueError: If query_embedding is empty or top_k is invalid
            BackendUnavailable: If the database operation fails
        """
        if not query_embedding:
            raise ValueError("Query embedding cannot be empty")

        if top_k <= 0:
            raise ValueError("top_k must be positive")

        try:
            response = self.client.query_points(
                collection_name=index,
                query=query_embedding,
                limit=top_k,
                score_threshold=min_relevance,
                with_payload=True
            )
        except Exception as e:
            error_msg = f"Failed to search index {index}: {str(e)}"
            logger.error(error_msg)
            raise BackendUnavailable(error_msg, {"index": index})

        scored_chunks = []
        for point in response.points:
            payload = point.payload or {}
            chunk = Chunk(
                chunk_id=str(point.id),
                text=payload.get("text", ""),
                document_id=payload.get("document_id", ""),
                document_name=payload.get("document_name", ""),
                page_number=payload.get("page_number", 0),
                partition_number=payload.get("partition_number", 0),
                token_count=payload.get("token_count", 0),
                tags=payload.get("tags") or {}
            )

            # Cosine similarity is in [-1, 1]
            relevance_score = max(0.0, min(1.0, point.score))

            scored_chunks.append(ScoredChunk(chunk=chunk, relevance_score=relevance_score))

        logger.debug(f"Found {len(scored_chunks)} chunks in index {index}")
        return scored_chunks
