"""Unit tests for VectorStore class."""
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import uuid
import pytest
from unittest.mock import Mock, patch, MagicMock
from qdrant_client import models
from models.chunk import Chunk, ScoredChunk
from models.errors import BackendUnavailable
from services.vector_store import VectorStore
from services.embedding_model import EmbeddingModel


def _chunk(text, partition=0):
    return Chunk(
        chunk_id=str(uuid.uuid4()),
        text=text,
        document_id="guide",
        document_name="guide.pdf",
        page_number=1,
        partition_number=partition,
        token_count=3,
        tags={"type": "pdf-document"}
    )


class TestVectorStore:
    """Test suite for VectorStore."""

    @pytest.fixture
    def mock_embedding_model(self):
        return Mock(spec=EmbeddingModel)

    @pytest.fixture
    def mock_client(self):
        with patch('services.vector_store.QdrantClient') as mock_client_class:
            client = MagicMock()
            mock_client_class.return_value = client
            yield client

    @pytest.fixture
    def store(self, mock_embedding_model, mock_client):
        return VectorStore(embedding_model=mock_embedding_model, qdrant_url="http://localhost:6333", batch_size=2)

    @patch('services.vector_store.QdrantClient')
    def test_initialization_success(self, mock_client_class):
        """Test successful initialization."""
        mock_embedding_model = Mock(spec=EmbeddingModel)

        store = VectorStore(embedding_model=mock_embedding_model, qdrant_url="http://localhost:6333")

        assert store.embedding_model == mock_embedding_model
        assert mock_client_class.call_args[1]["url"] == "http://localhost:6333"

    def test_initialization_without_url(self, mock_embedding_model):
        """Test initialization fails without a Qdrant URL."""
        with pytest.raises(ValueError, match="QDRANT_URL"):
            VectorStore(embedding_model=mock_embedding_model, qdrant_url="")

    def test_ping_failure(self, store, mock_client):
        """Test that an unreachable Qdrant is reported."""
        mock_client.get_collections.side_effect = ConnectionError("refused")

        with pytest.raises(BackendUnavailable, match="Cannot reach Qdrant"):
            store.ping()

    def test_ensure_index_creates_missing_collection(self, store, mock_client, mock_embedding_model):
        """Test that a missing collection is created with the model's vector size."""
        mock_client.collection_exists.return_value = False
        mock_embedding_model.dimension = 768

        store.ensure_index("dokumente")

        kwargs = mock_client.create_collection.call_args[1]
        assert kwargs["collection_name"] == "dokumente"
        assert kwargs["vectors_config"].size == 768
        assert kwargs["vectors_config"].distance == models.Distance.COSINE
        mock_client.create_payload_index.assert_called_once()

    def test_ensure_index_keeps_existing_collection(self, store, mock_client):
        """Test that an existing collection is left alone."""
        mock_client.collection_exists.return_value = True

        store.ensure_index("dokumente")

        mock_client.create_collection.assert_not_called()

    def test_replace_document_empty_list(self, store):
        """Test replace_document raises error for empty list."""
        with pytest.raises(ValueError, match="Chunks list cannot be empty"):
            store.replace_document("dokumente", "guide", [])

    def test_replace_document_in_batches(self, store, mock_client, mock_embedding_model):
        """Test that chunks are embedded in batches, then the old copy is replaced."""
        chunks = [_chunk("One"), _chunk("Two", 1), _chunk("Three", 2)]
        mock_embedding_model.embed_batch.side_effect = [
            [[0.1, 0.2], [0.3, 0.4]],
            [[0.5, 0.6]],
        ]

        store.replace_document("dokumente", "guide", chunks)

        assert mock_embedding_model.embed_batch.call_args_list[0][0][0] == ["One", "Two"]
        assert mock_embedding_model.embed_batch.call_args_list[1][0][0] == ["Three"]
        mock_client.delete.assert_called_once()
        assert mock_client.upsert.call_count == 2

        first_points = mock_client.upsert.call_args_list[0][1]["points"]
        assert first_points[0].id == chunks[0].chunk_id
        assert first_points[0].vector == [0.1, 0.2]
        assert first_points[0].payload["text"] == "One"
        assert first_points[0].payload["document_id"] == "guide"
        assert first_points[0].payload["tags"] == {"type": "pdf-document"}

    def test_replace_document_embeds_before_deleting(self, store, mock_client, mock_embedding_model):
        """Test that the old chunks are only deleted once every batch is embedded."""
        calls = []
        mock_embedding_model.embed_batch.side_effect = lambda texts: calls.append("embed") or [[0.1]] * len(texts)
        mock_client.delete.side_effect = lambda **kwargs: calls.append("delete")
        mock_client.upsert.side_effect = lambda **kwargs: calls.append("upsert")

        store.replace_document("dokumente", "guide", [_chunk("One"), _chunk("Two", 1), _chunk("Three", 2)])

        assert calls == ["embed", "embed", "delete", "upsert", "upsert"]

    def test_replace_document_keeps_old_copy_when_embedding_fails(self, store, mock_client, mock_embedding_model):
        """Test that a failing second batch leaves the index untouched."""
        chunks = [_chunk(f"Part {n}", n) for n in range(5)]
        mock_embedding_model.embed_batch.side_effect = [
            [[0.1, 0.2], [0.3, 0.4]],
            BackendUnavailable("Ollama server busy (503)"),
        ]

        with pytest.raises(BackendUnavailable, match="busy"):
            store.replace_document("dokumente", "guide", chunks)

        mock_client.delete.assert_not_called()
        mock_client.upsert.assert_not_called()

    def test_replace_document_removes_partial_copy_on_upsert_error(self, store, mock_client, mock_embedding_model):
        """Test that a failed upsert removes the batches already written."""
        mock_embedding_model.embed_batch.side_effect = [
            [[0.1, 0.2], [0.3, 0.4]],
            [[0.5, 0.6]],
        ]
        mock_client.upsert.side_effect = [None, Exception("Database error")]

        with pytest.raises(BackendUnavailable, match="Failed to add chunks"):
            store.replace_document("dokumente", "guide", [_chunk("One"), _chunk("Two", 1), _chunk("Three", 2)])

        assert mock_client.delete.call_count == 2
        condition = mock_client.delete.call_args[1]["points_selector"].filter.must[0]
        assert condition.match.value == "guide"

    def test_replace_document_reports_upsert_error_when_cleanup_fails(self, store, mock_client, mock_embedding_model):
        """Test that the upsert error is raised even if the cleanup delete fails too."""
        mock_embedding_model.embed_batch.return_value = [[0.1, 0.2]]
        mock_client.delete.side_effect = [None, Exception("Connection reset")]
        mock_client.upsert.side_effect = Exception("Database error")

        with pytest.raises(BackendUnavailable, match="Failed to add chunks"):
            store.replace_document("dokumente", "guide", [_chunk("One")])

    def test_delete_document_filters_by_id(self, store, mock_client):
        """Test that deletion targets one document id."""
        store.delete_document("dokumente", "guide")

        selector = mock_client.delete.call_args[1]["points_selector"]
        condition = selector.filter.must[0]
        assert condition.key == "document_id"
        assert condition.match.value == "guide"

    def test_search_empty_embedding(self, store):
        """Test search raises error for empty embedding."""
        with pytest.raises(ValueError, match="Query embedding cannot be empty"):
            store.search("dokumente", [])

    def test_search_invalid_top_k(self, store):
        """Test search raises error for invalid top_k."""
        with pytest.raises(ValueError, match="top_k must be positive"):
            store.search("dokumente", [0.1, 0.2], top_k=0)

    def test_search_success(self, store, mock_client):
        """Test successful search returns scored chunks."""
        point_id = str(uuid.uuid4())
        mock_client.query_points.return_value = MagicMock(points=[
            MagicMock(
                id=point_id,
                score=0.85,
                payload={
                    "text": "Found text",
                    "document_id": "guide",
                    "document_name": "guide.pdf",
                    "page_number": 4,
                    "partition_number": 7,
                    "token_count": 2,
                    "tags": {"type": "pdf-document"}
                }
            )
        ])

        results = store.search("dokumente", [0.1, 0.2], top_k=5, min_relevance=0.3)

        assert len(results) == 1
        assert isinstance(results[0], ScoredChunk)
        assert results[0].chunk.chunk_id == point_id
        assert results[0].chunk.text == "Found text"
        assert results[0].chunk.page_number == 4
        assert results[0].chunk.partition_number == 7
        assert results[0].relevance_score == 0.85

        kwargs = mock_client.query_points.call_args[1]
        assert kwargs["collection_name"] == "dokumente"
        assert kwargs["limit"] == 5
        assert kwargs["score_threshold"] == 0.3

    def test_search_clamps_scores(self, store, mock_client):
        """Test that scores are clamped to [0, 1]."""
        mock_client.query_points.return_value = MagicMock(points=[
            MagicMock(id="a", score=1.2, payload={"text": "x"}),
            MagicMock(id="b", score=-0.4, payload={"text": "y"}),
        ])

        results = store.search("dokumente", [0.1])

        assert [r.relevance_score for r in results] == [1.0, 0.0]

    def test_search_database_error(self, store, mock_client):
        """Test that search failures become BackendUnavailable."""
        mock_client.query_points.side_effect = Exception("Connection lost")

        with pytest.raises(BackendUnavailable, match="Failed to search index"):
            store.search("dokumente", [0.1])
