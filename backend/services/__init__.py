"""Services for the PDF RAG chat."""
from .document_loader import DocumentLoader, derive_document_id
from .chunking_engine import ChunkingEngine
from .embedding_model import EmbeddingModel
from .vector_store import VectorStore
from .retrieval_engine import RetrievalEngine
from .llm_client import LLMClient, LLMResponse
from .memory_service import MemoryService
from .conversation_manager import ConversationManager
from .chat_session import ChatSession
from .formatting import format_sources, truncate_snippet

__all__ = ['DocumentLoader', 'derive_document_id', 'ChunkingEngine', 'EmbeddingModel', 'VectorStore', 'RetrievalEngine', 'LLMClient', 'LLMResponse', 'MemoryService', 'ConversationManager', 'ChatSession', 'format_sources', 'truncate_snippet']
