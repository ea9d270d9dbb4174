"""Configuration management for the PDF RAG chat."""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Backend Endpoints
OLLAMA_URL = os.getenv("OLLAMA_URL", "http://localhost:11434")
QDRANT_URL = os.getenv("QDRANT_URL", "http://localhost:6333")
QDRANT_API_KEY = os.getenv("QDRANT_API_KEY")
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "300"))

# Model Configuration
EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "nomic-embed-text:latest")
CHAT_MODEL = os.getenv("CHAT_MODEL", "gemma3:1b")
CHAT_MAX_TOKEN_TOTAL = int(os.getenv("CHAT_MAX_TOKEN_TOTAL", "125000"))
EMBEDDING_MAX_TOKEN_TOTAL = int(os.getenv("EMBEDDING_MAX_TOKEN_TOTAL", "2048"))
ANSWER_TOKENS = int(os.getenv("ANSWER_TOKENS", "4096"))
SEED = int(os.getenv("SEED", "42"))

# Index Configuration
INDEX_NAME = os.getenv("INDEX_NAME", "dokumente")
DOCUMENT_TAGS = {
    "type": "pdf-document",
    "source": "user-upload",
}

# Chunking Configuration
CHUNK_SIZE = 1000  # tokens
CHUNK_OVERLAP = 100  # tokens

# Retrieval Configuration
MIN_RELEVANCE = float(os.getenv("MIN_RELEVANCE", "0.3"))
MAX_MATCHES = int(os.getenv("MAX_MATCHES", "20"))
EMPTY_ANSWER = "INFO NOT FOUND"

# Chat Configuration
MAX_HISTORY_TURNS = int(os.getenv("MAX_HISTORY_TURNS", "6"))
MAX_SOURCES = 3
SNIPPET_LENGTH = 150

# Logging Configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")
LOG_FILE = os.getenv("LOG_FILE")
