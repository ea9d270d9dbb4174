"""Chunking engine splitting PDF pages into indexable partitions."""
import logging
import uuid
from typing import Dict, List, Optional

import tiktoken
from langchain_text_splitters import RecursiveCharacterTextSplitter

from models.document import Document
from models.chunk import Chunk
from config import CHUNK_SIZE, CHUNK_OVERLAP

logger = logging.getLogger(__name__)

TOKEN_ENCODING = "cl100k_base"


class ChunkingEngine:
    """Segments documents into retrievable chunks."""

    def __init__(self, chunk_size: int = CHUNK_SIZE, chunk_overlap: int = CHUNK_OVERLAP):
        """
        Initialize ChunkingEngine.

        Args:
            chunk_size: Target chunk size in tokens
            chunk_overlap: Overlap between chunks in tokens
        """
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if chunk_overlap < 0 or chunk_overlap >= chunk_size:
            raise ValueError("chunk_overlap must be between 0 and chunk_size")

        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.encoder = tiktoken.get_encoding(TOKEN_ENCODING)
        self.splitter = RecursiveCharacterTextSplitter.from_tiktoken_encoder(
            encoding_name=TOKEN_ENCODING,
            chunk_size=chunk_size,
            chunk_overlap=chunk_overlap
        )

    def count_tokens(self, text: str) -> int:
        return len(self.encoder.encode(text))

    def chunk_document(self, document: Document, tags: Optional[Dict[str, str]] = None) -> List[Chunk]:
        """
        Split every page of a document into chunks.

        Partition numbers run across the whole document so that each chunk
        keeps its position in reading order.

        Args:
            document: Loaded document
            tags: Key/value tags copied onto every chunk

        Returns:
            List of Chunk objects, empty if the document has no text
        """
        tags = dict(tags or {})
        chunks: List[Chunk] = []

        for page in document.pages:
            if not page.text.strip():
                continue

            for piece in self.splitter.split_text(page.text):
                piece = piece.strip()
                if not piece:
                    continue

                chunks.append(Chunk(
                    chunk_id=str(uuid.uuid4()),
                    text=piece,
                    document_id=document.document_id,
                    document_name=document.filename,
                    page_number=page.page_number,
                    partition_number=len(chunks),
                    token_count=self.count_tokens(piece),
                    tags=tags
                ))

        logger.info(f"Created {len(chunks)} chunks from {document.filename}")
        return chunks
