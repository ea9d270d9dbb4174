"""Embedding model integration with the Ollama embed API."""
import time
import logging
from typing import List, Optional
import httpx

from models.errors import BackendUnavailable
from config import OLLAMA_URL, EMBEDDING_MODEL, EMBEDDING_MAX_TOKEN_TOTAL, REQUEST_TIMEOUT

logger = logging.getLogger(__name__)


class EmbeddingModel:
    """Wrapper for an embedding model served by Ollama."""

    def __init__(
        self,
        base_url: str = OLLAMA_URL,
        model_name: str = EMBEDDING_MODEL,
        max_token_total: int = EMBEDDING_MAX_TOKEN_TOTAL,
        max_retries: int = 3,
        initial_delay: float = 2.0,
        timeout: float = REQUEST_TIMEOUT
    ):
        """
        Initialize the embedding model client.

        Args:
            base_url: Ollama server URL
            model_name: Embedding model tag (default: nomic-embed-text:latest)
            max_token_total: Context size requested from the model
            max_retries: Maximum number of attempts for transient failures
            initial_delay: Initial delay in seconds for exponential backoff
            timeout: Request timeout in seconds
        """
        if not base_url:
            raise ValueError("OLLAMA_URL must be provided")

        self.base_url = base_url.rstrip("/")
        self.model_name = model_name
        self.max_token_total = max_token_total
        self.max_retries = max_retries
        self.initial_delay = initial_delay
        self.timeout = timeout
        self.api_url = f"{self.base_url}/api/embed"
        self._dimension: Optional[int] = None

        logger.info(f"Initialized EmbeddingModel with model: {model_name}")

    def embed_text(self, text: str) -> List[float]:
        """
        Generate embedding for a single text string.

        Args:
            text: Text to embed

        Returns:
            Embedding vector as list of floats

        Raises:
            ValueError: If text is empty
            BackendUnavailable: If the request fails after all retries
        """
        if not text or not text.strip():
            raise ValueError("Text cannot be empty")

        return self._embed_with_retry([text])[0]

    def embed_batch(self, texts: List[str]) -> List[List[float]]:
        """
        Generate embeddings for multiple texts in a single API call.

        Args:
            texts: List of texts to embed

        Returns:
            List of embedding vectors, one per input text

        Raises:
            ValueError: If texts list is empty or contains empty strings
            BackendUnavailable: If the request fails after all retries
        """
        if not texts:
            raise ValueError("Texts list cannot be empty")

        if any(not t or not t.strip() for t in texts):
            raise ValueError("Texts in batch cannot be empty")

        return self._embed_with_retry(texts)

    @property
    def dimension(self) -> int:
        """Vector size of the model, learned from a sample embedding."""
        if self._dimension is None:
            self._dimension = len(self.embed_text("dimension check"))
        return self._dimension

    def _embed_with_retry(self, texts: List[str]) -> List[List[float]]:
        """
        Call the Ollama embed endpoint with exponential backoff.

        Ollama loads a model into memory on first use, which can make the
        first request slow or fail while the server is busy.

        Args:
            texts: List of texts to embed

        Returns:
            List of embedding vectors

        Raises:
            BackendUnavailable: If the request fails after all retries
        """
        payload = {
            "model": self.model_name,
            "input": texts,
            "options": {
                "num_ctx": self.max_token_total
            }
        }

        delay = self.initial_delay
        last_error = None

        for attempt in range(self.max_retries):
            try:
                start_time = time.time()

                with httpx.Client(timeout=self.timeout) as client:
                    response = client.post(self.api_url, json=payload)

                elapsed = time.time() - start_time

                # Server busy, try again
                if response.status_code == 503:
                    last_error = "Ollama server busy (503)"
                    logger.warning(
                        f"{last_error} on attempt {attempt + 1}/{self.max_retries}. "
                        f"Retrying in {delay}s..."
                    )
                    if attempt < self.max_retries - 1:
                        time.sleep(delay)
                        delay = min(delay * 2, 30.0)
                    continue

                # Model not pulled
                if response.status_code == 404:
                    logger.error(f"Embedding model not found on Ollama server: {self.model_name}")
                    raise BackendUnavailable(
                        f"Embedding model '{self.model_name}' is not available. "
                        f"Run: ollama pull {self.model_name}",
                        {"model": self.model_name, "status_code": 404}
                    )

                if response.status_code != 200:
                    error_msg = f"Embedding request failed with status {response.status_code}: {response.text}"
                    logger.error(error_msg)
                    raise BackendUnavailable(error_msg, {"model": self.model_name, "status_code": response.status_code})

                try:
                    data = response.json()
                except ValueError as e:
                    error_msg = f"Invalid JSON from Ollama embed endpoint: {e}"
                    logger.error(error_msg)
                    raise BackendUnavailable(error_msg, {"model": self.model_name, "url": self.api_url})

                embeddings = (data.get("embeddings") if isinstance(data, dict) else None) or []
                if len(embeddings) != len(texts):
                    raise BackendUnavailable(
                        f"Expected {len(texts)} embeddings, got {len(embeddings)}",
                        {"model": self.model_name}
                    )

                logger.debug(f"Generated embeddings for {len(texts)} texts in {elapsed:.2f}s")
                return embeddings

            except httpx.TimeoutException:
                last_error = f"Request timeout after {self.timeout}s"
                logger.error(f"{last_error} on attempt {attempt + 1}/{self.max_retries}")

            except httpx.RequestError as e:
                last_error = f"Network error: {str(e)}"
                logger.error(f"{last_error} on attempt {attempt + 1}/{self.max_retries}")

            if attempt < self.max_retries - 1:
                time.sleep(delay)
                delay = min(delay * 2, 30.0)

        # All retries exhausted
        error_msg = f"Failed to generate embeddings after {self.max_retries} attempts. Last error: {last_error}"
        logger.error(error_msg)
        raise BackendUnavailable(error_msg, {"model": self.model_name, "url": self.api_url})

