"""LLM Client for the Ollama chat API."""
import time
from dataclasses import dataclass
from typing import List, Optional
import httpx
import logging

from models.errors import BackendUnavailable
from config import OLLAMA_URL, CHAT_MODEL, CHAT_MAX_TOKEN_TOTAL, ANSWER_TOKENS, SEED, REQUEST_TIMEOUT

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = """Facts:
{facts}
======
Given only the facts above, provide a comprehensive/detailed answer.
You don't know where the knowledge comes from, just answer.
If you don't have sufficient information, reply with '{empty_answer}'.
Question: {question}
Answer: """


@dataclass
class LLMResponse:
    """Response from LLM generation."""
    text: str
    tokens_input: int
    tokens_output: int
    latency_ms: int
    model_used: str


class LLMClient:
    """Client for generating answers with a chat model served by Ollama."""

    def __init__(
        self,
        base_url: str = OLLAMA_URL,
        model_name: str = CHAT_MODEL,
        max_token_total: int = CHAT_MAX_TOKEN_TOTAL,
        seed: int = SEED,
        timeout: float = REQUEST_TIMEOUT
    ):
        """
        Initialize LLM client.

        Args:
            base_url: Ollama server URL
            model_name: Chat model tag (default: gemma3:1b)
            max_token_total: Context size requested from the model
            seed: Sampling seed for reproducible answers
            timeout: Request timeout in seconds
        """
        if not base_url:
            raise ValueError("OLLAMA_URL must be provided")

        self.base_url = base_url.rstrip("/")
        self.model_name = model_name
        self.max_token_total = max_token_total
        self.seed = seed
        self.timeout = timeout
        self.api_url = f"{self.base_url}/api/chat"
        logger.info(f"LLMClient initialized with model: {model_name}")

    def generate(self, prompt: str, max_tokens: int = ANSWER_TOKENS) -> LLMResponse:
        """
        Generate a response for a complete prompt.

        Args:
            prompt: Complete prompt with facts and question
            max_tokens: Maximum tokens to generate

        Returns:
            LLMResponse with text, token counts, and latency

        Raises:
            BackendUnavailable: If Ollama cannot be reached or returns an error
        """
        start_time = time.time()
        payload = {
            "model": self.model_name,
            "messages": [
                {
                    "role": "user",
                    "content": prompt
                }
            ],
            "stream": False,
            "options": {
                "num_ctx": self.max_token_total,
                "num_predict": max_tokens,
                "seed": self.seed,
                "temperature": 0.0
            }
        }

        try:
            logger.debug(f"Generating response with model: {self.model_name}")

            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(self.api_url, json=payload)

        except httpx.TimeoutException as e:
            latency_ms = int((time.time() - start_time) * 1000)
            error = BackendUnavailable(
                "Request timed out. Please try again.",
                {"model": self.model_name, "latency_ms": latency_ms, "original_error": str(e)}
            )
            logger.error(
                f"Timeout error: model={self.model_name}, latency={latency_ms}ms, error={e}",
                exc_info=True,
                extra={"error_code": error.error.code, "error_details": error.error.details}
            )
            raise error

        except httpx.RequestError as e:
            latency_ms = int((time.time() - start_time) * 1000)
            error = BackendUnavailable(
                f"Cannot reach Ollama at {self.base_url}: {str(e)}",
                {"model": self.model_name, "latency_ms": latency_ms, "original_error": str(e)}
            )
            logger.error(
                f"Connection error: model={self.model_name}, latency={latency_ms}ms, error={e}",
                exc_info=True,
                extra={"error_code": error.error.code, "error_details": error.error.details}
            )
            raise error

        latency_ms = int((time.time() - start_time) * 1000)

        if response.status_code == 404:
            raise BackendUnavailable(
                f"Chat model '{self.model_name}' is not available. Run: ollama pull {self.model_name}",
                {"model": self.model_name, "status_code": 404}
            )

        if response.status_code != 200:
            error = BackendUnavailable(
                f"Ollama API error: {response.status_code} {response.text}",
                {"model": self.model_name, "status_code": response.status_code, "latency_ms": latency_ms}
            )
            logger.error(
                f"API error: model={self.model_name}, status={response.status_code}, latency={latency_ms}ms",
                extra={"error_code": error.error.code, "error_details": error.error.details}
            )
            raise error

        try:
            data = response.json()
        except ValueError as e:
            error = BackendUnavailable(
                f"Invalid JSON from Ollama chat endpoint: {e}",
                {"model": self.model_name, "latency_ms": latency_ms}
            )
            logger.error(
                f"Malformed response: model={self.model_name}, latency={latency_ms}ms, error={e}",
                extra={"error_code": error.error.code, "error_details": error.error.details}
            )
            raise error
        if not isinstance(data, dict):
            raise BackendUnavailable(
                "Unexpected response shape from Ollama chat endpoint",
                {"model": self.model_name, "latency_ms": latency_ms}
            )

        text = (data.get("message") or {}).get("content", "")
        tokens_input = data.get("prompt_eval_count", 0)
        tokens_output = data.get("eval_count", 0)

        logger.info(
            f"Generated response: model={self.model_name}, "
            f"input_tokens={tokens_input}, output_tokens={tokens_output}, "
            f"latency={latency_ms}ms"
        )

        return LLMResponse(
            text=text.strip(),
            tokens_input=tokens_input,
            tokens_output=tokens_output,
            latency_ms=latency_ms,
            model_used=self.model_name
        )

    def ping(self) -> None:
        """
        Check that the server is up and the chat model is pulled.

        Raises:
            BackendUnavailable: If the server is unreachable or lacks the model
        """
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(f"{self.base_url}/api/show", json={"model": self.model_name})
        except httpx.RequestError as e:
            raise BackendUnavailable(f"Cannot reach Ollama at {self.base_url}: {str(e)}", {"url": self.base_url})

        if response.status_code != 200:
            raise BackendUnavailable(
                f"Chat model '{self.model_name}' is not available. Run: ollama pull {self.model_name}",
                {"model": self.model_name, "status_code": response.status_code}
            )

    @staticmethod
    def build_prompt(question: str, facts: Optional[List[str]] = None, empty_answer: str = "INFO NOT FOUND") -> str:
        """
        Build the fact-grounded answer prompt.

        Args:
            question: User question, possibly prefixed with chat history
            facts: Retrieved partition texts, most relevant first
            empty_answer: Reply the model should give when the facts do not help

        Returns:
            Complete prompt string
        """
        facts_text = "\n".join(f"==== {fact}" for fact in facts or [])
        return PROMPT_TEMPLATE.format(facts=facts_text, question=question, empty_answer=empty_answer)
