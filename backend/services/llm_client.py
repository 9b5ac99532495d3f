"""LLM Client for answer generation.

Uses the Groq chat-completions API by default, or any OpenAI-compatible
server through the openai client when a base URL is configured.
"""
import time
from dataclasses import dataclass
from typing import List, Optional, Dict, Any
import groq
import openai
from groq import Groq
from openai import OpenAI
import logging

from config import GROQ_API_KEY, LLM_API_KEY, LLM_BASE_URL, LLM_MODEL, LLM_TEMPERATURE, LLM_MAX_TOKENS

logger = logging.getLogger(__name__)

CONTEXT_SEPARATOR = "\n---\n"

RateLimitError = (groq.RateLimitError, openai.RateLimitError)
AuthenticationError = (groq.AuthenticationError, openai.AuthenticationError)
APITimeoutError = (groq.APITimeoutError, openai.APITimeoutError)
APIError = (groq.APIError, openai.APIError)


@dataclass
class LLMResponse:
    """Response from LLM generation."""
    text: str
    tokens_input: int
    tokens_output: int
    latency_ms: int
    model_used: str


@dataclass
class LLMError:
    """Structured error response from LLM operations."""
    code: str
    message: str
    details: Dict[str, Any]


class LLMClientError(Exception):
    """Custom exception for LLM client errors with structured error information."""

    def __init__(self, error: LLMError):
        self.error = error
        super().__init__(error.message)


class LLMClient:
    """Client for the chat-completion service that writes answers from context."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = LLM_BASE_URL,
        model: str = LLM_MODEL,
        temperature: float = LLM_TEMPERATURE,
        max_tokens: int = LLM_MAX_TOKENS
    ):
        """
        Initialize LLM client.

        Args:
            api_key: API key (defaults to LLM_API_KEY, then GROQ_API_KEY)
            base_url: OpenAI-compatible endpoint, e.g. https://host/v1; when
                unset the Groq API is used
            model: Chat model name
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate
        """
        self.api_key = api_key or LLM_API_KEY or GROQ_API_KEY
        if not self.api_key:
            raise ValueError("GROQ_API_KEY must be provided or set in environment")

        self.base_url = base_url
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        if base_url:
            # The Groq SDK appends /openai/v1 to its base URL
            self.client = OpenAI(api_key=self.api_key, base_url=base_url)
        else:
            self.client = Groq(api_key=self.api_key)
        logger.info(f"LLMClient initialized successfully (endpoint={base_url or 'groq'})")

    def generate(self, messages: List[Dict[str, str]]) -> LLMResponse:
        """
        Run one chat completion.

        Args:
            messages: Chat messages (role/content dicts)

        Returns:
            LLMResponse with text, token counts, and latency

        Raises:
            LLMClientError: Structured error with code, message, and details
        """
        start_time = time.time()
        model = self.model

        try:
            logger.debug(f"Generating response with model: {model}")

            response = self.client.chat.completions.create(
                model=model,
                messages=messages,
                max_tokens=self.max_tokens,
                temperature=self.temperature
            )

            latency_ms = int((time.time() - start_time) * 1000)
            text = response.choices[0].message.content
            tokens_input = response.usage.prompt_tokens
            tokens_output = response.usage.completion_tokens

            logger.info(
                f"Generated response: model={model}, "
                f"input_tokens={tokens_input}, output_tokens={tokens_output}, "
                f"latency={latency_ms}ms"
            )

            return LLMResponse(
                text=text,
                tokens_input=tokens_input,
                tokens_output=tokens_output,
                latency_ms=latency_ms,
                model_used=model
            )

        except RateLimitError as e:
            raise self._error(
                "RATE_LIMIT_ERROR",
                "Rate limit exceeded. Please try again in a few moments.",
                model, start_time, e,
                retry_after=60
            )
        except AuthenticationError as e:
            raise self._error(
                "AUTHENTICATION_ERROR",
                "Authentication failed. Please check your API key.",
                model, start_time, e
            )
        except APITimeoutError as e:
            raise self._error(
                "TIMEOUT_ERROR",
                "Request timed out. Please try again.",
                model, start_time, e
            )
        except APIError as e:
            raise self._error("API_ERROR", f"LLM API error: {str(e)}", model, start_time, e)
        except Exception as e:
            raise self._error(
                "UNKNOWN_ERROR",
                f"Unexpected error during generation: {str(e)}",
                model, start_time, e,
                error_type=type(e).__name__
            )

    def answer(self, context_chunks: List[str], question: str) -> LLMResponse:
        """Answer a question from ranked context chunks."""
        return self.generate(self.build_messages(context_chunks, question))

    @staticmethod
    def build_messages(context_chunks: List[str], question: str) -> List[Dict[str, str]]:
        """
        Build the chat messages: knowledge-base context in the system
        message, the user's question as the user message.
        """
        context = CONTEXT_SEPARATOR.join(context_chunks)
        system_prompt = f"""You are a customer support assistant. Answer the user's question using the knowledge base content below, and help resolve their problem on the spot.

Knowledge base content:
{context}"""
        return [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": question},
        ]

    @staticmethod
    def _error(code: str, message: str, model: str, start_time: float, exc: Exception, **extra) -> LLMClientError:
        latency_ms = int((time.time() - start_time) * 1000)
        details = {
            "model": model,
            "latency_ms": latency_ms,
            "original_error": str(exc),
            **extra
        }
        error = LLMError(code=code, message=message, details=details)
        logger.error(
            f"{code}: model={model}, latency={latency_ms}ms, error={exc}",
            exc_info=True,
            extra={"error_code": error.code, "error_details": error.details}
        )
        return LLMClientError(error)
