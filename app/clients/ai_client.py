# app/clients/ai_client.py

from asyncio import wait_for
from logging import getLogger

from google.genai import Client
from google.genai.client import AsyncClient
from google.genai.errors import APIError, ServerError
from google.genai.types import GenerateContentConfig
from httpx import TimeoutException, TransportError

from app.configs.settings import GENERATION_CONFIG, settings
from app.errors import (
    AiAuthenticationError,
    AiError,
    AiNetworkError,
    AiQuotaExceededError,
    AiTimeoutError,
    ConfigurationError,
    MalformedResponseError,
    TransientServiceError,
)
from app.utils.helpers import file_logger

logger = file_logger(getLogger(__name__))

# Network-related exceptions that should be caught and converted
NETWORK_EXCEPTIONS = (
    TransportError,
    ConnectionError,
    OSError,
)

TIMEOUT_EXCEPTIONS = (TimeoutError, TimeoutException)


class AiClient:
    """
    Async text-in/text-out client for Google's Gemini API.

    Constructed once at startup and shared by reference; it holds no
    per-request state.

    Attributes:
        client: The Google GenAI AsyncClient instance.
        model_name: The name of the Gemini model to use.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        config: GenerateContentConfig | None = None,
    ) -> None:
        """
        Initialize the AI client with API credentials.

        Raises:
            ConfigurationError: If the API key is missing or the client cannot be built.
        """
        api_key = api_key or settings.GEMINI_API_KEY
        if not api_key:
            msg = "GEMINI_API_KEY is required but not set"
            raise ConfigurationError(detail=msg)

        self._model = model or settings.GEMINI_MODEL
        self._timeout = timeout if timeout is not None else settings.AI_REQUEST_TIMEOUT
        self._config = config or GENERATION_CONFIG

        try:
            self._client = Client(api_key=api_key).aio
        except Exception as e:
            logger.exception("Failed to initialize Gemini client")
            msg = f"Failed to initialize Gemini client: {e}"
            raise ConfigurationError(detail=msg) from e

        logger.info(f"AiClient initialized with model: {self._model}")

    @property
    def client(self) -> AsyncClient:
        """Get the AI client instance."""
        return self._client

    @property
    def model_name(self) -> str:
        return self._model

    async def invoke(self, prompt: str) -> str:
        """
        Send a prompt to the model and return its raw text.

        Args:
            prompt: The full instruction text.

        Returns:
            The unprocessed response text.

        Raises:
            AiTimeoutError: If the call exceeds the per-call timeout.
            AiNetworkError: On transport failures.
            AiQuotaExceededError: On HTTP 429.
            TransientServiceError: On HTTP 5xx.
            AiAuthenticationError: On HTTP 401/403.
            MalformedResponseError: If the model returned no text.
            AiError: For any other API error.
        """
        try:
            response = await wait_for(
                self._client.models.generate_content(
                    model=self._model,
                    contents=prompt,
                    config=self._config,
                ),
                timeout=self._timeout,
            )
        except TIMEOUT_EXCEPTIONS as e:
            detail = f"AI request exceeded {self._timeout:.0f}s timeout"
            logger.warning(detail)
            raise AiTimeoutError(detail=detail) from e
        except APIError as e:
            raise self._map_api_error(e) from e
        except NETWORK_EXCEPTIONS as e:
            logger.warning(f"AI network error: {e}")
            detail = f"AI service temporarily unavailable: {e}"
            raise AiNetworkError(detail=detail) from e

        text = response.text if response else None
        if not text:
            msg = "Empty response from Gemini API"
            raise MalformedResponseError(detail=msg)
        return text

    def _map_api_error(self, e: APIError) -> AiError:
        """Map a Gemini API error to the pipeline's error taxonomy by status code."""
        code = e.code
        logger.warning(f"Gemini API error {code}: {e.message}")

        if code == 429:
            return AiQuotaExceededError(detail=f"Quota exceeded: {e.message}")
        if code in (401, 403):
            return AiAuthenticationError(detail=f"Authentication failed: {e.message}")
        if code == 408:
            return AiTimeoutError(detail=f"AI request timed out: {e.message}")
        if code == 404:
            return AiError(
                detail=f'AI model "{self._model}" not available or API configuration issue',
            )
        if isinstance(e, ServerError) or (code is not None and code >= 500):
            return TransientServiceError(detail=f"AI service error {code}: {e.message}")
        return AiError(detail=f"An unexpected AI error occurred: {e.message}")

    async def close(self) -> None:
        try:
            logger.info("Closing AI client")
            await self.client.aclose()
        except Exception:
            logger.exception("Failed to close AI client")
        else:
            logger.info("AI client closed successfully")
