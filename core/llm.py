import os
import asyncio
import logging
from abc import ABC, abstractmethod
from langchain_core.messages import HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_openai import ChatOpenAI
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential, retry_if_exception
from dotenv import load_dotenv

from core.errors import ProviderNotConfigured, ServiceError, ServiceUnavailable

# Load environment variables from .env file
script_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
env_path = os.path.join(script_dir, '.env')
load_dotenv(env_path)

# Configuration
LLM_PROVIDER = os.environ.get("LLM_PROVIDER", "openai")
GOOGLE_API_KEY = os.environ.get("GOOGLE_API_KEY")
OPENAI_API_KEY = os.environ.get("OPENAI_API_KEY")
GEMINI_MODEL = os.environ.get("GEMINI_MODEL", "gemini-1.5-pro")
OPENAI_MODEL = os.environ.get("OPENAI_MODEL", "gpt-4o")
MAX_RETRIES = int(os.environ.get("MAX_RETRIES", 5))
REQUEST_TIMEOUT = int(os.environ.get("REQUEST_TIMEOUT", 120))

RATE_LIMIT_TERMS = ["quota", "429", "rate limit", "too many requests", "resourceexhausted"]
AUTH_TERMS = ["authentication", "unauthorized", "invalid api key", "api key not valid", "permission denied", "401", "403"]
CONNECTION_TERMS = ["connection error", "connection refused", "name resolution", "timed out", "timeout", "unreachable"]

logger = logging.getLogger(__name__)


class GenerationService(ABC):
    """Text generation capability used by the orchestrator.

    The returned text is provider output and may not be valid JSON.
    """

    @abstractmethod
    async def generate(self, prompt: str, response_schema: dict = None) -> str:
        ...


def get_llm(temperature=0.7, model_provider=None, json_mode=False):
    """
    Get the appropriate LLM based on the selected provider.

    Args:
        temperature: Float value controlling randomness in generation
        model_provider: 'openai' or 'gemini'; defaults to LLM_PROVIDER
        json_mode: Ask the provider for a JSON object response

    Returns:
        A configured LangChain chat model (or a bound runnable in JSON mode)
    """
    model_provider = (model_provider or LLM_PROVIDER).lower()

    if model_provider == "gemini":
        if not GOOGLE_API_KEY:
            raise ProviderNotConfigured("Google API key not configured.")
        logger.debug(f"Using Gemini model: {GEMINI_MODEL}")
        kwargs = {"response_mime_type": "application/json"} if json_mode else {}
        return ChatGoogleGenerativeAI(
            model=GEMINI_MODEL,
            temperature=temperature,
            google_api_key=GOOGLE_API_KEY,
            max_retries=MAX_RETRIES,
            request_timeout=REQUEST_TIMEOUT,
            **kwargs
        )

    if model_provider != "openai":
        logger.warning(f"Unknown model provider {model_provider!r}, falling back to OpenAI")
    if not OPENAI_API_KEY:
        raise ProviderNotConfigured("OpenAI API key not configured.")
    logger.debug(f"Using OpenAI model: {OPENAI_MODEL}")
    llm = ChatOpenAI(
        model=OPENAI_MODEL,
        temperature=temperature,
        api_key=OPENAI_API_KEY,
        max_retries=MAX_RETRIES,
        timeout=REQUEST_TIMEOUT
    )
    if json_mode:
        return llm.bind(response_format={"type": "json_object"})
    return llm


def _error_status(error):
    status = getattr(error, "status_code", None)
    if status is None:
        code = getattr(error, "code", None)
        status = code if isinstance(code, int) else None
    return status


def is_rate_limited(error) -> bool:
    if _error_status(error) == 429:
        return True
    message = f"{type(error).__name__} {error}".lower()
    return any(term in message for term in RATE_LIMIT_TERMS)


def classify_provider_error(error):
    """Map a provider/transport exception onto ServiceUnavailable or ServiceError."""
    status = _error_status(error)
    message = f"{type(error).__name__} {error}".lower()
    if status in (401, 403) or any(term in message for term in AUTH_TERMS):
        return ServiceUnavailable(f"API authentication failed. Please check your API key: {error}")
    if status is None and any(term in message for term in CONNECTION_TERMS):
        return ServiceUnavailable(str(error))
    return ServiceError(status or 500, str(error))


def _response_text(response) -> str:
    content = getattr(response, "content", response)
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, dict):
                parts.append(part.get("text", ""))
            else:
                parts.append(str(part))
        return "".join(parts)
    return content if isinstance(content, str) else str(content)


class LLMGenerationService(GenerationService):
    """GenerationService backed by a LangChain chat model."""

    def __init__(self, model_provider=None, temperature=0.7, max_retries=MAX_RETRIES, timeout=REQUEST_TIMEOUT):
        self.model_provider = model_provider or LLM_PROVIDER
        self.temperature = temperature
        self.max_retries = max_retries
        self.timeout = timeout

    async def generate(self, prompt: str, response_schema: dict = None) -> str:
        llm = get_llm(
            temperature=self.temperature,
            model_provider=self.model_provider,
            json_mode=response_schema is not None,
        )
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_retries),
                wait=wait_exponential(multiplier=1, min=2, max=60),
                retry=retry_if_exception(is_rate_limited),
                reraise=True,
            ):
                with attempt:
                    if attempt.retry_state.attempt_number > 1:
                        logger.warning(
                            f"API rate limit reached, retrying ({attempt.retry_state.attempt_number}/{self.max_retries})"
                        )
                    response = await asyncio.wait_for(
                        llm.ainvoke([HumanMessage(content=prompt)]),
                        timeout=self.timeout,
                    )
        except asyncio.TimeoutError:
            raise ServiceUnavailable(f"Request timed out after {self.timeout}s")
        except Exception as e:
            logger.error(f"Error invoking LLM: {e}")
            raise classify_provider_error(e) from e

        text = _response_text(response)
        if not text:
            raise ServiceError(500, "Unexpected empty response from the model")
        return text
