"""Documentation generation through OpenRouter's OpenAI-compatible API."""

import logging

import openai
from openai import AsyncOpenAI

from config import settings
from errors import (
    DocCreatorError,
    GenerationFailed,
    GenerationTimeout,
    InvalidRequest,
    QuotaExceeded,
)
from schemas import GenerationOptions, GenerationResult, ModelInfo, RepoAnalysis

from .prompt import SYSTEM_PROMPT, build_prompt

logger = logging.getLogger(__name__)

ALLOWED_MODELS = [
    "openai/gpt-3.5-turbo",
    "google/gemini-pro",
    "anthropic/claude-3-haiku",
    "meta-llama/llama-3.1-8b-instruct",
]

# Substrings a catalog model id must contain to be offered to users
MODEL_FILTERS = ("claude", "gpt", "gemini", "llama", "mistral", "deepseek")
MAX_LISTED_MODELS = 10

FALLBACK_MODELS = [
    ModelInfo(id="openai/gpt-3.5-turbo", name="GPT-3.5 Turbo"),
    ModelInfo(id="google/gemini-pro", name="Gemini Pro"),
    ModelInfo(id="anthropic/claude-3-haiku", name="Claude 3 Haiku"),
    ModelInfo(id="meta-llama/llama-3.1-8b-instruct", name="Llama 3.1 8B Instruct"),
]

# Vendor error code → error class
_ERROR_CODES: dict[int, type[DocCreatorError]] = {
    402: QuotaExceeded,
    408: GenerationTimeout,
    400: InvalidRequest,
}

_llm_client: AsyncOpenAI | None = None


def _get_llm_client() -> AsyncOpenAI:
    global _llm_client
    if _llm_client is None:
        _llm_client = AsyncOpenAI(
            api_key=settings.openrouter_api_key,
            base_url=settings.openrouter_base_url,
            timeout=settings.generation_timeout,
            max_retries=0,
            default_headers={
                "HTTP-Referer": settings.frontend_url or "http://localhost:3000",
                "X-Title": "Doc Creator",
            },
        )
    return _llm_client


def resolve_model(requested: str | None) -> str:
    """Requested model if it is on the allow-list, else the configured default."""
    if requested in ALLOWED_MODELS:
        return requested
    if requested:
        logger.info(f"Model {requested!r} not allowed, using {settings.default_model}")
    return settings.default_model


def _error_for_code(code) -> DocCreatorError:
    try:
        code = int(code)
    except (TypeError, ValueError):
        return GenerationFailed()
    return _ERROR_CODES.get(code, GenerationFailed)()


def _status_error_code(exc: openai.APIStatusError):
    """OpenRouter puts its own code in the error body; fall back to the HTTP status."""
    code = getattr(exc, "code", None)
    try:
        return int(code)
    except (TypeError, ValueError):
        return exc.status_code


async def generate_documentation(
    repo_data: RepoAnalysis, options: GenerationOptions | None = None
) -> GenerationResult:
    """Send one non-streaming completion request and return the generated text.

    No retries: a failed or timed-out request is terminal.

    Raises:
        QuotaExceeded, GenerationTimeout, InvalidRequest, GenerationFailed
    """
    options = options or GenerationOptions()
    model = resolve_model(options.model)
    max_tokens = min(options.max_tokens or settings.max_tokens, settings.max_tokens)
    prompt = build_prompt(repo_data, options)

    try:
        client = _get_llm_client()
    except ValueError as e:
        logger.error(f"OpenRouter client unavailable: {e}")
        raise GenerationFailed("AI generation is not configured on the server.") from e

    try:
        completion = await client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            temperature=options.temperature,
            max_tokens=max_tokens,
            stream=False,
        )
    except openai.APITimeoutError as e:
        logger.error(f"OpenRouter request timed out after {settings.generation_timeout}s")
        raise GenerationTimeout() from e
    except openai.APIStatusError as e:
        logger.error(f"OpenRouter API error {e.status_code}: {e.body}")
        raise _error_for_code(_status_error_code(e)) from e
    except openai.APIError as e:
        logger.error(f"OpenRouter request failed: {e}")
        raise GenerationFailed() from e

    # OpenRouter can report upstream provider failures in a 200 body.
    error = getattr(completion, "error", None)
    if error:
        logger.error(f"OpenRouter returned an error body: {error}")
        raise _error_for_code(error.get("code") if isinstance(error, dict) else None)

    if not completion.choices:
        logger.error("OpenRouter response contained no choices")
        raise GenerationFailed()

    choice = completion.choices[0]
    content = (choice.message.content or "").strip() if choice.message else ""
    if not content:
        logger.error(f"OpenRouter returned empty content (finish_reason={choice.finish_reason})")
        raise GenerationFailed()

    usage = completion.usage.model_dump() if completion.usage else None
    logger.info(
        f"Generated {len(content)} chars with {completion.model or model} "
        f"(finish_reason={choice.finish_reason})"
    )
    return GenerationResult(
        content=content,
        model=completion.model or model,
        usage=usage,
        finish_reason=choice.finish_reason,
    )


async def list_models() -> list[ModelInfo]:
    """Catalog models matching MODEL_FILTERS; the fallback list on any failure."""
    try:
        client = _get_llm_client()
        page = await client.models.list()
    except (openai.OpenAIError, ValueError) as e:
        logger.warning(f"Failed to fetch OpenRouter models, using fallback list: {e}")
        return list(FALLBACK_MODELS)

    models = [
        ModelInfo(id=m.id, name=getattr(m, "name", None) or m.id)
        for m in page.data
        if any(key in m.id for key in MODEL_FILTERS)
    ]
    return models[:MAX_LISTED_MODELS]
