"""OpenAI adapters for document analysis.

Uses the async Chat Completions API with Structured Outputs to produce a
validated SimplifiedAnalysis (plain-language breakdown) or
ContractAnalysisResult (obligations, key dates, payment terms).
"""

import json
import logging
from typing import Optional, TypeVar

from openai import (
    APIConnectionError,
    APITimeoutError,
    AsyncOpenAI,
    AuthenticationError,
    BadRequestError,
    InternalServerError,
    RateLimitError,
)
from pydantic import BaseModel
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from demystifier.core.config import settings
from demystifier.schemas.domain import ContractAnalysisResult, SimplifiedAnalysis

logger = logging.getLogger(__name__)

LLM_MODEL = settings.LLM_MODEL
LLM_MAX_CHARS = settings.LLM_MAX_CHARS
LLM_TEMPERATURE = settings.LLM_TEMPERATURE
LLM_TIMEOUT_S = settings.LLM_TIMEOUT_S
LLM_MAX_RETRIES = settings.LLM_MAX_RETRIES
LLM_RETRY_WAIT_S = settings.LLM_RETRY_WAIT_S

# Errors that are safe to retry (transient)
RETRYABLE_ERRORS = (
    RateLimitError,
    APIConnectionError,
    APITimeoutError,
    InternalServerError,
)

GENERAL_SYSTEM_PROMPT = """You are an expert legal analyst who explains documents to people without legal training.

Analyze the provided document and break it down for a layperson:

1. **summary**: A concise, plain-language summary of the entire document
2. **jargon**: Legal terms or phrases found in the document, each with a simple definition
3. **potential_risks**: Risks, unfavorable clauses, or ambiguous language the reader should notice
4. **actionable_next_steps**: Concrete steps the reader should consider taking

Write in clear, everyday language. Base every point on the document text only."""

CONTRACT_SYSTEM_PROMPT = """You are a meticulous legal document analyzer specializing in contract obligations and deadlines.

Read the entire contract and extract:

1. **obligations**: Every explicit obligation of any party (who, must_do, by_when, penalty)
   - Use "None specified" for penalty when the contract names none
2. **key_dates**: Critical non-payment dates (event_type is one of "Renewal Window Opens",
   "Notice Period Deadline", "Contract Expiry", "Other")
   - For a relative date, compute the absolute date from the contract's effective or expiry date when available
3. **payment_terms**: Every payment term (amount with currency, due_date, frequency, recipient)

Rules:
- For every date ('by_when', 'date', 'due_date'): when a specific date is stated, use YYYY-MM-DD.
  When it is relative or recurring, describe it concisely (e.g. "Within 48 hours of request",
  "The last business day of each quarter") instead of guessing a date.
- Every item MUST include source_span: the exact, verbatim quote from the contract it comes from.
- Return an empty list for a category with no items."""


class AnalysisError(RuntimeError):
    """Raised when a document analysis fails."""

    pass


ResultT = TypeVar("ResultT", bound=BaseModel)

# Lazy client initialization
_client: Optional[AsyncOpenAI] = None


def _get_client() -> AsyncOpenAI:
    """Get or create the OpenAI client (lazy initialization)."""
    global _client
    if _client is None:
        _client = AsyncOpenAI(api_key=settings.OPENAI_API_KEY or None, timeout=LLM_TIMEOUT_S)
    return _client


def _truncate_text(text: str, max_chars: int) -> str:
    """Truncate text to max_chars, preserving complete sentences where possible."""
    if len(text) <= max_chars:
        return text

    truncated = text[:max_chars]
    # Try to end at a sentence boundary
    last_period = truncated.rfind(".")
    if last_period > max_chars * 0.8:  # Only if we keep at least 80%
        truncated = truncated[: last_period + 1]

    return truncated


def _make_retry_decorator():
    """Create tenacity retry decorator with configured settings."""
    return retry(
        retry=retry_if_exception_type(RETRYABLE_ERRORS),
        stop=stop_after_attempt(LLM_MAX_RETRIES),
        wait=wait_exponential(multiplier=LLM_RETRY_WAIT_S, min=LLM_RETRY_WAIT_S, max=60),
        reraise=True,
    )


async def _call_openai(
    client: AsyncOpenAI,
    text: str,
    *,
    system_prompt: str,
    result_model: type[ResultT],
    schema_name: str,
) -> ResultT:
    """Make one OpenAI API call with structured output and validate it."""
    response = await client.chat.completions.create(
        model=LLM_MODEL,
        temperature=LLM_TEMPERATURE,
        messages=[
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": f"Analyze this document:\n\n{text}"},
        ],
        response_format={
            "type": "json_schema",
            "json_schema": {
                "name": schema_name,
                "strict": True,
                "schema": result_model.model_json_schema(),
            },
        },
    )

    content = response.choices[0].message.content
    if not content:
        raise AnalysisError("Empty response from LLM")

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise AnalysisError(f"Invalid JSON response: {e}")

    return result_model.model_validate(data)


async def _analyze(
    text: str,
    client: Optional[AsyncOpenAI],
    *,
    system_prompt: str,
    result_model: type[ResultT],
    schema_name: str,
) -> ResultT:
    if not text or not text.strip():
        raise AnalysisError("Empty text provided")

    actual_client = client if client is not None else _get_client()
    truncated_text = _truncate_text(text, LLM_MAX_CHARS)
    logger.info("Requesting %s for %d chars", schema_name, len(truncated_text))

    retryable_call = _make_retry_decorator()(_call_openai)

    try:
        return await retryable_call(
            actual_client,
            truncated_text,
            system_prompt=system_prompt,
            result_model=result_model,
            schema_name=schema_name,
        )
    except AnalysisError:
        raise
    except RETRYABLE_ERRORS as e:
        # Retries exhausted (reraise=True means original exception is re-raised)
        raise AnalysisError(f"API error after {LLM_MAX_RETRIES} retries: {e}")
    except (AuthenticationError, BadRequestError) as e:
        raise AnalysisError(f"Non-retryable API error: {e}")
    except Exception as e:
        raise AnalysisError(f"Unexpected error: {e}")


async def analyze_general(text: str, client: Optional[AsyncOpenAI] = None) -> SimplifiedAnalysis:
    """Produce a plain-language analysis of a document.

    Args:
        text: Full document text.
        client: Optional AsyncOpenAI client (for testing). If None, uses default client.

    Raises:
        AnalysisError: On any failure (API, validation, exhausted retries).
    """
    return await _analyze(
        text,
        client,
        system_prompt=GENERAL_SYSTEM_PROMPT,
        result_model=SimplifiedAnalysis,
        schema_name="simplified_analysis",
    )


async def analyze_contract(text: str, client: Optional[AsyncOpenAI] = None) -> ContractAnalysisResult:
    """Extract obligations, key dates and payment terms from a contract.

    Args:
        text: Full contract text.
        client: Optional AsyncOpenAI client (for testing). If None, uses default client.

    Raises:
        AnalysisError: On any failure (API, validation, exhausted retries).
    """
    return await _analyze(
        text,
        client,
        system_prompt=CONTRACT_SYSTEM_PROMPT,
        result_model=ContractAnalysisResult,
        schema_name="contract_analysis",
    )


__all__ = ["AnalysisError", "analyze_contract", "analyze_general"]
