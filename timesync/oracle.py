"""
Natural-language booking oracle and the assistant that calls it.
"""
import asyncio
import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Protocol

from openai import AsyncOpenAI, OpenAIError
from pydantic import ValidationError

from timesync.core import config
from timesync.scheduling.errors import OracleUnavailable, OracleUnparseable
from timesync.scheduling.suggestions import BookingDraft, BookingSuggestion, SuggestionAdapter
from timesync.scheduling.workflow import DEFAULT_DURATION_MINUTES, Role

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a smart calendar assistant.
Today is {today}.
Extract the desired date, start time, duration, and meeting title from the user's natural language request.
If the duration is not specified, assume {default_duration} minutes.
Return ONLY a JSON object with the keys "date" (YYYY-MM-DD), "startTime" (HH:mm, 24-hour),
"durationMinutes" (integer), "title" (string) and "reasoning" (short explanation of how you interpreted the request).
Omit any key you cannot determine."""


class SuggestionOracle(Protocol):
    enabled: bool

    async def suggest(self, free_text: str, reference_now: datetime) -> BookingSuggestion | None:
        ...


class DisabledOracle:
    """Stand-in used when no oracle credential is configured."""

    enabled = False

    async def suggest(self, free_text: str, reference_now: datetime) -> BookingSuggestion | None:
        raise OracleUnavailable('AI features are disabled because no API Key was provided.')


class OpenAIOracle:
    """Oracle backed by an OpenAI-compatible chat completions endpoint."""

    enabled = True

    def __init__(
        self,
        api_key: str,
        model: str = config.ORACLE_MODEL,
        base_url: str | None = config.ORACLE_BASE_URL,
        timeout: float = config.ORACLE_TIMEOUT_SECONDS,
        max_retries: int = config.ORACLE_MAX_RETRIES,
        client: AsyncOpenAI | None = None,
    ):
        self.model = model
        self.client = client or AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=max_retries,
        )
        logger.info(f"Initialized booking oracle: {self.model}")

    def build_messages(self, free_text: str, reference_now: datetime) -> list[dict]:
        system_prompt = SYSTEM_PROMPT.format(
            today=reference_now.strftime('%A %B %d %Y'),
            default_duration=DEFAULT_DURATION_MINUTES,
        )
        return [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": free_text},
        ]

    async def suggest(self, free_text: str, reference_now: datetime) -> BookingSuggestion | None:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=self.build_messages(free_text, reference_now),
            response_format={"type": "json_object"},
            temperature=0.1,
        )
        if not response.choices:
            return None
        return parse_oracle_payload(response.choices[0].message.content)


def parse_oracle_payload(content: str | None) -> BookingSuggestion | None:
    """Parse raw oracle text into a suggestion, or None when it is not usable JSON."""
    if not content or not content.strip():
        return None

    text = content.strip()
    if text.startswith("```"):
        text = text.strip("`")
        if text.lower().startswith("json"):
            text = text[4:]

    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        logger.warning("Oracle returned non-JSON content")
        return None

    if not isinstance(data, dict):
        return None

    try:
        return BookingSuggestion.model_validate(data)
    except ValidationError:
        logger.warning("Oracle returned an unexpected payload shape")
        return None


def build_oracle(api_key: str | None = None) -> SuggestionOracle:
    api_key = config.ORACLE_API_KEY if api_key is None else api_key
    if not api_key or not api_key.strip():
        logger.warning("Booking oracle not initialized (missing key); suggestions disabled")
        return DisabledOracle()
    return OpenAIOracle(api_key=api_key.strip())


@dataclass(frozen=True)
class SuggestionResult:
    request_id: int
    superseded: bool
    draft: BookingDraft | None = None


class SuggestionAssistant:
    """Runs oracle requests so that only the most recent one is acted upon.

    A response arriving after a newer request was issued is reported as
    superseded and its draft is dropped.
    """

    def __init__(
        self,
        oracle: SuggestionOracle,
        adapter: SuggestionAdapter,
        timeout: float = config.ORACLE_TIMEOUT_SECONDS,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.oracle = oracle
        self.adapter = adapter
        self.timeout = timeout
        self._clock = clock
        self._latest_request_id = 0

    @property
    def enabled(self) -> bool:
        return self.oracle.enabled

    async def interpret(self, free_text: str, role: Role) -> SuggestionResult:
        if not free_text or not free_text.strip():
            raise OracleUnparseable('Describe when you want to meet.')
        if not self.enabled:
            raise OracleUnavailable('AI features are disabled because no API Key was provided.')

        self._latest_request_id += 1
        request_id = self._latest_request_id

        try:
            suggestion = await asyncio.wait_for(
                self.oracle.suggest(free_text.strip(), self._clock()),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as exc:
            logger.warning(f"Oracle request {request_id} timed out after {self.timeout}s")
            if request_id != self._latest_request_id:
                return SuggestionResult(request_id=request_id, superseded=True)
            raise OracleUnavailable() from exc
        except (OpenAIError, OSError) as exc:
            logger.exception(f"Oracle request {request_id} failed")
            if request_id != self._latest_request_id:
                return SuggestionResult(request_id=request_id, superseded=True)
            raise OracleUnavailable() from exc

        if request_id != self._latest_request_id:
            logger.info(f"Discarding oracle response {request_id}; request {self._latest_request_id} is newer")
            return SuggestionResult(request_id=request_id, superseded=True)

        draft = self.adapter.to_draft(role, suggestion)
        return SuggestionResult(request_id=request_id, superseded=False, draft=draft)
