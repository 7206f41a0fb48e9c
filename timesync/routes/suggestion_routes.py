from datetime import date, datetime

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, field_validator

from timesync.oracle import SuggestionAssistant
from timesync.routes.http_errors import to_http_exception
from timesync.scheduling.errors import SchedulingError
from timesync.scheduling.overlap import BookAvailability
from timesync.scheduling.suggestions import BookingDraft
from timesync.scheduling.workflow import Role
from timesync.services import get_assistant

router = APIRouter(tags=['suggestions'])

MAX_SUGGESTION_TEXT_LENGTH = 500


class SuggestionRequest(BaseModel):
    role: Role
    text: str

    @field_validator('text')
    @classmethod
    def validate_text(cls, value: str) -> str:
        normalized = value.strip()
        if len(normalized) > MAX_SUGGESTION_TEXT_LENGTH:
            raise ValueError(f'Requests must be {MAX_SUGGESTION_TEXT_LENGTH} characters or fewer.')
        return normalized


class SuggestionStatusResponse(BaseModel):
    enabled: bool
    detail: str


class BookingDraftResponse(BaseModel):
    start: datetime
    date: date
    time: str
    duration_minutes: int
    title: str | None = None
    target_id: str | None = None
    action: str
    week_of: date
    reasoning: str | None = None


class SuggestionResponse(BaseModel):
    request_id: int
    status: str
    draft: BookingDraftResponse | None = None


def to_draft_response(draft: BookingDraft) -> BookingDraftResponse:
    return BookingDraftResponse(
        start=draft.start,
        date=draft.start.date(),
        time=draft.time,
        duration_minutes=draft.duration_minutes,
        title=draft.title,
        target_id=draft.target_id,
        action='book' if isinstance(draft.intent, BookAvailability) else 'open',
        week_of=draft.week_of,
        reasoning=draft.reasoning,
    )


@router.get('/status', response_model=SuggestionStatusResponse)
def get_suggestion_status(assistant: SuggestionAssistant = Depends(get_assistant)):
    if assistant.enabled:
        return SuggestionStatusResponse(enabled=True, detail='Smart Assistant ready.')
    return SuggestionStatusResponse(
        enabled=False,
        detail='AI scheduling features are turned off, but manual booking still works!',
    )


@router.post('', response_model=SuggestionResponse, status_code=status.HTTP_200_OK)
async def submit_suggestion(
    data: SuggestionRequest,
    assistant: SuggestionAssistant = Depends(get_assistant),
):
    try:
        result = await assistant.interpret(data.text, data.role)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc

    if result.superseded:
        return SuggestionResponse(request_id=result.request_id, status='superseded')
    return SuggestionResponse(
        request_id=result.request_id,
        status='ready',
        draft=to_draft_response(result.draft),
    )
