from threading import Lock

from timesync.core import config
from timesync.database import SessionLocal
from timesync.oracle import SuggestionAssistant, build_oracle
from timesync.routes.http_errors import to_http_exception
from timesync.scheduling.errors import SchedulingError
from timesync.scheduling.store import AppointmentStore
from timesync.scheduling.suggestions import SuggestionAdapter
from timesync.scheduling.workflow import BookingWorkflow
from timesync.storage import SqlKeyValueStore

_services_lock = Lock()
_store: AppointmentStore | None = None
_assistant: SuggestionAssistant | None = None


def get_store() -> AppointmentStore:
    global _store

    if _store is not None:
        return _store

    with _services_lock:
        if _store is None:
            store = AppointmentStore(SqlKeyValueStore(SessionLocal), key=config.STORAGE_KEY)
            store.load()
            _store = store

    return _store


def get_workflow() -> BookingWorkflow:
    try:
        return BookingWorkflow(get_store())
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc


def get_assistant() -> SuggestionAssistant:
    global _assistant

    if _assistant is not None:
        return _assistant

    try:
        store = get_store()
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc

    with _services_lock:
        if _assistant is None:
            _assistant = SuggestionAssistant(build_oracle(), SuggestionAdapter(store))

    return _assistant


def reset_services() -> None:
    global _store, _assistant

    with _services_lock:
        _store = None
        _assistant = None
