import os
from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from timesync.database import Base  # noqa: E402
from timesync.models.key_value import KeyValueEntry  # noqa: E402
from timesync.scheduling.store import AppointmentStore  # noqa: E402
from timesync.scheduling.workflow import BookingWorkflow  # noqa: E402
from timesync.storage import SqlKeyValueStore  # noqa: E402

STORAGE_KEY = 'timesync_appointments_test'

# Monday 3 June 2024, 08:00.
FIXED_NOW = datetime(2024, 6, 3, 8, 0)


@pytest.fixture
def session_factory():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine, tables=[KeyValueEntry.__table__])
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    try:
        yield testing_session_local
    finally:
        Base.metadata.drop_all(bind=engine, tables=[KeyValueEntry.__table__])
        engine.dispose()


@pytest.fixture
def kv_store(session_factory):
    return SqlKeyValueStore(session_factory)


@pytest.fixture
def store(kv_store):
    appointment_store = AppointmentStore(kv_store, key=STORAGE_KEY)
    appointment_store.load()
    return appointment_store


@pytest.fixture
def workflow(store):
    return BookingWorkflow(store, clock=lambda: FIXED_NOW)
