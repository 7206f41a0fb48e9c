from sqlalchemy import inspect

from timesync.models.key_value import KeyValueEntry


def test_created_table_includes_updated_at(session_factory) -> None:
    engine = session_factory.kw['bind']

    columns = {column['name'] for column in inspect(engine).get_columns(KeyValueEntry.__tablename__)}

    assert columns == {'key', 'value', 'updated_at'}


def test_write_stamps_updated_at(session_factory, kv_store) -> None:
    kv_store.write('timesync_appointments_test', '[]')

    session = session_factory()
    try:
        entry = session.get(KeyValueEntry, 'timesync_appointments_test')
        assert entry.value == '[]'
        assert entry.updated_at is not None
    finally:
        session.close()
