import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from timesync.core import config
from timesync.database import Base, engine
from timesync.models import key_value
from timesync.routes import calendar_routes, suggestion_routes
from timesync.scheduling.errors import PersistenceError
from timesync.services import get_assistant, get_store

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)

app = FastAPI(title='TimeSync')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_services() -> None:
    config.validate_runtime_config()
    try:
        Base.metadata.create_all(bind=engine, tables=[key_value.KeyValueEntry.__table__])
        get_store()
        get_assistant()
    except (SQLAlchemyError, PersistenceError):
        logger.exception('Appointment storage initialization failed. Check DATABASE_URL.')


@app.get('/')
def root():
    return {'status': 'TimeSync API Running'}


app.include_router(calendar_routes.router, prefix='/calendar')
app.include_router(suggestion_routes.router, prefix='/suggestions')
