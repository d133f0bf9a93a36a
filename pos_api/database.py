from fastapi import Request
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine, Session


def build_engine(database_url: str, **kwargs) -> Engine:
    if database_url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        return create_engine(database_url, echo=False, **kwargs)

    return create_engine(
        database_url,
        echo=False,
        pool_pre_ping=True,      # checks dead connections
        pool_recycle=1800,       # refresh every 30 min
        **kwargs,
    )


def create_db_and_tables(engine: Engine):
    from pos_api import models  # noqa: F401  registers every table
    SQLModel.metadata.create_all(engine)


def get_session(request: Request):
    with Session(request.app.state.engine) as session:
        yield session


def get_app_settings(request: Request):
    return request.app.state.settings
