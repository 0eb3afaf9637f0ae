"""
Database engine and sessions for the competition engine.

Configured from the environment (a .env file is honoured):
    DATABASE_URL  default sqlite:///./competition.db
    SQL_ECHO      log every statement when true/1/yes
"""
import os
from pathlib import Path
from typing import Generator

from dotenv import load_dotenv
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from competition_engine import models  # noqa: F401  registers every table on SQLModel.metadata

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./competition.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("true", "1", "yes")


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Engine for ``database_url``. SQLite files get their directory created."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        # Sessions are used from FastAPI's threadpool
        connect_args["check_same_thread"] = False
        if ":memory:" not in database_url:
            Path(database_url.replace("sqlite:///", "", 1)).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(database_url, echo=echo, connect_args=connect_args)


engine: Engine = build_engine(DATABASE_URL, echo=SQL_ECHO)


def get_session() -> Generator[Session, None, None]:
    """Request-scoped session (FastAPI dependency)"""
    with Session(engine) as session:
        yield session


def init_db(target: Engine = engine) -> None:
    """Create every competition table that does not exist yet"""
    SQLModel.metadata.create_all(target)
