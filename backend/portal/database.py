# backend/portal/database.py
from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .utils.logging import db_logger

Base = declarative_base()


def build_engine(database_url: str) -> Engine:
    """Create the process-wide engine for the given URL"""
    db_logger.info("Connecting to database", extra={"database_url": database_url.split("@")[-1]})
    return create_engine(
        database_url,
        connect_args={"check_same_thread": False} if database_url.startswith("sqlite") else {},
        echo=False
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
