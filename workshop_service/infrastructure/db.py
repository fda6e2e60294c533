from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .models import Base


class Database:
    """Owns the engine (connection pool) and hands out sessions.

    Created once at application startup and disposed on shutdown; request
    handlers only ever see sessions through ``get_db``.
    """

    def __init__(self, url: str, echo: bool = False):
        connect_args = {}
        engine_kwargs = {"pool_pre_ping": True, "echo": echo}
        if url.startswith("postgresql"):
            connect_args = {"client_encoding": "utf8"}
        if url.startswith("sqlite"):
            connect_args = {"check_same_thread": False}
            if ":memory:" in url:
                # one shared connection, otherwise every thread sees an empty db
                engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs.update(pool_size=10, max_overflow=20, pool_recycle=3600)

        self.engine = create_engine(url, connect_args=connect_args, **engine_kwargs)
        self.SessionLocal = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)

    def create_all(self) -> None:
        Base.metadata.create_all(bind=self.engine)
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def drop_all(self) -> None:
        Base.metadata.drop_all(bind=self.engine)

    def session(self) -> Session:
        return self.SessionLocal()

    def dispose(self) -> None:
        self.engine.dispose()


def get_db(request: Request):
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
