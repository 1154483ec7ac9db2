"""SQLite engine and request-scoped sessions for chat history."""

from sqlalchemy import event
from sqlmodel import Session, SQLModel, create_engine

from galaxy_chat.core.config import settings

engine = create_engine(
    f"sqlite:///{settings.db_path}",
    echo=settings.debug,
    connect_args={"check_same_thread": False},
)


@event.listens_for(engine, "connect")
def _enable_foreign_keys(dbapi_connection, connection_record):
    # SQLite leaves FK enforcement off per connection; chat messages reference chats
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def init_db() -> None:
    import galaxy_chat.models  # noqa: F401 - register Chat, ChatMessage and User tables
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)
    SQLModel.metadata.create_all(engine)


def get_session():
    """One session per request; ChatStore commits its own writes."""
    with Session(engine) as session:
        yield session
