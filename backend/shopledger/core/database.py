"""SQLModel database engine and record store wiring."""
from sqlmodel import SQLModel, create_engine, Session
from shopledger.core.config import settings

# Import models so SQLModel.metadata knows about all tables
import shopledger.models.store  # noqa: F401
from shopledger.engine.bookkeeper import Bookkeeper
from shopledger.store.sql import SqlRecordStore

# check_same_thread off: FastAPI runs sync endpoints in a threadpool,
# the record store lock serializes access
engine = create_engine(
    settings.DATABASE_URL,
    connect_args={"check_same_thread": False},
    echo=False,
)

store = SqlRecordStore(engine)


def create_db_and_tables() -> None:
    """Create all tables defined in SQLModel models."""
    SQLModel.metadata.create_all(engine)


def get_session():
    """FastAPI dependency: yields a SQLModel session."""
    with Session(engine) as session:
        yield session


def get_bookkeeper() -> Bookkeeper:
    """FastAPI dependency: ledger services bound to the record store."""
    return Bookkeeper(store)
