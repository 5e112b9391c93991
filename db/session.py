from sqlmodel import SQLModel, Session, create_engine

from core.config import DATABASE_URL

# Connects app to the relational store

# SQLite needs to be told that sessions may hop between FastAPI's worker threads
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

# The Wire / Link That Lets Us Pass Data from App -> db
# Note: echo=True will log all SQL statements, keep it off outside debugging
engine = create_engine(DATABASE_URL, echo=False, connect_args=connect_args)


def init_db(bind=None) -> None:
    """Create all tables that don't exist yet."""
    # Importing the package registers every table on SQLModel.metadata
    import models  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)


# Getter for this Wire, used as a FastAPI dependency
def get_session():
    with Session(engine) as session:
        try:
            yield session
        finally:
            session.close()
