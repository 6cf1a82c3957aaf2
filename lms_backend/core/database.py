from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from lms_backend.core.config import settings

DATABASE_URL = settings.DATABASE_URL

# SQLite connections are handed across threads by FastAPI's threadpool and by the sweep workers.
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    """
    Dependency to get a database session.
    Ensures the database session is always closed after the request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

# Function to create all tables.
# This is typically used with Alembic for migrations in a production setup.
def create_db_and_tables(bind=None):
    # Registers every model with Base.metadata before create_all
    from lms_backend import models  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)

if __name__ == "__main__":
    print("Creating database tables based on models...")
    create_db_and_tables()
    print("Database tables created (if they didn't exist).")
