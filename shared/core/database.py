from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from shared.core.config import FLEET_DATABASE_URL

Base = declarative_base()

POOL_SIZE = 5
MAX_OVERFLOW = 5


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,
        "pool_recycle": 300,
        "pool_size": POOL_SIZE,          # max idle connections
        "max_overflow": MAX_OVERFLOW,    # max temporary extra connections
        "pool_timeout": 30,              # wait time before failing
    }


# Fleet DB
fleet_engine = create_engine(FLEET_DATABASE_URL, **_engine_options(FLEET_DATABASE_URL))
FleetSessionLocal = sessionmaker(
    autocommit=False, autoflush=False, bind=fleet_engine)


# Dependency
def get_fleet_db():
    db = FleetSessionLocal()
    try:
        yield db
    finally:
        db.close()
