from sqlalchemy.engine import Engine
from .db import engine
from .models import Base
from .models import location, box, item


def init_db(bind: Engine = engine) -> None:
    """Create any missing tables. Alembic owns schema changes after that."""
    Base.metadata.create_all(bind=bind)


if __name__ == "__main__":
    init_db()
