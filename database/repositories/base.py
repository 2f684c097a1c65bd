from sqlalchemy.orm import Session


class BaseRepository:
    """Repositories share the caller's Session; the unit of work owns commit/rollback."""

    def __init__(self, db: Session):
        self.db = db

    def _persist(self, obj):
        self.db.add(obj)
        self.db.flush()
        return obj
