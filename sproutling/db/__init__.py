from sproutling.db.database import init_db, make_engine, make_session_factory, session_scope
from sproutling.db.models import Base, ItemMasteryRow

__all__ = [
    "Base",
    "ItemMasteryRow",
    "init_db",
    "make_engine",
    "make_session_factory",
    "session_scope",
]
