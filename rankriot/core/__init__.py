"""Core configuration and utilities"""

from rankriot.core.config import settings
from rankriot.core.database import get_db, engine, Base

__all__ = ["settings", "get_db", "engine", "Base"]
