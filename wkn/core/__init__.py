from wkn.core.config import settings
from wkn.core.db import get_db

__all__ = ["settings", "get_db"]
