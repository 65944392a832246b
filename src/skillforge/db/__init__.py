"""Database module for SQLite persistence.

Provides:
- Database connection management and schema initialization
- Repositories for generated content (topics, concepts, problems)
- Repositories for user progress and profiles
"""

from skillforge.db.content_repository import ContentRepository
from skillforge.db.database import Database
from skillforge.db.profiles_repository import ProfilesRepository
from skillforge.db.progress_repository import ProgressRepository

__all__ = ["ContentRepository", "Database", "ProfilesRepository", "ProgressRepository"]
