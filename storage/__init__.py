"""
Storage package
Database engine and sessions, ORM models, repositories and object storage
"""
# Local imports
from .database import (
    get_session,
    init_db,
    cleanup_db,
    Base,
    engine,
    async_session_factory
)
from .models import (
    Occasion,
    Card
)
from .repositories import (
    BaseRepository,
    CardRepository,
    OccasionRepository
)
from .object_store import (
    ObjectStore,
    build_cover_key,
    extract_storage_key,
    make_object_store
)

__all__ = [
    # Database
    "get_session",
    "init_db",
    "cleanup_db",
    "Base",
    "engine",
    "async_session_factory",

    # Models
    "Occasion",
    "Card",

    # Repositories
    "BaseRepository",
    "CardRepository",
    "OccasionRepository",

    # Object storage
    "ObjectStore",
    "build_cover_key",
    "extract_storage_key",
    "make_object_store",
]
