"""Entity store factory — one process-wide store, selected by STORE_BACKEND.

FastAPI dependency:
    store: Annotated[EntityStoreProtocol, Depends(get_entity_store)]
"""

from config.settings import settings
from src.ah_store.domain.repository import EntityStoreProtocol
from src.ah_store.infrastructure.memory import InMemoryEntityStore

_store: EntityStoreProtocol | None = None


def build_entity_store(backend: str) -> EntityStoreProtocol:
    if backend == "memory":
        return InMemoryEntityStore()
    if backend == "postgres":
        # Deferred so the memory backend never needs a database driver
        from src.ah_store.infrastructure.postgres import PostgresEntityStore

        return PostgresEntityStore()
    raise ValueError(f"Unknown STORE_BACKEND: {backend!r}")


def get_entity_store() -> EntityStoreProtocol:
    """Get or create the process-wide entity store."""
    global _store  # noqa: PLW0603
    if _store is None:
        _store = build_entity_store(settings.STORE_BACKEND)
    return _store


async def close_entity_store() -> None:
    global _store  # noqa: PLW0603
    if _store is not None:
        await _store.close()
        _store = None
