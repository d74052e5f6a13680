"""BaseService: abstract foundation for all ammonomicon services.

Every service receives a :class:`CatalogStore` at construction time. The
store provides read access for index builds and transactional access for
mutations via ``self._store.transaction()``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ammonomicon.infrastructure.store import CatalogStore


class BaseService:
    """Abstract base for all service-layer classes.

    Usage::

        class EntryService(BaseService):
            def create(self, category_id: str, fields: dict[str, str]) -> ServiceResult:
                with self._store.transaction() as txn:
                    ...
    """

    def __init__(self, store: CatalogStore) -> None:
        self._store = store

    @property
    def store(self) -> CatalogStore:
        return self._store
