"""Tests for BaseService and service inheritance."""

from ammonomicon.infrastructure.store import CatalogStore
from ammonomicon.services.base import BaseService
from ammonomicon.services.catalog import CatalogService
from ammonomicon.services.entries import EntryService


class TestBaseService:
    def test_store_kept(self, store: CatalogStore) -> None:
        service = BaseService(store)
        assert service.store is store
        assert service._store is store

    def test_subclass_pattern(self, store: CatalogStore) -> None:
        class GunCounter(BaseService):
            def count(self) -> int:
                return len(self._store.fetch_all("guns"))

        with store.transaction() as txn:
            txn.insert_row("guns", {"name": "Shotgun"})
        assert GunCounter(store).count() == 1


class TestInheritance:
    def test_store_backed_services_extend_base(self) -> None:
        assert issubclass(CatalogService, BaseService)
        assert issubclass(EntryService, BaseService)
