import logging
from dataclasses import dataclass
from typing import List, Optional

from marketplace.config import SERVICES_LIST_LIMIT
from marketplace.models import CreateServiceData, Service, ServiceUpdate
from marketplace.services.backend import Backend
from marketplace.services.document_store import (
    DocumentNotFoundError,
    DocumentStoreError,
    Query,
    unique_id,
    utc_now_iso,
)
from marketplace.services.records import service_from_document

logger = logging.getLogger(__name__)


@dataclass
class ListingStore:
    """Service listings. Deleting a listing only flips ``isActive``."""

    backend: Backend
    list_limit: int = SERVICES_LIST_LIMIT

    @property
    def _collection(self) -> str:
        return self.backend.config.services_collection_id

    def create_service(self, data: CreateServiceData, provider_id: str, provider_name: str) -> Service:
        payload = data.model_dump(by_alias=True, exclude_none=True)
        payload.update(
            {
                "providerId": provider_id,
                "providerName": provider_name,
                "isActive": True,
                "createdAt": utc_now_iso(),
            }
        )
        try:
            doc = self.backend.documents.create_document(
                self.backend.config.database_id, self._collection, unique_id(), payload
            )
        except DocumentStoreError:
            logger.exception("Create service failed for provider %s", provider_id)
            raise
        return service_from_document(doc)

    def get_all_services(self) -> List[Service]:
        try:
            result = self.backend.documents.list_documents(
                self.backend.config.database_id,
                self._collection,
                [
                    Query.equal("isActive", [True]),
                    Query.order_desc("createdAt"),
                    Query.limit(self.list_limit),
                ],
            )
        except DocumentStoreError:
            logger.exception("Get services failed")
            raise
        return [service_from_document(doc) for doc in result.documents]

    def get_service_by_id(self, service_id: str) -> Optional[Service]:
        try:
            doc = self.backend.documents.get_document(self.backend.config.database_id, self._collection, service_id)
        except DocumentNotFoundError:
            logger.info("Service %s not found", service_id)
            return None
        except DocumentStoreError:
            logger.exception("Get service %s failed", service_id)
            return None
        return service_from_document(doc)

    def get_services_by_provider(self, provider_id: str) -> List[Service]:
        try:
            result = self.backend.documents.list_documents(
                self.backend.config.database_id,
                self._collection,
                [
                    Query.equal("providerId", [provider_id]),
                    Query.equal("isActive", [True]),
                    Query.order_desc("createdAt"),
                ],
            )
        except DocumentStoreError:
            logger.exception("Get provider services failed for %s", provider_id)
            raise
        return [service_from_document(doc) for doc in result.documents]

    def update_service(self, service_id: str, data: ServiceUpdate) -> Service:
        changes = data.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)
        try:
            doc = self.backend.documents.update_document(
                self.backend.config.database_id, self._collection, service_id, changes
            )
        except DocumentStoreError:
            logger.exception("Update service %s failed", service_id)
            raise
        return service_from_document(doc)

    def delete_service(self, service_id: str) -> None:
        try:
            self.backend.documents.update_document(
                self.backend.config.database_id, self._collection, service_id, {"isActive": False}
            )
        except DocumentStoreError:
            logger.exception("Delete service %s failed", service_id)
            raise
