from dataclasses import dataclass, replace
from typing import Optional

from marketplace.config import StoreConfig, load_store_config
from marketplace.services.account_client import AccountClient
from marketplace.services.document_store import DocumentStore


@dataclass
class Backend:
    """Handles on the document database and account service for one client."""

    config: StoreConfig
    documents: DocumentStore
    accounts: AccountClient

    def for_session(self, session_id: Optional[str]) -> "Backend":
        return replace(self, accounts=self.accounts.for_session(session_id))


def build_backend(config: Optional[StoreConfig] = None) -> Backend:
    config = config or load_store_config()
    return Backend(
        config=config,
        documents=DocumentStore(db_path=config.db_path),
        accounts=AccountClient(db_path=config.db_path),
    )
