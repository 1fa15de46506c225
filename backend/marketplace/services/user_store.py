import logging
from dataclasses import dataclass
from typing import Optional

from pydantic import ValidationError

from marketplace.models import AccountSession, RegisterData, User
from marketplace.services.account_client import AccountError, NoSessionError
from marketplace.services.backend import Backend
from marketplace.services.document_store import DocumentStoreError, Query, unique_id, utc_now_iso
from marketplace.services.records import user_from_document

logger = logging.getLogger(__name__)


@dataclass
class UserStore:
    backend: Backend

    @property
    def _collection(self) -> str:
        return self.backend.config.users_collection_id

    @property
    def session_id(self) -> Optional[str]:
        return self.backend.accounts.current_session_id

    def _drop_existing_session(self) -> None:
        try:
            self.backend.accounts.delete_session("current")
        except NoSessionError:
            pass

    def register_user(self, data: RegisterData) -> User:
        try:
            self._drop_existing_session()
            account = self.backend.accounts.create(unique_id(), data.email, data.password, data.name)
            self.backend.accounts.create_email_password_session(data.email, data.password)
            doc = self.backend.documents.create_document(
                self.backend.config.database_id,
                self._collection,
                unique_id(),
                {
                    "name": data.name,
                    "email": account.email,
                    "role": data.role,
                    "createdAt": utc_now_iso(),
                },
            )
        except (AccountError, DocumentStoreError):
            logger.exception("Registration failed for %s", data.email)
            raise
        logger.info("Registered %s user %s", data.role, doc["$id"])
        return user_from_document(doc)

    def login_user(self, email: str, password: str) -> AccountSession:
        try:
            self._drop_existing_session()
            return self.backend.accounts.create_email_password_session(email, password)
        except AccountError:
            logger.exception("Login failed for %s", email)
            raise

    def logout_user(self) -> None:
        try:
            self.backend.accounts.delete_session("current")
        except AccountError:
            logger.exception("Logout failed")
            raise

    def get_current_user(self) -> Optional[User]:
        if not self.session_id:
            return None
        try:
            account = self.backend.accounts.get()
            result = self.backend.documents.list_documents(
                self.backend.config.database_id,
                self._collection,
                [Query.equal("email", account.email)],
            )
        except (AccountError, DocumentStoreError) as exc:
            logger.info("No active session: %s", exc)
            return None
        if not result.documents:
            logger.info("No user document for account %s", account.id)
            return None
        doc = result.documents[0]
        try:
            return user_from_document(doc)
        except ValidationError:
            logger.warning("User document %s for account %s has no valid role", doc["$id"], account.id)
            return None
