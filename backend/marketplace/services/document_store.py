import json
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock
from typing import Any, Dict, List, Optional, Sequence
from uuid import uuid4


class DocumentStoreError(RuntimeError):
    """Base class for document store failures."""


class DocumentNotFoundError(DocumentStoreError):
    pass


class DocumentStoreValidationError(DocumentStoreError):
    pass


def unique_id() -> str:
    return uuid4().hex[:20]


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class QueryClause:
    method: str
    attribute: Optional[str] = None
    values: tuple = ()


class Query:
    """Builders for the three query shapes the marketplace needs."""

    @staticmethod
    def equal(attribute: str, value: Any) -> QueryClause:
        values = tuple(value) if isinstance(value, (list, tuple)) else (value,)
        return QueryClause("equal", attribute, values)

    @staticmethod
    def order_desc(attribute: str) -> QueryClause:
        return QueryClause("orderDesc", attribute)

    @staticmethod
    def limit(count: int) -> QueryClause:
        return QueryClause("limit", None, (int(count),))


@dataclass
class DocumentList:
    total: int
    documents: List[Dict[str, Any]]


@dataclass
class DocumentStore:
    """JSON documents grouped by database and collection, kept in SQLite.

    Documents come back as plain dicts carrying ``$id``, ``$createdAt`` and
    ``$updatedAt`` next to their own fields.
    """

    db_path: str

    def __post_init__(self) -> None:
        self._lock = Lock()
        path = Path(self.db_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.db_path = str(path)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        with self._lock:
            with self._connect() as conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS documents (
                        seq INTEGER PRIMARY KEY AUTOINCREMENT,
                        database_id TEXT NOT NULL,
                        collection_id TEXT NOT NULL,
                        id TEXT NOT NULL,
                        data_json TEXT NOT NULL,
                        created_at TEXT NOT NULL,
                        updated_at TEXT NOT NULL,
                        UNIQUE (database_id, collection_id, id)
                    )
                    """
                )
                conn.commit()

    def _decode_data(self, raw_value: Any) -> Dict[str, Any]:
        if not raw_value:
            return {}
        try:
            parsed = json.loads(raw_value)
        except json.JSONDecodeError:
            return {}
        return parsed if isinstance(parsed, dict) else {}

    def _row_to_document(self, row: sqlite3.Row) -> Dict[str, Any]:
        data = self._decode_data(row["data_json"])
        return {
            "$id": row["id"],
            "$collectionId": row["collection_id"],
            "$databaseId": row["database_id"],
            "$createdAt": row["created_at"],
            "$updatedAt": row["updated_at"],
            **data,
        }

    def _clean_payload(self, data: Dict[str, Any]) -> Dict[str, Any]:
        payload = {key: value for key, value in data.items() if not key.startswith("$")}
        try:
            json.dumps(payload)
        except (TypeError, ValueError) as exc:
            raise DocumentStoreValidationError(f"Document is not JSON serialisable: {exc}") from exc
        return payload

    def create_document(
        self,
        database_id: str,
        collection_id: str,
        document_id: str,
        data: Dict[str, Any],
    ) -> Dict[str, Any]:
        if not document_id.strip():
            raise DocumentStoreValidationError("Document id is required")
        payload = self._clean_payload(data)
        now = utc_now_iso()
        with self._lock:
            with self._connect() as conn:
                try:
                    conn.execute(
                        """
                        INSERT INTO documents (database_id, collection_id, id, data_json, created_at, updated_at)
                        VALUES (?, ?, ?, ?, ?, ?)
                        """,
                        (database_id, collection_id, document_id, json.dumps(payload), now, now),
                    )
                except sqlite3.IntegrityError as exc:
                    raise DocumentStoreValidationError(f"Document {document_id} already exists") from exc
                conn.commit()
                row = conn.execute(
                    "SELECT * FROM documents WHERE database_id = ? AND collection_id = ? AND id = ?",
                    (database_id, collection_id, document_id),
                ).fetchone()
        return self._row_to_document(row)

    def get_document(self, database_id: str, collection_id: str, document_id: str) -> Dict[str, Any]:
        with self._lock:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT * FROM documents WHERE database_id = ? AND collection_id = ? AND id = ?",
                    (database_id, collection_id, document_id),
                ).fetchone()
        if not row:
            raise DocumentNotFoundError(f"Document {document_id} not found in {collection_id}")
        return self._row_to_document(row)

    def update_document(
        self,
        database_id: str,
        collection_id: str,
        document_id: str,
        data: Dict[str, Any],
    ) -> Dict[str, Any]:
        changes = self._clean_payload(data)
        with self._lock:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT * FROM documents WHERE database_id = ? AND collection_id = ? AND id = ?",
                    (database_id, collection_id, document_id),
                ).fetchone()
                if not row:
                    raise DocumentNotFoundError(f"Document {document_id} not found in {collection_id}")
                current = self._decode_data(row["data_json"])
                current.update(changes)
                conn.execute(
                    "UPDATE documents SET data_json = ?, updated_at = ? WHERE seq = ?",
                    (json.dumps(current), utc_now_iso(), row["seq"]),
                )
                conn.commit()
                updated = conn.execute("SELECT * FROM documents WHERE seq = ?", (row["seq"],)).fetchone()
        return self._row_to_document(updated)

    def list_documents(
        self,
        database_id: str,
        collection_id: str,
        queries: Optional[Sequence[QueryClause]] = None,
    ) -> DocumentList:
        with self._lock:
            with self._connect() as conn:
                rows = conn.execute(
                    "SELECT * FROM documents WHERE database_id = ? AND collection_id = ? ORDER BY seq DESC",
                    (database_id, collection_id),
                ).fetchall()
        documents = [self._row_to_document(row) for row in rows]

        limit: Optional[int] = None
        order_fields: List[str] = []
        for clause in queries or []:
            if clause.method == "equal":
                documents = [doc for doc in documents if doc.get(clause.attribute) in clause.values]
            elif clause.method == "orderDesc":
                order_fields.append(str(clause.attribute))
            elif clause.method == "limit":
                limit = clause.values[0]
            else:
                raise DocumentStoreValidationError(f"Unsupported query method: {clause.method}")

        # Rows start newest-inserted first, so ties keep that order.
        for field in reversed(order_fields):
            documents.sort(
                key=lambda doc: (doc.get(field) is not None, doc.get(field) if doc.get(field) is not None else ""),
                reverse=True,
            )

        total = len(documents)
        if limit is not None:
            documents = documents[: max(limit, 0)]
        return DocumentList(total=total, documents=documents)
