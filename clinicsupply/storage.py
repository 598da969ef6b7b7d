"""Record storage over named collections.

Two interchangeable implementations of the same small contract:

- ``MemoryStore`` keeps every collection in a dict of ``id -> record``. It is
  an ordinary object, so each app instance or test builds its own.
- ``SqlStore`` maps each collection to an ORM table in ``clinicsupply.models``
  and works through a SQLAlchemy session.

Records are plain dicts keyed by camelCase field names. Both stores hand out
copies, so callers may mutate what they get back.
"""
import copy
import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import inspect, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import models
from .errors import BadRequest, Conflict, NotFound

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


class TableNames:
    USERS = "users"
    CLINICS = "clinics"
    PRODUCTS = "products"
    ORDERS = "orders"
    TEMPLATES = "templates"
    SETTINGS = "settings"


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_id() -> str:
    return str(uuid.uuid4())


class RecordStore(ABC):
    @abstractmethod
    def get_by_id(self, table: str, id: str) -> Optional[Record]:
        """Return the record or None; a miss is not an error."""

    @abstractmethod
    def create(self, table: str, record: Record) -> Record:
        """Insert, generating an id when none is supplied, and stamp timestamps."""

    @abstractmethod
    def update(self, table: str, id: str, changes: Record) -> Record:
        """Shallow-merge ``changes``; raises NotFound if the id is absent."""

    @abstractmethod
    def remove(self, table: str, id: str) -> None:
        """Delete; removing an absent id is a no-op."""

    @abstractmethod
    def query_by_index(
        self,
        table: str,
        index_name: str,
        field: str,
        value: Any,
        secondary_field: Optional[str] = None,
        secondary_value: Any = None,
    ) -> List[Record]:
        """Equality lookup on one field, or two when a secondary pair is given."""

    @abstractmethod
    def scan_all(self, table: str, limit: Optional[int] = None) -> List[Record]:
        """Every record in the collection, optionally capped at ``limit``."""

    @staticmethod
    def _prepare_new(record: Record) -> Record:
        timestamp = utc_now()
        new_record = dict(record)
        new_record["id"] = record.get("id") or new_id()
        new_record["createdAt"] = timestamp
        new_record["updatedAt"] = timestamp
        return new_record

    @staticmethod
    def _prepare_changes(changes: Record) -> Record:
        # id and createdAt belong to the store
        prepared = {k: v for k, v in changes.items() if k not in ("id", "createdAt")}
        prepared["updatedAt"] = utc_now()
        return prepared


class MemoryStore(RecordStore):
    """Dict-backed store. Not safe against concurrent writers on one key."""

    def __init__(self, data: Optional[Dict[str, Dict[str, Record]]] = None):
        self._tables: Dict[str, Dict[str, Record]] = {}
        for table, rows in (data or {}).items():
            self._tables[table] = {row_id: copy.deepcopy(row) for row_id, row in rows.items()}

    def _table(self, table: str) -> Dict[str, Record]:
        return self._tables.setdefault(table, {})

    def get_by_id(self, table, id):
        record = self._table(table).get(id)
        return copy.deepcopy(record) if record is not None else None

    def create(self, table, record):
        new_record = self._prepare_new(copy.deepcopy(record))
        self._table(table)[new_record["id"]] = new_record
        logger.debug("created %s/%s", table, new_record["id"])
        return copy.deepcopy(new_record)

    def update(self, table, id, changes):
        rows = self._table(table)
        if id not in rows:
            raise NotFound(f"{table} record {id} not found")
        rows[id] = {**rows[id], **copy.deepcopy(self._prepare_changes(changes))}
        return copy.deepcopy(rows[id])

    def remove(self, table, id):
        self._table(table).pop(id, None)

    def query_by_index(self, table, index_name, field, value, secondary_field=None, secondary_value=None):
        # full scan; the index name only documents the lookup path here
        matches = []
        for record in self._table(table).values():
            if record.get(field) != value:
                continue
            if secondary_field and secondary_value is not None and record.get(secondary_field) != secondary_value:
                continue
            matches.append(copy.deepcopy(record))
        return matches

    def scan_all(self, table, limit=None):
        records = [copy.deepcopy(r) for r in self._table(table).values()]
        return records[:limit] if limit is not None else records


class SqlStore(RecordStore):
    """Store backed by the ORM tables; one instance per session."""

    table_models = {
        TableNames.USERS: models.User,
        TableNames.CLINICS: models.Clinic,
        TableNames.PRODUCTS: models.Product,
        TableNames.ORDERS: models.Order,
        TableNames.TEMPLATES: models.Template,
        TableNames.SETTINGS: models.Settings,
    }

    def __init__(self, db: Session):
        self.db = db

    def _model(self, table: str):
        try:
            return self.table_models[table]
        except KeyError:
            raise ValueError(f"unknown table: {table}") from None

    @staticmethod
    def _attributes(model) -> Dict[str, str]:
        """Map record field name -> mapped attribute name."""
        return {prop.columns[0].name: prop.key for prop in inspect(model).column_attrs}

    def _to_record(self, row) -> Record:
        return {field: copy.deepcopy(getattr(row, attr)) for field, attr in self._attributes(type(row)).items()}

    def _assign(self, row, values: Record):
        attributes = self._attributes(type(row))
        for field, value in values.items():
            attr = attributes.get(field)
            if attr is None:
                logger.debug("ignoring unknown field %s on %s", field, type(row).__tablename__)
                continue
            setattr(row, attr, value)

    def _commit(self, table: str):
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.info("integrity error on %s: %s", table, e.orig)
            if "unique" in str(e.orig).lower():
                raise Conflict(f"{table} record violates a uniqueness constraint") from e
            raise BadRequest(f"{table} record is missing required fields") from e

    def get_by_id(self, table, id):
        row = self.db.get(self._model(table), id)
        return self._to_record(row) if row is not None else None

    def create(self, table, record):
        model = self._model(table)
        row = model()
        self._assign(row, self._prepare_new(record))
        self.db.add(row)
        self._commit(table)
        self.db.refresh(row)
        logger.debug("created %s/%s", table, row.id)
        return self._to_record(row)

    def update(self, table, id, changes):
        row = self.db.get(self._model(table), id)
        if row is None:
            raise NotFound(f"{table} record {id} not found")
        self._assign(row, self._prepare_changes(changes))
        self._commit(table)
        self.db.refresh(row)
        return self._to_record(row)

    def remove(self, table, id):
        row = self.db.get(self._model(table), id)
        if row is None:
            return
        self.db.delete(row)
        self.db.commit()

    def _column(self, model, field: str):
        attr = self._attributes(model).get(field)
        if attr is None:
            raise ValueError(f"{model.__tablename__} has no field {field}")
        return getattr(model, attr)

    def query_by_index(self, table, index_name, field, value, secondary_field=None, secondary_value=None):
        model = self._model(table)
        stmt = select(model).where(self._column(model, field) == value)
        if secondary_field and secondary_value is not None:
            stmt = stmt.where(self._column(model, secondary_field) == secondary_value)
        logger.debug("query %s via %s", table, index_name)
        return [self._to_record(row) for row in self.db.scalars(stmt).all()]

    def scan_all(self, table, limit=None):
        stmt = select(self._model(table))
        if limit is not None:
            stmt = stmt.limit(limit)
        return [self._to_record(row) for row in self.db.scalars(stmt).all()]
