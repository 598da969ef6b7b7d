"""Typed access to each collection.

A repository fixes the collection and index names for one entity and turns
store records into that entity's schema. Nothing here coordinates across
entities: creating an order does not touch product stock.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel

from . import schemas
from .storage import RecordStore, TableNames

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)
Payload = Union[BaseModel, Mapping[str, Any]]


def to_record(data: Payload, partial: bool = False) -> dict:
    """Dump a schema (or mapping) into camelCase, JSON-compatible fields."""
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json", by_alias=True, exclude_unset=partial, exclude_none=not partial)
    return dict(data)


class Repository(Generic[ModelT]):
    table: str
    model: Type[ModelT]

    def __init__(self, store: RecordStore):
        self.store = store

    def _load(self, record: Optional[dict]) -> Optional[ModelT]:
        return self.model.model_validate(record) if record is not None else None

    def _query(self, index_name: str, field: str, value: Any) -> List[ModelT]:
        if isinstance(value, Enum):
            value = value.value
        return [self._load(r) for r in self.store.query_by_index(self.table, index_name, field, value)]

    def get_by_id(self, id: str) -> Optional[ModelT]:
        return self._load(self.store.get_by_id(self.table, id))

    def get_all(self, limit: Optional[int] = None) -> List[ModelT]:
        return [self._load(r) for r in self.store.scan_all(self.table, limit)]

    def create(self, data: Payload) -> ModelT:
        record = self.store.create(self.table, to_record(data))
        logger.info("created %s %s", self.table, record["id"])
        return self._load(record)

    def update(self, id: str, changes: Payload) -> ModelT:
        record = self.store.update(self.table, id, to_record(changes, partial=True))
        logger.info("updated %s %s", self.table, id)
        return self._load(record)

    def delete(self, id: str) -> None:
        self.store.remove(self.table, id)
        logger.info("deleted %s %s", self.table, id)


class UserRepository(Repository[schemas.User]):
    table = TableNames.USERS
    model = schemas.User

    def get_by_email(self, email: str) -> Optional[schemas.User]:
        users = self._query("EmailIndex", "email", email)
        return users[0] if users else None

    def get_by_clinic(self, clinic_id: str) -> List[schemas.User]:
        return self._query("ClinicIndex", "clinicId", clinic_id)

    def get_password_hash(self, id: str) -> Optional[str]:
        record = self.store.get_by_id(self.table, id)
        return record.get("passwordHash") if record else None


class ClinicRepository(Repository[schemas.Clinic]):
    table = TableNames.CLINICS
    model = schemas.Clinic


class ProductRepository(Repository[schemas.Product]):
    table = TableNames.PRODUCTS
    model = schemas.Product

    def get_by_category(self, category: str) -> List[schemas.Product]:
        return self._query("CategoryIndex", "category", category)


class OrderRepository(Repository[schemas.Order]):
    table = TableNames.ORDERS
    model = schemas.Order

    def get_by_clinic(self, clinic_id: str) -> List[schemas.Order]:
        return self._query("ClinicOrdersIndex", "clinicId", clinic_id)

    def get_by_user(self, user_id: str) -> List[schemas.Order]:
        return self._query("UserOrdersIndex", "userId", user_id)

    def get_by_status(self, status: schemas.OrderStatus) -> List[schemas.Order]:
        return self._query("StatusIndex", "status", status)


class TemplateRepository(Repository[schemas.OrderTemplate]):
    table = TableNames.TEMPLATES
    model = schemas.OrderTemplate

    def get_by_clinic(self, clinic_id: str) -> List[schemas.OrderTemplate]:
        return self._query("ClinicTemplatesIndex", "clinicId", clinic_id)


class SettingsRepository(Repository[schemas.Settings]):
    table = TableNames.SETTINGS
    model = schemas.Settings

    def get_by_type(self, type: schemas.SettingsType) -> List[schemas.Settings]:
        return self._query("TypeIndex", "type", type)

    def get_by_owner(self, owner_id: str) -> List[schemas.Settings]:
        return self._query("OwnerIndex", "ownerId", owner_id)


@dataclass
class Repositories:
    users: UserRepository
    clinics: ClinicRepository
    products: ProductRepository
    orders: OrderRepository
    templates: TemplateRepository
    settings: SettingsRepository

    @classmethod
    def from_store(cls, store: RecordStore) -> "Repositories":
        return cls(
            users=UserRepository(store),
            clinics=ClinicRepository(store),
            products=ProductRepository(store),
            orders=OrderRepository(store),
            templates=TemplateRepository(store),
            settings=SettingsRepository(store),
        )
