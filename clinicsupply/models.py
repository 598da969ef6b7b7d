from sqlalchemy import Boolean, Column, Float, Index, Integer, JSON, String, Text

from .db import Base

# Column names are the camelCase record field names; attributes stay snake_case.


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True)
    email = Column(String, nullable=False)
    name = Column(String, nullable=False)
    first_name = Column("firstName", String, nullable=True)
    last_name = Column("lastName", String, nullable=True)
    # 'ADMIN', 'MANAGER' or 'STAFF'
    role = Column(String, nullable=False, default="STAFF")
    # administrators may be clinic-less
    clinic_id = Column("clinicId", String(36), nullable=True)
    is_active = Column("isActive", Boolean, nullable=False, default=True)
    password_hash = Column("passwordHash", String, nullable=True)
    created_at = Column("createdAt", String, nullable=True)
    updated_at = Column("updatedAt", String, nullable=True)

    __table_args__ = (
        Index("EmailIndex", "email", unique=True),
        Index("ClinicIndex", "clinicId"),
    )


class Clinic(Base):
    __tablename__ = "clinics"

    id = Column(String(36), primary_key=True)
    name = Column(String, nullable=False)
    address = Column(String, nullable=False, default="")
    phone = Column(String, nullable=False, default="")
    email = Column(String, nullable=True)
    is_active = Column("isActive", Boolean, nullable=False, default=True)
    created_at = Column("createdAt", String, nullable=True)
    updated_at = Column("updatedAt", String, nullable=True)


class Product(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    category = Column(String, nullable=False)
    sku = Column(String, nullable=False)
    price = Column(Float, nullable=False, default=0.0)
    unit = Column(String, nullable=False, default="each")
    min_stock = Column("minStock", Integer, nullable=False, default=0)
    # on-hand stock lives on the catalog row
    quantity = Column(Integer, nullable=False, default=0)
    manufacturer = Column(String, nullable=True)
    image_url = Column("imageUrl", String, nullable=True)
    is_active = Column("isActive", Boolean, nullable=False, default=True)
    created_at = Column("createdAt", String, nullable=True)
    updated_at = Column("updatedAt", String, nullable=True)

    __table_args__ = (Index("CategoryIndex", "category"),)


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True)
    clinic_id = Column("clinicId", String(36), nullable=False)
    user_id = Column("userId", String(36), nullable=False)
    status = Column(String, nullable=False, default="pending")
    items = Column(JSON, nullable=False, default=list)
    total = Column(Float, nullable=False, default=0.0)
    notes = Column(Text, nullable=True)
    created_at = Column("createdAt", String, nullable=True)
    updated_at = Column("updatedAt", String, nullable=True)

    __table_args__ = (
        Index("ClinicOrdersIndex", "clinicId"),
        Index("UserOrdersIndex", "userId"),
        Index("StatusIndex", "status"),
    )


class Template(Base):
    __tablename__ = "templates"

    id = Column(String(36), primary_key=True)
    clinic_id = Column("clinicId", String(36), nullable=False)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    items = Column(JSON, nullable=False, default=list)
    last_used = Column("lastUsed", String, nullable=True)
    frequency = Column(Integer, nullable=True)
    created_by = Column("createdBy", String(36), nullable=True)
    created_at = Column("createdAt", String, nullable=True)
    updated_at = Column("updatedAt", String, nullable=True)

    __table_args__ = (Index("ClinicTemplatesIndex", "clinicId"),)


class Settings(Base):
    __tablename__ = "settings"

    id = Column(String(36), primary_key=True)
    # 'global' or 'clinic'
    type = Column(String, nullable=False)
    # clinicId for clinic-scoped settings
    owner_id = Column("ownerId", String(36), nullable=True)
    config = Column(JSON, nullable=False, default=dict)
    created_at = Column("createdAt", String, nullable=True)
    updated_at = Column("updatedAt", String, nullable=True)

    __table_args__ = (
        Index("TypeIndex", "type"),
        Index("OwnerIndex", "ownerId"),
    )
