"""ORM models for the tables the reconciliation engine reads and writes.

Only the columns the engine touches are mapped; the tables themselves are
owned by the application's CRUD layer and its migrations.
"""

from __future__ import annotations

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import ARRAY, JSONB
from sqlalchemy.orm import declarative_base

Base = declarative_base()

JSONDocument = JSON().with_variant(JSONB(), "postgresql")
StringList = JSON().with_variant(ARRAY(Text()), "postgresql")


class Company(Base):
    __tablename__ = "companies"

    id = Column(Text, primary_key=True)
    name = Column(String(100), nullable=False, default="")
    aims_company_code = Column(String(50), nullable=False)
    aims_base_url = Column(String(255))
    aims_cluster = Column(String(50))
    aims_username = Column(String(255))
    aims_password_enc = Column(Text)
    settings = Column(JSONDocument, nullable=False, default=dict)
    is_active = Column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<Company {self.id}: {self.aims_company_code}>"


class Store(Base):
    __tablename__ = "stores"

    id = Column(Text, primary_key=True)
    company_id = Column(Text, ForeignKey("companies.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False, default="")
    store_number = Column(String(50), nullable=False)
    settings = Column(JSONDocument, nullable=False, default=dict)
    sync_enabled = Column(Boolean, nullable=False, default=True)
    is_active = Column(Boolean, nullable=False, default=True)
    last_aims_sync_at = Column(DateTime(timezone=True))

    def __repr__(self) -> str:
        return f"<Store {self.id}: {self.store_number}>"


class Space(Base):
    __tablename__ = "spaces"

    id = Column(Text, primary_key=True)
    store_id = Column(Text, ForeignKey("stores.id"), nullable=False, index=True)
    external_id = Column(String(50), nullable=False)
    data = Column(JSONDocument, nullable=False, default=dict)
    assigned_labels = Column(StringList, nullable=False, default=list)


class Person(Base):
    __tablename__ = "people"

    id = Column(Text, primary_key=True)
    store_id = Column(Text, ForeignKey("stores.id"), nullable=False, index=True)
    assigned_space_id = Column(Text)
    data = Column(JSONDocument, nullable=False, default=dict)


class ConferenceRoom(Base):
    __tablename__ = "conference_rooms"

    id = Column(Text, primary_key=True)
    store_id = Column(Text, ForeignKey("stores.id"), nullable=False, index=True)
    external_id = Column(String(50), nullable=False)
    room_name = Column(String(100), nullable=False, default="")
    has_meeting = Column(Boolean, nullable=False, default=False)
    meeting_name = Column(String(255))
    start_time = Column(String(10))
    end_time = Column(String(10))
    participants = Column(StringList, nullable=False, default=list)
    data = Column(JSONDocument, nullable=False, default=dict)
    assigned_labels = Column(StringList, nullable=False, default=list)
