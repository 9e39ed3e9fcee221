from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Double,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    UniqueConstraint,
)

metadata = MetaData()

items = Table(
    "items",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("owner_id", String(128), nullable=False, index=True),
    Column("name", String(255), nullable=False),
    Column("description", Text),
    Column("category", String(100)),
    Column("price", Numeric(12, 2), nullable=False),
    Column("currency_code", String(3), nullable=False),
    Column("available", Boolean, nullable=False, default=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("rating_mean", Double, nullable=False, default=0.0),
    Column("rating_count", Integer, nullable=False, default=0),
    Column("calendar_version", Integer, nullable=False, default=0),
    Column("rating_version", Integer, nullable=False, default=0),
)

item_unavailable_ranges = Table(
    "item_unavailable_ranges",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("item_id", String(64), nullable=False, index=True),
    Column("request_id", String(64), nullable=False, unique=True),
    Column("start_at", DateTime(timezone=True), nullable=False),
    Column("end_at", DateTime(timezone=True), nullable=False),
)

user_ratings = Table(
    "user_ratings",
    metadata,
    Column("user_id", String(128), primary_key=True),
    Column("rating_mean", Double, nullable=False),
    Column("rating_count", Integer, nullable=False),
    Column("rating_version", Integer, nullable=False),
)

reservation_requests = Table(
    "reservation_requests",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("item_id", String(64), nullable=False, index=True),
    Column("requester_id", String(128), nullable=False, index=True),
    Column("owner_id", String(128), nullable=False, index=True),
    Column("start_at", DateTime(timezone=True), nullable=False),
    Column("end_at", DateTime(timezone=True), nullable=False),
    Column("unit_price", Numeric(12, 2), nullable=False),
    Column("total_price", Numeric(12, 2), nullable=False),
    Column("currency_code", String(3), nullable=False),
    Column("status", String(16), nullable=False, index=True),
    Column("rejection_reason", String(500)),
    Column("notes", Text),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("decided_at", DateTime(timezone=True)),
    Column("cancelled_at", DateTime(timezone=True)),
    Column("item_rated", Boolean, nullable=False, default=False),
    Column("renter_rated", Boolean, nullable=False, default=False),
    Column("lock_version", Integer, nullable=False, default=0),
)

rating_events = Table(
    "rating_events",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("subject_id", String(128), nullable=False, index=True),
    Column("subject_kind", String(8), nullable=False),
    Column("score", Double, nullable=False),
    Column("related_request_id", String(64), nullable=False),
    Column("author_id", String(128)),
    Column("comment", Text),
    Column("created_at", DateTime(timezone=True), nullable=False),
    UniqueConstraint("related_request_id", "subject_kind", name="uq_rating_events_request_kind"),
)
