"""Database-agnostic type definitions for SQLAlchemy models.

This module provides type definitions that work with both SQLite and PostgreSQL.
"""
from sqlalchemy import JSON, Numeric
from sqlalchemy.dialects.postgresql import JSONB, UUID as PG_UUID

# JSONB on PostgreSQL, plain JSON everywhere else (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")

# UUID type that works with both databases
UUIDType = PG_UUID

# Money columns: taka amounts with paisa precision
Money = Numeric(12, 2)
