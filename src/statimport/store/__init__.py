"""
Relational store access.

Reference lookups, catalog reads, transactional upserts and seeding
all go through this package.
"""

from statimport.store.database import connect, ensure_schema, open_connection
from statimport.store.lookups import ReferenceLookups, load_lookups
from statimport.store.upsert import UpsertResult, fetch_observation, upsert_records

__all__ = [
    "ReferenceLookups",
    "UpsertResult",
    "connect",
    "ensure_schema",
    "fetch_observation",
    "load_lookups",
    "open_connection",
    "upsert_records",
]
