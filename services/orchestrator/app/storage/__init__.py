"""Job store backends."""

from .base import JobStore
from .memory import InMemoryJobStore
from .postgres import PostgresJobStore
from .schema import initialise_schema

__all__ = ["JobStore", "InMemoryJobStore", "PostgresJobStore", "initialise_schema"]
