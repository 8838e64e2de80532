"""Core infrastructure: configuration, logging, results, errors and storage."""

from .cache import Cache
from .config import Settings, get_settings
from .errors import DomainError, ErrorCategory, ErrorCode, PremiumInvariantError
from .record_store import InMemoryRecordStore, RecordStore
from .result_types import Err, Ok, Result

__all__ = [
    "Cache",
    "DomainError",
    "Err",
    "ErrorCategory",
    "ErrorCode",
    "InMemoryRecordStore",
    "Ok",
    "PremiumInvariantError",
    "RecordStore",
    "Result",
    "Settings",
    "get_settings",
]
