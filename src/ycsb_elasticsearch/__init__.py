"""Elasticsearch binding for YCSB-style benchmark harnesses

Translates insert, read, update, delete and scan calls from a benchmark
harness into Elasticsearch requests.
"""

from .adapters import DB, ElasticsearchClient
from .bulk import BulkListener, BulkProcessor
from .config import ElasticsearchSettings
from .connection import ElasticsearchConnection
from .status import Status
from .exceptions import (
    DataAccessError,
    ConfigurationError,
    ConnectionError,
    BulkError
)

__version__ = "0.1.0"

__all__ = [
    "DB",
    "ElasticsearchClient",
    "ElasticsearchConnection",
    "ElasticsearchSettings",
    "BulkProcessor",
    "BulkListener",
    "Status",
    "DataAccessError",
    "ConfigurationError",
    "ConnectionError",
    "BulkError"
]
