"""Base binding interface driven by the benchmark harness"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional, Set

from ..status import Status

FieldMap = Dict[str, str]


class DB(ABC):
    """
    A layer for accessing a database to be benchmarked.

    The harness creates one instance per worker thread and calls init()
    before the first operation and cleanup() after the last one.
    """

    def __init__(self, properties: Optional[Mapping[str, Any]] = None):
        self.properties: Dict[str, Any] = dict(properties or {})

    def init(self):
        """Initialize any state for this binding"""
        pass

    def cleanup(self):
        """Release any state held by this binding"""
        pass

    @abstractmethod
    def read(self, table: str, key: str, fields: Optional[Set[str]] = None,
             result: Optional[FieldMap] = None) -> Status:
        """Read a record; each requested field/value pair is stored in result"""
        pass

    @abstractmethod
    def scan(self, table: str, start_key: str, record_count: int, fields: Optional[Set[str]] = None,
             result: Optional[List[FieldMap]] = None) -> Status:
        """Read up to record_count records starting at start_key, one field map per record"""
        pass

    @abstractmethod
    def update(self, table: str, key: str, values: Mapping[str, str]) -> Status:
        """Overwrite the given fields of an existing record"""
        pass

    @abstractmethod
    def insert(self, table: str, key: str, values: Mapping[str, str]) -> Status:
        """Write a record with the given fields"""
        pass

    @abstractmethod
    def delete(self, table: str, key: str) -> Status:
        """Remove a record"""
        pass
