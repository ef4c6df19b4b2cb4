"""Elasticsearch binding for the benchmark harness"""

import logging
from concurrent.futures import Future
from typing import Any, Dict, List, Mapping, Optional, Set

from elasticsearch import BadRequestError, NotFoundError

from .base import DB, FieldMap
from ..bulk import BulkProcessor
from ..config import ElasticsearchSettings
from ..connection import FIELDS_FIELD, KEY_FIELD, TABLE_FIELD, ElasticsearchConnection
from ..metrics import OperationTimer, instrument
from ..status import Status

logger = logging.getLogger(__name__)


def document_id(table: str, key: str) -> str:
    """
    Identifier of a record inside the shared index.

    Backslashes and colons in the table are escaped, so the first unescaped
    colon always separates table from key.
    """
    escaped = table.replace("\\", "\\\\").replace(":", "\\:")
    return f"{escaped}:{key}"


def build_document(table: str, key: str, values: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        TABLE_FIELD: table,
        KEY_FIELD: key,
        FIELDS_FIELD: {str(name): str(value) for name, value in values.items()},
    }


def extract_fields(source: Mapping[str, Any], fields: Optional[Set[str]] = None) -> FieldMap:
    """Requested fields of a stored record; fields absent from the record are skipped"""
    stored = source.get(FIELDS_FIELD) or {}
    if fields is None:
        return dict(stored)
    return {name: stored[name] for name in fields if name in stored}


def status_for(error: Exception) -> Status:
    if isinstance(error, NotFoundError):
        return Status.NOT_FOUND
    if isinstance(error, BadRequestError):
        return Status.BAD_REQUEST
    return Status.ERROR


class ElasticsearchClient(DB):
    """
    Elasticsearch binding.

    Recognized properties:
    - es.index.key = es.ycsb
    - cluster.name = es.ycsb.cluster
    - elasticsearch.remote = false
    - elasticsearch.hosts.list = localhost:9200
    - elasticsearch.newdb = false
    - bulk.insert = disabled
    - bulk.size = 1000

    A connection may be injected; it is then owned by the caller and left
    open by cleanup().
    """

    def __init__(
        self,
        properties: Optional[Mapping[str, Any]] = None,
        connection: Optional[ElasticsearchConnection] = None
    ):
        super().__init__(properties)
        self.connection = connection
        self.settings: Optional[ElasticsearchSettings] = connection.settings if connection else None
        self.bulk_processor: Optional[BulkProcessor] = None
        self._owns_connection = connection is None

    @property
    def index(self) -> str:
        return self.settings.index_key

    def init(self):
        """Connect to the cluster and prepare the bulk pipeline"""
        if self.settings is None:
            self.settings = ElasticsearchSettings.from_properties(self.properties)
        logger.info(f"Elasticsearch binding settings: {self.settings.describe()}")

        if self.connection is None:
            self.connection = ElasticsearchConnection.open(self.settings)
            self._owns_connection = True

        if self.settings.bulk_insert and self.bulk_processor is None:
            self.bulk_processor = BulkProcessor(
                self.connection.client,
                bulk_actions=self.settings.bulk_size,
                bulk_size_bytes=self.settings.bulk_size_bytes,
                flush_interval=self.settings.flush_interval,
                concurrent_requests=1
            )

    def cleanup(self):
        if self.bulk_processor is not None:
            if not self.bulk_processor.close(timeout=self.settings.request_timeout):
                logger.warning("Bulk pipeline closed with requests still in flight")
            self.bulk_processor = None

        if self.connection is not None and self._owns_connection:
            self.connection.close()
            self.connection = None

    def insert(self, table: str, key: str, values: Mapping[str, str]) -> Status:
        with instrument('insert') as op:
            try:
                doc = build_document(table, key, values)
                if self.bulk_processor is not None:
                    self.bulk_processor.add(self.index, document_id(table, key), doc)
                else:
                    self.connection.client.index(index=self.index, id=document_id(table, key), document=doc)
                op.status = Status.OK
                return op.status
            except Exception as e:
                return self._failed(op, table, key, e)

    def insert_async(self, table: str, key: str, values: Mapping[str, str]) -> Future:
        """
        Insert through the bulk pipeline and return its acknowledgement.

        The future resolves to the Status of the write once the bulk request
        carrying it completes. Without bulk mode the write happens
        synchronously and the returned future is already resolved.
        """
        if self.bulk_processor is None:
            future: Future = Future()
            future.set_result(self.insert(table, key, values))
            return future

        with instrument('insert') as op:
            try:
                future = self.bulk_processor.add(
                    self.index, document_id(table, key), build_document(table, key, values)
                )
                op.status = Status.OK
            except Exception as e:
                future = Future()
                future.set_result(self._failed(op, table, key, e))
        return future

    def read(self, table: str, key: str, fields: Optional[Set[str]] = None,
             result: Optional[FieldMap] = None) -> Status:
        with instrument('read') as op:
            try:
                response = self.connection.client.get(index=self.index, id=document_id(table, key))
                if not response.get("found"):
                    op.status = Status.NOT_FOUND
                    return op.status

                if result is not None:
                    result.update(extract_fields(response["_source"], fields))
                op.status = Status.OK
                return op.status
            except Exception as e:
                return self._failed(op, table, key, e)

    def update(self, table: str, key: str, values: Mapping[str, str]) -> Status:
        with instrument('update') as op:
            try:
                response = self.connection.client.get(index=self.index, id=document_id(table, key))
                if not response.get("found"):
                    op.status = Status.NOT_FOUND
                    return op.status

                merged = extract_fields(response["_source"])
                merged.update(values)
                self.connection.client.index(
                    index=self.index, id=document_id(table, key), document=build_document(table, key, merged)
                )
                op.status = Status.OK
                return op.status
            except Exception as e:
                return self._failed(op, table, key, e)

    def delete(self, table: str, key: str) -> Status:
        with instrument('delete') as op:
            try:
                self.connection.client.delete(index=self.index, id=document_id(table, key))
            except NotFoundError:
                logger.debug(f"Delete of missing record {table}/{key}")
            except Exception as e:
                return self._failed(op, table, key, e)
            op.status = Status.OK
            return op.status

    def scan(self, table: str, start_key: str, record_count: int, fields: Optional[Set[str]] = None,
             result: Optional[List[FieldMap]] = None) -> Status:
        with instrument('scan') as op:
            try:
                query = {
                    "bool": {
                        "filter": [
                            {"term": {TABLE_FIELD: table}},
                            {"range": {KEY_FIELD: {"gte": start_key}}},
                        ]
                    }
                }
                response = self.connection.client.search(index=self.index, query=query, size=record_count)

                if result is not None:
                    for hit in response["hits"]["hits"]:
                        result.append(extract_fields(hit["_source"], fields))
                op.status = Status.OK
                return op.status
            except Exception as e:
                return self._failed(op, table, start_key, e)

    def _failed(self, op: OperationTimer, table: str, key: str, error: Exception) -> Status:
        op.record_error(error)
        op.status = status_for(error)
        if op.status is Status.NOT_FOUND:
            logger.debug(f"{op.operation} {table}/{key}: not found")
        else:
            logger.error(f"Failed to {op.operation} {table}/{key}: {error}")
        return op.status
