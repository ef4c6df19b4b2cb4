"""Prometheus metrics for binding operations"""

import time
from contextlib import contextmanager

from prometheus_client import Counter, Gauge, Histogram

from .status import Status

operations = Counter('ycsb_es_operations_total', 'Total binding operations', ['operation', 'status'])
operation_duration = Histogram('ycsb_es_operation_duration_seconds', 'Binding operation duration', ['operation'])
operation_errors = Counter('ycsb_es_operation_errors_total', 'Binding operation errors', ['operation', 'error_type'])

bulk_flushes = Counter('ycsb_es_bulk_flushes_total', 'Bulk flushes executed', ['outcome'])
bulk_flush_duration = Histogram('ycsb_es_bulk_flush_duration_seconds', 'Bulk flush duration')
bulk_pending_actions = Gauge('ycsb_es_bulk_pending_actions', 'Actions buffered and not yet flushed')


class OperationTimer:
    """Holds the status an instrumented operation settles on"""

    def __init__(self, operation: str):
        self.operation = operation
        self.status = Status.ERROR

    def record_error(self, error: Exception):
        operation_errors.labels(operation=self.operation, error_type=type(error).__name__).inc()


@contextmanager
def instrument(operation: str):
    """Time an operation and count it under the status it ends with"""
    timer = OperationTimer(operation)
    start = time.perf_counter()
    try:
        yield timer
    finally:
        operation_duration.labels(operation=operation).observe(time.perf_counter() - start)
        operations.labels(operation=operation, status=timer.status.label).inc()
