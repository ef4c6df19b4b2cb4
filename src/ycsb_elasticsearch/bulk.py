"""
Batching pipeline for index requests

Index actions are buffered and handed to elasticsearch.helpers.streaming_bulk
when the action count reaches its limit or the flush interval elapses. The
helper splits a flush into requests no larger than the byte limit. Every
buffered action gets a Future that resolves to the Status of that action
once the flush carrying it completes.
"""

import itertools
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from elasticsearch import Elasticsearch
from elasticsearch.helpers import streaming_bulk

from .exceptions import BulkError
from .metrics import bulk_flush_duration, bulk_flushes, bulk_pending_actions
from .status import Status

logger = logging.getLogger(__name__)


@dataclass
class BulkAction:
    """A single buffered index action"""
    index: str
    doc_id: str
    document: Dict[str, Any]
    future: Future = field(default_factory=Future)

    def to_action(self) -> Dict[str, Any]:
        return {"_op_type": "index", "_index": self.index, "_id": self.doc_id, "_source": self.document}


class BulkListener:
    """Callbacks around each bulk execution; the default only logs"""

    def before_bulk(self, execution_id: int, actions: List[BulkAction]):
        logger.debug(f"Executing bulk {execution_id} with {len(actions)} actions")

    def after_bulk(self, execution_id: int, actions: List[BulkAction], failed: int):
        if failed:
            logger.error(f"Bulk {execution_id} completed with {failed} failed actions out of {len(actions)}")

    def after_bulk_failure(self, execution_id: int, actions: List[BulkAction], failure: Exception):
        logger.error(f"BULK FAILED: execution id {execution_id}, {len(actions)} actions: {failure}")


def _item_status(ok: bool, item: Dict[str, Any]) -> Status:
    """Map one result yielded by streaming_bulk to a Status"""
    if ok:
        return Status.OK
    result = next(iter(item.values()), {}) if item else {}
    if result.get("status") == 400:
        return Status.BAD_REQUEST
    return Status.ERROR


class BulkProcessor:
    """Accumulates index actions and flushes them through streaming_bulk"""

    def __init__(
        self,
        client: Elasticsearch,
        bulk_actions: int = 1000,
        bulk_size_bytes: int = 1024 * 1024 * 1024,
        flush_interval: Optional[float] = 5.0,
        concurrent_requests: int = 1,
        listener: Optional[BulkListener] = None
    ):
        if concurrent_requests < 1:
            raise ValueError("concurrent_requests must be at least 1")

        self.client = client
        self.bulk_actions = bulk_actions
        self.bulk_size_bytes = bulk_size_bytes
        self.flush_interval = flush_interval
        self.listener = listener or BulkListener()

        self._lock = threading.Lock()
        self._buffer: List[BulkAction] = []
        self._execution_ids = itertools.count(1)
        self._slots = threading.Semaphore(concurrent_requests)
        self._executor = ThreadPoolExecutor(max_workers=concurrent_requests, thread_name_prefix="bulk-flush")
        self._inflight: Set[Future] = set()
        self._inflight_lock = threading.Lock()
        self._closed = False

        self._stop = threading.Event()
        self._timer = None
        if flush_interval:
            self._timer = threading.Thread(target=self._run_timer, name="bulk-flush-timer", daemon=True)
            self._timer.start()

    def add(self, index: str, doc_id: str, document: Dict[str, Any]) -> Future:
        """Buffer an index action, flushing if a limit is reached"""
        action = BulkAction(index=index, doc_id=doc_id, document=document)
        with self._lock:
            if self._closed:
                raise BulkError("Bulk processor is closed")

            self._buffer.append(action)
            bulk_pending_actions.inc()

            if len(self._buffer) >= self.bulk_actions:
                self._execute_locked()

        return action.future

    def flush(self):
        """Send whatever is buffered now"""
        with self._lock:
            if self._buffer:
                self._execute_locked()

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._buffer)

    def close(self, timeout: Optional[float] = None) -> bool:
        """
        Flush remaining actions and stop the pipeline

        Returns True when every in-flight bulk finished within timeout.
        """
        with self._lock:
            if self._closed:
                return True
            self._closed = True
            if self._buffer:
                self._execute_locked()

        with self._inflight_lock:
            inflight = list(self._inflight)

        self._stop.set()
        if self._timer is not None:
            self._timer.join()

        _, not_done = wait(inflight, timeout=timeout)
        self._executor.shutdown(wait=not not_done)
        return not not_done

    def _execute_locked(self):
        """Hand the current buffer to the executor; caller holds the lock"""
        batch = self._buffer
        self._buffer = []
        bulk_pending_actions.dec(len(batch))

        execution_id = next(self._execution_ids)
        # Blocks while the maximum number of bulks is already in flight
        self._slots.acquire()
        try:
            task = self._executor.submit(self._run_bulk, execution_id, batch)
        except Exception:
            self._slots.release()
            raise
        with self._inflight_lock:
            self._inflight.add(task)
        task.add_done_callback(self._forget)

    def _forget(self, task: Future):
        with self._inflight_lock:
            self._inflight.discard(task)

    def _run_bulk(self, execution_id: int, batch: List[BulkAction]):
        try:
            self._notify(self.listener.before_bulk, execution_id, batch)

            with bulk_flush_duration.time():
                results = streaming_bulk(
                    self.client,
                    (action.to_action() for action in batch),
                    chunk_size=self.bulk_actions,
                    max_chunk_bytes=self.bulk_size_bytes,
                    raise_on_error=False,
                )
                # Results arrive in the order the actions were sent
                statuses = [_item_status(ok, item) for ok, item in results]

        except Exception as e:
            bulk_flushes.labels(outcome='failure').inc()
            self._notify(self.listener.after_bulk_failure, execution_id, batch, e)
            for action in batch:
                action.future.set_result(Status.ERROR)

        else:
            statuses.extend([Status.ERROR] * (len(batch) - len(statuses)))
            for action, status in zip(batch, statuses):
                action.future.set_result(status)

            failed = sum(1 for status in statuses if status is not Status.OK)
            bulk_flushes.labels(outcome='errors' if failed else 'success').inc()
            self._notify(self.listener.after_bulk, execution_id, batch, failed)

        finally:
            self._slots.release()

    def _notify(self, callback, *args):
        try:
            callback(*args)
        except Exception as e:
            logger.error(f"Bulk listener {getattr(callback, '__name__', callback)} failed: {e}")

    def _run_timer(self):
        while not self._stop.wait(self.flush_interval):
            try:
                self.flush()
            except Exception as e:
                logger.error(f"Scheduled bulk flush failed: {e}")
