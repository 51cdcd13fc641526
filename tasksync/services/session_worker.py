"""Single-consumer serialization of calls against a target session.

The Hansoft session is not safe for concurrent use. Every read and write is
queued on a bounded queue that exactly one worker thread drains, so callers on
any thread see one strictly ordered stream of session calls.
"""
import logging
import operator
import queue
import threading
from concurrent.futures import Future
from typing import Any, Callable, Iterable, List

logger = logging.getLogger(__name__)

_STOP = object()


class SessionWorker:
    """Bounded work queue drained by one dedicated thread.

    ``close()`` stops accepting work, lets the worker finish everything already
    queued, then joins it (drain-then-close).
    """

    def __init__(self, max_pending: int = 256, name: str = "target-session"):
        if max_pending < 1:
            raise ValueError("max_pending must be at least 1")
        self._queue: "queue.Queue[Any]" = queue.Queue(maxsize=max_pending)
        self._closed = False
        self._lock = threading.Lock()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._thread.start()

    def _run(self):
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                future, fn, args, kwargs = item
                if not future.set_running_or_notify_cancel():
                    continue
                try:
                    future.set_result(fn(*args, **kwargs))
                except BaseException as e:
                    future.set_exception(e)
            finally:
                self._queue.task_done()

    def submit(self, fn: Callable[..., Any], *args, **kwargs) -> Future:
        """Queue a call; blocks while the queue is full."""
        with self._lock:
            if self._closed:
                raise RuntimeError("Session worker is closed")
            if threading.current_thread() is self._thread:
                raise RuntimeError("Session worker cannot queue work onto itself")
            future: Future = Future()
            self._queue.put((future, fn, args, kwargs))
        return future

    def call(self, fn: Callable[..., Any], *args, **kwargs) -> Any:
        """Run a call on the worker thread and wait for its result."""
        if threading.current_thread() is self._thread:
            return fn(*args, **kwargs)
        return self.submit(fn, *args, **kwargs).result()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self, timeout: float | None = None) -> None:
        """Drain pending calls, then stop the worker thread."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put(_STOP)
        self._thread.join(timeout)
        if self._thread.is_alive():
            logger.error("Target session worker did not stop within the timeout")
        else:
            logger.debug("Target session worker stopped")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class _SerializedProxy:
    """Routes every method call of the wrapped object through the worker."""

    def __init__(self, target: Any, worker: SessionWorker):
        self._target = target
        self._worker = worker

    def __getattr__(self, name: str) -> Any:
        attr = getattr(self._target, name)
        if not callable(attr):
            return attr

        def call(*args, **kwargs):
            args = tuple(_unwrap(a) for a in args)
            kwargs = {k: _unwrap(v) for k, v in kwargs.items()}
            return self._worker.call(attr, *args, **kwargs)

        return call

    def __eq__(self, other: Any) -> bool:
        other = _unwrap(other)
        return self._worker.call(operator.eq, self._target, other)

    def __hash__(self) -> int:
        return hash(self._target)

    def __repr__(self) -> str:
        return f"<serialized {self._target!r}>"


def _unwrap(value: Any) -> Any:
    return value._target if isinstance(value, _SerializedProxy) else value


class SerializedTask(_SerializedProxy):
    """A task whose getters and setters run on the session worker.

    Handle-valued getters return proxies, the same kind of handle the
    repository hands out for users, milestones and sprints.
    """

    def _handle(self, getter: str) -> Any:
        value = self._worker.call(getattr(self._target, getter))
        return None if value is None else _SerializedProxy(value, self._worker)

    def assignee(self) -> Any:
        return self._handle("assignee")

    def milestone(self) -> Any:
        return self._handle("milestone")

    def sprint(self) -> Any:
        return self._handle("sprint")


class SerializedTaskRepository(_SerializedProxy):
    """A TaskRepository whose calls, and the tasks it hands out, run on the worker."""

    def list_tasks(self) -> List[SerializedTask]:
        tasks: Iterable[Any] = self._worker.call(lambda: list(self._target.list_tasks()))
        return [SerializedTask(task, self._worker) for task in tasks]

    def create_task(self) -> SerializedTask:
        return SerializedTask(self._worker.call(self._target.create_task), self._worker)

    def _handles(self, enumerate_fn: Callable[[], Iterable[Any]]) -> List[_SerializedProxy]:
        handles = self._worker.call(lambda: list(enumerate_fn()))
        return [_SerializedProxy(handle, self._worker) for handle in handles]

    def list_users(self) -> List[_SerializedProxy]:
        return self._handles(self._target.list_users)

    def list_milestones(self) -> List[_SerializedProxy]:
        return self._handles(self._target.list_milestones)

    def list_sprints(self) -> List[_SerializedProxy]:
        return self._handles(self._target.list_sprints)
