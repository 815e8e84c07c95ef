# gitops_tool/utils/async_utils.py
"""Asynchronous operation utilities"""

import asyncio
import functools
from typing import Any, Awaitable, Callable, Coroutine, Generic, Iterable, List, Optional, TypeVar

T = TypeVar('T')

_CLOSED = object()


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """
    Run async coroutine in sync context

    Args:
        coro: Coroutine to run

    Returns:
        Coroutine result
    """
    loop = None
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        # No running loop
        pass

    if loop and loop.is_running():
        # Already in async context, create new thread
        import threading

        result = None
        exception = None

        def run_in_thread():
            nonlocal result, exception
            try:
                result = asyncio.run(coro)
            except Exception as e:
                exception = e

        thread = threading.Thread(target=run_in_thread)
        thread.start()
        thread.join()

        if exception:
            raise exception
        return result
    else:
        # No running loop, use asyncio.run
        return asyncio.run(coro)


def sync_to_async(func: Callable[..., T]) -> Callable[..., Coroutine[Any, Any, T]]:
    """
    Decorator to convert sync function to async

    Args:
        func: Sync function

    Returns:
        Async wrapper function
    """

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))

    return wrapper


class TaskPool(Generic[T]):
    """Fixed number of workers draining a single work queue

    Items are handed to ``handler`` by ``max_workers`` worker tasks. The
    producer submits everything, then ``join`` closes the queue and waits
    until every worker has finished its in-flight item. The first handler
    failure cancels the remaining workers and is re-raised.

    Example:
        async with TaskPool(push, max_workers=3) as pool:
            for command in commands:
                await pool.submit(command)
    """

    def __init__(self, handler: Callable[[T], Awaitable[Any]], max_workers: int = 1):
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        self.handler = handler
        self.max_workers = max_workers
        self.completed = 0
        self._queue: Optional[asyncio.Queue] = None
        self._workers: List[asyncio.Task] = []
        self._closed = False

    def start(self) -> None:
        """Spawn the workers"""
        if self._queue is not None:
            return
        self._queue = asyncio.Queue()
        self._workers = [
            asyncio.create_task(self._worker())
            for _ in range(self.max_workers)
        ]

    async def submit(self, item: T) -> None:
        """Queue one item"""
        if self._closed:
            raise RuntimeError("Cannot submit to a closed pool")
        self.start()
        await self._queue.put(item)

    def close(self) -> None:
        """Signal that no more items will be submitted"""
        if self._closed:
            return
        self.start()
        self._closed = True
        for _ in self._workers:
            self._queue.put_nowait(_CLOSED)

    async def join(self) -> int:
        """
        Wait for every queued item to be handled

        Returns:
            Number of items handled
        """
        self.close()
        try:
            await asyncio.gather(*self._workers)
        except BaseException:
            await self.cancel()
            raise
        return self.completed

    async def cancel(self) -> None:
        """Abort workers without draining the queue"""
        for worker in self._workers:
            worker.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)

    async def run(self, items: Iterable[T]) -> int:
        """Submit all ``items`` and wait for completion"""
        for item in items:
            await self.submit(item)
        return await self.join()

    async def _worker(self) -> None:
        while True:
            item = await self._queue.get()
            if item is _CLOSED:
                return
            await self.handler(item)
            self.completed += 1

    async def __aenter__(self):
        self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            await self.join()
        else:
            await self.cancel()
