"""Asynchronous enumerator core.

An ``AsyncEnumerator`` advance is the only suspension point of the async
surface. Each advance runs the operator's ``_step`` in its own task and
races it against two cancellation sources:

* the caller's :class:`~pullseq.base.cancellation.CancellationToken`, and
* the enumerator's own lifetime token, cancelled by ``dispose()``.

Whichever is signalled first cancels the step task, releases everything the
enumerator owns, and resolves the advance to ``Outcome.fault(CancelledError)``.
Tokens may be cancelled from any thread; the wake-up is marshalled onto the
running loop with ``call_soon_threadsafe``.

The step receives a per-advance token linked to both sources. When the task
awaiting the advance is itself cancelled (``asyncio.wait_for``,
``Task.cancel``) the enumerator is faulted and released the same way before
``asyncio.CancelledError`` propagates.
"""

from __future__ import annotations

import asyncio
import inspect
from contextlib import suppress
from typing import Any, AsyncIterable, AsyncIterator, Awaitable, Callable, Iterable, List, Optional, Tuple, TypeVar

from ..base.cancellation import CancellationToken, CancelledError
from ..base.cursor import Cursor, EnumeratorState
from ..base.errors import ArgumentNullError, InvalidOperationError, ObjectDisposedError
from ..base.logging import trace_event
from ..base.outcome import Outcome
from ..config import get_runtime_config

T = TypeVar("T")
R = TypeVar("R")


class AsyncEnumerator(Cursor[T], AsyncIterator[T]):
    """Single-consumer, cancellable cursor over an :class:`AsyncEnumerable`."""

    surface = "async"

    def __init__(self) -> None:
        super().__init__()
        self._lifetime = CancellationToken()
        self._pending = False

    @property
    def lifetime(self) -> CancellationToken:  # noqa: D401 - short property
        """Token cancelled when this enumerator is disposed."""
        return self._lifetime

    async def _step(self, token: Optional[CancellationToken]) -> Outcome[T]:
        raise NotImplementedError

    def _on_dispose(self) -> None:
        self._lifetime.cancel("enumerator disposed")

    async def advance(self, token: Optional[CancellationToken] = None) -> Outcome[T]:
        """Produce the next outcome, honouring ``token``.

        Raises:
            ObjectDisposedError: if the enumerator was disposed.
            InvalidOperationError: if another advance is still pending.
        """
        if self._state is EnumeratorState.DISPOSED:
            raise ObjectDisposedError()
        if self._pending:
            raise InvalidOperationError("another advance is already pending on this enumerator")
        if self.finished:
            return Outcome.completed()
        self._pending = True
        try:
            return await self._race(token)
        finally:
            self._pending = False

    async def _step_safely(self, token: Optional[CancellationToken]) -> Outcome[T]:
        try:
            return await self._step(token)
        except Exception as exc:
            return Outcome.fault(exc)

    async def _race(self, token: Optional[CancellationToken]) -> Outcome[T]:
        if token is not None and token.cancelled:
            return self._cancelled(token.reason)
        loop = asyncio.get_running_loop()
        # Cancelled by whichever of the caller token or the lifetime fires first.
        step_token = CancellationToken()
        links = [self._lifetime.link_child(step_token)]
        if token is not None:
            links.append(token.link_child(step_token))
        step = loop.create_task(self._step_safely(step_token))
        woken: asyncio.Future[Optional[str]] = loop.create_future()

        def wake(reason: Optional[str]) -> None:
            if not woken.done():
                woken.set_result(reason)

        def on_cancel(reason: Optional[str]) -> None:
            with suppress(RuntimeError):  # loop already closed
                loop.call_soon_threadsafe(wake, reason)

        registration = step_token.register(on_cancel)
        try:
            await asyncio.wait((step, woken), return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            # The awaiting task itself was cancelled (wait_for, Task.cancel).
            await self._abandon(step)
            raise
        finally:
            registration.dispose()
            for link in links:
                link.dispose()
            woken.cancel()

        if step.done() and not step.cancelled() and not self._lifetime.cancelled:
            return self._accept(step.result())
        unwound = await self._unwind(step)
        return self._cancelled(step_token.reason or "step cancelled", unwound=unwound)

    async def _unwind(self, step: "asyncio.Task[Outcome[T]]") -> bool:
        """Cancel ``step`` and wait up to the grace period for it to finish."""
        if step.done():
            return True
        step.cancel()
        done, _ = await asyncio.wait((step,), timeout=get_runtime_config().cancel_grace_seconds)
        return bool(done)

    async def _abandon(self, step: "asyncio.Task[Outcome[T]]") -> None:
        unwound = False
        try:
            unwound = await self._unwind(step)
        finally:
            self._cancelled("advance task cancelled", unwound=unwound)

    def _cancelled(self, reason: Optional[str], **fields: Any) -> Outcome[T]:
        error = CancelledError(reason or "advance cancelled")
        trace_event("enumerator.cancelled", self._log_context(), error=error, **fields)
        return self._finish(Outcome.fault(error))

    async def move_next(self, token: Optional[CancellationToken] = None) -> bool:
        """``advance`` in boolean form; a fault is raised the one time it is seen."""
        return (await self.advance(token)).unwrap()

    async def aclose(self) -> None:
        self.dispose()

    def __aiter__(self) -> "AsyncEnumerator[T]":
        return self

    async def __anext__(self) -> T:
        if await self.move_next():
            return self.current
        raise StopAsyncIteration

    async def __aenter__(self) -> "AsyncEnumerator[T]":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.dispose()


class AsyncEnumerable(AsyncIterable[T]):
    """Restartable asynchronous sequence with fluent operator forms."""

    def get_async_enumerator(self) -> AsyncEnumerator[T]:
        raise NotImplementedError

    async def __aiter__(self):
        async with self.get_async_enumerator() as enumerator:
            while await enumerator.move_next():
                yield enumerator.current

    # fluent operators ----------------------------------------------------
    # Local imports: the operator modules import this one.

    def catch(self, handler: Callable[[Any], Any], exception_type: type = Exception) -> "AsyncEnumerable[T]":
        from .exceptions import catch

        return catch(self, handler, exception_type)

    def catch_with(self, *others: Any) -> "AsyncEnumerable[T]":
        from .exceptions import catch_many

        return catch_many([self, *others])

    def retry(self, count: Optional[int] = None) -> "AsyncEnumerable[T]":
        from .exceptions import retry

        return retry(self, count)

    def on_error_resume_next(self, other: Any, *others: Any) -> "AsyncEnumerable[T]":
        from .exceptions import on_error_resume_next

        return on_error_resume_next(self, other, *others)

    def finally_(self, action: Callable[[], None]) -> "AsyncEnumerable[T]":
        from .exceptions import finally_

        return finally_(self, action)

    def repeat(self, count: Optional[int] = None) -> "AsyncEnumerable[T]":
        from .creation import repeat_sequence

        return repeat_sequence(self, count)

    def concat(self, *others: Any) -> "AsyncEnumerable[T]":
        from .single import concat

        return concat([self, *others])

    def do(
        self,
        on_next: Callable[[T], Any],
        on_error: Optional[Callable[[BaseException], Any]] = None,
        on_completed: Optional[Callable[[], Any]] = None,
    ) -> "AsyncEnumerable[T]":
        from .single import do

        return do(self, on_next, on_error, on_completed)

    def start_with(self, *values: T) -> "AsyncEnumerable[T]":
        from .single import start_with

        return start_with(self, *values)

    def ignore_elements(self) -> "AsyncEnumerable[T]":
        from .single import ignore_elements

        return ignore_elements(self)

    def select(self, selector: Callable[[T], R]) -> "AsyncEnumerable[R]":
        from .single import select

        return select(self, selector)

    def where(self, predicate: Callable[[T], Any]) -> "AsyncEnumerable[T]":
        from .single import where

        return where(self, predicate)

    def scan(self, accumulator: Callable[[Any, T], Any], *seed: Any) -> "AsyncEnumerable[Any]":
        from .single import scan

        return scan(self, accumulator, *seed)

    def distinct_until_changed(self, key_selector: Optional[Callable[[T], Any]] = None) -> "AsyncEnumerable[T]":
        from .single import distinct_until_changed

        return distinct_until_changed(self, key_selector)

    def buffer(self, count: int, skip: Optional[int] = None) -> "AsyncEnumerable[List[T]]":
        from .single import buffer

        return buffer(self, count, skip)

    async def to_list(self, token: Optional[CancellationToken] = None) -> List[T]:
        from .single import to_list

        return await to_list(self, token)

    async def for_each(self, action: Callable[[T], Any], token: Optional[CancellationToken] = None) -> None:
        from .single import for_each

        await for_each(self, action, token)


class AnonymousAsyncEnumerable(AsyncEnumerable[T]):
    def __init__(self, get_async_enumerator: Callable[[], AsyncEnumerator[T]]) -> None:
        self._factory = get_async_enumerator

    def get_async_enumerator(self) -> AsyncEnumerator[T]:
        return self._factory()


class AnonymousAsyncEnumerator(AsyncEnumerator[T]):
    """Enumerator assembled from an async ``move_next``, ``current`` and ``dispose``.

    ``move_next`` receives the advance's token.
    """

    operator = "create_async_enumerator"

    def __init__(
        self,
        move_next: Callable[[Optional[CancellationToken]], Awaitable[bool]],
        current: Optional[Callable[[], T]] = None,
        dispose: Optional[Callable[[], None]] = None,
    ) -> None:
        super().__init__()
        self._move_next = move_next
        self._read_current = current
        self._dispose_action = dispose

    async def _step(self, token: Optional[CancellationToken]) -> Outcome[T]:
        if not await self._move_next(token):
            return Outcome.completed()
        return Outcome.of(self._read_current() if self._read_current is not None else None)

    def _release(self) -> None:
        if self._dispose_action is not None:
            self._dispose_action()


class IterableAsyncEnumerable(AsyncEnumerable[T]):
    """Adapter over a sync iterable or a plain async iterable."""

    def __init__(self, iterable: Any) -> None:
        self._iterable = iterable

    def get_async_enumerator(self) -> AsyncEnumerator[T]:
        if isinstance(self._iterable, AsyncIterable):
            return _AsyncIteratorEnumerator(self._iterable)
        return _IteratorAsyncEnumerator(self._iterable)


class _IteratorAsyncEnumerator(AsyncEnumerator[T]):
    operator = "to_async_enumerable"

    def __init__(self, iterable: Iterable[T]) -> None:
        super().__init__()
        self._iterable = iterable
        self._iterator: Any = None

    async def _step(self, token: Optional[CancellationToken]) -> Outcome[T]:
        if self._iterator is None:
            self._iterator = iter(self._iterable)
        try:
            return Outcome.of(next(self._iterator))
        except StopIteration:
            return Outcome.completed()

    def _release(self) -> None:
        close = getattr(self._iterator, "close", None)
        if callable(close):
            close()


class _AsyncIteratorEnumerator(AsyncEnumerator[T]):
    operator = "to_async_enumerable"

    def __init__(self, iterable: AsyncIterable[T]) -> None:
        super().__init__()
        self._iterable = iterable
        self._iterator: Any = None
        self._closing: Optional[asyncio.Task[Any]] = None

    async def _step(self, token: Optional[CancellationToken]) -> Outcome[T]:
        if self._iterator is None:
            self._iterator = self._iterable.__aiter__()
        try:
            return Outcome.of(await self._iterator.__anext__())
        except StopAsyncIteration:
            return Outcome.completed()

    def _release(self) -> None:
        aclose = getattr(self._iterator, "aclose", None)
        if not callable(aclose):
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop: the async generator is finalized by the interpreter.
            return
        self._closing = loop.create_task(aclose())
        self._closing.add_done_callback(self._on_closed)

    def _on_closed(self, task: "asyncio.Task[Any]") -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            trace_event("enumerator.aclose_failed", self._log_context(), error=error)


class AsyncForwardingEnumerator(AsyncEnumerator[T]):
    """Async enumerator that owns at most one inner enumerator at a time."""

    def __init__(self) -> None:
        super().__init__()
        self._inner: Optional[AsyncEnumerator[Any]] = None

    def _switch(self, inner: Optional[AsyncEnumerator[Any]]) -> None:
        previous, self._inner = self._inner, inner
        if previous is not None:
            previous.dispose()

    def _release(self) -> None:
        self._switch(None)


class AsyncChainEnumerator(AsyncForwardingEnumerator[T]):
    """Enumerates a sequence of async sequences one after another.

    Same hooks as the synchronous ``ChainEnumerator``.
    """

    def __init__(self, sources: Iterable[Any]) -> None:
        super().__init__()
        self._sources = sources
        self._pending_sources: Any = None
        self._attempt = 0

    def _on_attempt(self, attempt: int) -> None:
        """Called before each inner sequence is acquired."""

    def _on_inner_completed(self) -> bool:
        return False

    def _on_inner_fault(self, error: BaseException) -> Optional[Outcome[T]]:
        return Outcome.fault(error)

    def _on_exhausted(self) -> Outcome[T]:
        return Outcome.completed()

    def _acquire_next(self) -> bool:
        if self._pending_sources is None:
            self._pending_sources = iter(self._sources)
        for source in self._pending_sources:
            self._attempt += 1
            self._on_attempt(self._attempt)
            self._switch(as_async_enumerable(source, "sources[]").get_async_enumerator())
            return True
        return False

    async def _step(self, token: Optional[CancellationToken]) -> Outcome[T]:
        while True:
            if self._inner is None:
                try:
                    acquired = self._acquire_next()
                except Exception as exc:
                    handled = self._on_inner_fault(exc)
                    if handled is not None:
                        return handled
                    continue
                if not acquired:
                    return self._on_exhausted()
            outcome = await self._inner.advance(token)
            if outcome.has_value:
                return outcome
            self._switch(None)
            if outcome.is_completed:
                if self._on_inner_completed():
                    return outcome
                continue
            handled = self._on_inner_fault(outcome.error)
            if handled is not None:
                return handled


def as_async_enumerable(source: Any, argument: str = "source") -> AsyncEnumerable[Any]:
    """Return ``source`` as an :class:`AsyncEnumerable`.

    Accepts async sequences, plain async iterables and sync iterables
    (including :class:`~pullseq.enumerable.Enumerable`).

    Raises:
        ArgumentNullError: if ``source`` is ``None``.
        TypeError: if ``source`` is not iterable.
    """
    if source is None:
        raise ArgumentNullError(argument)
    if isinstance(source, AsyncEnumerable):
        return source
    if isinstance(source, (AsyncIterable, Iterable)):
        return IterableAsyncEnumerable(source)
    raise TypeError(f"{argument} must be iterable, got {type(source).__name__}")


def to_async_enumerable(iterable: Any) -> AsyncEnumerable[Any]:
    """Adapt a sync iterable, an ``Enumerable`` or an async iterable."""
    if iterable is None:
        raise ArgumentNullError("iterable")
    return IterableAsyncEnumerable(iterable)


def sources_argument(sources: Tuple[Any, ...]) -> Iterable[Any]:
    """Async counterpart of :func:`pullseq.enumerable.core.sources_argument`."""
    if not sources:
        raise ArgumentNullError("sources", "at least one sequence is required")
    if len(sources) == 1:
        (outer,) = sources
        if outer is None:
            raise ArgumentNullError("sources")
        if not isinstance(outer, Iterable):
            raise TypeError(f"sources must be an iterable of sequences, got {type(outer).__name__}")
        return outer
    return tuple(as_async_enumerable(source, f"sources[{i}]") for i, source in enumerate(sources))


async def maybe_await(value: Any) -> Any:
    """Await ``value`` if it is awaitable; callbacks may be sync or async."""
    if inspect.isawaitable(value):
        return await value
    return value


__all__ = [
    "AsyncEnumerator",
    "AsyncEnumerable",
    "AnonymousAsyncEnumerable",
    "AnonymousAsyncEnumerator",
    "IterableAsyncEnumerable",
    "AsyncForwardingEnumerator",
    "AsyncChainEnumerator",
    "as_async_enumerable",
    "to_async_enumerable",
    "sources_argument",
    "maybe_await",
]
