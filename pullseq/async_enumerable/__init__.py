"""Asynchronous, cancellable pull-based sequences.

Usage::

    import asyncio
    from pullseq import async_enumerable as ax
    from pullseq.base.cancellation import CancellationToken

    async def main():
        token = CancellationToken()
        return await ax.range_(0, 3).retry(2).to_list(token)

    asyncio.run(main())
"""

from .core import (
    AnonymousAsyncEnumerable,
    AnonymousAsyncEnumerator,
    AsyncEnumerable,
    AsyncEnumerator,
    as_async_enumerable,
    to_async_enumerable,
)
from .creation import (
    create,
    create_enumerable,
    create_enumerator,
    defer,
    empty,
    generate,
    never,
    range_,
    repeat,
    repeat_sequence,
    return_,
    throw,
    using,
)
from .exceptions import catch, catch_many, finally_, on_error_resume_next, retry
from .single import (
    buffer,
    concat,
    distinct_until_changed,
    do,
    for_each,
    ignore_elements,
    scan,
    select,
    start_with,
    to_list,
    where,
)
from .yielder import AsyncYielder

__all__ = [
    "AsyncEnumerable",
    "AsyncEnumerator",
    "AnonymousAsyncEnumerable",
    "AnonymousAsyncEnumerator",
    "AsyncYielder",
    "as_async_enumerable",
    "to_async_enumerable",
    # creation
    "return_",
    "empty",
    "never",
    "throw",
    "range_",
    "repeat",
    "repeat_sequence",
    "defer",
    "generate",
    "using",
    "create",
    "create_enumerator",
    "create_enumerable",
    # error recovery
    "catch",
    "catch_many",
    "retry",
    "on_error_resume_next",
    "finally_",
    # helpers
    "concat",
    "start_with",
    "do",
    "ignore_elements",
    "select",
    "where",
    "scan",
    "distinct_until_changed",
    "buffer",
    "to_list",
    "for_each",
]
