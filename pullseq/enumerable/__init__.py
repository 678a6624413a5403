"""Synchronous pull-based sequences.

Usage::

    from pullseq import enumerable as ex

    ex.range_(0, 3).concat(ex.throw(ValueError("boom"))).retry(2).to_list()
"""

from .core import (
    AnonymousEnumerable,
    AnonymousEnumerator,
    Enumerable,
    Enumerator,
    as_enumerable,
    from_iterable,
)
from .creation import (
    BodyState,
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
    hide,
    ignore_elements,
    scan,
    select,
    start_with,
    to_list,
    where,
)
from .yielder import Yielder

__all__ = [
    "Enumerable",
    "Enumerator",
    "AnonymousEnumerable",
    "AnonymousEnumerator",
    "as_enumerable",
    "from_iterable",
    "BodyState",
    "Yielder",
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
    "hide",
    "ignore_elements",
    "select",
    "where",
    "scan",
    "distinct_until_changed",
    "buffer",
    "for_each",
    "to_list",
]
