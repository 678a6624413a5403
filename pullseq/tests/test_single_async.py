"""Helpers and terminal drivers on the asynchronous surface."""
from __future__ import annotations

import asyncio

import pytest

from pullseq import async_enumerable as ax
from pullseq.base.errors import ArgumentNullError, ArgumentOutOfRangeError

from .utils import adrain


def run(coro):
    return asyncio.run(coro)


def test_concat_start_with_select_where():
    async def double(x):
        await asyncio.sleep(0)
        return x * 2

    async def scenario():
        return (
            await ax.concat([1], ax.range_(2, 2)).to_list(),
            await ax.range_(3, 2).start_with(1, 2).to_list(),
            await ax.range_(0, 6).where(lambda x: x % 2 == 0).select(double).to_list(),
        )

    assert run(scenario()) == ([1, 2, 3], [1, 2, 3, 4], [0, 4, 8])  # nosec B101


def test_do_and_ignore_elements():
    log = []

    async def on_next(value):
        log.append(value)

    async def scenario():
        await ax.do([1, 2], on_next, on_completed=lambda: log.append("done")).to_list()
        values, error = await adrain(
            ax.concat([3], ax.throw(KeyError("k"))).do(on_next, on_error=lambda e: log.append("error"))
            .ignore_elements()
            .get_async_enumerator()
        )
        return values, error

    values, error = run(scenario())
    assert log == [1, 2, "done", 3, "error"]  # nosec B101
    assert values == [] and isinstance(error, KeyError)  # nosec B101


def test_for_each_with_async_action_and_disposal_on_error():
    seen = []
    released = []

    async def action(value):
        seen.append(value)

    def failing(_):
        raise RuntimeError("stop")

    async def scenario():
        await ax.range_(0, 3).for_each(action)
        with pytest.raises(RuntimeError):
            await ax.repeat(1).finally_(lambda: released.append(1)).for_each(failing)

    run(scenario())
    assert seen == [0, 1, 2] and released == [1]  # nosec B101


def test_scan_with_and_without_seed():
    async def add(acc, x):
        await asyncio.sleep(0)
        return acc + x

    async def scenario():
        return (
            await ax.range_(1, 4).scan(add, 10).to_list(),
            await ax.scan(ax.range_(1, 4), lambda acc, x: acc * x).to_list(),
            await ax.scan(ax.empty(), add).to_list(),
        )

    assert run(scenario()) == ([11, 13, 16, 20], [2, 6, 24], [])  # nosec B101


def test_distinct_until_changed_compares_neighbours_only():
    async def scenario():
        return (
            await ax.distinct_until_changed([1, 1, 2, 2, 1, 3, 3]).to_list(),
            await ax.to_async_enumerable(["a", "A", "b", "B", "a"]).distinct_until_changed(str.lower).to_list(),
        )

    assert run(scenario()) == ([1, 2, 1, 3], ["a", "b", "a"])  # nosec B101


def test_buffer_chunks_and_overlaps():
    async def scenario():
        return (
            await ax.range_(0, 5).buffer(2).to_list(),
            await ax.buffer(ax.range_(0, 5), 3, 1).to_list(),
        )

    plain, sliding = run(scenario())
    assert plain == [[0, 1], [2, 3], [4]]  # nosec B101
    assert sliding == [[0, 1, 2], [1, 2, 3], [2, 3, 4], [3, 4], [4]]  # nosec B101


def test_buffer_fault_drops_open_chunk():
    seq = ax.concat([1, 2, 3], ax.throw(KeyError("k")))
    values, error = run(adrain(ax.buffer(seq, 2).get_async_enumerator()))
    assert values == [[1, 2]] and isinstance(error, KeyError)  # nosec B101


def test_helper_argument_validation_is_eager():
    with pytest.raises(ArgumentOutOfRangeError):
        ax.buffer([1], 0)
    with pytest.raises(ArgumentOutOfRangeError):
        ax.buffer([1], 2, 0)
    with pytest.raises(ArgumentNullError):
        ax.scan([1], None)
