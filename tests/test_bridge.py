"""Tests for the streaming bridge between the walker thread and asyncio."""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from summarize.errors import ReadError, WalkError
from summarize.file_walker import DiscoveredFile, FileStream, FilterSet, find, stream


class CountingSource:
    """A source of `total` fake files that records how many items were pulled."""

    def __init__(self, total: int) -> None:
        self.total = total
        self.pulled = 0
        self.finished = threading.Event()

    def __iter__(self) -> Iterator[DiscoveredFile]:
        try:
            for i in range(self.total):
                self.pulled += 1
                yield DiscoveredFile(Path(f"file{i}.txt"), str(i).encode())
        finally:
            self.finished.set()


async def _wait_for(predicate: Callable[[], bool], timeout: float = 5.0) -> None:
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.01)


def _make_tree(root: Path) -> None:
    (root / "a.rs").write_text("fn a() {}")
    (root / "b.kt").write_text("fun b() {}")
    for d in ["sub", "sub/deeper", "other"]:
        (root / d).mkdir()
        (root / d / "c.rs").write_text(d)


@pytest.mark.asyncio
async def test_stream_matches_synchronous_walk(tmp_path: Path) -> None:
    _make_tree(tmp_path)
    filters = FilterSet.from_strings(extensions=["rs"])

    streamed: list[Path] = []
    async with stream(tmp_path, filters) as files:
        async for item in files:
            assert isinstance(item, DiscoveredFile)
            streamed.append(item.path)

    direct = [item.path for item in find(tmp_path, filters) if isinstance(item, DiscoveredFile)]
    assert set(streamed) == set(direct)
    assert len(streamed) == 4


@pytest.mark.asyncio
async def test_stream_preserves_source_order() -> None:
    source = CountingSource(250)
    names = [item.path.name async for item in FileStream(source, capacity=7)]
    assert names == [f"file{i}.txt" for i in range(250)]


@pytest.mark.asyncio
async def test_stream_delivers_contents() -> None:
    items = [item async for item in FileStream(CountingSource(3))]
    assert [i.content for i in items if isinstance(i, DiscoveredFile)] == [b"0", b"1", b"2"]


@pytest.mark.asyncio
async def test_end_of_stream_is_clean() -> None:
    files = FileStream(CountingSource(2))
    assert len([item async for item in files]) == 2
    with pytest.raises(StopAsyncIteration):
        await files.__anext__()
    assert files.join(timeout=5)


@pytest.mark.asyncio
async def test_empty_source() -> None:
    assert [item async for item in FileStream([])] == []


@pytest.mark.asyncio
async def test_backpressure_blocks_producer() -> None:
    capacity = 3
    source = CountingSource(1000)
    files = FileStream(source, capacity=capacity)

    first = await files.__anext__()
    assert isinstance(first, DiscoveredFile)
    await _wait_for(lambda: source.pulled >= capacity + 1)
    await asyncio.sleep(0.2)

    # One delivered, `capacity` queued, one held by the blocked send.
    assert source.pulled <= capacity + 2
    assert files.producer_alive
    assert not source.finished.is_set()

    await files.aclose()
    assert files.join(timeout=5)


@pytest.mark.asyncio
async def test_close_stops_producer_early() -> None:
    source = CountingSource(100_000)
    files = FileStream(source, capacity=10)
    for _ in range(5):
        await files.__anext__()

    await files.aclose()
    assert files.join(timeout=5)
    assert source.finished.is_set()
    assert source.pulled < 100
    with pytest.raises(StopAsyncIteration):
        await files.__anext__()


@pytest.mark.asyncio
async def test_leaving_context_stops_producer() -> None:
    source = CountingSource(100_000)
    async with FileStream(source, capacity=4) as files:
        async for _ in files:
            break
    assert files.join(timeout=5)
    assert source.pulled < 100


@pytest.mark.asyncio
async def test_dropping_stream_stops_producer() -> None:
    source = CountingSource(100_000)
    files = FileStream(source, capacity=4)
    await files.__anext__()
    await _wait_for(lambda: source.pulled >= 5)
    del files
    await asyncio.to_thread(source.finished.wait, 5)
    assert source.finished.is_set()
    assert source.pulled < 100


@pytest.mark.asyncio
async def test_walk_errors_are_delivered_inline() -> None:
    error = ReadError(Path("bad.txt"), PermissionError(13, "Permission denied"))
    good = DiscoveredFile(Path("good.txt"), b"ok")
    items = [item async for item in FileStream([good, error, good])]
    assert items[0] == good
    assert isinstance(items[1], WalkError)
    assert items[1].path == Path("bad.txt")
    assert items[2] == good


@pytest.mark.asyncio
async def test_source_failure_is_reraised() -> None:
    def broken() -> Iterator[DiscoveredFile]:
        yield DiscoveredFile(Path("one.txt"), b"1")
        raise RuntimeError("walker bug")

    files = FileStream(broken())
    assert isinstance(await files.__anext__(), DiscoveredFile)
    with pytest.raises(RuntimeError, match="walker bug"):
        await files.__anext__()


@pytest.mark.asyncio
async def test_walk_runs_off_the_event_loop() -> None:
    loop_thread = threading.get_ident()
    seen: list[int] = []

    def source() -> Iterator[DiscoveredFile]:
        seen.append(threading.get_ident())
        yield DiscoveredFile(Path("x"), b"")

    assert len([item async for item in FileStream(source())]) == 1
    assert seen and seen[0] != loop_thread


def test_capacity_must_be_positive() -> None:
    with pytest.raises(ValueError):
        FileStream([], capacity=0)


def test_stream_under_asyncio_run(tmp_path: Path) -> None:
    _make_tree(tmp_path)

    async def collect() -> list[str]:
        return sorted(
            [
                item.path.name
                async for item in stream(tmp_path, FilterSet.from_strings(extensions=["kt"]))
                if isinstance(item, DiscoveredFile)
            ]
        )

    assert asyncio.run(collect()) == ["b.kt"]


class _Abort(BaseException):
    """Stands in for KeyboardInterrupt or SystemExit raised inside a walk."""


@pytest.mark.asyncio
async def test_base_exception_in_source_ends_stream() -> None:
    def interrupted() -> Iterator[DiscoveredFile]:
        yield DiscoveredFile(Path("one.txt"), b"1")
        raise _Abort()

    files = FileStream(interrupted())
    assert isinstance(await asyncio.wait_for(files.__anext__(), 5), DiscoveredFile)
    with pytest.raises(_Abort):
        await asyncio.wait_for(files.__anext__(), 5)
    assert files.join(5)
