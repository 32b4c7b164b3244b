"""
Tests for the load orchestrator and its four strategies.

Scope
-----
1.  **cache-first**: fresh cache short-circuits the remote; stale cache is
    served at once and refreshed in the background; empty cache fetches.
2.  **api-first**: remote wins, cache is the fallback, both empty is fatal.
3.  **cache-only / api-only**: each touches exactly one side for reading.
4.  **Background refresh**: writes the cache, then notifies; never raises.

All tests use a `StubSource` and a `FakeClock`, so nothing touches the
network and freshness is deterministic.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import pytest

from sportevents.cache import EventCache
from sportevents.core.contracts import SportEvent
from sportevents.core.errors import (
    NoCacheAvailableError,
    NoDataAvailableError,
    PersistenceError,
    RemoteRejectedError,
    RemoteUnavailableError,
)
from sportevents.loader import (
    BackgroundUpdateChannel,
    DataSource,
    EventLoader,
    LoadStrategy,
)
from sportevents.loader.background import run_background_refresh
from sportevents.loader.outcome import FALLBACK_NOTICE, STALE_NOTICE

MakeEvents = Callable[..., list[SportEvent]]
WINDOW = 3600


@pytest.fixture
def loader_for(cache: EventCache[SportEvent]) -> Iterator[Callable[..., EventLoader]]:
    """Return ``f(source)`` building a loader over the shared cache; closes them all."""
    built: list[EventLoader] = []

    def _make(source: Any) -> EventLoader:
        loader = EventLoader(cache, source)
        built.append(loader)
        return loader

    yield _make
    for loader in built:
        loader.close()


def _ids(events: list[SportEvent] | None) -> list[int]:
    return [e.id for e in events or []]


# --------------------------------------------------------------------------- #
# cache-first
# --------------------------------------------------------------------------- #


def test_cache_first_empty_cache_fetches_and_saves(
    loader_for: Any, stub_source: Any, make_events: MakeEvents, cache: EventCache[SportEvent]
) -> None:
    source = stub_source(make_events(1, 2))
    result = loader_for(source).load()

    assert result.source is DataSource.NETWORK
    assert result.strategy is LoadStrategy.CACHE_FIRST
    assert _ids(result.events) == [1, 2]
    assert _ids(cache.load()) == [1, 2]
    assert source.calls == 1


def test_cache_first_empty_cache_propagates_remote_error(
    loader_for: Any, stub_source: Any, cache: EventCache[SportEvent]
) -> None:
    source = stub_source(error=RemoteUnavailableError())
    with pytest.raises(RemoteUnavailableError):
        loader_for(source).load(LoadStrategy.CACHE_FIRST)
    assert cache.load() is None


def test_cache_first_fresh_cache_skips_remote(
    loader_for: Any, stub_source: Any, make_events: MakeEvents, cache: EventCache[SportEvent]
) -> None:
    cache.save(make_events(1))
    source = stub_source(make_events(9))
    loader = loader_for(source)

    result = loader.load("cache-first")

    assert result.source is DataSource.CACHE and not result.stale
    assert result.refresh is None and result.notice is None
    assert _ids(result.events) == [1]
    assert source.calls == 0
    assert loader.background_tasks == ()


def test_cache_first_stale_cache_refreshes_in_background(
    loader_for: Any,
    stub_source: Any,
    make_events: MakeEvents,
    cache: EventCache[SportEvent],
    clock: Any,
) -> None:
    cache.save(make_events(1, 2, 3))
    clock.advance(WINDOW + 1)
    source = stub_source(make_events(1, 2, 3, 4, 5))
    loader = loader_for(source)
    notified: list[list[int]] = []
    loader.channel.subscribe(lambda evs: notified.append(_ids(evs)))

    result = loader.load()

    assert _ids(result.events) == [1, 2, 3]
    assert result.from_cache and result.stale and result.degraded
    assert result.notice == STALE_NOTICE
    assert result.refresh is not None

    assert loader.wait_for_background(timeout=5)
    assert _ids(result.refresh.result()) == [1, 2, 3, 4, 5]
    assert notified == [[1, 2, 3, 4, 5]]

    after = loader.load(LoadStrategy.CACHE_ONLY)
    assert _ids(after.events) == [1, 2, 3, 4, 5]
    assert not after.stale
    assert cache.is_fresh()


def test_background_failure_is_swallowed(
    loader_for: Any,
    stub_source: Any,
    make_events: MakeEvents,
    cache: EventCache[SportEvent],
    clock: Any,
) -> None:
    cache.save(make_events(1))
    clock.advance(WINDOW + 1)
    loader = loader_for(stub_source(error=RemoteRejectedError(500)))
    notified: list[int] = []
    loader.channel.subscribe(lambda evs: notified.append(len(evs)))

    result = loader.load()
    assert result.refresh is not None
    assert result.refresh.result(timeout=5) is None

    assert notified == []
    assert _ids(cache.load()) == [1]
    assert not cache.is_fresh()


def test_closed_loader_serves_stale_cache_without_refresh(
    loader_for: Any,
    stub_source: Any,
    make_events: MakeEvents,
    cache: EventCache[SportEvent],
    clock: Any,
) -> None:
    cache.save(make_events(1))
    clock.advance(WINDOW + 1)
    source = stub_source(make_events(2))
    loader = loader_for(source)
    loader.close()

    result = loader.load()
    assert result.stale and result.refresh is None
    assert source.calls == 0


def test_shut_down_executor_does_not_fail_stale_load(
    stub_source: Any,
    make_events: MakeEvents,
    cache: EventCache[SportEvent],
    clock: Any,
) -> None:
    cache.save(make_events(1))
    clock.advance(WINDOW + 1)
    source = stub_source(make_events(2))
    executor = ThreadPoolExecutor(max_workers=1)
    executor.shutdown()

    with EventLoader(cache, source, executor=executor) as loader:
        result = loader.load()

    assert _ids(result.events) == [1]
    assert result.stale and result.refresh is None
    assert source.calls == 0


# --------------------------------------------------------------------------- #
# api-first
# --------------------------------------------------------------------------- #


def test_api_first_prefers_remote(
    loader_for: Any, stub_source: Any, make_events: MakeEvents, cache: EventCache[SportEvent]
) -> None:
    cache.save(make_events(1))
    result = loader_for(stub_source(make_events(2, 3))).load(LoadStrategy.API_FIRST)

    assert result.source is DataSource.NETWORK and not result.fallback
    assert _ids(result.events) == [2, 3]
    assert _ids(cache.load()) == [2, 3]


def test_api_first_falls_back_to_cache(
    loader_for: Any,
    stub_source: Any,
    make_events: MakeEvents,
    cache: EventCache[SportEvent],
    clock: Any,
) -> None:
    cache.save(make_events(1))
    clock.advance(WINDOW + 1)
    error = RemoteUnavailableError()

    result = loader_for(stub_source(error=error)).load(LoadStrategy.API_FIRST)

    assert result.source is DataSource.CACHE
    assert result.fallback and result.stale and result.degraded
    assert result.fallback_error is error
    assert result.notice == FALLBACK_NOTICE
    assert _ids(result.events) == [1]


def test_api_first_with_nothing_raises_no_data(
    loader_for: Any, stub_source: Any, cache: EventCache[SportEvent]
) -> None:
    with pytest.raises(NoDataAvailableError) as info:
        loader_for(stub_source(error=RemoteRejectedError(502))).load("api-first")

    assert info.value.is_critical
    assert isinstance(info.value.__cause__, RemoteRejectedError)
    assert cache.load() is None


# --------------------------------------------------------------------------- #
# cache-only / api-only
# --------------------------------------------------------------------------- #


def test_cache_only_never_calls_remote(
    loader_for: Any, stub_source: Any, make_events: MakeEvents, cache: EventCache[SportEvent]
) -> None:
    source = stub_source(make_events(9))
    loader = loader_for(source)

    with pytest.raises(NoCacheAvailableError):
        loader.load(LoadStrategy.CACHE_ONLY)

    cache.save(make_events(1))
    result = loader.load(LoadStrategy.CACHE_ONLY)
    assert _ids(result.events) == [1] and not result.stale
    assert source.calls == 0


def test_cache_only_reports_stale_snapshot(
    loader_for: Any,
    stub_source: Any,
    make_events: MakeEvents,
    cache: EventCache[SportEvent],
    clock: Any,
) -> None:
    cache.save(make_events(1))
    clock.advance(WINDOW + 1)
    result = loader_for(stub_source()).load(LoadStrategy.CACHE_ONLY)
    assert result.stale and result.refresh is None


def test_api_only_writes_through(
    loader_for: Any, stub_source: Any, make_events: MakeEvents, cache: EventCache[SportEvent]
) -> None:
    cache.save(make_events(1))
    result = loader_for(stub_source(make_events(4))).load(LoadStrategy.API_ONLY)

    assert result.source is DataSource.NETWORK
    assert _ids(cache.load()) == [4]


def test_api_only_propagates_errors_and_keeps_cache(
    loader_for: Any, stub_source: Any, make_events: MakeEvents, cache: EventCache[SportEvent]
) -> None:
    cache.save(make_events(1))
    with pytest.raises(RemoteRejectedError):
        loader_for(stub_source(error=RemoteRejectedError(404))).load(LoadStrategy.API_ONLY)
    assert _ids(cache.load()) == [1]


def test_save_failure_does_not_hide_fetched_events(
    loader_for: Any,
    stub_source: Any,
    make_events: MakeEvents,
    cache: EventCache[SportEvent],
    monkeypatch: Any,
) -> None:
    def refuse(events: Any) -> None:
        raise PersistenceError("disk full")

    monkeypatch.setattr(cache, "save", refuse)
    result = loader_for(stub_source(make_events(5))).refresh()

    assert _ids(result.events) == [5]
    assert cache.load() is None


def test_unknown_strategy_is_rejected(loader_for: Any, stub_source: Any) -> None:
    with pytest.raises(ValueError):
        loader_for(stub_source()).load("network-maybe")


# --------------------------------------------------------------------------- #
# End-to-end scenario and the background worker
# --------------------------------------------------------------------------- #


def test_three_then_five_events_scenario(
    loader_for: Any,
    stub_source: Any,
    make_events: MakeEvents,
    cache: EventCache[SportEvent],
    clock: Any,
) -> None:
    source = stub_source(make_events(1, 2, 3))
    loader = loader_for(source)

    first = loader.load()
    assert first.source is DataSource.NETWORK and len(first.events) == 3

    clock.advance(WINDOW + 1)
    source.events = make_events(1, 2, 3, 4, 5)
    received: list[int] = []
    with loader.channel.subscribe(lambda evs: received.append(len(evs))):
        second = loader.load()
        assert len(second.events) == 3 and second.stale
        assert loader.wait_for_background(timeout=5)

    assert received == [5]
    third = loader.load()
    assert third.source is DataSource.CACHE and not third.stale
    assert len(third.events) == 5
    assert source.calls == 2


def test_background_refresh_publishes_even_if_save_fails(
    stub_source: Any, make_events: MakeEvents, cache: EventCache[SportEvent], monkeypatch: Any
) -> None:
    def refuse(events: Any) -> None:
        raise PersistenceError("disk full")

    monkeypatch.setattr(cache, "save", refuse)
    channel = BackgroundUpdateChannel()
    received: list[int] = []
    channel.subscribe(lambda evs: received.append(len(evs)))

    out = run_background_refresh(stub_source(make_events(1, 2)), cache, channel)

    assert _ids(out) == [1, 2]
    assert received == [2]


def test_background_refresh_survives_unexpected_errors(
    cache: EventCache[SportEvent],
) -> None:
    class Exploding:
        def fetch_events(self) -> list[SportEvent]:
            raise KeyError("bug")

    channel = BackgroundUpdateChannel()
    assert run_background_refresh(Exploding(), cache, channel) is None  # type: ignore[arg-type]


def test_status_and_clear_delegate_to_cache(
    loader_for: Any, stub_source: Any, make_events: MakeEvents, cache: EventCache[SportEvent]
) -> None:
    loader = loader_for(stub_source())
    cache.save(make_events(1, 2))
    assert loader.cache_status().record_count == 2

    loader.clear_cache()
    assert not loader.cache_status().has_snapshot
