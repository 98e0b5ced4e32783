from __future__ import annotations

import asyncio
import logging

import pytest
from fakes import SAMPLE_RECORD, Delayed, FakeMapProvider, FakeTransport, RecordingNotifier, make_record

from pyfiremap.exceptions import FireMapTransportError
from pyfiremap.models import Prediction
from pyfiremap.render import HeatmapRenderer
from pyfiremap.state import PredictionStore
from pyfiremap.sync import SyncLoop


def _wire(
    transport: FakeTransport,
    provider: FakeMapProvider,
    notifier: RecordingNotifier,
    *,
    discard_stale: bool = True,
    refresh_interval: float = 10.0,
) -> tuple[SyncLoop, PredictionStore]:
    store = PredictionStore(discard_stale=discard_stale)
    renderer = HeatmapRenderer(provider)
    store.subscribe(renderer.on_store_change)
    sync = SyncLoop(transport, store, refresh_interval=refresh_interval, notifier=notifier)
    return sync, store


def _addresses(store: PredictionStore) -> list[str]:
    return [p.address for p in store.snapshot()]


@pytest.mark.asyncio
@pytest.mark.parametrize("address", ["", "   "])
async def test_empty_address_alerts_without_request(
    transport: FakeTransport,
    provider: FakeMapProvider,
    notifier: RecordingNotifier,
    address: str,
) -> None:
    sync, store = _wire(transport, provider, notifier)

    assert await sync.submit_one(address) is None

    assert transport.calls == []
    assert notifier.alerts == ["Please enter an address"]
    assert store.snapshot() == ()


@pytest.mark.asyncio
async def test_submit_appends_record_and_renders_its_weight(
    transport: FakeTransport,
    provider: FakeMapProvider,
    notifier: RecordingNotifier,
) -> None:
    sync, store = _wire(transport, provider, notifier)
    transport.queue("GET", "/predictions", [make_record("existing")])
    transport.queue("POST", "/predict", dict(SAMPLE_RECORD))
    await sync.refresh_all()

    result = await sync.submit_one("123 Oak St")

    expected = Prediction.model_validate(SAMPLE_RECORD)
    assert result == expected
    assert store.snapshot()[-1] == expected
    assert _addresses(store) == ["existing", "123 Oak St"]
    assert transport.calls[-1] == ("POST", "/predict", {"address": "123 Oak St"})
    (points,) = provider.heat_layers()
    assert points[-1] == (1.0, 2.0, 0.9)
    assert notifier.alerts == []


@pytest.mark.asyncio
async def test_submit_failure_alerts_and_leaves_store(
    transport: FakeTransport,
    provider: FakeMapProvider,
    notifier: RecordingNotifier,
    caplog: pytest.LogCaptureFixture,
) -> None:
    sync, store = _wire(transport, provider, notifier)
    transport.queue("GET", "/predictions", [make_record("existing")])
    transport.queue("POST", "/predict", FireMapTransportError("HTTP 502", status_code=502, endpoint="/predict"))
    await sync.refresh_all()
    markers_before = provider.markers()

    with caplog.at_level(logging.ERROR, logger="pyfiremap.sync"):
        assert await sync.submit_one("9 Elm St") is None

    assert notifier.alerts == ["Failed to predict fire risk."]
    assert _addresses(store) == ["existing"]
    assert provider.markers() == markers_before
    assert "Failed to predict fire risk" in caplog.text


@pytest.mark.asyncio
async def test_submit_with_malformed_response_is_treated_as_failure(
    transport: FakeTransport,
    provider: FakeMapProvider,
    notifier: RecordingNotifier,
) -> None:
    sync, store = _wire(transport, provider, notifier)
    transport.queue("POST", "/predict", {"address": "9 Elm St"})

    assert await sync.submit_one("9 Elm St") is None
    assert notifier.alerts == ["Failed to predict fire risk."]
    assert store.snapshot() == ()


@pytest.mark.asyncio
async def test_failing_read_keeps_store_and_markers(
    transport: FakeTransport,
    provider: FakeMapProvider,
    notifier: RecordingNotifier,
    caplog: pytest.LogCaptureFixture,
) -> None:
    sync, store = _wire(transport, provider, notifier)
    transport.queue(
        "GET",
        "/predictions",
        [make_record("a"), make_record("b")],
        FireMapTransportError("HTTP 500 from /predictions", status_code=500, endpoint="/predictions"),
    )
    await sync.refresh_all()
    before = (store.snapshot(), provider.markers())

    with caplog.at_level(logging.ERROR, logger="pyfiremap.sync"):
        assert await sync.refresh_all() is False

    assert (store.snapshot(), provider.markers()) == before
    assert "Failed to fetch predictions" in caplog.text
    assert notifier.alerts == []


@pytest.mark.asyncio
async def test_non_list_read_payload_is_logged_not_raised(
    transport: FakeTransport,
    provider: FakeMapProvider,
    notifier: RecordingNotifier,
) -> None:
    sync, store = _wire(transport, provider, notifier)
    transport.queue("GET", "/predictions", {"detail": "oops"})

    assert await sync.refresh_all() is False
    assert store.snapshot() == ()


@pytest.mark.asyncio
async def test_consecutive_refreshes_replace_store(
    transport: FakeTransport,
    provider: FakeMapProvider,
    notifier: RecordingNotifier,
) -> None:
    sync, store = _wire(transport, provider, notifier)
    transport.queue("GET", "/predictions", [make_record("l1-a"), make_record("l1-b")], [make_record("l2-a")])

    await sync.refresh_all()
    await sync.refresh_all()

    assert _addresses(store) == ["l2-a"]
    assert len(provider.markers()) == 1


@pytest.mark.asyncio
async def test_slow_refresh_is_dropped_after_newer_refresh(
    transport: FakeTransport,
    provider: FakeMapProvider,
    notifier: RecordingNotifier,
) -> None:
    sync, store = _wire(transport, provider, notifier)
    gate = asyncio.Event()
    transport.queue("GET", "/predictions", Delayed(gate, [make_record("slow")]), [make_record("fast")])

    slow = asyncio.create_task(sync.refresh_all())
    await asyncio.sleep(0)
    assert await sync.refresh_all() is True
    gate.set()

    assert await slow is False
    assert _addresses(store) == ["fast"]


@pytest.mark.asyncio
async def test_slow_refresh_wins_when_stale_discard_disabled(
    transport: FakeTransport,
    provider: FakeMapProvider,
    notifier: RecordingNotifier,
) -> None:
    sync, store = _wire(transport, provider, notifier, discard_stale=False)
    gate = asyncio.Event()
    transport.queue("GET", "/predictions", Delayed(gate, [make_record("slow")]), [make_record("fast")])

    slow = asyncio.create_task(sync.refresh_all())
    await asyncio.sleep(0)
    await sync.refresh_all()
    gate.set()

    assert await slow is True
    assert _addresses(store) == ["slow"]


@pytest.mark.asyncio
async def test_refresh_issued_before_submit_does_not_drop_submitted_record(
    transport: FakeTransport,
    provider: FakeMapProvider,
    notifier: RecordingNotifier,
) -> None:
    sync, store = _wire(transport, provider, notifier)
    gate = asyncio.Event()
    transport.queue("GET", "/predictions", Delayed(gate, []))
    transport.queue("POST", "/predict", dict(SAMPLE_RECORD))

    pending = asyncio.create_task(sync.refresh_all())
    await asyncio.sleep(0)
    await sync.submit_one("123 Oak St")
    gate.set()
    await pending

    assert _addresses(store) == ["123 Oak St"]


@pytest.mark.asyncio
async def test_periodic_ticks_overlap_and_close_cancels_pending(
    transport: FakeTransport,
    provider: FakeMapProvider,
    notifier: RecordingNotifier,
) -> None:
    sync, _store = _wire(transport, provider, notifier, refresh_interval=0.01)
    never = asyncio.Event()
    transport.defaults[("GET", "/predictions")] = Delayed(never, [])

    runner = asyncio.create_task(sync.run_periodic())
    await asyncio.sleep(0.08)
    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner

    assert transport.count("GET", "/predictions") >= 2
    assert sync.pending_refreshes >= 2

    await sync.aclose()
    assert sync.pending_refreshes == 0


@pytest.mark.asyncio
async def test_periodic_ticks_continue_after_failures(
    transport: FakeTransport,
    provider: FakeMapProvider,
    notifier: RecordingNotifier,
) -> None:
    sync, store = _wire(transport, provider, notifier, refresh_interval=0.01)
    transport.queue("GET", "/predictions", FireMapTransportError("down", endpoint="/predictions"))
    transport.defaults[("GET", "/predictions")] = [make_record("recovered")]

    runner = asyncio.create_task(sync.run_periodic())
    await asyncio.sleep(0.08)
    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner
    await sync.aclose()

    assert transport.count("GET", "/predictions") >= 2
    assert _addresses(store) == ["recovered"]


@pytest.mark.asyncio
async def test_read_with_non_finite_coordinate_keeps_previous_map(
    transport: FakeTransport,
    provider: FakeMapProvider,
    notifier: RecordingNotifier,
) -> None:
    sync, store = _wire(transport, provider, notifier)
    transport.queue("GET", "/predictions", [make_record("ok")])
    transport.queue("GET", "/predictions", [make_record("bad", lat=float("nan")), make_record("ok2")])
    assert await sync.refresh_all() is True
    markers_before = provider.markers()

    assert await sync.refresh_all() is False

    assert _addresses(store) == ["ok"]
    assert provider.markers() == markers_before
    assert len(provider.heat_layers()) == 1
