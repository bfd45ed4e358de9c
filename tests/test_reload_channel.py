from __future__ import annotations

from devserve.reload_channel import CONNECTED_COMMENT, KEEPALIVE_COMMENT, RELOAD_EVENT, ReloadChannel


def _drain_connected(subscription):
    events = iter(subscription)
    assert next(events) == CONNECTED_COMMENT
    return events


def test_broadcast_reaches_every_client():
    channel = ReloadChannel()
    first = channel.register("10.0.0.1:5000")
    second = channel.register("10.0.0.2:5000")
    first_events = _drain_connected(first)
    second_events = _drain_connected(second)

    assert channel.broadcast() == 2
    assert next(first_events) == RELOAD_EVENT
    assert next(second_events) == RELOAD_EVENT


def test_disconnected_client_is_skipped():
    channel = ReloadChannel()
    gone = channel.register("10.0.0.1:5000")
    staying = channel.register("10.0.0.2:5000")
    events = _drain_connected(staying)

    gone.close()
    assert channel.client_ids() == ["10.0.0.2:5000"]
    assert channel.broadcast() == 1
    assert next(events) == RELOAD_EVENT
    assert gone.push(RELOAD_EVENT) is False


def test_close_is_idempotent():
    channel = ReloadChannel()
    subscription = channel.register("a")
    subscription.close()
    subscription.close()
    assert len(channel) == 0


def test_reconnect_creates_new_entry_and_ends_old_stream():
    channel = ReloadChannel()
    old = channel.register("a")
    old_events = _drain_connected(old)
    new = channel.register("a")

    assert new is not old
    assert channel.client_ids() == ["a"]
    assert list(old_events) == []
    assert channel.broadcast() == 1


def test_channel_close_revokes_streams():
    channel = ReloadChannel()
    subscription = channel.register("a")
    events = _drain_connected(subscription)
    channel.close()
    assert list(events) == []
    assert len(channel) == 0


def test_idle_stream_sends_keepalive():
    channel = ReloadChannel(keepalive=0.01)
    events = _drain_connected(channel.register("a"))
    assert next(events) == KEEPALIVE_COMMENT


def test_broadcast_with_no_clients():
    assert ReloadChannel().broadcast() == 0
