"""Unit tests for the recovery EventBus."""

import pytest

from declorder_core.events import EVENT_PAYLOAD_KEYS, RECOVERY_EVENTS, EventBus


def _payload(event_name: str, owner: str = "p.T") -> dict:
    payload = {key: None for key in EVENT_PAYLOAD_KEYS[event_name]}
    payload["owner"] = owner
    return payload


def test_event_handlers_run_in_priority_order() -> None:
    bus = EventBus()
    seen: list[str] = []

    def make_handler(label: str):
        def handler(event):
            seen.append(f"{label}:{event.owner}")

        return handler

    bus.on("order_unavailable", make_handler("one"), priority=0)
    bus.on("order_unavailable", make_handler("two"), priority=0)
    bus.on("order_unavailable", make_handler("high"), priority=5)
    bus.on("order_unavailable", make_handler("low"), priority=-1)
    bus.emit("order_unavailable", {"owner": "p.T"})

    assert seen == ["high:p.T", "one:p.T", "two:p.T", "low:p.T"]


def test_on_all_subscribes_to_every_recovery_event() -> None:
    bus = EventBus()
    recorded: list[str] = []
    bus.on_all(lambda event: recorded.append(event.name))

    for name in RECOVERY_EVENTS:
        bus.emit(name, _payload(name))

    assert recorded == list(RECOVERY_EVENTS)


def test_recovery_events_are_listed() -> None:
    assert RECOVERY_EVENTS == (
        "order_recovered",
        "order_unavailable",
        "order_failed",
        "run_reordered",
        "run_skipped",
    )


def test_every_payload_names_its_owner() -> None:
    assert all("owner" in keys for keys in EVENT_PAYLOAD_KEYS.values())


def test_emit_without_handlers_is_a_no_op() -> None:
    EventBus().emit("order_failed", _payload("order_failed"))


def test_unknown_event_names_are_rejected() -> None:
    bus = EventBus()
    with pytest.raises(ValueError, match="unknown recovery event 'something_else'"):
        bus.on("something_else", lambda event: None)
    with pytest.raises(ValueError, match="unknown recovery event"):
        bus.emit("something_else", {"owner": "p.T"})


def test_incomplete_payload_is_rejected() -> None:
    bus = EventBus()
    with pytest.raises(ValueError, match="run_skipped payload lacks reason"):
        bus.emit("run_skipped", {"owner": "p.T"})


def test_extra_payload_keys_are_delivered() -> None:
    bus = EventBus()
    seen: list[dict] = []
    bus.on("order_unavailable", lambda event: seen.append(event.payload))
    bus.emit("order_unavailable", {"owner": "p.T", "note": "cache miss"})
    assert seen == [{"owner": "p.T", "note": "cache miss"}]
