from onboarding.services.event_bus import EventBus, TourEvent


def test_subscribe_publish_basic():
    bus = EventBus()
    received = []

    def handler(evt):
        received.append((evt.name, evt.payload))

    bus.subscribe(TourEvent.TOUR_STARTED, handler)
    bus.publish(TourEvent.TOUR_STARTED, {"tourId": "t"})
    assert received == [(TourEvent.TOUR_STARTED.value, {"tourId": "t"})]


def test_once_subscription():
    bus = EventBus()
    count = 0

    def incr(_):
        nonlocal count
        count += 1

    bus.subscribe(TourEvent.PLATFORM_RESOLVED, incr, once=True)
    bus.publish(TourEvent.PLATFORM_RESOLVED)
    bus.publish(TourEvent.PLATFORM_RESOLVED)
    assert count == 1
    assert bus.subscriber_count(TourEvent.PLATFORM_RESOLVED) == 0


def test_error_isolation():
    bus = EventBus()
    order = []

    def bad(_):
        order.append("bad")
        raise RuntimeError("boom")

    def good(_):
        order.append("good")

    bus.subscribe("custom", bad)
    bus.subscribe("custom", good)
    bus.publish("custom", 123)
    assert order == ["bad", "good"]
    assert len(bus.errors) == 1


def test_unsubscribe_and_clear():
    bus = EventBus()
    sub = bus.subscribe("x", lambda e: None)
    bus.subscribe("x", lambda e: None)
    bus.unsubscribe(sub)
    assert not sub.active
    assert bus.subscriber_count("x") == 1
    bus.clear()
    assert bus.subscriber_count("x") == 0


def test_unsubscribe_removes_only_the_given_handle():
    bus = EventBus()
    calls = []

    def handler(evt):
        calls.append(evt.name)

    first = bus.subscribe("x", handler)
    second = bus.subscribe("x", handler)
    bus.unsubscribe(second)
    assert bus.subscriber_count("x") == 1
    assert first.active
    bus.publish("x")
    assert calls == ["x"]
