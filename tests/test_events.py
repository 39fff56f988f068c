"""Tests for the event bus."""

from earthspeed.interaction.events import Event, EventBus, EventType


class TestEventBus:
    """Test subscribe/emit semantics."""

    def test_subscribers_receive_data(self):
        bus = EventBus(name="test")
        received = []
        bus.subscribe(EventType.SPEED_CHANGED, received.append)

        bus.emit(EventType.SPEED_CHANGED, source="test", speed=2.0)

        assert len(received) == 1
        assert isinstance(received[0], Event)
        assert received[0].data == {"speed": 2.0}
        assert received[0].source == "test"

    def test_priority_order(self):
        bus = EventBus()
        order = []
        bus.subscribe(EventType.PATTERN_CHANGED, lambda e: order.append("low"))
        bus.subscribe(EventType.PATTERN_CHANGED, lambda e: order.append("high"), priority=10)
        bus.subscribe(EventType.PATTERN_CHANGED, lambda e: order.append("low2"))

        bus.emit(EventType.PATTERN_CHANGED)

        assert order == ["high", "low", "low2"]

    def test_other_types_not_delivered(self):
        bus = EventBus()
        received = []
        bus.subscribe(EventType.SUN_MOVED, received.append)
        bus.emit(EventType.SPEED_CHANGED, speed=1.0)
        assert received == []

    def test_unsubscribe(self):
        bus = EventBus()
        received = []
        bus.subscribe(EventType.ANIMATION_RESET, received.append)

        assert bus.unsubscribe(EventType.ANIMATION_RESET, received.append)
        assert not bus.unsubscribe(EventType.ANIMATION_RESET, received.append)
        bus.emit(EventType.ANIMATION_RESET)

        assert received == []
        assert not bus.has_subscribers(EventType.ANIMATION_RESET)

    def test_handler_error_does_not_propagate(self):
        bus = EventBus()
        received = []

        def broken(event):
            raise RuntimeError("widget gone")

        bus.subscribe(EventType.SPEED_CHANGED, broken, priority=1)
        bus.subscribe(EventType.SPEED_CHANGED, received.append)

        bus.emit(EventType.SPEED_CHANGED, speed=1.0)

        assert len(received) == 1

    def test_history_bounded(self):
        bus = EventBus(max_history=3)
        for i in range(5):
            bus.emit(EventType.SPEED_CHANGED, speed=float(i))

        history = bus.get_history()
        assert [e.data["speed"] for e in history] == [2.0, 3.0, 4.0]
        assert len(bus.get_history(limit=1)) == 1

        bus.clear_history()
        assert bus.get_history() == []

    def test_string_event_types(self):
        bus = EventBus()
        received = []
        bus.subscribe("custom", received.append)
        bus.emit("custom", value=1)
        assert received[0].data == {"value": 1}
