"""
Tests for the event bus.
"""

from storyloom.state.event_bus import EventBus, EventType, get_event_bus, reset_event_bus


class TestEventBus:
    """Test subscribe/emit behaviour."""

    def test_handlers_receive_events(self):
        """Subscribers get the emitted payload."""
        bus = EventBus()
        received = []
        bus.on(EventType.CHOICE_RESOLVED, received.append)

        bus.emit(EventType.CHOICE_RESOLVED, project_id="p", choice_id="c1")
        bus.emit(EventType.SCENE_CHANGED, before="a", after="b")

        assert len(received) == 1
        assert received[0].data == {"choice_id": "c1"}
        assert received[0].project_id == "p"

    def test_failing_handler_is_isolated(self):
        """One broken listener does not stop the others."""
        bus = EventBus()
        received = []

        def broken(event):
            raise RuntimeError("boom")

        bus.on(EventType.STATE_SAVED, broken)
        bus.on(EventType.STATE_SAVED, received.append)
        bus.emit(EventType.STATE_SAVED, key="quicksave")
        assert len(received) == 1

    def test_off_and_duplicates(self):
        """A handler subscribes once and can unsubscribe."""
        bus = EventBus()
        handler = lambda event: None
        bus.on(EventType.TRIGGER_FIRED, handler)
        bus.on(EventType.TRIGGER_FIRED, handler)
        assert bus.listener_count(EventType.TRIGGER_FIRED) == 1
        bus.off(EventType.TRIGGER_FIRED, handler)
        assert bus.listener_count(EventType.TRIGGER_FIRED) == 0

    def test_history_is_bounded(self):
        """Only the most recent events are kept."""
        bus = EventBus(history_limit=3)
        for i in range(5):
            bus.emit(EventType.DEBUG_COMMAND, command=str(i))
        assert [e.data["command"] for e in bus.get_history()] == ["2", "3", "4"]

    def test_global_singleton(self):
        """get_event_bus returns one instance until reset."""
        first = get_event_bus()
        assert get_event_bus() is first
        reset_event_bus()
        assert get_event_bus() is not first

    def test_catch_all_handlers(self):
        """on_any sees every event type."""
        bus = EventBus()
        seen = []
        bus.on_any(seen.append)
        bus.emit(EventType.STATE_SAVED, key="a")
        bus.emit(EventType.TRIGGER_FIRED, trigger_id="t")
        assert [e.type for e in seen] == [EventType.STATE_SAVED, EventType.TRIGGER_FIRED]
        assert bus.listener_count(EventType.SCENE_CHANGED) == 1

        bus.off_any(seen.append)
        bus.emit(EventType.STATE_SAVED, key="b")
        assert len(seen) == 2

    def test_history_by_project(self):
        """History can be filtered by project."""
        bus = EventBus()
        bus.emit(EventType.STATE_SAVED, project_id="p1")
        bus.emit(EventType.STATE_SAVED, project_id="p2")
        assert [e.project_id for e in bus.get_history(project_id="p2")] == ["p2"]

    def test_str(self):
        """Events render as type plus payload."""
        event = EventBus().emit(EventType.SCENE_CHANGED, before="a", after="b")
        assert str(event) == "scene.changed before=a after=b"
