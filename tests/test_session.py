"""
Tests for the session controller.

Drives the sample project end to end: choices, history, triggers,
item use, pause, reset, and save/load through an in-memory store.
"""

import pytest

from storyloom.state import (
    ChoiceNotFoundError,
    EventType,
    JsonFileBlobStore,
    MemoryBlobStore,
    NoActiveSessionError,
    ProjectError,
    SaveLoadError,
    SessionController,
    StaticProject,
)
from storyloom.state.codec import serialize
from storyloom.state.schema import QuestStatus


class TestStart:
    """Test session start."""

    def test_initial_state(self, session):
        """Start scene, variable defaults, empty collections, global track."""
        state = session.state
        assert state.current_scene_id == "s_start"
        assert state.variable_values == {"sanity": 100, "alias": "ghost"}
        assert state.inventory == []
        assert state.history == []
        assert state.quest_states == {}
        assert state.current_track_url == "audio/theme.ogg"
        assert not state.is_paused

    def test_operations_need_a_session(self, project):
        """Using the controller before start() raises."""
        controller = SessionController(project)
        assert controller.state is None
        with pytest.raises(NoActiveSessionError):
            controller.choose("c_stare")
        with pytest.raises(NoActiveSessionError):
            controller.choices()

    def test_missing_start_scene(self):
        """A project without a valid start scene cannot start."""
        project = StaticProject(id="p", start_scene_id="nowhere")
        with pytest.raises(ProjectError):
            SessionController(project).start()

    def test_project_is_snapshotted(self, project, memory_store):
        """Edits to the source project after start do not reach the session."""
        controller = SessionController(project, store=memory_store)
        controller.start()
        project.scenes[0].title = "Renamed"
        assert controller.current_scene().title == "Antechamber"

    def test_emits_started(self, session, bus):
        """Start is announced on the bus."""
        events = bus.get_history(EventType.SESSION_STARTED)
        assert len(events) == 1
        assert events[0].data["scene_id"] == "s_start"


class TestChoose:
    """Test choosing."""

    def test_sanity_drain(self, session):
        """Two -20 choices take sanity from 100 to 60."""
        session.choose("c_stare")
        session.choose("c_stare")
        assert session.state.variable_values["sanity"] == 60

    def test_history_records_every_choice(self, session):
        """The scene a choice was made in is pushed every time."""
        session.choose("c_stare")
        session.choose("c_take_card")
        session.choose("c_door")
        assert session.state.history == ["s_start", "s_start", "s_start"]
        assert session.state.current_scene_id == "s_hall"

    def test_gated_choice_changes_nothing(self, session):
        """Without the keycard the door does nothing."""
        before = session.state
        outcome = session.choose("c_door")
        assert not outcome.applied
        assert outcome.reason == "unavailable"
        assert session.state is before

    def test_unknown_choice_raises(self, session):
        """Choices must be on the current scene."""
        with pytest.raises(ChoiceNotFoundError):
            session.choose("c_report")

    def test_trigger_fires_after_choice(self, session, bus):
        """Entering the hall fires Mira's one-time welcome."""
        session.choose("c_take_card")
        outcome = session.choose("c_door")
        assert outcome.fired_triggers == ["t_mira_welcome"]
        assert session.state.relationships["mira"] == 15
        assert [e.data["trigger_id"] for e in bus.get_history(EventType.TRIGGER_FIRED)] == ["t_mira_welcome"]

        again = session.choose("c_report")
        assert again.fired_triggers == []
        assert session.state.relationships["mira"] == 15

    def test_quest_walkthrough(self, session, bus):
        """Accept the job, enter, report twice: the quest completes."""
        session.choose("c_job")
        session.choose("c_take_card")
        session.choose("c_door")
        session.choose("c_report")
        assert session.state.quest_states["q_job"].current_stage_ids == ["B"]
        session.choose("c_report")
        assert session.state.quest_states["q_job"].status == QuestStatus.COMPLETED

        changes = [(e.data["before"], e.data["after"]) for e in bus.get_history(EventType.QUEST_STATUS_CHANGED)]
        assert changes == [("not_started", "active"), ("active", "completed")]

    def test_reaches_ending(self, session):
        """The exit scene ends the story."""
        session.choose("c_take_card")
        session.choose("c_door")
        assert not session.is_finished()
        session.choose("c_leave")
        assert session.is_finished()
        assert session.choices() == []

    def test_scene_change_event(self, session, bus):
        """Scene changes are announced."""
        session.choose("c_take_card")
        session.choose("c_door")
        events = bus.get_history(EventType.SCENE_CHANGED)
        assert [(e.data["before"], e.data["after"]) for e in events] == [("s_start", "s_hall")]


class TestItemsAndPause:
    """Test item use and pausing."""

    def test_consumable_item(self, session):
        """Using a medkit applies its effect and uses it up."""
        session.choose("c_stare")
        session._state = session.state.replace(inventory=["medkit"])
        outcome = session.use_item("medkit")
        assert outcome.applied
        assert session.state.variable_values["sanity"] == 90
        assert session.state.inventory == []

    def test_item_not_held(self, session):
        """Items must be in the inventory."""
        outcome = session.use_item("medkit")
        assert not outcome.applied
        assert outcome.reason == "not held"

    def test_item_not_usable(self, session):
        """Plain items cannot be used."""
        session.choose("c_take_card")
        assert session.use_item("keycard").reason == "not usable"

    def test_item_use_conditions(self, session):
        """The lamp needs oil; it is not consumed."""
        session._state = session.state.replace(inventory=["lamp"])
        assert session.use_item("lamp").reason == "conditions not met"

        session._state = session.state.replace(flags={"has_oil": True})
        assert session.use_item("lamp").applied
        assert session.state.flags["lit"] is True
        assert session.state.inventory == ["lamp"]

    def test_paused_session_ignores_choices(self, session):
        """Nothing resolves while paused."""
        session.pause()
        outcome = session.choose("c_stare")
        assert not outcome.applied
        assert outcome.reason == "paused"
        assert session.state.variable_values["sanity"] == 100

        session.resume()
        assert session.choose("c_stare").applied

    def test_paused_session_ignores_items(self, session):
        """Item use is refused while paused."""
        session._state = session.state.replace(inventory=["medkit"])
        session.pause()
        outcome = session.use_item("medkit")
        assert not outcome.applied
        assert outcome.reason == "paused"
        assert session.state.inventory == ["medkit"]


class TestReset:
    """Test reset."""

    def test_reset_restores_start(self, session, bus):
        """Reset goes back to a fresh state."""
        session.choose("c_take_card")
        session.choose("c_door")
        session.reset()
        assert session.state.current_scene_id == "s_start"
        assert session.state.inventory == []
        assert session.state.triggered_ids == []
        assert len(bus.get_history(EventType.SESSION_RESET)) == 1

    def test_failed_reset_keeps_session(self, session, project, bus):
        """A reset that cannot start leaves the running session in place."""
        session.choose("c_take_card")
        before = session.state
        project.start_scene_id = "s_gone"
        with pytest.raises(ProjectError):
            session.reset()
        assert session.is_active
        assert session.state is before
        assert session.current_scene().id == "s_start"
        assert bus.get_history(EventType.SESSION_RESET) == []


class TestDebugCommands:
    """Test debug commands through the controller."""

    def test_set_variable(self, session, bus):
        """set assigns a variable and is announced."""
        reply = session.execute_debug_command("set sanity 5")
        assert reply == "Variable sanity set to 5"
        assert session.state.variable_values["sanity"] == 5
        assert len(bus.get_history(EventType.DEBUG_COMMAND)) == 1

    def test_set_runs_triggers(self, bus):
        """A debug edit is followed by a trigger sweep."""
        project = StaticProject.model_validate({
            "id": "p",
            "startSceneId": "s",
            "scenes": [{"id": "s"}],
            "characters": [{"id": "doc", "triggers": [{
                "id": "t_breakdown",
                "conditions": [{"type": "variable", "targetId": "sanity", "operator": "lt", "value": 10}],
                "actions": [{"type": "set_flag", "targetId": "broken"}],
                "isOneTime": True,
            }]}],
        })
        controller = SessionController(project, bus=bus)
        controller.start()
        controller.execute_debug_command("set sanity 3")
        assert controller.state.flags == {"broken": True}
        assert controller.state.triggered_ids == ["t_breakdown"]

    def test_pass_limit_reported(self, bus):
        """A step reports when its trigger sweep was cut short."""
        project = StaticProject.model_validate({
            "id": "p",
            "startSceneId": "s",
            "scenes": [{"id": "s", "choices": [{"id": "c"}]}],
            "characters": [{"id": "npc", "triggers": [
                {"id": "second", "conditions": [{"type": "flag", "targetId": "x", "operator": "set"}],
                 "actions": [{"type": "set_flag", "targetId": "y"}], "isOneTime": True},
                {"id": "first", "actions": [{"type": "set_flag", "targetId": "x"}], "isOneTime": True},
            ]}],
        })
        controller = SessionController(project, bus=bus, max_trigger_passes=1)
        controller.start()
        outcome = controller.choose("c")
        assert outcome.fired_triggers == ["first"]
        assert outcome.truncated

    def test_unknown_command(self, session):
        """Unknown commands leave the state alone."""
        before = session.state
        assert session.execute_debug_command("Teleport s_end") == "Unknown: teleport"
        assert session.state is before

    def test_no_session(self, project):
        """Without a session the console says so."""
        assert SessionController(project).execute_debug_command("set x 1") == "No active session"


class TestSaveLoad:
    """Test persistence through the blob store."""

    @pytest.mark.asyncio
    async def test_round_trip(self, session, memory_store):
        """Save, play on, load: the saved state comes back."""
        session.choose("c_take_card")
        saved = session.state
        await session.save()
        assert "quicksave" in memory_store.blobs

        session.choose("c_door")
        assert await session.load() is True
        assert session.state == saved

    @pytest.mark.asyncio
    async def test_named_slot(self, session, memory_store):
        """Slots are independent."""
        await session.save("slot1")
        session.choose("c_stare")
        await session.save("slot2")

        await session.load("slot1")
        assert session.state.variable_values["sanity"] == 100
        await session.load("slot2")
        assert session.state.variable_values["sanity"] == 80

    @pytest.mark.asyncio
    async def test_load_empty_slot(self, session):
        """Loading a missing slot changes nothing."""
        before = session.state
        assert await session.load("nothing_here") is False
        assert session.state is before

    @pytest.mark.asyncio
    async def test_load_corrupt_slot(self, session, memory_store):
        """A corrupt save surfaces as SaveLoadError."""
        await memory_store.set("quicksave", "{not json")
        with pytest.raises(SaveLoadError):
            await session.load()

    @pytest.mark.asyncio
    async def test_load_without_start(self, project, session, memory_store):
        """A fresh controller can resume straight from a save."""
        session.choose("c_stare")
        await session.save()

        controller = SessionController(project, store=memory_store)
        assert await controller.load() is True
        assert controller.state.variable_values["sanity"] == 80
        assert controller.current_scene().id == "s_start"

    @pytest.mark.asyncio
    async def test_save_events(self, session, bus):
        """Saves and loads are announced."""
        await session.save()
        await session.load()
        assert len(bus.get_history(EventType.STATE_SAVED)) == 1
        assert len(bus.get_history(EventType.STATE_LOADED)) == 1

    @pytest.mark.asyncio
    async def test_store_failure(self, session):
        """Store errors surface as SaveLoadError."""
        class BrokenStore(MemoryBlobStore):
            async def set(self, key, value):
                raise OSError("disk full")

        session.store = BrokenStore()
        with pytest.raises(SaveLoadError, match="disk full"):
            await session.save()

    @pytest.mark.asyncio
    async def test_saved_text_is_serialized_state(self, session, memory_store):
        """The store holds exactly the serialized state."""
        await session.save()
        assert memory_store.blobs["quicksave"] == serialize(session.state)

    @pytest.mark.asyncio
    async def test_delete_save(self, session, memory_store):
        """Deleting a slot empties it; deleting again is harmless."""
        await session.save("slot1")
        await session.delete_save("slot1")
        await session.delete_save("slot1")
        assert "slot1" not in memory_store.blobs
        assert await session.load("slot1") is False

    @pytest.mark.asyncio
    async def test_delete_bad_key(self, session, tmp_path):
        """A key the store rejects surfaces as SaveLoadError."""
        session.store = JsonFileBlobStore(tmp_path)
        with pytest.raises(SaveLoadError, match="Invalid save key"):
            await session.delete_save("../escape")
