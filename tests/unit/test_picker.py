"""
Tests for one-shot element picking.
"""

import pytest

from tour_automation.bridge import Command, Event
from tour_automation.recorder import PickController


@pytest.fixture
def commands(channels):
    _, content = channels
    received = []
    content.on_event(lambda message_type: True, lambda m: received.append(m.type))
    return received


class TestPickController:
    """Test arming, resolving and cancelling."""

    @pytest.mark.asyncio
    async def test_resolves_once(self, channels, commands, settle):
        controller, content = channels
        picker = PickController(controller)
        picked = []

        picker.begin(picked.append)
        assert picker.is_armed
        assert PickController.armed() is picker

        content.send(Event.ELEMENT_SELECTED, "#startBtn")
        content.send(Event.ELEMENT_SELECTED, ".card")
        await settle()

        assert picked == ["#startBtn"]
        assert not picker.is_armed
        assert PickController.armed() is None
        assert commands == [Command.ENABLE_ELEMENT_SELECTION, Command.DISABLE_ELEMENT_SELECTION]
        assert controller.listener_count() == 0

    @pytest.mark.asyncio
    async def test_accepts_object_payload(self, channels, settle):
        controller, content = channels
        picker = PickController(controller)
        picked = []

        picker.begin(picked.append)
        content.send(Event.ELEMENT_SELECTED, {"selector": ".submit-btn"})
        await settle()

        assert picked == [".submit-btn"]

    @pytest.mark.asyncio
    async def test_empty_selection_keeps_waiting(self, channels, settle):
        controller, content = channels
        picker = PickController(controller)
        picked = []

        picker.begin(picked.append)
        content.send(Event.ELEMENT_SELECTED, "")
        await settle()
        assert picker.is_armed

        content.send(Event.ELEMENT_SELECTED, "#answerInput")
        await settle()
        assert picked == ["#answerInput"]

    @pytest.mark.asyncio
    async def test_new_controller_cancels_previous(self, channels, settle):
        controller, content = channels
        first, second = PickController(controller), PickController(controller)
        first_picked, second_picked = [], []

        first.begin(first_picked.append)
        second.begin(second_picked.append)
        assert not first.is_armed
        assert PickController.armed() is second

        content.send(Event.ELEMENT_SELECTED, "#startBtn")
        await settle()

        assert first_picked == []
        assert second_picked == ["#startBtn"]

    @pytest.mark.asyncio
    async def test_rearming_replaces_destination(self, channels, settle):
        controller, content = channels
        picker = PickController(controller)
        old, new = [], []

        picker.begin(old.append)
        picker.begin(new.append)
        content.send(Event.ELEMENT_SELECTED, "#startBtn")
        await settle()

        assert old == []
        assert new == ["#startBtn"]
        assert controller.listener_count() == 0

    @pytest.mark.asyncio
    async def test_cancel_is_idempotent(self, channels, commands, settle):
        controller, content = channels
        picker = PickController(controller)
        picked = []

        picker.begin(picked.append)
        picker.cancel()
        picker.cancel()
        content.send(Event.ELEMENT_SELECTED, "#startBtn")
        await settle()

        assert picked == []
        assert commands.count(Command.DISABLE_ELEMENT_SELECTION) == 1

    @pytest.mark.asyncio
    async def test_cancel_on_closed_channel(self, channels):
        controller, _ = channels
        picker = PickController(controller)
        picker.begin(lambda selector: None)

        controller.close()
        picker.cancel()

        assert not picker.is_armed

    @pytest.mark.asyncio
    async def test_hover_previews_until_pick(self, channels, settle):
        controller, content = channels
        picker = PickController(controller)
        hovered, picked = [], []

        picker.begin(picked.append, on_hover=lambda selector, rect: hovered.append((selector, rect)))
        content.send(Event.ELEMENT_HOVER, {"selector": "#startBtn", "rect": {"top": 4}})
        content.send(Event.ELEMENT_HOVER, {"rect": {"top": 9}})
        content.send(Event.ELEMENT_SELECTED, "#startBtn")
        content.send(Event.ELEMENT_HOVER, {"selector": ".card", "rect": None})
        await settle()

        assert hovered == [("#startBtn", {"top": 4})]
        assert picked == ["#startBtn"]
        assert controller.listener_count() == 0
