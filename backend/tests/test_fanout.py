"""Tests for event building and dispatch."""

from unittest.mock import AsyncMock

import pytest

from crisisconnect.services import fanout
from crisisconnect.services.fanout import Event, EventDispatcher, volunteer_room


class TestEvent:
    """Tests for Event audience computation."""

    def test_broadcast_only(self):
        assert Event("new-incident", {}).audience == [None]

    def test_room_plus_broadcast(self):
        event = Event("new-request", {}, rooms=("volunteers",))
        assert event.audience == ["volunteers", None]

    def test_room_only(self):
        event = Event("new-task-assigned", {}, rooms=(volunteer_room("p1"),), broadcast=False)
        assert event.audience == ["volunteer-p1"]


class TestDeletionEvents:
    """Deletion events carry only the id."""

    @pytest.mark.parametrize(
        "builder,name",
        [
            (fanout.request_deleted, "request-deleted"),
            (fanout.alert_deleted, "alert-deleted"),
            (fanout.resource_deleted, "resource-deleted"),
        ],
    )
    def test_id_only_payload(self, builder, name):
        event = builder("abc")
        assert event.name == name
        assert event.payload == {"id": "abc"}
        assert event.audience == [None]


class TestEventDispatcher:
    """Tests for EventDispatcher.publish."""

    @pytest.mark.asyncio
    async def test_publish_emits_each_target(self, transport):
        dispatcher = EventDispatcher(transport)

        await dispatcher.publish(
            [
                Event("new-request", {"id": "r1"}, rooms=("volunteers",)),
                Event("request-deleted", {"id": "r1"}),
            ]
        )

        assert transport.emitted == [
            ("new-request", "volunteers", {"id": "r1"}),
            ("new-request", None, {"id": "r1"}),
            ("request-deleted", None, {"id": "r1"}),
        ]

    @pytest.mark.asyncio
    async def test_transport_failure_is_swallowed(self):
        """A failing room emit does not stop the broadcast backstop."""
        transport = AsyncMock()
        transport.emit.side_effect = [RuntimeError("socket gone"), 3]
        dispatcher = EventDispatcher(transport)

        await dispatcher.publish([Event("request-claimed", {"id": "r1"}, rooms=("volunteers",))])

        assert transport.emit.await_count == 2
        transport.emit.assert_any_await("request-claimed", {"id": "r1"}, room=None)

    @pytest.mark.asyncio
    async def test_publish_nothing(self, transport):
        await EventDispatcher(transport).publish([])
        assert transport.emitted == []
