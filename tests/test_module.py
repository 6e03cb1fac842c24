"""Tests for wiring the events module together."""

import asyncio

from conftest import make_draft

from eventdesk.service.client import EventServiceClient
from eventdesk.service.module import EventsModule
from eventdesk.service.store import EventStore


class TestEventsModule:
    """Tests for the module's shared store."""

    def test_keeps_an_empty_store(self, clock):
        store = EventStore(clock)
        assert len(store) == 0

        module = EventsModule(store=store, client=EventServiceClient(""), clock=clock, seed_baseline=False)

        assert module.store is store
        assert module.budget.store is store

    def test_writes_land_in_the_given_store(self, clock, auth):
        store = EventStore(clock)
        module = EventsModule(store=store, client=EventServiceClient(""), clock=clock, seed_baseline=False)

        result = asyncio.run(module.create_event(auth, make_draft()))

        assert result.ok
        assert [e.id for e in store.all()] == [result.value.id]
