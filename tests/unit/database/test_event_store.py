#!/usr/bin/env python3
"""
Tests for the append-only event store.
"""

import unittest
from datetime import datetime, timedelta, timezone

from core.events import UserDeletedEvent, SkillDeletedEvent
from database.models import StoredEvent
from database.repositories import EventStoreRepository
from tests import make_store

T0 = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


class TestEventStoreRepository(unittest.TestCase):

    def setUp(self):
        self.store = make_store("accounts")
        self.session = self.store.new_session()
        self.repo = EventStoreRepository(self.session)

    def tearDown(self):
        self.session.close()
        self.store.dispose()

    def test_append_and_get(self):
        event = UserDeletedEvent(user_id="u1", reason="gdpr", occurred_on=T0)
        self.assertTrue(self.repo.append(event))
        self.session.commit()

        restored = self.repo.get(event.event_id)
        self.assertEqual(restored, event)

        record = self.repo.get_record(event.event_id)
        self.assertEqual(record.event_type, UserDeletedEvent.event_type())

    def test_append_is_idempotent(self):
        event = UserDeletedEvent(user_id="u1", occurred_on=T0)
        self.assertTrue(self.repo.append(event))
        self.assertFalse(self.repo.append(event))
        self.session.commit()

        self.assertFalse(self.repo.append(event))
        self.assertEqual(self.session.query(StoredEvent).count(), 1)

    def test_get_missing(self):
        self.assertIsNone(self.repo.get("missing"))

    def test_replay_orders_by_occurred_on(self):
        late = UserDeletedEvent(user_id="late", occurred_on=T0 + timedelta(minutes=5))
        early = UserDeletedEvent(user_id="early", occurred_on=T0)
        middle = SkillDeletedEvent(skill_id="s1", occurred_on=T0 + timedelta(minutes=1))
        for event in (late, early, middle):
            self.repo.append(event)
        self.session.commit()

        replayed = self.repo.replay(T0)
        self.assertEqual([e.event_id for e in replayed], [early.event_id, middle.event_id, late.event_id])
        self.assertIsInstance(replayed[1], SkillDeletedEvent)

        # Repeated replays are identical
        self.assertEqual(self.repo.replay(T0), replayed)

    def test_replay_ties_broken_by_event_id(self):
        events = [UserDeletedEvent(user_id=f"u{i}", occurred_on=T0) for i in range(5)]
        for event in events:
            self.repo.append(event)
        self.session.commit()

        replayed = self.repo.replay(T0)
        self.assertEqual([e.event_id for e in replayed], sorted(e.event_id for e in events))

    def test_replay_from_timestamp_and_type(self):
        old = UserDeletedEvent(user_id="old", occurred_on=T0 - timedelta(days=1))
        new_user = UserDeletedEvent(user_id="new", occurred_on=T0 + timedelta(hours=1))
        new_skill = SkillDeletedEvent(skill_id="s", occurred_on=T0 + timedelta(hours=2))
        for event in (old, new_user, new_skill):
            self.repo.append(event)
        self.session.commit()

        self.assertEqual(
            [e.event_id for e in self.repo.replay(T0)],
            [new_user.event_id, new_skill.event_id]
        )
        self.assertEqual(
            [e.event_id for e in self.repo.replay(T0, event_type=SkillDeletedEvent.event_type())],
            [new_skill.event_id]
        )

    def test_read_filters_and_limits(self):
        for i in range(3):
            self.repo.append(UserDeletedEvent(user_id=f"u{i}", occurred_on=T0 + timedelta(seconds=i)))
        self.repo.append(SkillDeletedEvent(skill_id="s", occurred_on=T0))
        self.session.commit()

        self.assertEqual(len(self.repo.read()), 4)
        self.assertEqual(len(self.repo.read(event_type=UserDeletedEvent.event_type())), 3)
        self.assertEqual(len(self.repo.read(limit=2)), 2)


if __name__ == '__main__':
    unittest.main()
