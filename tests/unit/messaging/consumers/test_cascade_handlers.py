#!/usr/bin/env python3
"""
Tests for each service's cascade handlers.

Every handler is also run a second time with the same event to check that
redelivery leaves the store unchanged.
"""

import unittest
from datetime import datetime, timezone

from core.events import (
    UserDeletedEvent,
    SkillDeletedEvent,
    MatchAcceptedDomainEvent,
    MatchCompletedDomainEvent,
    MatchDissolvedDomainEvent,
    MatchExpiredDomainEvent,
)
from core.exceptions import HandlerRegistrationError
from database.models import (
    Appointment,
    CallParticipant,
    CallSession,
    ChatMessage,
    ChatThread,
    Match,
    MatchRequest,
    StoredEvent,
)
from database.uow import unit_of_work
from messaging.consumers import build_consumer, build_registry, CONSUMER_MODULES
from messaging.consumers.appointment import first_session_date, parse_time
from messaging.handlers import HandlerRegistry
from tests import make_store

ACCEPTED_AT = datetime(2024, 5, 6, 9, 15, tzinfo=timezone.utc)  # a Monday


def accepted_event(**overrides) -> MatchAcceptedDomainEvent:
    values = dict(
        match_id="m1",
        offering_user_id="mentor",
        requesting_user_id="learner",
        accepted_at=ACCEPTED_AT,
        skill_id="python",
        thread_id="thread-1",
        agreed_days=("Wednesday",),
        agreed_times=("19:30",),
        session_duration_minutes=45,
        total_sessions=1,
    )
    values.update(overrides)
    return MatchAcceptedDomainEvent(**values)


def dissolved_event(match_id="m1") -> MatchDissolvedDomainEvent:
    return MatchDissolvedDomainEvent(
        match_id=match_id, offering_user_id="mentor", requesting_user_id="learner", reason="moved"
    )


class ConsumerTestCase(unittest.TestCase):
    service = None

    def setUp(self):
        self.store = make_store(self.service)
        self.consumer = build_consumer(self.service, self.store)

    def tearDown(self):
        self.store.dispose()

    def rows(self, model):
        with self.store.session_scope() as session:
            rows = session.query(model).all()
            session.expunge_all()
            return rows

    def handle_twice(self, event):
        self.consumer.handle(event)
        first = self.snapshot()
        self.consumer.handle(event)
        self.assertEqual(self.snapshot(), first)

    def snapshot(self):
        return []


class TestRegistries(unittest.TestCase):

    def test_every_service_covers_required_events(self):
        for service in CONSUMER_MODULES:
            registry = build_registry(service)
            self.assertIsInstance(registry, HandlerRegistry)
            self.assertEqual(registry.service, service)

    def test_require_catches_missing_handler(self):
        with self.assertRaises(HandlerRegistrationError):
            HandlerRegistry("chat").require(CONSUMER_MODULES['chat'].REQUIRED)


class TestMatchmakingConsumer(ConsumerTestCase):
    service = "matchmaking"

    def setUp(self):
        super().setUp()
        with unit_of_work(self.store) as uow:
            uow.matches.add_request(MatchRequest(requester_id="gone", target_user_id="t", skill_id="python"))
            uow.matches.add_request(MatchRequest(requester_id="r", target_user_id="gone", skill_id="go"))
            uow.matches.add_request(MatchRequest(requester_id="r", target_user_id="t", skill_id="rust"))
            uow.matches.add_request(MatchRequest(
                requester_id="r2", target_user_id="t", skill_id="go", exchange_skill_id="rust"
            ))
            uow.matches.add_match(Match(
                id="pending", offering_user_id="gone", requesting_user_id="r", offered_skill_id="python"
            ))
            uow.matches.add_match(Match(
                id="accepted", offering_user_id="t", requesting_user_id="gone",
                offered_skill_id="go", status="Accepted"
            ))
            uow.matches.add_match(Match(
                id="unrelated", offering_user_id="t", requesting_user_id="r",
                offered_skill_id="go", status="Accepted"
            ))

    def snapshot(self):
        return (
            sorted((r.requester_id, r.target_user_id, r.skill_id) for r in self.rows(MatchRequest)),
            sorted((m.id, m.status) for m in self.rows(Match)),
            len(self.rows(StoredEvent)),
        )

    def test_user_deleted_removes_requests_and_ends_matches(self):
        self.handle_twice(UserDeletedEvent(user_id="gone"))

        requests, matches, stored = self.snapshot()
        self.assertEqual(requests, [("r", "t", "rust"), ("r2", "t", "go")])
        self.assertEqual(matches, [("accepted", "Dissolved"), ("pending", "Expired"), ("unrelated", "Accepted")])
        self.assertEqual(stored, 2)

        with unit_of_work(self.store) as uow:
            types = {type(e) for e in uow.events.read()}
        self.assertEqual(types, {MatchExpiredDomainEvent, MatchDissolvedDomainEvent})

    def test_skill_deleted_removes_pending_requests(self):
        self.handle_twice(SkillDeletedEvent(skill_id="rust"))

        requests, _, _ = self.snapshot()
        self.assertEqual(requests, [("gone", "t", "python"), ("r", "gone", "go")])

    def test_unknown_user_is_noop(self):
        before = self.snapshot()
        self.consumer.handle(UserDeletedEvent(user_id="nobody"))
        self.assertEqual(self.snapshot(), before)


class TestVideocallConsumer(ConsumerTestCase):
    service = "videocall"

    def setUp(self):
        super().setUp()
        with unit_of_work(self.store) as uow:
            session = uow.calls.add_session(CallSession(
                id="call-1", match_id="m1", initiator_user_id="gone", participant_user_id="other", status="Active"
            ))
            uow.calls.add_participant(CallParticipant(session_id=session.id, user_id="gone"))
            uow.calls.add_participant(CallParticipant(session_id=session.id, user_id="other"))
            uow.calls.add_session(CallSession(
                id="call-2", match_id="m2", initiator_user_id="x", participant_user_id="y", status="Ended"
            ))

    def snapshot(self):
        return (
            sorted(p.user_id for p in self.rows(CallParticipant)),
            sorted((s.id, s.status, s.end_reason) for s in self.rows(CallSession)),
        )

    def test_user_deleted_removes_participants(self):
        self.handle_twice(UserDeletedEvent(user_id="gone"))
        participants, sessions = self.snapshot()
        self.assertEqual(participants, ["other"])
        self.assertEqual(len(sessions), 2)

    def test_match_dissolved_ends_active_sessions(self):
        self.handle_twice(dissolved_event("m1"))
        _, sessions = self.snapshot()
        self.assertEqual(sessions, [("call-1", "Ended", "Match dissolved"), ("call-2", "Ended", None)])

    def test_match_completed_ends_active_sessions(self):
        self.consumer.handle(MatchCompletedDomainEvent(
            match_id="m1", offering_user_id="a", requesting_user_id="b"
        ))
        _, sessions = self.snapshot()
        self.assertEqual(sessions[0], ("call-1", "Ended", "Match completed"))


class TestChatConsumer(ConsumerTestCase):
    service = "chat"

    def snapshot(self):
        return sorted(
            (t.thread_id, t.match_id, t.participant1_id, t.participant2_id, t.is_locked)
            for t in self.rows(ChatThread)
        )

    def test_match_accepted_creates_thread_once(self):
        self.handle_twice(accepted_event())
        self.assertEqual(self.snapshot(), [("thread-1", "m1", "mentor", "learner", False)])

    def test_existing_thread_for_same_pair_is_reused(self):
        self.consumer.handle(accepted_event())
        self.consumer.handle(accepted_event(match_id="m2"))
        self.assertEqual(len(self.snapshot()), 1)

    def test_thread_id_generated_when_missing(self):
        self.consumer.handle(accepted_event(thread_id=None))
        self.assertEqual(len(self.snapshot()[0][0]), 36)

    def test_match_dissolved_locks_thread(self):
        self.consumer.handle(accepted_event())
        self.handle_twice(dissolved_event())

        thread = self.rows(ChatThread)[0]
        self.assertTrue(thread.is_locked)
        self.assertEqual(thread.lock_reason, "moved")

    def test_accepted_after_dissolved_opens_no_thread(self):
        self.handle_twice(dissolved_event())
        self.handle_twice(accepted_event())
        self.assertEqual(self.snapshot(), [])

    def test_user_deleted_removes_threads_and_messages(self):
        self.consumer.handle(accepted_event())
        with unit_of_work(self.store) as uow:
            thread = uow.chats.get_by_match_id("m1")
            uow.chats.add_message(thread, "learner", "hello")

        self.handle_twice(UserDeletedEvent(user_id="learner"))
        self.assertEqual(self.snapshot(), [])
        self.assertEqual(self.rows(ChatMessage), [])


class TestAppointmentConsumer(ConsumerTestCase):
    service = "appointment"

    def snapshot(self):
        return sorted(
            (a.match_id, a.session_number, a.scheduled_date.replace(tzinfo=None), a.status)
            for a in self.rows(Appointment)
        )

    def test_match_accepted_schedules_first_session(self):
        self.handle_twice(accepted_event())

        appointments = self.rows(Appointment)
        self.assertEqual(len(appointments), 1)
        appointment = appointments[0]
        self.assertEqual(appointment.scheduled_date.replace(tzinfo=None), datetime(2024, 5, 8, 19, 30))
        self.assertEqual(appointment.organizer_user_id, "learner")
        self.assertEqual(appointment.participant_user_id, "mentor")
        self.assertEqual(appointment.duration_minutes, 45)
        self.assertEqual(appointment.meeting_type, "Learning")
        self.assertEqual(appointment.title, "Skill-Exchange: python")
        self.assertEqual(appointment.status, "Confirmed")

    def test_follow_up_sessions_are_weekly(self):
        self.consumer.handle(accepted_event(total_sessions=3, is_skill_exchange=True))

        dates = [row[2] for row in self.snapshot()]
        self.assertEqual(dates, [
            datetime(2024, 5, 8, 19, 30),
            datetime(2024, 5, 15, 19, 30),
            datetime(2024, 5, 22, 19, 30),
        ])
        self.assertTrue(all(a.meeting_type == "Exchange" for a in self.rows(Appointment)))

    def test_match_dissolved_cancels(self):
        self.consumer.handle(accepted_event(total_sessions=2))
        self.handle_twice(dissolved_event())

        self.assertEqual({row[3] for row in self.snapshot()}, {"Cancelled"})

    def test_accepted_after_dissolved_schedules_nothing(self):
        self.consumer.handle(dissolved_event())
        self.handle_twice(accepted_event(total_sessions=3))
        self.assertEqual(self.snapshot(), [])

    def test_skill_deleted_cancels(self):
        self.consumer.handle(accepted_event())
        self.handle_twice(SkillDeletedEvent(skill_id="python"))

        appointment = self.rows(Appointment)[0]
        self.assertEqual(appointment.status, "Cancelled")
        self.assertEqual(appointment.cancellation_reason, "Skill deleted")

    def test_user_deleted_removes_appointments(self):
        self.consumer.handle(accepted_event())
        self.handle_twice(UserDeletedEvent(user_id="mentor"))
        self.assertEqual(self.snapshot(), [])


class TestFirstSessionDate(unittest.TestCase):

    def test_next_preferred_weekday(self):
        self.assertEqual(
            first_session_date(ACCEPTED_AT, ["wednesday"], ["08:00"]),
            datetime(2024, 5, 8, 8, 0, tzinfo=timezone.utc)
        )

    def test_same_weekday_means_next_week(self):
        self.assertEqual(
            first_session_date(ACCEPTED_AT, ["Monday"], []).date(),
            datetime(2024, 5, 13).date()
        )

    def test_defaults(self):
        self.assertEqual(
            first_session_date(ACCEPTED_AT),
            datetime(2024, 5, 9, 18, 0, tzinfo=timezone.utc)
        )

    def test_unparseable_time_falls_back(self):
        self.assertEqual(first_session_date(ACCEPTED_AT, [], ["evening"]).hour, 18)

    def test_parse_time(self):
        self.assertEqual(parse_time("09:30").minute, 30)
        self.assertEqual(parse_time("21:15:10").second, 10)
        self.assertIsNone(parse_time("soon"))


if __name__ == '__main__':
    unittest.main()
