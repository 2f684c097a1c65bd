#!/usr/bin/env python3
"""
Tests for AccountService deletions and the events they record.
"""

import threading
import unittest
from unittest.mock import Mock

from core.account_service import AccountService
from core.events import UserDeletedEvent, SkillDeletedEvent
from core.exceptions import UserNotFoundException, SkillNotFoundException, OperationCancelledError
from database.models import User, Skill, StoredEvent
from tests import make_store


class TestAccountService(unittest.TestCase):

    def setUp(self):
        self.store = make_store("accounts")
        self.publisher = Mock()
        self.service = AccountService(self.store, self.publisher)
        self.user_id = self.service.register_user("ada@example.com", "Ada", rating=4.5)
        self.skill_id = self.service.add_skill(self.user_id, "Python")

    def tearDown(self):
        self.store.dispose()

    def count(self, model) -> int:
        with self.store.session_scope() as session:
            return session.query(model).count()

    def test_delete_user_removes_user_and_skills(self):
        event = self.service.delete_user(self.user_id, deleted_by="admin", reason="gdpr")

        self.assertIsInstance(event, UserDeletedEvent)
        self.assertEqual(event.user_id, self.user_id)
        self.assertEqual(event.email, "ada@example.com")
        self.assertEqual(event.reason, "gdpr")
        self.assertEqual(self.count(User), 0)
        self.assertEqual(self.count(Skill), 0)
        self.assertEqual(self.count(StoredEvent), 1)
        self.publisher.publish_all.assert_called_once_with([event], source="accounts")

    def test_delete_unknown_user(self):
        with self.assertRaises(UserNotFoundException):
            self.service.delete_user("missing")
        self.assertEqual(self.count(StoredEvent), 0)
        self.publisher.publish_all.assert_not_called()

    def test_cancelled_delete_leaves_user(self):
        cancel = threading.Event()
        cancel.set()

        with self.assertRaises(OperationCancelledError):
            self.service.delete_user(self.user_id, cancel_event=cancel)

        self.assertEqual(self.count(User), 1)
        self.assertEqual(self.count(Skill), 1)
        self.assertEqual(self.count(StoredEvent), 0)
        self.publisher.publish_all.assert_not_called()

    def test_delete_skill(self):
        event = self.service.delete_skill(self.skill_id, reason="no longer offered")

        self.assertIsInstance(event, SkillDeletedEvent)
        self.assertEqual(event.user_id, self.user_id)
        self.assertEqual(self.count(Skill), 0)
        self.assertEqual(self.count(User), 1)

    def test_delete_unknown_skill(self):
        with self.assertRaises(SkillNotFoundException):
            self.service.delete_skill("missing")

    def test_add_skill_for_unknown_user(self):
        with self.assertRaises(UserNotFoundException):
            self.service.add_skill("missing", "Go")


if __name__ == '__main__':
    unittest.main()
