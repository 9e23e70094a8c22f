"""Unit tests for FakeUserRepository: verifies Port contract compliance."""

import unittest

from adapter.fake.user_repository import FakeUserRepository
from domain.model.user import User


class TestFakeUserRepository(unittest.TestCase):
    """Tests that FakeUserRepository behaves like the UserRepository Protocol requires."""

    def setUp(self):
        self.repo = FakeUserRepository()
        self.user = self.repo.create(username='alice', email='a@x.com', password_hash='$2b$04$hash')

    # ── create ────────────────────────────────────────────────

    def test_create_returns_user_with_defaults(self):
        self.assertIsInstance(self.user, User)
        self.assertEqual(self.user.username, 'alice')
        self.assertEqual(self.user.login_count, 0)
        self.assertIsNone(self.user.last_login)
        self.assertIsNotNone(self.user.created_at)

    def test_create_rejects_duplicate_username(self):
        self.assertIsNone(self.repo.create(username='alice', email='other@x.com', password_hash='h'))

    def test_create_rejects_duplicate_email(self):
        self.assertIsNone(self.repo.create(username='other', email='a@x.com', password_hash='h'))

    # ── reads ─────────────────────────────────────────────────

    def test_lookups(self):
        self.assertEqual(self.repo.get_by_id(self.user.id).username, 'alice')
        self.assertEqual(self.repo.get_by_username('alice').id, self.user.id)
        self.assertEqual(self.repo.get_by_email('a@x.com').id, self.user.id)
        self.assertIsNone(self.repo.get_by_username('nobody'))
        self.assertIsNone(self.repo.get_by_id('missing'))

    def test_reads_return_copies(self):
        fetched = self.repo.get_by_id(self.user.id)
        fetched.username = 'mallory'
        self.assertEqual(self.repo.get_by_id(self.user.id).username, 'alice')

    # ── updates ───────────────────────────────────────────────

    def test_record_login_increments(self):
        self.repo.record_login(self.user.id)
        updated = self.repo.record_login(self.user.id)

        self.assertEqual(updated.login_count, 2)
        self.assertIsNotNone(updated.last_login)

    def test_record_login_unknown_user(self):
        self.assertIsNone(self.repo.record_login('missing'))

    def test_update_profile_ignores_non_profile_fields(self):
        updated = self.repo.update_profile(self.user.id, {'bio': 'hi', 'username': 'mallory'})

        self.assertEqual(updated.bio, 'hi')
        self.assertEqual(updated.username, 'alice')

    def test_update_password(self):
        self.assertTrue(self.repo.update_password(self.user.id, 'new-hash'))
        self.assertEqual(self.repo.get_by_id(self.user.id).password_hash, 'new-hash')
        self.assertFalse(self.repo.update_password('missing', 'new-hash'))


if __name__ == '__main__':
    unittest.main()
