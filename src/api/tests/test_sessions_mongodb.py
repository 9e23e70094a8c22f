"""Tests for MongoSessionStore and shared index helpers against mocked collections."""

import unittest
from unittest.mock import MagicMock
from datetime import datetime, timedelta, timezone
from pymongo.errors import OperationFailure, PyMongoError

from adapter.mongodb.indexes import create_index_safe, ensure_all_indexes
from adapter.mongodb.session_store import MongoSessionStore
from domain.model.session import SESSION_TTL


class MongoSessionStoreTestCase(unittest.TestCase):

    def setUp(self):
        self.collection = MagicMock()
        db = MagicMock()
        db.__getitem__.return_value = self.collection
        self.store = MongoSessionStore(db)


class TestCreate(MongoSessionStoreTestCase):

    def test_create_persists_session_with_one_week_expiry(self):
        session = self.store.create('user-1')

        doc = self.collection.insert_one.call_args[0][0]
        self.assertEqual(doc['_id'], session.id)
        self.assertEqual(doc['user_id'], 'user-1')
        self.assertEqual(doc['expires_at'] - doc['created_at'], SESSION_TTL)

    def test_session_ids_are_unique_and_long(self):
        ids = {self.store.create('user-1').id for _ in range(20)}

        self.assertEqual(len(ids), 20)
        self.assertTrue(all(len(session_id) >= 43 for session_id in ids))

    def test_create_propagates_errors(self):
        self.collection.insert_one.side_effect = PyMongoError("connection lost")

        with self.assertRaises(PyMongoError):
            self.store.create('user-1')


class TestGet(MongoSessionStoreTestCase):

    def test_get_filters_out_expired(self):
        now = datetime.now(timezone.utc)
        self.collection.find_one.return_value = {
            '_id': 'sid', 'user_id': 'user-1', 'created_at': now, 'expires_at': now + SESSION_TTL,
        }

        session = self.store.get('sid')

        self.assertEqual(session.user_id, 'user-1')
        query = self.collection.find_one.call_args[0][0]
        self.assertEqual(query['_id'], 'sid')
        self.assertIn('$gt', query['expires_at'])
        self.assertLess(abs(query['expires_at']['$gt'] - now), timedelta(minutes=1))

    def test_get_missing(self):
        self.collection.find_one.return_value = None

        self.assertIsNone(self.store.get('nope'))

    def test_get_errors_propagate(self):
        self.collection.find_one.side_effect = PyMongoError("timeout")

        with self.assertRaises(PyMongoError):
            self.store.get('sid')


class TestDelete(MongoSessionStoreTestCase):

    def test_delete_existing(self):
        self.collection.delete_one.return_value = MagicMock(deleted_count=1)

        self.assertTrue(self.store.delete('sid'))
        self.collection.delete_one.assert_called_once_with({'_id': 'sid'})

    def test_delete_missing_is_not_an_error(self):
        self.collection.delete_one.return_value = MagicMock(deleted_count=0)

        self.assertFalse(self.store.delete('sid'))


class TestIndexes(MongoSessionStoreTestCase):

    def test_ttl_index_on_expires_at(self):
        self.assertTrue(self.store.ensure_indexes())

        calls = {c.kwargs['name']: c for c in self.collection.create_index.call_args_list}
        ttl = calls['idx_sessions_ttl']
        self.assertEqual(ttl.args[0], [('expires_at', 1)])
        self.assertEqual(ttl.kwargs['expireAfterSeconds'], 0)
        self.assertIn('idx_sessions_user_id', calls)

    def test_conflicting_index_is_dropped_and_recreated(self):
        collection = MagicMock()
        collection.create_index.side_effect = [OperationFailure("Index already exists with different options"), None]
        collection.index_information.return_value = {
            '_id_': {'key': [('_id', 1)]},
            'old_ttl': {'key': [('expires_at', 1)]},
        }

        self.assertTrue(create_index_safe(collection, [('expires_at', 1)], 'idx_sessions_ttl', expireAfterSeconds=0))

        collection.drop_index.assert_called_once_with('old_ttl')
        self.assertEqual(collection.create_index.call_count, 2)

    def test_conflict_without_matching_index_reports_failure(self):
        collection = MagicMock()
        collection.create_index.side_effect = OperationFailure("Index already exists with a different name")
        collection.index_information.return_value = {'_id_': {'key': [('_id', 1)]}}

        self.assertFalse(create_index_safe(collection, [('user_id', 1)], 'idx_sessions_user_id'))
        collection.drop_index.assert_not_called()

    def test_unrelated_errors_are_raised(self):
        collection = MagicMock()
        collection.create_index.side_effect = OperationFailure("not authorized")

        with self.assertRaises(OperationFailure):
            create_index_safe(collection, [('user_id', 1)], 'idx_sessions_user_id')

    def test_ensure_all_indexes_covers_both_collections(self):
        db = MagicMock()

        self.assertTrue(ensure_all_indexes(db))

        requested = {c.args[0] for c in db.__getitem__.call_args_list}
        self.assertEqual(requested, {'users', 'sessions'})


if __name__ == '__main__':
    unittest.main()
