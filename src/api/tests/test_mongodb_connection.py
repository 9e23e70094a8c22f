"""Tests for the shared MongoDB client cache."""

import unittest
from unittest.mock import patch, MagicMock
from pymongo.errors import ServerSelectionTimeoutError

from adapter.mongodb import connection


class TestGetMongodbClient(unittest.TestCase):

    def setUp(self):
        connection.reset_client()
        self.addCleanup(connection.reset_client)

    @patch('adapter.mongodb.connection.MONGO_URL', None)
    def test_unconfigured_url_returns_none(self):
        self.assertIsNone(connection.get_mongodb_client())

    @patch('adapter.mongodb.connection.MongoClient')
    @patch('adapter.mongodb.connection.MONGO_URL', 'mongodb://db:27017')
    def test_client_is_cached(self, mock_client_cls):
        client = mock_client_cls.return_value

        first = connection.get_mongodb_client()
        second = connection.get_mongodb_client()

        self.assertIs(first, client)
        self.assertIs(second, client)
        mock_client_cls.assert_called_once()
        self.assertTrue(mock_client_cls.call_args.kwargs['tz_aware'])

    @patch('adapter.mongodb.connection.MongoClient')
    @patch('adapter.mongodb.connection.MONGO_URL', 'mongodb://db:27017')
    def test_initial_failure_is_not_retried(self, mock_client_cls):
        mock_client_cls.return_value.admin.command.side_effect = ServerSelectionTimeoutError("no servers")

        self.assertIsNone(connection.get_mongodb_client())
        self.assertIsNone(connection.get_mongodb_client())
        mock_client_cls.assert_called_once()

    @patch('adapter.mongodb.connection.MongoClient')
    @patch('adapter.mongodb.connection.MONGO_URL', 'mongodb://db:27017')
    def test_dead_cached_client_is_replaced(self, mock_client_cls):
        dead, fresh = MagicMock(), MagicMock()
        mock_client_cls.side_effect = [dead, fresh]
        connection.get_mongodb_client()
        dead.admin.command.side_effect = ServerSelectionTimeoutError("gone")

        self.assertIs(connection.get_mongodb_client(), fresh)


if __name__ == '__main__':
    unittest.main()
