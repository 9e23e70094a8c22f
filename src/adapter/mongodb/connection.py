"""Process-wide MongoDB client.

One client is shared by every request; pymongo pools connections
internally. A missing or unreachable MONGO_URL at startup marks the
database as unavailable for the life of the process, and the API answers
503 instead of retrying on every request.
"""

import os
import logging
from pymongo import MongoClient
from pymongo.errors import ConnectionFailure, PyMongoError

logger = logging.getLogger(__name__)

# Driver-level logs are noisy at INFO
logging.getLogger('pymongo').setLevel(logging.WARNING)

MONGO_URL = os.getenv('MONGO_URL')
DATABASE_NAME = os.getenv('MONGODB_DATABASE', 'travel_planner')
USERS_COLLECTION_NAME = 'users'
SESSIONS_COLLECTION_NAME = 'sessions'

CLIENT_OPTIONS = {
    'serverSelectionTimeoutMS': 5000,
    'connectTimeoutMS': 5000,
    'socketTimeoutMS': 30000,
    'maxPoolSize': 20,
    'minPoolSize': 0,
    'maxIdleTimeMS': 30000,
    'waitQueueTimeoutMS': 10000,
    'retryWrites': True,
    'retryReads': True,
    # Session expiry compares against datetime.now(timezone.utc)
    'tz_aware': True,
}

_client_cache = None
_connection_attempted = False
_connection_failed = False


def reset_client():
    """Forget the cached client and any earlier failure."""
    global _client_cache, _connection_attempted, _connection_failed
    _client_cache = None
    _connection_attempted = False
    _connection_failed = False


def _is_alive(client: MongoClient) -> bool:
    try:
        client.admin.command('ping')
        return True
    except PyMongoError:
        return False


def get_mongodb_client() -> MongoClient | None:
    """Return the shared client, reconnecting if it stopped answering pings.

    Returns None when MONGO_URL is unset or the very first connection
    attempt failed; later outages are retried on the next call.
    """
    global _client_cache, _connection_attempted, _connection_failed

    if _client_cache is not None:
        if _is_alive(_client_cache):
            return _client_cache
        logger.warning("[MONGODB] Cached client failed ping, reconnecting")
        _client_cache = None

    if _connection_failed:
        return None

    if not MONGO_URL:
        logger.error("[MONGODB] MONGO_URL not configured")
        _connection_failed = True
        return None

    try:
        client = MongoClient(MONGO_URL, **CLIENT_OPTIONS)
        client.admin.command('ping')
    except (ConnectionFailure, PyMongoError) as e:
        if not _connection_attempted:
            logger.error(f"[MONGODB] Initial connection failed: {str(e)[:200]}")
            _connection_failed = True
        return None

    if not _connection_attempted:
        logger.info(f"[MONGODB] Connected to {DATABASE_NAME}")
    _connection_attempted = True
    _client_cache = client
    return client
