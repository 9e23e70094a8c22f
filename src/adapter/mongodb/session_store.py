"""MongoDB implementation of SessionStore.

Expired sessions are filtered on read and reaped by a TTL index on expires_at.
"""

from datetime import datetime, timezone
from logging import getLogger
from pymongo.database import Database
from pymongo.errors import PyMongoError
from adapter.mongodb.connection import SESSIONS_COLLECTION_NAME
from domain.model.session import Session

logger = getLogger(__name__)


class MongoSessionStore:
    def __init__(self, db: Database):
        self.collection = db[SESSIONS_COLLECTION_NAME]

    def ensure_indexes(self) -> bool:
        """Create indexes for sessions collection."""
        from adapter.mongodb.indexes import create_index_safe

        try:
            create_index_safe(self.collection, [('expires_at', 1)], 'idx_sessions_ttl', expireAfterSeconds=0)
            create_index_safe(self.collection, [('user_id', 1)], 'idx_sessions_user_id')
            return True
        except PyMongoError as e:
            logger.error("Failed to create sessions indexes", extra={"error": str(e)})
            return False

    def _to_domain(self, doc: dict) -> Session:
        return Session(
            id=doc['_id'],
            user_id=doc['user_id'],
            created_at=doc['created_at'],
            expires_at=doc['expires_at'],
        )

    def create(self, user_id: str) -> Session:
        session = Session.start(user_id)
        try:
            self.collection.insert_one({
                '_id': session.id,
                'user_id': session.user_id,
                'created_at': session.created_at,
                'expires_at': session.expires_at,
            })
        except PyMongoError as e:
            logger.error("Failed to create session", extra={"userId": user_id, "error": str(e)})
            raise
        return session

    def get(self, session_id: str) -> Session | None:
        try:
            doc = self.collection.find_one({
                '_id': session_id,
                'expires_at': {'$gt': datetime.now(timezone.utc)},
            })
        except PyMongoError as e:
            logger.error("Failed to load session", extra={"error": str(e)})
            raise
        return self._to_domain(doc) if doc else None

    def delete(self, session_id: str) -> bool:
        try:
            result = self.collection.delete_one({'_id': session_id})
        except PyMongoError as e:
            logger.error("Failed to delete session", extra={"error": str(e)})
            raise
        return result.deleted_count > 0
