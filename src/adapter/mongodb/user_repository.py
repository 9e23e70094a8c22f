"""MongoDB implementation of UserRepository."""

import uuid
from datetime import datetime, timezone
from logging import getLogger
from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError
from adapter.mongodb.connection import USERS_COLLECTION_NAME
from domain.model.user import PROFILE_FIELDS, User

logger = getLogger(__name__)


class MongoUserRepository:
    def __init__(self, db: Database):
        self.collection = db[USERS_COLLECTION_NAME]

    def ensure_indexes(self) -> bool:
        """Create indexes for users collection."""
        from adapter.mongodb.indexes import create_index_safe

        try:
            create_index_safe(self.collection, [('username', 1)], 'idx_users_username', unique=True)
            create_index_safe(self.collection, [('email', 1)], 'idx_users_email', unique=True)
            create_index_safe(self.collection, [('created_at', -1)], 'idx_users_created_at')
            return True
        except PyMongoError as e:
            logger.error("Failed to create users indexes", extra={"error": str(e)})
            return False

    def _to_domain(self, doc: dict) -> User:
        """Convert MongoDB document to User domain model."""
        return User(
            id=doc['_id'],
            username=doc['username'],
            email=doc['email'],
            password_hash=doc['password_hash'],
            created_at=doc['created_at'],
            first_name=doc.get('first_name'),
            last_name=doc.get('last_name'),
            bio=doc.get('bio'),
            location=doc.get('location'),
            phone=doc.get('phone'),
            avatar=doc.get('avatar'),
            last_login=doc.get('last_login'),
            login_count=doc.get('login_count', 0),
        )

    # ── write operations ─────────────────────────────────────

    def create(
        self,
        username: str,
        email: str,
        password_hash: str,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> User | None:
        """Create a new user. Return None if the username or email is taken."""
        user_id = uuid.uuid4().hex
        user_doc = {
            '_id': user_id,
            'username': username,
            'email': email,
            'password_hash': password_hash,
            'first_name': first_name,
            'last_name': last_name,
            'created_at': datetime.now(timezone.utc),
            'last_login': None,
            'login_count': 0,
        }
        try:
            self.collection.insert_one(user_doc)
        except DuplicateKeyError:
            logger.warning("User creation failed: username or email already exists", extra={"username": username})
            return None
        except PyMongoError as e:
            logger.error("Failed to create user", extra={"username": username, "error": str(e)})
            raise

        logger.info("User created", extra={"userId": user_id})
        return self._to_domain(user_doc)

    def update_profile(self, user_id: str, changes: dict) -> User | None:
        """Apply profile field changes and return the updated User."""
        fields = {k: v for k, v in changes.items() if k in PROFILE_FIELDS}
        if not fields:
            return self.get_by_id(user_id)
        try:
            doc = self.collection.find_one_and_update(
                {'_id': user_id},
                {'$set': fields},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            logger.warning("Profile update failed: email already exists", extra={"userId": user_id})
            return None
        except PyMongoError as e:
            logger.error("Failed to update profile", extra={"userId": user_id, "error": str(e)})
            raise
        return self._to_domain(doc) if doc else None

    def update_password(self, user_id: str, password_hash: str) -> bool:
        """Replace the stored password hash. Return True if the user exists."""
        try:
            result = self.collection.update_one(
                {'_id': user_id},
                {'$set': {'password_hash': password_hash}},
            )
        except PyMongoError as e:
            logger.error("Failed to update password", extra={"userId": user_id, "error": str(e)})
            raise
        return result.matched_count > 0

    def record_login(self, user_id: str) -> User | None:
        """Set last_login and increment login_count in one atomic update."""
        try:
            doc = self.collection.find_one_and_update(
                {'_id': user_id},
                {'$set': {'last_login': datetime.now(timezone.utc)}, '$inc': {'login_count': 1}},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logger.error("Failed to record login", extra={"userId": user_id, "error": str(e)})
            raise
        if doc:
            logger.debug("Recorded login", extra={"userId": user_id})
            return self._to_domain(doc)
        return None

    # ── read operations ──────────────────────────────────────

    def _find_one(self, query: dict) -> User | None:
        try:
            doc = self.collection.find_one(query)
        except PyMongoError as e:
            logger.error("Failed to get user", extra={"query": list(query), "error": str(e)})
            raise
        return self._to_domain(doc) if doc else None

    def get_by_id(self, user_id: str) -> User | None:
        """Find a user by ID. Return User or None if not found."""
        return self._find_one({'_id': user_id})

    def get_by_username(self, username: str) -> User | None:
        """Find a user by username. Return User or None if not found."""
        return self._find_one({'username': username})

    def get_by_email(self, email: str) -> User | None:
        """Find a user by email. Return User or None if not found."""
        return self._find_one({'email': email})
