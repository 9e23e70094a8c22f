"""Index creation for the users and sessions collections.

Run once at startup. An index whose definition changed between releases
(renamed, or unique/TTL options changed) is dropped and rebuilt.
"""

from logging import getLogger

from pymongo.errors import OperationFailure

logger = getLogger(__name__)


def create_index_safe(collection, keys: list, name: str, **options) -> bool:
    """Create an index, replacing any existing one with the same name or keys."""
    try:
        collection.create_index(keys, name=name, **options)
        return True
    except OperationFailure as e:
        if "already exists" not in str(e) and "Conflict" not in str(e):
            raise

    stale = [
        idx_name
        for idx_name, info in collection.index_information().items()
        if idx_name != '_id_' and (idx_name == name or dict(info.get('key', [])) == dict(keys))
    ]
    if not stale:
        logger.error("Index conflict with no matching index", extra={"index": name})
        return False

    for idx_name in stale:
        logger.warning("Dropping outdated index", extra={"index": idx_name})
        collection.drop_index(idx_name)
    collection.create_index(keys, name=name, **options)
    logger.info("Rebuilt index", extra={"index": name})
    return True


def ensure_all_indexes(db) -> bool:
    """Ensure indexes for every collection the app owns."""
    from adapter.mongodb.session_store import MongoSessionStore
    from adapter.mongodb.user_repository import MongoUserRepository

    results = [
        MongoUserRepository(db).ensure_indexes(),
        MongoSessionStore(db).ensure_indexes(),
    ]
    return all(results)
