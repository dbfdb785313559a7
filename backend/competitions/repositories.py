"""Repository pattern for database operations.

This module provides repository classes for each main collection,
abstracting database operations and providing a clean interface for the
service and mailer layers. Loaders return read models from `models`.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from pymongo.collection import Collection
from pymongo.errors import PyMongoError
from bson import ObjectId
from bson.errors import InvalidId

from . import db
from .models import (
    WAITING_LIST_STATUSES,
    Competition,
    CompetitionDelegate,
    Registration,
    RegistrationStatus,
    User,
)

logger = logging.getLogger(__name__)


def _object_id(value: Any) -> Optional[ObjectId]:
    try:
        return value if isinstance(value, ObjectId) else ObjectId(value)
    except (InvalidId, TypeError, ValueError):
        return None


class BaseRepository:
    """Base repository class with common database operations."""

    def __init__(self, collection_name: str):
        """Initialize repository with collection name.

        Args:
            collection_name: Name of the MongoDB collection
        """
        self.collection_name = collection_name

    @property
    def collection(self) -> Collection:
        database = db.get_db()
        return database[self.collection_name]

    def find_one(self, filter_dict: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        try:
            return self.collection.find_one(filter_dict)
        except PyMongoError as e:
            logger.error(f"Error finding document in {self.collection_name}: {e}")
            raise

    def find_many(self, filter_dict: Dict[str, Any], limit: Optional[int] = None, sort: Optional[List[tuple]] = None) -> List[Dict[str, Any]]:
        try:
            cursor = self.collection.find(filter_dict)
            if sort:
                cursor = cursor.sort(sort)
            if limit:
                cursor = cursor.limit(limit)
            return list(cursor)
        except PyMongoError as e:
            logger.error(f"Error finding documents in {self.collection_name}: {e}")
            raise

    def insert_one(self, document: Dict[str, Any]) -> ObjectId:
        try:
            result = self.collection.insert_one(document)
            return result.inserted_id
        except PyMongoError as e:
            logger.error(f"Error inserting document in {self.collection_name}: {e}")
            raise

    def update_one(self, filter_dict: Dict[str, Any], update_dict: Dict[str, Any]) -> bool:
        try:
            result = self.collection.update_one(filter_dict, update_dict)
            return result.modified_count > 0
        except PyMongoError as e:
            logger.error(f"Error updating document in {self.collection_name}: {e}")
            raise

    def count_documents(self, filter_dict: Dict[str, Any]) -> int:
        try:
            return self.collection.count_documents(filter_dict)
        except PyMongoError as e:
            logger.error(f"Error counting documents in {self.collection_name}: {e}")
            raise


class UsersRepository(BaseRepository):
    def __init__(self) -> None:
        super().__init__('users')

    def find_by_id(self, user_id: Any) -> Optional[Dict[str, Any]]:
        oid = _object_id(user_id)
        if oid is None:
            return None
        return self.find_one({'_id': oid})

    def find_by_ids(self, user_ids: List[Any]) -> List[Dict[str, Any]]:
        oids = [oid for oid in (_object_id(u) for u in user_ids) if oid is not None]
        if not oids:
            return []
        return self.find_many({'_id': {'$in': oids}})

    def load(self, user_id: Any) -> Optional[User]:
        doc = self.find_by_id(user_id)
        return User.from_document(doc) if doc else None


class CompetitionsRepository(BaseRepository):
    def __init__(self) -> None:
        super().__init__('competitions')

    def find_by_id(self, competition_id: str) -> Optional[Dict[str, Any]]:
        return self.find_one({'_id': competition_id})

    def load(self, competition_id: str) -> Optional[Competition]:
        """Load a competition with its delegates and organizers resolved to users.

        Staff entries whose user document is missing are skipped with a warning.
        Returns None when no delegate resolves, since every competition has at
        least one. Roster order follows the competition document.
        """
        doc = self.find_by_id(competition_id)
        if not doc:
            return None

        delegate_entries = doc.get('delegates') or []
        organizer_ids = doc.get('organizer_ids') or []
        wanted = [entry['user_id'] for entry in delegate_entries] + list(organizer_ids)
        users = {str(u['_id']): User.from_document(u) for u in users_repo.find_by_ids(wanted)}

        delegates = []
        for entry in delegate_entries:
            user = users.get(str(entry['user_id']))
            if user is None:
                logger.warning('Delegate %s of competition %s not found', entry['user_id'], competition_id)
                continue
            delegates.append(CompetitionDelegate(
                user=user,
                receive_registration_emails=entry.get('receive_registration_emails', True),
            ))

        organizers = []
        for organizer_id in organizer_ids:
            user = users.get(str(organizer_id))
            if user is None:
                logger.warning('Organizer %s of competition %s not found', organizer_id, competition_id)
                continue
            organizers.append(user)

        if not delegates:
            logger.error('Competition %s has no resolvable delegates', competition_id)
            return None

        return Competition(id=str(doc['_id']), name=doc['name'], delegates=delegates, organizers=organizers)


class RegistrationsRepository(BaseRepository):
    def __init__(self) -> None:
        super().__init__('registrations')

    def find_by_id(self, registration_id: Any) -> Optional[Dict[str, Any]]:
        oid = _object_id(registration_id)
        if oid is None:
            return None
        return self.find_one({'_id': oid})

    def find_active_for_user(self, competition_id: str, user_id: Any) -> Optional[Dict[str, Any]]:
        return self.find_one({
            'competition_id': competition_id,
            'user_id': _object_id(user_id),
            'status': {'$ne': RegistrationStatus.DELETED.value},
        })

    def load(self, registration_id: Any, competition: Optional[Competition] = None) -> Optional[Registration]:
        doc = self.find_by_id(registration_id)
        if not doc:
            return None
        if competition is None:
            competition = competitions_repo.load(doc['competition_id'])
        user = users_repo.load(doc['user_id'])
        if competition is None or user is None:
            logger.warning('Registration %s references a missing competition or user', registration_id)
            return None
        return Registration(
            id=str(doc['_id']),
            competition=competition,
            user=user,
            status=RegistrationStatus(doc['status']),
            created_at=doc['created_at'],
            accepted_at=doc.get('accepted_at'),
            deleted_at=doc.get('deleted_at'),
        )

    def create_registration(self, competition_id: str, user_id: Any) -> ObjectId:
        now = datetime.now(timezone.utc)
        return self.insert_one({
            'competition_id': competition_id,
            'user_id': _object_id(user_id),
            'status': RegistrationStatus.PENDING.value,
            'created_at': now,
            'accepted_at': None,
            'deleted_at': None,
        })

    def update_status(self, registration_id: Any, status: RegistrationStatus) -> bool:
        now = datetime.now(timezone.utc)
        changes: Dict[str, Any] = {'status': status.value}
        if status is RegistrationStatus.ACCEPTED:
            changes['accepted_at'] = now
        elif status is RegistrationStatus.DELETED:
            changes['deleted_at'] = now
        else:
            changes['accepted_at'] = None
        return self.update_one({'_id': _object_id(registration_id)}, {'$set': changes})

    def count_waiting_list(self, competition_id: str, up_to: Optional[datetime] = None) -> int:
        """Count waiting-list registrations, optionally only those created by `up_to`."""
        query: Dict[str, Any] = {
            'competition_id': competition_id,
            'status': {'$in': [s.value for s in WAITING_LIST_STATUSES]},
        }
        if up_to is not None:
            query['created_at'] = {'$lte': up_to}
        return self.count_documents(query)


users_repo = UsersRepository()
competitions_repo = CompetitionsRepository()
registrations_repo = RegistrationsRepository()
