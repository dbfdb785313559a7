"""Read models for competitions, their staff, and registrations.

Repositories build these from MongoDB documents; mailers and services only
read them.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class RegistrationStatus(str, Enum):
    NEW = 'new'
    PENDING = 'pending'
    ACCEPTED = 'accepted'
    DELETED = 'deleted'


# Registrations not yet accepted (or deleted) count towards the waiting list
WAITING_LIST_STATUSES = (RegistrationStatus.NEW, RegistrationStatus.PENDING)


@dataclass(frozen=True)
class User:
    id: str
    name: str
    email: str

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> 'User':
        return cls(id=str(doc['_id']), name=doc.get('name') or '', email=doc['email'])


@dataclass(frozen=True)
class CompetitionDelegate:
    """A delegate of one competition, with their registration-email opt-in."""

    user: User
    receive_registration_emails: bool = True

    @property
    def email(self) -> str:
        return self.user.email

    @property
    def name(self) -> str:
        return self.user.name


@dataclass
class Competition:
    id: str
    name: str
    delegates: List[CompetitionDelegate]
    organizers: List[User] = field(default_factory=list)

    @property
    def delegate_users(self) -> List[User]:
        return [d.user for d in self.delegates]

    @property
    def organizers_or_delegates(self) -> List[User]:
        return list(self.organizers) if self.organizers else self.delegate_users

    managers = organizers_or_delegates

    def is_manager(self, user_id: Any) -> bool:
        user_id = str(user_id)
        staff = self.organizers + self.delegate_users
        return any(u.id == user_id for u in staff)


@dataclass
class Registration:
    id: str
    competition: Competition
    user: User
    status: RegistrationStatus
    created_at: datetime
    accepted_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    @property
    def name(self) -> str:
        return self.user.name

    @property
    def email(self) -> str:
        return self.user.email

    @property
    def on_waiting_list(self) -> bool:
        return self.status in WAITING_LIST_STATUSES

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'competition_id': self.competition.id,
            'user_id': self.user.id,
            'name': self.name,
            'status': self.status.value,
            'created_at': self.created_at.isoformat(),
            'accepted_at': self.accepted_at.isoformat() if self.accepted_at else None,
            'deleted_at': self.deleted_at.isoformat() if self.deleted_at else None,
        }
