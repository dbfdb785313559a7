"""Service layer for the registration lifecycle.

Each transition persists the new status, reloads the registration and hands
the emails it triggers to the mailer. Mail failures never undo a transition.
"""
from __future__ import annotations

import logging
from typing import Any, List

from backend.competitions.mailers import registrations as mailer
from backend.competitions.models import Registration, RegistrationStatus
from backend.competitions.repositories import competitions_repo, registrations_repo

logger = logging.getLogger(__name__)

# Statuses a manager may move a registration to
MANAGER_STATUSES = (RegistrationStatus.ACCEPTED, RegistrationStatus.PENDING)


class RegistrationServiceError(Exception):
    def __init__(self, code: str, message: str, status: int = 400):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status = status


def _load_registration(registration_id: Any) -> Registration:
    registration = registrations_repo.load(registration_id)
    if registration is None:
        raise RegistrationServiceError('registration_not_found', 'Registration not found', 404)
    return registration


def _send(emails: List[Any]) -> int:
    return sum(1 for email in emails if mailer.deliver(email))


def get_competition_summary(competition_id: str) -> dict:
    competition = competitions_repo.load(competition_id)
    if competition is None:
        raise RegistrationServiceError('competition_not_found', 'Competition not found', 404)
    return {
        'id': competition.id,
        'name': competition.name,
        'managers': [u.name for u in competition.managers],
        'waiting_list_size': registrations_repo.count_waiting_list(competition.id),
    }


def get_registration(registration_id: Any, actor_id: Any) -> Registration:
    registration = _load_registration(registration_id)
    if str(actor_id) != registration.user.id and not registration.competition.is_manager(actor_id):
        raise RegistrationServiceError('forbidden', 'Not allowed to view this registration', 403)
    return registration


def register(competition_id: str, user_id: Any) -> Registration:
    """Create a waiting-list registration and notify delegates and registrant."""
    competition = competitions_repo.load(competition_id)
    if competition is None:
        raise RegistrationServiceError('competition_not_found', 'Competition not found', 404)
    if registrations_repo.find_active_for_user(competition_id, user_id):
        raise RegistrationServiceError('already_registered', 'You are already registered for this competition', 409)

    registration_id = registrations_repo.create_registration(competition_id, user_id)
    registration = registrations_repo.load(registration_id, competition=competition)
    if registration is None:
        raise RegistrationServiceError('registration_not_found', 'Registration could not be loaded', 500)

    logger.info('User %s registered for %s (registration %s)', user_id, competition_id, registration.id)
    _send([
        mailer.notify_organizers_of_new_registration(registration),
        mailer.notify_registrant_of_new_registration(registration),
    ])
    return registration


def delete_registration(registration_id: Any, actor_id: Any) -> Registration:
    """Delete a registration on behalf of the registrant or a manager."""
    registration = get_registration(registration_id, actor_id)
    if registration.status is RegistrationStatus.DELETED:
        return registration

    registrations_repo.update_status(registration.id, RegistrationStatus.DELETED)
    registration = _load_registration(registration.id)
    logger.info('Registration %s deleted by %s', registration.id, actor_id)
    _send([
        mailer.notify_organizers_of_deleted_registration(registration),
        mailer.notify_registrant_of_deleted_registration(registration),
    ])
    return registration


def update_status(registration_id: Any, status: str, actor_id: Any) -> Registration:
    """Accept a registration or move it back to the waiting list (managers only)."""
    try:
        new_status = RegistrationStatus(status)
    except ValueError:
        raise RegistrationServiceError('invalid_status', f'Unknown status: {status!r}')
    if new_status not in MANAGER_STATUSES:
        raise RegistrationServiceError('invalid_status', f'Status must be one of: {", ".join(s.value for s in MANAGER_STATUSES)}')

    registration = _load_registration(registration_id)
    if not registration.competition.is_manager(actor_id):
        raise RegistrationServiceError('forbidden', 'Only competition managers can change a registration status', 403)
    if registration.status is new_status:
        return registration

    registrations_repo.update_status(registration.id, new_status)
    registration = _load_registration(registration.id)
    logger.info('Registration %s moved to %s by %s', registration.id, new_status.value, actor_id)

    if new_status is RegistrationStatus.ACCEPTED:
        _send([mailer.notify_registrant_of_accepted_registration(registration)])
    else:
        _send([mailer.notify_registrant_of_pending_registration(registration)])
    return registration
