"""Registration lifecycle emails.

Each ``notify_*`` function renders one email for a registration and returns
a :class:`RegistrationEmail`, or ``None`` when nobody should receive it.
Rendering needs an application context (templates, ``url_for`` and the
``MAIL_DEFAULT_SENDER`` setting). Nothing is sent until :func:`deliver`.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from flask import current_app, render_template, url_for
from flask_mail import Message

from backend.competitions.config import DEFAULT_NOTIFICATIONS_SENDER
from backend.competitions.extensions import mail
from backend.competitions.mailers import recipients
from backend.competitions.models import Registration
from backend.competitions.repositories import registrations_repo

logger = logging.getLogger(__name__)

TEMPLATE_DIR = 'email/registrations'


@dataclass
class RegistrationEmail:
    """A fully addressed email, ready to hand to Flask-Mail."""

    subject: str
    to: List[str]
    reply_to: List[str]
    html: str
    sender: str = DEFAULT_NOTIFICATIONS_SENDER
    kind: str = field(default='', compare=False)

    def to_message(self) -> Message:
        return Message(
            subject=self.subject,
            recipients=list(self.to),
            reply_to=', '.join(self.reply_to) or None,
            sender=self.sender,
            html=self.html,
        )


def _sender() -> str:
    return current_app.config.get('MAIL_DEFAULT_SENDER') or DEFAULT_NOTIFICATIONS_SENDER


def _render(kind: str, registration: Registration, **context) -> str:
    competition = registration.competition
    return render_template(
        f'{TEMPLATE_DIR}/{kind}.html',
        registration=registration,
        competition=competition,
        signature=recipients.signature(competition),
        **context,
    )


def _email(kind: str, registration: Registration, *, subject: str, to: List[str], reply_to: List[str], **context) -> RegistrationEmail:
    return RegistrationEmail(
        subject=subject,
        to=to,
        reply_to=reply_to,
        html=_render(kind, registration, **context),
        sender=_sender(),
        kind=kind,
    )


def _competition_register_url(registration: Registration) -> str:
    return url_for('registrations.competition_register', competition_id=registration.competition.id, _external=True)


def notify_organizers_of_new_registration(registration: Registration) -> Optional[RegistrationEmail]:
    competition = registration.competition
    to = recipients.registration_email_recipients(competition)
    if not to:
        logger.info('No delegate of %s receives registration emails, skipping notice', competition.id)
        return None
    return _email(
        'notify_organizers_of_new_registration',
        registration,
        subject=f'{registration.name} just registered for {competition.name}',
        to=to,
        reply_to=[registration.email],
        edit_registration_url=url_for('registrations.edit_registration', registration_id=registration.id, _external=True),
    )


def notify_organizers_of_deleted_registration(registration: Registration) -> RegistrationEmail:
    competition = registration.competition
    # Unlike new-registration notices, deletions reach every delegate
    return _email(
        'notify_organizers_of_deleted_registration',
        registration,
        subject=f'{registration.name} just deleted their registration for {competition.name}',
        to=recipients.delegate_emails(competition),
        reply_to=recipients.manager_emails(competition),
    )


def notify_registrant_of_new_registration(registration: Registration) -> RegistrationEmail:
    competition = registration.competition
    waiting = registrations_repo.count_waiting_list(competition.id, up_to=registration.created_at)
    return _email(
        'notify_registrant_of_new_registration',
        registration,
        subject=f'You have registered for {competition.name}',
        to=[registration.email],
        reply_to=recipients.manager_emails(competition),
        waiting_list_size=recipients.pluralize(waiting, 'person', 'people'),
        competition_register_url=_competition_register_url(registration),
    )


def notify_registrant_of_accepted_registration(registration: Registration) -> RegistrationEmail:
    competition = registration.competition
    return _email(
        'notify_registrant_of_accepted_registration',
        registration,
        subject=f'Your registration for {competition.name} has been accepted',
        to=[registration.email],
        reply_to=recipients.manager_emails(competition),
        competition_register_url=_competition_register_url(registration),
    )


def notify_registrant_of_pending_registration(registration: Registration) -> RegistrationEmail:
    competition = registration.competition
    return _email(
        'notify_registrant_of_pending_registration',
        registration,
        subject=f'You have been moved to the waiting list for {competition.name}',
        to=[registration.email],
        reply_to=recipients.manager_emails(competition),
        competition_register_url=_competition_register_url(registration),
    )


def notify_registrant_of_deleted_registration(registration: Registration) -> RegistrationEmail:
    competition = registration.competition
    return _email(
        'notify_registrant_of_deleted_registration',
        registration,
        subject=f'Your registration for {competition.name} has been deleted',
        to=[registration.email],
        reply_to=recipients.manager_emails(competition),
        competition_register_url=_competition_register_url(registration),
    )


def deliver(email: Optional[RegistrationEmail]) -> bool:
    """Send `email` through Flask-Mail.

    Returns False without sending when `email` is None or has no recipients.
    Any error raised by Flask-Mail (bad headers, transport failures) is
    logged and reported as False so a lifecycle change never fails on mail.
    """
    if email is None:
        return False
    if not email.to:
        logger.warning('%s email has no recipients, not sending', email.kind)
        return False
    try:
        mail.send(email.to_message())
    except Exception:
        logger.exception('Failed to send %s email to %s', email.kind, ', '.join(email.to))
        return False
    logger.info('Sent %s email to %d recipient(s)', email.kind, len(email.to))
    return True
