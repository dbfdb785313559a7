"""Recipient and signature rules for registration emails.

Everything here is a pure function of already-loaded read models, so the
mailer templates stay free of selection logic.
"""
from __future__ import annotations

from typing import Iterable, List, Sequence

from markupsafe import Markup, escape

from backend.competitions.models import Competition, User


def organizers_or_delegates(competition: Competition) -> List[User]:
    """Organizers when the competition has any, otherwise its delegates."""
    return competition.organizers_or_delegates


def registration_email_recipients(competition: Competition) -> List[str]:
    """Emails of delegates who opted in to new-registration notices."""
    return [d.email for d in competition.delegates if d.receive_registration_emails]


def delegate_emails(competition: Competition) -> List[str]:
    return [d.email for d in competition.delegates]


def manager_emails(competition: Competition) -> List[str]:
    return [u.email for u in organizers_or_delegates(competition)]


def to_sentence(words: Sequence[str]) -> str:
    """Join words as an English list: "A", "A and B", "A, B, and C"."""
    words = list(words)
    if not words:
        return ''
    if len(words) == 1:
        return words[0]
    if len(words) == 2:
        return f'{words[0]} and {words[1]}'
    return '{}, and {}'.format(', '.join(words[:-1]), words[-1])


def users_to_sentence(users: Iterable[User]) -> Markup:
    # Escape before sorting so the order matches what the reader sees
    names = sorted(str(escape(u.name)) for u in users)
    return Markup(to_sentence(names))


def signature(competition: Competition) -> Markup:
    return Markup('Regards, {}.').format(users_to_sentence(organizers_or_delegates(competition)))


def pluralize(count: int, singular: str, plural: str) -> str:
    return f'{count} {singular if count == 1 else plural}'
