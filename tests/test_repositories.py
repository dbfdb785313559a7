"""Repository tests against a fake Mongo database object.

Only the query shapes and document mapping are checked here; pymongo itself
is not exercised.
"""

from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from bson import ObjectId
from pymongo.errors import PyMongoError

from backend.competitions import repositories as repos
from backend.competitions.models import RegistrationStatus


class FakeCollection:
    def __init__(self, docs=None):
        self.docs = list(docs or [])
        self.queries = []

    def _matches(self, doc, query):
        for key, cond in query.items():
            value = doc.get(key)
            if isinstance(cond, dict):
                if '$in' in cond and value not in cond['$in']:
                    return False
                if '$ne' in cond and value == cond['$ne']:
                    return False
                if '$lte' in cond and not value <= cond['$lte']:
                    return False
            elif value != cond:
                return False
        return True

    def find_one(self, query):
        self.queries.append(query)
        return next((d for d in self.docs if self._matches(d, query)), None)

    def find(self, query):
        self.queries.append(query)
        return [d for d in self.docs if self._matches(d, query)]

    def count_documents(self, query):
        self.queries.append(query)
        return len(self.find(query))

    def update_one(self, query, update):
        self.queries.append(query)
        modified = 0
        for d in self.docs:
            if self._matches(d, query):
                d.update(update['$set'])
                modified = 1
                break
        return SimpleNamespace(modified_count=modified)

    def insert_one(self, doc):
        doc.setdefault('_id', ObjectId())
        self.docs.append(doc)
        return SimpleNamespace(inserted_id=doc['_id'])


@pytest.fixture(name="database")
def fixture_database(monkeypatch):
    dana, carl, olga = ObjectId(), ObjectId(), ObjectId()
    database = {
        'users': FakeCollection([
            {'_id': dana, 'name': 'Dana', 'email': 'dana@example.com'},
            {'_id': carl, 'name': 'Carl', 'email': 'carl@example.com'},
            {'_id': olga, 'name': 'Olga', 'email': 'olga@example.com'},
        ]),
        'competitions': FakeCollection([
            {
                '_id': 'BerlinOpen2026',
                'name': 'Berlin Open 2026',
                'delegates': [
                    {'user_id': dana, 'receive_registration_emails': True},
                    {'user_id': carl, 'receive_registration_emails': False},
                    {'user_id': ObjectId()},
                ],
                'organizer_ids': [olga],
            },
        ]),
        'registrations': FakeCollection(),
    }
    monkeypatch.setattr(repos, 'db', SimpleNamespace(get_db=lambda: database))
    database['ids'] = SimpleNamespace(dana=dana, carl=carl, olga=olga)
    return database


def test_load_competition_resolves_staff(database) -> None:
    competition = repos.competitions_repo.load('BerlinOpen2026')

    assert competition.name == 'Berlin Open 2026'
    assert [d.email for d in competition.delegates] == ['dana@example.com', 'carl@example.com']
    assert [d.receive_registration_emails for d in competition.delegates] == [True, False]
    assert [u.email for u in competition.organizers] == ['olga@example.com']
    assert competition.is_manager(str(database['ids'].carl))


def test_load_missing_competition(database) -> None:
    assert repos.competitions_repo.load('Nope') is None


def test_create_and_load_registration(database) -> None:
    reg_id = repos.registrations_repo.create_registration('BerlinOpen2026', str(database['ids'].dana))

    registration = repos.registrations_repo.load(str(reg_id))

    assert registration.status is RegistrationStatus.PENDING
    assert registration.email == 'dana@example.com'
    assert registration.competition.id == 'BerlinOpen2026'


def test_update_status_sets_timestamps(database) -> None:
    reg_id = repos.registrations_repo.create_registration('BerlinOpen2026', str(database['ids'].dana))

    assert repos.registrations_repo.update_status(reg_id, RegistrationStatus.ACCEPTED)
    doc = database['registrations'].docs[0]
    assert doc['status'] == 'accepted'
    assert doc['accepted_at'] is not None


def test_count_waiting_list_query(database) -> None:
    t = lambda minute: datetime(2026, 10, 1, 12, minute, tzinfo=timezone.utc)
    database['registrations'].docs.extend([
        {'competition_id': 'BerlinOpen2026', 'status': 'pending', 'created_at': t(1)},
        {'competition_id': 'BerlinOpen2026', 'status': 'new', 'created_at': t(2)},
        {'competition_id': 'BerlinOpen2026', 'status': 'accepted', 'created_at': t(3)},
        {'competition_id': 'BerlinOpen2026', 'status': 'pending', 'created_at': t(4)},
        {'competition_id': 'OtherOpen2026', 'status': 'pending', 'created_at': t(1)},
    ])

    assert repos.registrations_repo.count_waiting_list('BerlinOpen2026', up_to=t(3)) == 2
    assert repos.registrations_repo.count_waiting_list('BerlinOpen2026') == 3
    assert database['registrations'].queries[0]['status'] == {'$in': ['new', 'pending']}


def test_invalid_object_id_returns_none(database) -> None:
    assert repos.registrations_repo.find_by_id('not-an-object-id') is None
    assert repos.users_repo.find_by_id(None) is None


def test_database_errors_propagate(monkeypatch) -> None:
    class BrokenCollection:
        def count_documents(self, query):
            raise PyMongoError('boom')

    monkeypatch.setattr(repos, 'db', SimpleNamespace(get_db=lambda: {'registrations': BrokenCollection()}))

    with pytest.raises(PyMongoError):
        repos.registrations_repo.count_waiting_list('BerlinOpen2026')


def test_load_competition_without_resolvable_delegates(database) -> None:
    database['competitions'].docs.append({
        '_id': 'GhostOpen2026',
        'name': 'Ghost Open 2026',
        'delegates': [{'user_id': ObjectId()}],
        'organizer_ids': [database['ids'].olga],
    })

    assert repos.competitions_repo.load('GhostOpen2026') is None
