import pytest
from flask import Flask

from backend.competitions import create_app
from backend.competitions.config import TestingConfig
from backend.competitions.extensions import mail
from backend.competitions.mailers import registrations as mailer
from backend.competitions.services import registration_service as svc

from registration_factories import create_competition, create_delegate, create_user
from repo_fakes import FakeCompetitionsRepo, FakeRegistrationsRepo


@pytest.fixture(name="app")
def fixture_app() -> Flask:
    return create_app(TestingConfig)


@pytest.fixture(name="app_ctx")
def fixture_app_ctx(app: Flask):
    with app.app_context():
        yield app


@pytest.fixture(name="outbox")
def fixture_outbox(app_ctx: Flask):
    with mail.record_messages() as outbox:
        yield outbox


@pytest.fixture(name="delegate1")
def fixture_delegate1():
    return create_user(name="Dana Delegate", email="dana@example.com")


@pytest.fixture(name="delegate2")
def fixture_delegate2():
    return create_user(name="Carl Delegate", email="carl@example.com")


@pytest.fixture(name="organizer1")
def fixture_organizer1():
    return create_user(name="Olga Organizer", email="olga@example.com")


@pytest.fixture(name="organizer2")
def fixture_organizer2():
    return create_user(name="Bruno Organizer", email="bruno@example.com")


@pytest.fixture(name="competition_without_organizers")
def fixture_competition_without_organizers(delegate1, delegate2):
    return create_competition(
        name="Berlin Open 2026",
        delegates=[create_delegate(delegate1), create_delegate(delegate2)],
    )


@pytest.fixture(name="competition_with_organizers")
def fixture_competition_with_organizers(delegate1, delegate2, organizer1, organizer2):
    return create_competition(
        name="Madrid Summer 2026",
        delegates=[create_delegate(delegate1), create_delegate(delegate2)],
        organizers=[organizer1, organizer2],
    )


@pytest.fixture(name="competitions_repo")
def fixture_competitions_repo(competition_without_organizers, competition_with_organizers):
    return FakeCompetitionsRepo(competition_without_organizers, competition_with_organizers)


@pytest.fixture(name="registrations_repo")
def fixture_registrations_repo(app_ctx, monkeypatch, competitions_repo, delegate1, delegate2, organizer1, organizer2):
    repo = FakeRegistrationsRepo(competitions_repo, users=[delegate1, delegate2, organizer1, organizer2])
    monkeypatch.setattr(mailer, "registrations_repo", repo)
    monkeypatch.setattr(svc, "registrations_repo", repo)
    monkeypatch.setattr(svc, "competitions_repo", competitions_repo)
    return repo
