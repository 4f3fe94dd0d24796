from datetime import datetime

import pytest
import pytz
from werkzeug.security import generate_password_hash

from hrflow import create_app
from hrflow.config import TestingConfig
from hrflow.models import CheckinZone, Employee, WorkingHours, db

HQ = (3.1390, 101.6869)

# 2024-01-10 is a Wednesday; Monday is the default off day
WEDNESDAY_MORNING = pytz.utc.localize(datetime(2024, 1, 10, 10, 0))
MONDAY_MORNING = pytz.utc.localize(datetime(2024, 1, 8, 10, 0))


class FixedClock:
    def __init__(self, moment):
        self.moment = moment

    def set(self, moment):
        self.moment = moment

    def __call__(self, tz_name):
        return self.moment.astimezone(pytz.timezone(tz_name))


@pytest.fixture(autouse=True)
def clock(monkeypatch):
    fixed = FixedClock(WEDNESDAY_MORNING)
    monkeypatch.setattr('hrflow.working_hours.local_now', fixed)
    return fixed


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
        _seed()

    # Requests push their own app context so each client loads its own user
    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


def _seed():
    db.session.add_all([
        Employee(username='hr', password=generate_password_hash('hrpass1'), role='hr',
                 name='Hana Rahman', email='hr@example.com', department='Human Resources'),
        Employee(username='alice', password=generate_password_hash('alice123'), role='employee',
                 name='Alice Tan', email='alice@example.com', department='Engineering'),
        Employee(username='bob', password=generate_password_hash('bobby123'), role='employee',
                 name='Bob Lim', email='bob@example.com', department='Engineering'),
        CheckinZone(name='HQ', latitude=HQ[0], longitude=HQ[1], radius=100),
        WorkingHours(start_time='09:30', end_time='17:00', work_days='2,3,4,5,6,0', break_duration=60),
    ])
    db.session.commit()


def user_id(username):
    return Employee.query.filter_by(username=username).first().id


def login(client, username, password):
    response = client.post('/api/auth/login', json={'username': username, 'password': password})
    assert response.status_code == 200, response.get_json()
    return client


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def hr_client(app):
    return login(app.test_client(), 'hr', 'hrpass1')


@pytest.fixture
def alice_client(app):
    return login(app.test_client(), 'alice', 'alice123')


@pytest.fixture
def bob_client(app):
    return login(app.test_client(), 'bob', 'bobby123')
