from conftest import HQ, login, user_id
from hrflow.cli import seed_database
from hrflow.models import Employee, WorkingHours


def test_login_and_me(client):
    response = client.post('/api/auth/login', json={'username': 'alice', 'password': 'wrong1'})
    assert response.status_code == 401

    login(client, 'alice', 'alice123')
    user = client.get('/api/auth/me').get_json()['user']
    assert user['username'] == 'alice'
    assert 'password' not in user

    assert client.post('/api/auth/logout').status_code == 200
    assert client.get('/api/auth/me').status_code == 401


def test_login_requires_fields(client):
    response = client.post('/api/auth/login', json={'username': 'alice'})
    assert response.status_code == 400
    assert response.get_json()['errors'] == ['password: This field is required.']


def test_change_password(client, alice_client):
    payload = {'current_password': 'alice123', 'new_password': 'abc12', 'confirm_password': 'abc12'}
    response = alice_client.post('/api/auth/change-password', json=payload)
    assert response.status_code == 400
    assert response.get_json()['message'] == 'Password must contain at least 5 letters.'

    payload.update(new_password='wonderland', confirm_password='wonderland')
    response = alice_client.post('/api/auth/change-password', json=payload)
    assert response.get_json()['message'] == 'Password must contain at least 1 number.'

    payload.update(new_password='wonderland7', confirm_password='wonderland8')
    assert alice_client.post('/api/auth/change-password', json=payload).status_code == 400

    payload.update(confirm_password='wonderland7', current_password='nope')
    assert alice_client.post('/api/auth/change-password', json=payload).status_code == 400

    payload.update(current_password='alice123')
    assert alice_client.post('/api/auth/change-password', json=payload).status_code == 200
    login(client, 'alice', 'wonderland7')


def test_hr_manages_employees(app, client, hr_client, alice_client):
    assert alice_client.get('/api/users').status_code == 403
    assert len(hr_client.get('/api/users').get_json()['users']) == 3

    payload = {'username': 'chen', 'password': 'chenwei1', 'name': 'Chen Wei',
               'email': 'chen@acme.com', 'department': 'Sales', 'base_salary': 4200}
    response = hr_client.post('/api/users', json=payload)
    assert response.status_code == 201
    created = response.get_json()['user']
    assert created['role'] == 'employee'
    assert created['is_active'] is True
    assert created['base_salary'] == 4200

    assert hr_client.post('/api/users', json=payload).status_code == 409
    assert hr_client.post('/api/users', json=dict(payload, username='chen2', email='not-an-email')).status_code == 400
    assert hr_client.post('/api/users', json=dict(payload, username='chen3', email='c3@acme.com',
                                                  password=None)).status_code == 400

    response = hr_client.put(f"/api/users/{created['id']}", json={'position': 'Account Manager'})
    assert response.get_json()['user']['position'] == 'Account Manager'
    assert response.get_json()['user']['department'] == 'Sales'

    login(client, 'chen', 'chenwei1')
    assert client.get(f"/api/users/{created['id']}").status_code == 200
    with app.app_context():
        alice_id = user_id('alice')
    assert client.get(f'/api/users/{alice_id}').status_code == 403

    hr_client.put(f"/api/users/{created['id']}", json={'is_active': False})
    response = app.test_client().post('/api/auth/login', json={'username': 'chen', 'password': 'chenwei1'})
    assert response.status_code == 403


def test_settings(client, hr_client, alice_client):
    settings = client.get('/api/settings').get_json()['settings']
    assert settings['app_name'] == 'HRFlow'
    assert settings['timezone'] == 'UTC'

    assert alice_client.put('/api/settings', json={'company_name': 'Acme'}).status_code == 403
    assert hr_client.put('/api/settings', json={'timezone': 'Nowhere/Special'}).status_code == 400

    response = hr_client.put('/api/settings', json={'company_name': 'Acme', 'timezone': 'Asia/Kuala_Lumpur'})
    assert response.status_code == 200
    settings = client.get('/api/settings').get_json()['settings']
    assert settings['company_name'] == 'Acme'
    assert settings['timezone'] == 'Asia/Kuala_Lumpur'
    assert settings['currency'] == 'USD'


def test_dashboard_and_reports(hr_client, alice_client):
    alice_client.post('/api/attendance/checkin', json={'latitude': HQ[0], 'longitude': HQ[1]})
    alice_client.post('/api/requests', json={'type': 'overtime', 'start_date': '2024-01-10', 'reason': 'Release'})

    assert alice_client.get('/api/dashboard/stats').status_code == 403
    stats = hr_client.get('/api/dashboard/stats').get_json()
    assert stats['total_employees'] == 2
    assert stats['present_today'] == 1
    assert stats['pending_requests'] == 1
    assert stats['on_leave'] == 0

    report = hr_client.get('/api/reports/employees?start_date=2024-01-01&end_date=2024-01-31').get_json()['report']
    alice = next(entry for entry in report if entry['employee']['name'] == 'Alice Tan')
    assert alice['attendance']['present_days'] == 1
    assert alice['requests']['pending'] == 1


def test_seed_database_is_idempotent(app):
    with app.app_context():
        created = seed_database(admin_username='root', admin_password='rootpass1', admin_email='root@example.com')
        assert created == ['HR user root']
        assert Employee.query.filter_by(username='root').one().is_hr
        assert WorkingHours.query.count() == 1
        assert seed_database(admin_username='root', admin_email='root@example.com') == []


def test_cli_check_zone(app):
    runner = app.test_cli_runner()
    result = runner.invoke(args=['check-zone', str(HQ[0]), str(HQ[1])])
    assert result.exit_code == 0
    assert 'Inside HQ' in result.output

    result = runner.invoke(args=['check-zone', '0', '0'])
    assert 'Outside all zones, nearest is HQ' in result.output


def test_cli_monitor_location(app, tmp_path, clock):
    path = tmp_path / 'gps.log'
    path.write_text(f'{HQ[0]},{HQ[1]}\n')
    result = app.test_cli_runner().invoke(args=['monitor-location', str(path), '--count', '1'])
    assert result.exit_code == 0, result.output
    assert 'can check in at HQ' in result.output


def test_cli_monitor_location_skips_invalid_fix(app, tmp_path, clock):
    path = tmp_path / 'gps.log'
    path.write_text('95,101.68\n')
    result = app.test_cli_runner().invoke(args=['monitor-location', str(path), '--count', '1'])
    assert result.exit_code == 0, result.output
    assert 'can check in' not in result.output
