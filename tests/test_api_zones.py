from conftest import HQ


def test_geofence_check(alice_client):
    response = alice_client.post('/api/geofence/check', json={'latitude': HQ[0], 'longitude': HQ[1]})
    assert response.status_code == 200
    data = response.get_json()
    assert data['in_zone'] is True
    assert data['zone'] == 'HQ'
    assert data['distance'] == 0
    assert data['location'] == '3.139000, 101.686900'

    data = alice_client.post('/api/geofence/check', json={'latitude': HQ[0] + 0.01, 'longitude': HQ[1]}).get_json()
    assert data['in_zone'] is False
    assert data['nearest_zone'] == 'HQ'
    assert 1100 < data['distance'] < 1125

    response = alice_client.post('/api/geofence/check', json={'latitude': 0, 'longitude': 200})
    assert response.status_code == 400


def test_geofence_check_at_the_antipode(hr_client, alice_client):
    zone = {'name': 'Far side', 'latitude': 43.5577, 'longitude': 151.6723, 'radius': 100}
    assert hr_client.post('/api/checkin-zones', json=zone).status_code == 201

    response = alice_client.post('/api/geofence/check', json={'latitude': -43.5577, 'longitude': -28.3277})
    assert response.status_code == 200
    data = response.get_json()
    assert data['in_zone'] is False
    # HQ is closer than the far side zone
    assert data['nearest_zone'] == 'HQ'


def test_zone_listing(alice_client):
    zones = alice_client.get('/api/checkin-zones').get_json()['zones']
    assert [zone['name'] for zone in zones] == ['HQ']
    assert zones[0]['radius'] == 100

    data = alice_client.get('/api/checkin-zones/active').get_json()
    assert data['refresh_interval'] == 15


def test_hr_manages_zones(hr_client, alice_client):
    payload = {'name': 'Warehouse', 'latitude': 3.05, 'longitude': 101.55, 'radius': 250}
    assert alice_client.post('/api/checkin-zones', json=payload).status_code == 403

    response = hr_client.post('/api/checkin-zones', json=payload)
    assert response.status_code == 201
    zone = response.get_json()['zone']
    assert zone['is_active'] is True

    response = alice_client.post('/api/geofence/check', json={'latitude': 3.05, 'longitude': 101.55})
    assert response.get_json()['zone'] == 'Warehouse'

    response = hr_client.put(f"/api/checkin-zones/{zone['id']}", json={'is_active': False})
    assert response.status_code == 200
    updated = response.get_json()['zone']
    assert updated['is_active'] is False
    assert updated['name'] == 'Warehouse'
    assert updated['radius'] == 250

    response = alice_client.post('/api/geofence/check', json={'latitude': 3.05, 'longitude': 101.55})
    assert response.get_json()['in_zone'] is False

    active = alice_client.get('/api/checkin-zones/active').get_json()['zones']
    assert [zone['name'] for zone in active] == ['HQ']

    assert hr_client.delete(f"/api/checkin-zones/{zone['id']}").status_code == 200
    assert hr_client.delete(f"/api/checkin-zones/{zone['id']}").status_code == 404


def test_zone_validation(hr_client):
    response = hr_client.post('/api/checkin-zones', json={'name': 'Nowhere', 'latitude': 95,
                                                           'longitude': 0, 'radius': 0})
    assert response.status_code == 400
    fields = {error.split(':')[0] for error in response.get_json()['errors']}
    assert fields == {'latitude', 'radius'}


def test_working_hours_management(hr_client, alice_client):
    data = alice_client.get('/api/working-hours').get_json()
    assert data['active']['start_time'] == '09:30'
    assert data['summary'] == '09:30 - 17:00, Tuesday, Wednesday, Thursday, Friday, Saturday, Sunday'
    hours_id = data['working_hours'][0]['id']

    response = hr_client.put(f'/api/working-hours/{hours_id}', json={'start_time': '18:00'})
    assert response.status_code == 400
    assert response.get_json()['message'] == 'End time must be after start time'

    response = hr_client.put(f'/api/working-hours/{hours_id}',
                             json={'start_time': '08:00', 'work_days': '1,2,3'})
    assert response.status_code == 200
    assert response.get_json()['working_hours']['work_days'] == [1, 2, 3]

    response = hr_client.post('/api/working-hours', json={'start_time': '8am', 'end_time': '17:00'})
    assert response.status_code == 400

    assert alice_client.delete(f'/api/working-hours/{hours_id}').status_code == 403


def test_checkin_follows_updated_working_hours(hr_client, alice_client):
    hours_id = alice_client.get('/api/working-hours').get_json()['working_hours'][0]['id']
    hr_client.put(f'/api/working-hours/{hours_id}', json={'start_time': '11:00'})

    response = alice_client.post('/api/attendance/checkin', json={'latitude': HQ[0], 'longitude': HQ[1]})
    assert response.status_code == 403
    assert response.get_json()['errors'] == ['Work starts at 11:00']


def test_holidays(hr_client, alice_client):
    response = hr_client.post('/api/holidays', json={'name': 'Federal Territory Day', 'date': '2024-02-01'})
    assert response.status_code == 201
    holiday = response.get_json()['holiday']

    assert alice_client.get('/api/holidays').get_json()['holidays'][0]['name'] == 'Federal Territory Day'
    assert alice_client.post('/api/holidays', json={'name': 'Mine', 'date': '2024-02-02'}).status_code == 403

    response = hr_client.put(f"/api/holidays/{holiday['id']}", json={'is_active': False})
    assert response.get_json()['holiday'] == dict(holiday, is_active=False)

    assert hr_client.post('/api/holidays', json={'name': 'Bad', 'date': '01/02/2024'}).status_code == 400
    assert hr_client.delete(f"/api/holidays/{holiday['id']}").status_code == 200
