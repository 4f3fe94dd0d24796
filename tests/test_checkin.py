from datetime import datetime

from hrflow.checkin import (OUTSIDE_ZONE_CHECKOUT_MESSAGE, OUTSIDE_ZONE_MESSAGE, evaluate_checkin,
                            evaluate_checkout)

ZONES = [{'name': 'HQ', 'latitude': 3.1390, 'longitude': 101.6869, 'radius': 100}]
INSIDE = (3.1392, 101.6869)
OUTSIDE = (3.1500, 101.6869)

WEDNESDAY_NOON = datetime(2024, 1, 10, 12, 0)
MONDAY_NOON = datetime(2024, 1, 8, 12, 0)
WEDNESDAY_EVENING = datetime(2024, 1, 10, 19, 0)


def test_allowed_inside_zone_during_working_hours():
    decision = evaluate_checkin(WEDNESDAY_NOON, *INSIDE, ZONES)
    assert decision.allowed
    assert decision.reasons == []
    assert decision.zone_name == 'HQ'
    assert decision.working_status['status'] == 'working-hours'


def test_outside_zone_is_denied():
    decision = evaluate_checkin(WEDNESDAY_NOON, *OUTSIDE, ZONES)
    assert not decision.allowed
    assert decision.reasons == [OUTSIDE_ZONE_MESSAGE]
    assert decision.zone_name is None


def test_off_day_is_denied_even_inside_zone():
    decision = evaluate_checkin(MONDAY_NOON, *INSIDE, ZONES)
    assert not decision.allowed
    assert decision.reasons == ['Today is an off day']


def test_both_reasons_are_reported():
    decision = evaluate_checkin(WEDNESDAY_EVENING, *OUTSIDE, ZONES)
    assert decision.reasons == ['Work ended at 17:00', OUTSIDE_ZONE_MESSAGE]


def test_no_active_zone_denies_checkin():
    decision = evaluate_checkin(WEDNESDAY_NOON, *INSIDE, [dict(ZONES[0], is_active=False)])
    assert not decision.allowed
    assert decision.geofence.distance is None


def test_checkout_ignores_working_hours():
    assert evaluate_checkout(*INSIDE, ZONES).allowed

    decision = evaluate_checkout(*OUTSIDE, ZONES)
    assert not decision.allowed
    assert decision.reasons == [OUTSIDE_ZONE_CHECKOUT_MESSAGE]
    assert 'working_status' not in decision.to_dict()


def test_decision_to_dict():
    payload = evaluate_checkin(WEDNESDAY_NOON, *INSIDE, ZONES).to_dict()
    assert payload['allowed'] is True
    assert payload['geofence']['zone'] == 'HQ'
    assert payload['geofence']['in_zone'] is True
    assert payload['working_status']['can_check_in'] is True
