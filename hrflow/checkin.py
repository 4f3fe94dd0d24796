"""Check-in / check-out gate combining the working schedule and the geofence."""
from hrflow.geofence import check_zones, result_to_dict, zone_name
from hrflow.working_hours import get_working_status

OUTSIDE_ZONE_MESSAGE = 'You must be in a designated check-in zone to check in.'
OUTSIDE_ZONE_CHECKOUT_MESSAGE = 'You must be in a designated check-in zone to check out.'


class CheckInDecision:
    def __init__(self, allowed, reasons, geofence, working_status=None):
        self.allowed = allowed
        self.reasons = reasons
        self.geofence = geofence
        self.working_status = working_status

    @property
    def zone_name(self):
        return zone_name(self.geofence.zone)

    def to_dict(self):
        payload = {
            'allowed': self.allowed,
            'reasons': list(self.reasons),
            'geofence': result_to_dict(self.geofence),
        }
        if self.working_status is not None:
            payload['working_status'] = self.working_status
        return payload

    def __eq__(self, other):
        if not isinstance(other, CheckInDecision):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f'<CheckInDecision allowed={self.allowed} zone={self.zone_name!r}>'


def evaluate_checkin(moment, latitude, longitude, zones, hours=None):
    """Check-in needs working hours on a work day AND an active zone around the device."""
    working_status = get_working_status(moment, hours)
    geofence = check_zones(latitude, longitude, zones)

    reasons = []
    if not working_status['can_check_in']:
        reasons.append(working_status['message'])
    if not geofence.in_zone:
        reasons.append(OUTSIDE_ZONE_MESSAGE)

    return CheckInDecision(not reasons, reasons, geofence, working_status)


def evaluate_checkout(latitude, longitude, zones):
    """Check-out only needs the device inside an active zone."""
    geofence = check_zones(latitude, longitude, zones)
    reasons = [] if geofence.in_zone else [OUTSIDE_ZONE_CHECKOUT_MESSAGE]
    return CheckInDecision(geofence.in_zone, reasons, geofence)
