import logging

from flask import Blueprint, current_app, jsonify
from flask_login import current_user, login_required

from hrflow.api import get_or_404, json_body, validated
from hrflow.attendance import ordered_zones
from hrflow.auth import hr_required
from hrflow.forms import CheckinZoneForm, LocationForm
from hrflow.geofence import check_zones, format_location, result_to_dict
from hrflow.models import CheckinZone, db

logger = logging.getLogger(__name__)

zones_bp = Blueprint('zones', __name__, url_prefix='/api')


def _apply(zone, form):
    zone.name = form.name.data
    zone.latitude = form.latitude.data
    zone.longitude = form.longitude.data
    zone.radius = form.radius.data
    zone.is_active = form.is_active.data


@zones_bp.route('/checkin-zones', methods=['GET'])
@login_required
def list_zones():
    return jsonify({'success': True, 'zones': [zone.to_dict() for zone in ordered_zones()]})


@zones_bp.route('/checkin-zones/active', methods=['GET'])
@login_required
def active_zones():
    zones = [zone.to_dict() for zone in ordered_zones() if zone.is_active]
    return jsonify({
        'success': True,
        'zones': zones,
        'refresh_interval': current_app.config['MAP_REFRESH_INTERVAL'],
    })


@zones_bp.route('/checkin-zones', methods=['POST'])
@hr_required
def create_zone():
    form = validated(CheckinZoneForm, json_body(), defaults={'is_active': True},
                     message='Invalid check-in zone')
    zone = CheckinZone()
    _apply(zone, form)
    db.session.add(zone)
    db.session.commit()

    logger.info(f"{current_user.username} created check-in zone {zone.name} ({zone.radius} m)")
    return jsonify({'success': True, 'zone': zone.to_dict()}), 201


@zones_bp.route('/checkin-zones/<int:zone_id>', methods=['PUT'])
@hr_required
def update_zone(zone_id):
    zone = get_or_404(CheckinZone, zone_id, 'Check-in zone')
    form = validated(CheckinZoneForm, json_body(), defaults=zone.to_dict(),
                     message='Invalid check-in zone')
    _apply(zone, form)
    db.session.commit()

    logger.info(f"{current_user.username} updated check-in zone {zone.name}")
    return jsonify({'success': True, 'zone': zone.to_dict()})


@zones_bp.route('/checkin-zones/<int:zone_id>', methods=['DELETE'])
@hr_required
def delete_zone(zone_id):
    zone = get_or_404(CheckinZone, zone_id, 'Check-in zone')
    db.session.delete(zone)
    db.session.commit()

    logger.info(f"{current_user.username} deleted check-in zone {zone.name}")
    return jsonify({'success': True, 'message': 'Check-in zone deleted'})


@zones_bp.route('/geofence/check', methods=['POST'])
@login_required
def geofence_check():
    form = validated(LocationForm, json_body(), message='Location is required')
    latitude, longitude = form.latitude.data, form.longitude.data
    result = check_zones(latitude, longitude, ordered_zones())

    payload = result_to_dict(result)
    payload.update({'success': True, 'location': format_location(latitude, longitude)})
    return jsonify(payload)
