"""Flask CLI commands: database setup and geofence tools."""
import logging
import os
import time

import click
from werkzeug.security import generate_password_hash

from hrflow.attendance import active_working_hours, configured_timezone, ordered_zones
from hrflow.geofence import check_zones, result_to_dict
from hrflow.models import Employee, WorkingHours, db
from hrflow.monitor import FileLocationSource, LocationMonitor
from hrflow.working_hours import DEFAULT_WORKING_HOURS, format_working_hours

logger = logging.getLogger(__name__)


def seed_database(admin_username='admin', admin_password='admin123', admin_email='admin@example.com'):
    """Create tables, an HR admin and the default working hours if missing"""
    db.create_all()

    created = []
    if not Employee.query.filter_by(username=admin_username).first():
        admin = Employee(
            username=admin_username,
            password=generate_password_hash(admin_password),
            role='hr',
            name='HR Administrator',
            email=admin_email,
            department='Human Resources',
            position='Administrator',
        )
        db.session.add(admin)
        created.append(f'HR user {admin_username}')

    if WorkingHours.query.count() == 0:
        db.session.add(WorkingHours(
            start_time=DEFAULT_WORKING_HOURS['start_time'],
            end_time=DEFAULT_WORKING_HOURS['end_time'],
            work_days=','.join(str(day) for day in DEFAULT_WORKING_HOURS['work_days']),
            break_duration=DEFAULT_WORKING_HOURS['break_duration'],
        ))
        created.append('default working hours')

    db.session.commit()
    return created


def register_commands(app):
    @app.cli.command('init-db')
    @click.option('--admin-username', default='admin', show_default=True)
    @click.option('--admin-email', default='admin@example.com', show_default=True)
    def init_db(admin_username, admin_email):
        """Create the tables and seed an HR administrator."""
        password = os.environ.get('HRFLOW_ADMIN_PASSWORD', 'admin123')
        created = seed_database(admin_username, password, admin_email)
        if created:
            click.echo(f"Created: {', '.join(created)}")
        else:
            click.echo('Database already initialised')

    @app.cli.command('check-zone')
    @click.argument('latitude', type=float)
    @click.argument('longitude', type=float)
    def check_zone(latitude, longitude):
        """Report which check-in zone a location falls in (use -- before negative values)."""
        result = result_to_dict(check_zones(latitude, longitude, ordered_zones()))
        if result['in_zone']:
            click.echo(f"Inside {result['zone']} ({result['distance']} m from center)")
        elif result['nearest_zone']:
            click.echo(f"Outside all zones, nearest is {result['nearest_zone']} at {result['distance']} m")
        else:
            click.echo('No active check-in zones configured')

    @app.cli.command('monitor-location')
    @click.argument('path', type=click.Path(dir_okay=False))
    @click.option('--interval', default=app.config['MAP_REFRESH_INTERVAL'], show_default=True,
                  type=click.IntRange(min=1), help='Seconds between samples.')
    @click.option('--count', default=None, type=click.IntRange(min=1),
                  help='Stop after this many samples.')
    def monitor_location(path, interval, count):
        """Poll a location file and print check-in eligibility as it changes."""

        def zones():
            with app.app_context():
                return [zone.to_dict() for zone in ordered_zones()]

        def hours():
            with app.app_context():
                row = active_working_hours()
                return row.to_dict() if row else None

        def report(previous, current):
            state = 'can check in' if current.allowed else 'cannot check in'
            reasons = f" ({'; '.join(current.reasons)})" if current.reasons else ''
            click.echo(f"[{time.strftime('%H:%M:%S')}] {state} at {current.zone_name or 'no zone'}{reasons}")

        monitor = LocationMonitor(
            FileLocationSource(path), zones, hours,
            interval=interval, timezone=configured_timezone(), on_change=report,
        )
        click.echo(f"Monitoring {path} every {interval}s, schedule {format_working_hours(hours())}")

        if count:
            for sample_number in range(count):
                monitor.sample()
                if sample_number < count - 1:
                    time.sleep(interval)
            return

        monitor.start()
        try:
            while monitor.running:
                time.sleep(1)
        except KeyboardInterrupt:
            monitor.stop()
