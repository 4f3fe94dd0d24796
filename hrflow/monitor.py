"""
Periodic location sampling.

Each tick reads one device location and recomputes the check-in gate from
scratch. There is no smoothing between samples: a device sitting on a zone
boundary can flip between inside and outside on consecutive ticks.
"""
import logging
import threading

from hrflow.checkin import evaluate_checkin
from hrflow import working_hours
from hrflow.errors import GeofenceError

logger = logging.getLogger(__name__)


class LocationUnavailable(Exception):
    pass


class FileLocationSource:
    """Reads the last 'latitude,longitude' line written to a file, e.g. by a GPS logger."""

    def __init__(self, path):
        self.path = path

    def __call__(self):
        try:
            with open(self.path, encoding='utf-8') as handle:
                lines = [line.strip() for line in handle if line.strip()]
        except OSError as e:
            raise LocationUnavailable(f'Cannot read {self.path}: {e}')

        if not lines:
            raise LocationUnavailable(f'No location in {self.path}')

        try:
            latitude, longitude = (float(part) for part in lines[-1].split(',')[:2])
        except ValueError:
            raise LocationUnavailable(f'Malformed location line: {lines[-1]!r}')
        return latitude, longitude


class LocationMonitor:
    def __init__(self, location_source, zones_source, hours_source=None, interval=15,
                 timezone='UTC', on_change=None, clock=None):
        self.location_source = location_source
        self.zones_source = zones_source
        self.hours_source = hours_source
        self.interval = interval
        self.timezone = timezone
        self.on_change = on_change
        self.clock = clock or (lambda: working_hours.local_now(self.timezone))

        self.status = None
        self.location = None
        self.samples = 0
        self._timer = None
        self._running = False
        self._lock = threading.Lock()

    def sample(self):
        """Take one location reading and recompute the gate."""
        try:
            latitude, longitude = self.location_source()
        except LocationUnavailable as e:
            logger.warning(f"Location sample failed: {e}")
            return self.status

        hours = self.hours_source() if self.hours_source else None
        try:
            decision = evaluate_checkin(self.clock(), latitude, longitude, self.zones_source(), hours)
        except GeofenceError as e:
            logger.warning(f"Discarding location sample: {e.message}")
            return self.status

        with self._lock:
            previous = self.status
            self.status = decision
            self.location = (latitude, longitude)
            self.samples += 1

        if self.on_change and self._changed(previous, decision):
            self.on_change(previous, decision)
        return decision

    @staticmethod
    def _changed(previous, current):
        if previous is None:
            return True
        return (previous.allowed != current.allowed or
                previous.geofence.in_zone != current.geofence.in_zone or
                previous.zone_name != current.zone_name)

    def _tick(self):
        if not self._running:
            return
        try:
            self.sample()
        except Exception:
            logger.exception("Location monitor tick failed")
        self._schedule()

    def _schedule(self):
        if not self._running:
            return
        self._timer = threading.Timer(self.interval, self._tick)
        self._timer.daemon = True
        self._timer.start()

    def start(self):
        if self._running:
            return
        self._running = True
        logger.info(f"Location monitor started, sampling every {self.interval}s")
        self._tick()

    def stop(self):
        self._running = False
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        logger.info("Location monitor stopped")

    @property
    def running(self):
        return self._running
