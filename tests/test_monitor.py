from datetime import datetime

import pytest

from hrflow.monitor import FileLocationSource, LocationMonitor, LocationUnavailable

ZONES = [{'name': 'HQ', 'latitude': 3.1390, 'longitude': 101.6869, 'radius': 100}]
INSIDE = (3.1392, 101.6869)
OUTSIDE = (3.1500, 101.6869)
WEDNESDAY_NOON = datetime(2024, 1, 10, 12, 0)


class ScriptedLocations:
    def __init__(self, *locations):
        self.locations = list(locations)

    def __call__(self):
        location = self.locations.pop(0)
        if location is None:
            raise LocationUnavailable('GPS lost')
        return location


def make_monitor(source, changes):
    return LocationMonitor(
        source, lambda: ZONES, interval=15,
        on_change=lambda previous, current: changes.append((previous, current)),
        clock=lambda: WEDNESDAY_NOON,
    )


def test_each_sample_recomputes_without_smoothing():
    changes = []
    monitor = make_monitor(ScriptedLocations(INSIDE, OUTSIDE, INSIDE), changes)

    assert monitor.sample().allowed
    assert not monitor.sample().allowed
    assert monitor.sample().allowed
    assert monitor.samples == 3
    assert len(changes) == 3
    assert changes[0][0] is None


def test_unchanged_status_does_not_notify():
    changes = []
    monitor = make_monitor(ScriptedLocations(INSIDE, (3.1391, 101.6869)), changes)
    monitor.sample()
    monitor.sample()
    assert len(changes) == 1
    assert monitor.location == (3.1391, 101.6869)


def test_failed_sample_keeps_previous_status():
    changes = []
    monitor = make_monitor(ScriptedLocations(INSIDE, None), changes)
    first = monitor.sample()
    assert monitor.sample() is first
    assert monitor.samples == 1


def test_out_of_range_sample_keeps_previous_status():
    changes = []
    monitor = make_monitor(ScriptedLocations(INSIDE, (95.0, 101.6869), (float('nan'), 101.6869)), changes)
    first = monitor.sample()
    assert monitor.sample() is first
    assert monitor.sample() is first
    assert monitor.samples == 1
    assert monitor.location == INSIDE
    assert len(changes) == 1


def test_start_samples_immediately_and_stops():
    monitor = make_monitor(ScriptedLocations(INSIDE), [])
    monitor.interval = 3600
    monitor.start()
    try:
        assert monitor.running
        assert monitor.samples == 1
        assert monitor.status.zone_name == 'HQ'
    finally:
        monitor.stop()
    assert not monitor.running


def test_working_hours_source_is_used():
    monitor = LocationMonitor(
        ScriptedLocations(INSIDE), lambda: ZONES,
        hours_source=lambda: {'start_time': '13:00', 'end_time': '17:00', 'work_days': [3]},
        clock=lambda: WEDNESDAY_NOON,
    )
    decision = monitor.sample()
    assert not decision.allowed
    assert decision.reasons == ['Work starts at 13:00']


def test_file_location_source_reads_last_line(tmp_path):
    path = tmp_path / 'gps.log'
    path.write_text('3.1,101.6\n3.1392, 101.6869\n\n')
    assert FileLocationSource(str(path))() == (3.1392, 101.6869)


def test_file_location_source_errors(tmp_path):
    with pytest.raises(LocationUnavailable):
        FileLocationSource(str(tmp_path / 'missing.log'))()

    empty = tmp_path / 'empty.log'
    empty.write_text('')
    with pytest.raises(LocationUnavailable):
        FileLocationSource(str(empty))()

    broken = tmp_path / 'broken.log'
    broken.write_text('north,east\n')
    with pytest.raises(LocationUnavailable):
        FileLocationSource(str(broken))()
