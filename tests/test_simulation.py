import logging
import random

import pytest

from scheduler import Direction
from simulation import (
    ConfigurationError,
    ElevatorStatus,
    InvariantViolation,
    MetricsSnapshot,
    Person,
    Simulation,
    SimulationSettings,
)
from simulation.simulation import MetricsTracker


def quiet_settings(**overrides):
    """Settings with spawning switched off."""
    values = {"spawn_interval": -1, "random_seed": 1}
    values.update(overrides)
    return SimulationSettings(**values)


class TestSettings:
    @pytest.mark.parametrize(
        "overrides",
        [
            {"num_floors": 1},
            {"num_elevators": 0},
            {"update_frequency": 0},
            {"spawn_probability": 1.0},
            {"time_scale": 64.0},
            {"loading_wait_time": "long"},
        ],
    )
    def test_invalid_settings_are_refused(self, overrides):
        with pytest.raises(ConfigurationError):
            Simulation(SimulationSettings(**overrides))

    def test_from_dict_reads_building_and_parameters(self):
        settings = SimulationSettings.from_dict(
            {
                "random_seed": 3,
                "building": {
                    "num_floors": 6,
                    "elevator_count": 2,
                    "constraints": {"capacity": 8, "acceleration": 0.5},
                },
                "parameters": {"spawn_probability": 0.2, "time_scale": 2},
            }
        )

        assert (settings.num_floors, settings.num_elevators) == (6, 2)
        assert settings.elevator.capacity == 8
        assert settings.elevator.acceleration == 0.5
        assert settings.spawn_probability == 0.2
        assert settings.time_scale == 2
        assert settings.update_frequency == 20

    def test_from_dict_rejects_unknown_parameters(self):
        with pytest.raises(ConfigurationError, match="warp_factor"):
            SimulationSettings.from_dict({"parameters": {"warp_factor": 9}})


class TestParameters:
    def test_defaults_and_bounds_are_readable(self):
        sim = Simulation(quiet_settings())

        assert sim.value("loading_wait_time") == 3000
        assert sim.bounds("time_scale").maximum == 32
        assert sim.bounds("spawn_interval").minimum == -1

    def test_out_of_range_values_are_clamped_with_a_warning(self, caplog):
        sim = Simulation(quiet_settings())

        with caplog.at_level(logging.WARNING, logger="simulation.simulation"):
            applied = sim.adjust("spawn_probability", 1.5)

        assert applied == 0.99
        assert sim.spawner.spawn_probability == 0.99
        assert "clamped" in caplog.text

    def test_in_range_values_apply_silently(self, caplog):
        sim = Simulation(quiet_settings())

        with caplog.at_level(logging.WARNING, logger="simulation.simulation"):
            sim.adjust("group_member_probability", 0.25)

        assert sim.value("group_member_probability") == 0.25
        assert caplog.text == ""

    @pytest.mark.parametrize(
        "name, value",
        [
            ("warp_factor", 1),
            ("time_scale", "fast"),
            ("time_scale", True),
            ("time_scale", float("nan")),
        ],
    )
    def test_bad_adjustments_are_refused(self, name, value):
        sim = Simulation(quiet_settings())

        with pytest.raises(ConfigurationError):
            sim.adjust(name, value)
        assert sim.value("time_scale") == 1.0

    def test_tick_period_recalibrates_every_car(self):
        sim = Simulation(quiet_settings())

        sim.set_update_frequency(10)

        assert sim.tick_seconds == 0.01
        for elevator in sim.elevators:
            assert elevator.acceleration == pytest.approx(0.01 ** 2)

    def test_loading_wait_time_reaches_every_car(self):
        sim = Simulation(quiet_settings())

        sim.set_loading_wait_time(500)

        assert {e.wait_time for e in sim.elevators} == {500}

    def test_negative_spawn_interval_stops_spawning(self):
        sim = Simulation(SimulationSettings(spawn_probability=0.99, spawn_interval=20, random_seed=2))
        sim.set_spawn_interval(-1)

        sim.run(200)

        assert sim.spawned_count == 0

    def test_time_scale_change_rescales_pending_deadlines(self):
        sim = Simulation(quiet_settings(num_elevators=1, spawn_interval=100))
        car = sim.elevators[0]
        sim.request_elevator(0)
        sim.step()
        assert car.status is ElevatorStatus.WAITING
        assert car.wait_deadline == pytest.approx(3000)
        assert sim.spawner.next_spawn_at == pytest.approx(100)

        sim.set_time_scale(2)

        assert car.wait_deadline == pytest.approx(1510)
        assert sim.spawner.next_spawn_at == pytest.approx(60)
        assert car.acceleration == pytest.approx(0.04 ** 2)


class TestStep:
    def test_clocks_advance_by_one_tick(self):
        sim = Simulation(quiet_settings())
        sim.step()

        assert sim.tick == 1
        assert sim.elapsed_ms == 20
        assert sim.sim_time == pytest.approx(0.02)

    def test_time_scale_speeds_up_the_simulated_clock(self):
        sim = Simulation(quiet_settings(time_scale=2.0))
        sim.run(50)

        assert sim.elapsed_ms == 1000
        assert sim.sim_time == pytest.approx(2.0)

    def test_rider_is_delivered_end_to_end(self):
        sim = Simulation(quiet_settings(num_elevators=1))
        rider = Person(destination=5)
        sim.building.add_person(0, rider)
        sim.request_elevator(0, Direction.UP)

        sim.run(2000)

        assert sim.metrics.throughput == 1
        assert sim.average_wait_time == 0.0
        assert sim.metrics.ride_times[0] > 3.0
        assert sim.building.count_on_floor(0) == 0
        assert sim.elevators[0].occupants == []
        assert sim.elevators[0].position == 5.0

    def test_overfull_car_is_an_invariant_violation(self):
        sim = Simulation(quiet_settings(num_elevators=1))
        car = sim.elevators[0]
        car.capacity = 1
        car.occupants = [Person(destination=0), Person(destination=0)]

        with pytest.raises(InvariantViolation):
            sim.step()

    def test_same_seed_same_history(self):
        settings = dict(spawn_probability=0.3, random_seed=11)
        first = Simulation(SimulationSettings(**settings))
        second = Simulation(SimulationSettings(**settings))

        first.run(1000)
        second.run(1000)

        assert first.spawned_count == second.spawned_count > 0
        assert first.snapshot() == second.snapshot()

    def test_busy_building_keeps_its_invariants_and_drains(self):
        sim = Simulation(SimulationSettings(spawn_probability=0.1, random_seed=42))
        top = sim.settings.num_floors - 1

        for _ in range(1500):
            sim.step()
            for elevator in sim.elevators:
                assert len(elevator.occupants) <= elevator.capacity
                assert 0.0 <= elevator.position <= top
                for person in elevator.occupants:
                    assert (
                        person.destination in elevator.destinations
                        or person.destination == elevator.destination
                    )

        assert sim.spawned_count > 0
        sim.set_spawn_interval(-1)
        sim.run(30000)

        assert sim.metrics.throughput == sim.spawned_count
        assert all(len(floor) == 0 for floor in sim.building.floors)
        assert not sim.building.pending_calls


class TestHooks:
    def test_metrics_hook_fires_on_its_interval(self):
        sim = Simulation(quiet_settings(), metrics_hook_interval=5)
        received = []
        sim.on_event("metrics", received.append)

        sim.run(10)

        assert [payload["metrics"].time_step for payload in received] == [0, 5]
        assert isinstance(received[0]["metrics"], MetricsSnapshot)
        assert "elevators" in received[0]["building"]

    def test_arrival_hook_reports_each_spawn(self):
        sim = Simulation(
            SimulationSettings(spawn_probability=0.9, spawn_interval=20, random_seed=5)
        )
        arrivals = []
        sim.on_event("arrival", arrivals.append)

        sim.run(20)

        assert arrivals
        assert sum(event["count"] for event in arrivals) == sim.spawned_count


class TestMetricsTracker:
    def test_wait_and_ride_times_are_recorded_per_rider(self):
        tracker = MetricsTracker()
        early, late = Person(destination=3, created_at=1.0), Person(destination=4, created_at=2.0)

        tracker.record_boarding(early, 4.0)
        tracker.record_boarding(late, 4.0)
        tracker.record_alighting(late, 10.0)

        assert tracker.wait_times == [3.0, 2.0]
        assert tracker.ride_times == [6.0]
        assert tracker.throughput == 1
        assert tracker.average_wait() == 2.5

    def test_snapshot_interpolates_percentiles(self):
        tracker = MetricsTracker()
        tracker.wait_times = [0.0, 10.0]

        snapshot = tracker.snapshot(time_step=7, spawned=2)

        assert snapshot.wait_p95 == pytest.approx(9.5)
        assert snapshot.average_ride == 0.0
        assert (snapshot.time_step, snapshot.spawned) == (7, 2)

    def test_empty_tracker_reports_zeros(self):
        snapshot = MetricsTracker().snapshot(time_step=0)

        assert snapshot.average_wait == 0.0
        assert snapshot.ride_p95 == 0.0


def test_explicit_random_source_is_shared_by_cars_and_spawner():
    source = random.Random(8)
    sim = Simulation(quiet_settings(), rng=source)

    assert sim.spawner.rng is source
    assert all(elevator.rng is source for elevator in sim.elevators)
