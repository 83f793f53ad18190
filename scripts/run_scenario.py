"""CLI for running headless elevator-bank scenarios defined in JSON configs."""
from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from scheduler import Direction
from simulation import Simulation, SimulationSettings


def build_simulation(config: Dict) -> Simulation:
    settings = SimulationSettings.from_dict(config)
    scheduler_name = config.get("scheduler", {}).get("name", "nearest_car")
    metrics_interval = config.get("metrics_hook_interval", 50)
    return Simulation(
        settings=settings,
        scheduler_name=scheduler_name,
        metrics_hook_interval=metrics_interval,
    )


def _apply_scheduled_events(simulation: Simulation, events: Iterable[Dict], current_tick: int) -> None:
    for event in events:
        if event.get("tick") != current_tick:
            continue
        kind = event.get("type")
        if kind == "adjust":
            simulation.adjust(event["name"], event["value"])
        elif kind == "call":
            direction = event.get("direction")
            simulation.request_elevator(event["floor"], Direction(direction) if direction else None)
        else:
            raise ValueError(f"Unknown scheduled event type {kind!r}")


def run_simulation(simulation: Simulation, config: Dict) -> List[Dict]:
    duration = config.get("duration", 3000)
    events = config.get("events", [])
    snapshots: List[Dict] = []

    simulation.on_event("metrics", lambda payload: snapshots.append(asdict(payload["metrics"])))
    for _ in range(duration):
        _apply_scheduled_events(simulation, events, simulation.tick)
        simulation.step()
    return snapshots


def write_report(path: Path, report: Dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w") as handle:
        json.dump(report, handle, indent=2)


def _print_summary(report: Dict) -> None:
    print(f"{report['scenario']}: {report['duration']} ticks, {report['simulated_seconds']:.1f} simulated s")
    if report["description"]:
        print(f"  {report['description']}")
    width = max(len(key) for key in report["final_metrics"])
    for key, value in report["final_metrics"].items():
        if isinstance(value, float):
            value = f"{value:.2f}"
        print(f"  {key.ljust(width)}  {value}")


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("config", type=Path, help="JSON scenario file")
    parser.add_argument("-o", "--output", type=Path, help="Write the full report to this JSON file")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    config = json.loads(args.config.read_text())
    simulation = build_simulation(config)
    snapshots = run_simulation(simulation, config)

    report = {
        "scenario": config.get("name", args.config.stem),
        "description": config.get("description"),
        "duration": simulation.tick,
        "simulated_seconds": simulation.sim_time,
        "final_metrics": asdict(simulation.metrics.snapshot(simulation.tick, simulation.spawned_count)),
        "final_state": simulation.snapshot(),
        "metrics_over_time": snapshots,
    }
    _print_summary(report)
    if args.output:
        write_report(args.output, report)
        print(f"Report written to {args.output}")


if __name__ == "__main__":
    main()
