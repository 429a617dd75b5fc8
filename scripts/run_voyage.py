#!/usr/bin/env python3
"""
Run a headless airship voyage and print status reports.

Spawns an airship, loads fuel, sets the helm (or the autopilot toward a
target) and advances simulated time, printing a status block at a fixed
interval and a final report.
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from airship.config import TIME_WARP_STEPS, SimulationConfig
from airship.report import format_status, format_status_json
from airship.simulation import SimulationEngine, SimulationEventType


def main():
    parser = argparse.ArgumentParser(
        description="Run a headless airship voyage",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python scripts/run_voyage.py --lat 55.75 --lng 37.62 --fuel 2000 --throttle 5 --duration 3600
    python scripts/run_voyage.py --lat 0 --lng 0 --fuel 500 --target 0.009 0 --autopilot --warp 10
    python scripts/run_voyage.py --lat 0 --lng 0 --config voyage.json --wind-force 4 --wind-direction 90
        """,
    )

    # Spawn
    parser.add_argument("--lat", type=float, required=True, help="Spawn latitude (degrees)")
    parser.add_argument("--lng", type=float, required=True, help="Spawn longitude (degrees)")
    parser.add_argument("--config", help="JSON simulation config file")

    # Helm
    parser.add_argument("--fuel", type=float, default=1000.0, help="Fuel to load in liters (default: 1000)")
    parser.add_argument("--throttle", type=int, default=0, help="Throttle notch -5..5 (default: 0)")
    parser.add_argument("--rudder", type=float, default=0.0, help="Rudder -5..5 (default: 0)")
    parser.add_argument(
        "--target",
        type=float,
        nargs=2,
        metavar=("LAT", "LNG"),
        help="Navigation target",
    )
    parser.add_argument("--autopilot", action="store_true", help="Fly to the target on autopilot")

    # Environment
    parser.add_argument("--wind-force", type=float, help="Manual wind force 0..12")
    parser.add_argument("--wind-direction", type=float, default=0.0, help="Manual wind direction (degrees)")
    parser.add_argument("--seed", type=int, help="Random seed for the automatic wind")

    # Time
    parser.add_argument("--duration", type=float, default=600.0, help="Simulated seconds (default: 600)")
    parser.add_argument(
        "--warp",
        type=float,
        choices=TIME_WARP_STEPS,
        help="Time-warp factor",
    )
    parser.add_argument(
        "--report-every",
        type=float,
        default=300.0,
        help="Simulated seconds between status reports (default: 300)",
    )

    # Output
    parser.add_argument("--json", action="store_true", help="Print the final snapshot as JSON")
    parser.add_argument("--quiet", "-q", action="store_true", help="Quiet mode (only final report)")

    args = parser.parse_args()

    try:
        config = SimulationConfig.from_json(args.config) if args.config else SimulationConfig()
        if args.seed is not None:
            config.seed = args.seed
        if args.warp is not None:
            config.time_warp = args.warp

        engine = SimulationEngine.from_config(config, args.lat, args.lng)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not args.quiet:
        engine.add_event_callback(
            lambda event: print(f"  {event}")
            if event.event_type is not SimulationEventType.COMMAND_ACCEPTED else None
        )

    if args.wind_force is not None:
        engine.set_wind_mode("manual")
        engine.set_wind_manual(args.wind_force, args.wind_direction)

    engine.add_fuel(args.fuel)
    engine.set_anchor(False)

    if args.target:
        engine.set_target(*args.target)
    if args.autopilot:
        if not engine.set_autopilot(True):
            print("Error: autopilot needs a --target", file=sys.stderr)
            return 1
    else:
        engine.set_throttle(args.throttle)
        engine.set_rudder(args.rudder)

    elapsed = 0.0
    while elapsed < args.duration:
        span = min(args.report_every, args.duration - elapsed)
        engine.run(span, tick_interval_s=config.tick_interval_s)
        elapsed += span
        if not args.quiet and elapsed < args.duration:
            print(format_status(engine.get_snapshot()))

    snapshot = engine.get_snapshot()
    if args.json:
        print(format_status_json(snapshot))
    else:
        print(format_status(snapshot))

    return 0


if __name__ == "__main__":
    sys.exit(main())
