"""
Household Energy Simulator - Command Line Interface

Simulates a small household energy installation:
- Solar inverters following the sun
- An electric stove on a duty cycle
- Electric cars charging on wallboxes
- A three-phase smart meter

Usage:
    # Run a single tick
    python run_simulator.py --once

    # Tick continuously every 5 seconds
    python run_simulator.py --continuous --interval 5

    # Simulate a day on a simulated clock
    python run_simulator.py --historical --start 2024-06-21 --end 2024-06-22 --interval 60

    # List discoverable devices of a kind
    python run_simulator.py --discover wallbox

    # Use custom config file
    python run_simulator.py --config config.json --continuous
"""

import argparse
import logging
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
# Must happen before InfluxDB settings read their overrides
load_dotenv()

from energy_simulation.config import DEFAULT_CONFIG, SimulationConfig  # noqa: E402
from energy_simulation.engine import SimulationEngine, SimulationRunner  # noqa: E402
from energy_simulation.models import DeviceKind  # noqa: E402
from energy_simulation.registry import DeviceRegistry  # noqa: E402
from energy_simulation.storage import InfluxDBStorage  # noqa: E402

logger = logging.getLogger(__name__)


def print_data(data) -> None:
    """Print data as formatted JSON to stdout."""
    print(data.to_json())


def create_runner(config: SimulationConfig, storage: InfluxDBStorage | None = None) -> SimulationRunner:
    """Create a SimulationRunner from configuration."""
    engine = SimulationEngine.from_config(config)
    output_file = Path(config.output_file) if config.output_file else None

    return SimulationRunner(
        engine=engine,
        output_callback=print_data,
        output_file=output_file,
        storage=storage,
    )


def run_once(config: SimulationConfig, storage: InfluxDBStorage | None = None) -> None:
    """Run a single tick."""
    create_runner(config, storage).run_once()


def run_continuous(
    config: SimulationConfig,
    duration: int | None = None,
    storage: InfluxDBStorage | None = None,
) -> None:
    """Tick continuously."""
    runner = create_runner(config, storage)
    runner.run_continuous(
        interval_seconds=config.interval_seconds,
        duration_seconds=duration,
    )


def run_historical(
    config: SimulationConfig,
    start: datetime,
    end: datetime,
    storage: InfluxDBStorage | None = None,
) -> None:
    """Simulate a time range on a simulated clock."""
    engine = SimulationEngine.from_config(config)
    results = engine.run_historical(start, end, config.interval_seconds)

    logger.info("Simulated %d ticks from %s to %s", len(results), start, end)

    if storage is not None:
        storage.write_batch(results)

    if config.output_file:
        output_path = Path(config.output_file)
        with open(output_path, "w") as f:
            for r in results:
                f.write(r.to_json(indent=None) + "\n")
        logger.info("Data written to %s", output_path)
    else:
        for r in results:
            print(r.to_json())


def discover(config: SimulationConfig, kind: DeviceKind) -> None:
    """Print the device descriptors discovery offers for ``kind``."""
    registry = DeviceRegistry(discovery_result_count=config.discovery_result_count)
    for descriptor in registry.discover(kind):
        print(f"{descriptor.kind.value}\t{descriptor.title}")


def generate_sample_config(output_path: Path) -> None:
    """Generate a sample configuration file."""
    DEFAULT_CONFIG.to_file(output_path)
    logger.info("Sample config written to %s", output_path)


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    parser = argparse.ArgumentParser(
        description="Household Energy Simulator - Generate plausible household energy telemetry",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    # Mode selection
    mode_group = parser.add_mutually_exclusive_group(required=True)
    mode_group.add_argument(
        "--once",
        action="store_true",
        help="Run a single tick and exit",
    )
    mode_group.add_argument(
        "--continuous",
        action="store_true",
        help="Tick continuously at the configured interval",
    )
    mode_group.add_argument(
        "--historical",
        action="store_true",
        help="Simulate a time range on a simulated clock",
    )
    mode_group.add_argument(
        "--discover",
        choices=[kind.value for kind in DeviceKind],
        help="List discoverable devices of a kind",
    )
    mode_group.add_argument(
        "--generate-config",
        action="store_true",
        help="Generate a sample configuration file",
    )

    # Configuration options
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration JSON file",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Seconds covered by one tick (default: 5)",
    )
    parser.add_argument(
        "--duration",
        type=int,
        help="Duration in seconds for continuous mode (default: run forever)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Output file path (JSON lines format)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Random seed for reproducibility",
    )

    # Historical mode options
    parser.add_argument(
        "--start",
        type=str,
        help="Start of the simulated range (YYYY-MM-DD starts at midnight, or YYYY-MM-DD HH:MM)",
    )
    parser.add_argument(
        "--end",
        type=str,
        help="End of the simulated range (YYYY-MM-DD is exclusive/ends at midnight, or YYYY-MM-DD HH:MM for exact time)",
    )

    # Verbosity
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress log output",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()

    # Configure logging level
    if args.quiet:
        logging.getLogger().setLevel(logging.WARNING)
    elif args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    # Load or create configuration
    if args.config and not args.generate_config:
        if not args.config.exists():
            parser.error(f"Configuration file not found: {args.config}")
        config = SimulationConfig.from_file(args.config)
        logger.info("Loaded config from %s", args.config)
    else:
        config = SimulationConfig()

    # Apply command line overrides (only if explicitly provided)
    if args.interval is not None:
        if args.interval <= 0:
            parser.error("--interval must be positive")
        config.interval_seconds = args.interval
    if args.output is not None:
        config.output_file = str(args.output)
    if args.seed is not None:
        config.seed = args.seed

    if args.generate_config:
        generate_sample_config(args.config or Path("config.json"))
        return

    if args.discover:
        discover(config, DeviceKind(args.discover))
        return

    with InfluxDBStorage(config.influxdb) as storage:
        if args.once:
            run_once(config, storage)

        elif args.continuous:
            run_continuous(config, args.duration, storage)

        elif args.historical:
            if not args.start or not args.end:
                parser.error("--historical requires --start and --end dates")

            def parse_date(date_str: str) -> datetime:
                """Parse a date string in YYYY-MM-DD or YYYY-MM-DD HH:MM[:SS] format (UTC)."""
                try:
                    dt = datetime.fromisoformat(date_str)
                except ValueError:
                    parser.error(
                        f"Invalid date format {date_str!r}. Use YYYY-MM-DD or YYYY-MM-DD HH:MM"
                    )
                    raise  # pragma: no cover - parser.error exits

                if dt.tzinfo is None:
                    dt = dt.replace(tzinfo=timezone.utc)
                return dt

            start = parse_date(args.start)
            end = parse_date(args.end)

            # A date-only end is exclusive: stop one interval before midnight
            if " " not in args.end and "T" not in args.end:
                end = end - timedelta(seconds=config.interval_seconds)

            if end < start:
                parser.error("--end must be after --start for historical mode")

            run_historical(config, start, end, storage)


if __name__ == "__main__":
    main()
