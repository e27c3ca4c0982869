"""CLI for replaying liftdispatch scenarios defined in JSON configs."""
from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Dict, Optional

from pydantic import ValidationError

from control import ScenarioConfig, run_scenario


def save_results(output_path: Optional[Path], data: Dict) -> None:
    if not output_path:
        return
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(data, indent=2))


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("config", type=Path, help="Path to a JSON scenario configuration file")
    parser.add_argument(
        "--output",
        type=Path,
        help="Optional file path to write the replay results as JSON",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity for dispatch decisions",
    )
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    try:
        config = ScenarioConfig.model_validate_json(args.config.read_text())
    except ValidationError as exc:
        parser.error(f"invalid scenario {args.config}:\n{exc}")
    results = run_scenario(config)

    save_results(args.output, results)

    print(f"Scenario: {results['scenario']}")
    if results["description"]:
        print(results["description"])
    print(f"Simulated time: {results['elapsed_seconds']:.1f}s")
    print(f"Riders boarded: {results['riders_boarded']} (still waiting: {results['riders_waiting']})")
    print(f"Average wait: {results['average_wait']:.1f}s")
    print("Elevators:")
    for elevator in results["state"]["elevators"]:
        print(f"  #{elevator['id']}: floor {elevator['current_floor']} ({elevator['state']})")
    if results["state"]["pending"]:
        print(f"Pending calls: {results['state']['pending']}")
    if args.output:
        print(f"Saved results to {args.output}")


if __name__ == "__main__":
    main()
