"""
Command-line entry point for the Youth Basketball Playing-Time Scheduler.
Builds a schedule for a roster file and prints it with a validation report.

Roster file format (JSON): either a list of players or {"players": [...]}, e.g.
    [{"id": "p1", "name": "Ava", "grade": 4, "is_point_guard": true}, ...]
"""

import sys
import argparse
import json
from datetime import datetime
import os

# Add backend directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.models import Player
from app.core.logging_config import setup_logging
from app.services.attendance import player_maps
from app.services.scheduler import generate_schedule
from app.services.validator import ScheduleValidator


def load_roster(path: str):
    """Read players from a roster JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    rows = data.get("players", []) if isinstance(data, dict) else data
    return [Player.from_dict(row) for row in rows]


def main():
    """
    Main function to run the scheduling system.
    Coordinates roster loading, schedule building, validation, and output.
    """
    parser = argparse.ArgumentParser(
        description='Youth Basketball Playing-Time Scheduler - Generate a fair 8-period schedule'
    )
    parser.add_argument(
        '--input',
        required=True,
        help='Path to roster JSON file'
    )
    parser.add_argument(
        '--absent',
        nargs='*',
        default=[],
        help='Player ids not at the game'
    )
    parser.add_argument(
        '--output',
        help='Write the schedule JSON to this file'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose output'
    )

    args = parser.parse_args()
    setup_logging("DEBUG" if args.verbose else "WARNING")

    print("\n" + "=" * 80)
    print("YOUTH BASKETBALL PLAYING-TIME SCHEDULER")
    print("=" * 80)
    print(f"Started at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print("=" * 80)

    try:
        # Step 1: Load roster
        print("\n[STEP 1] Loading roster...")
        players = [p for p in load_roster(args.input) if p.active]
        absent = set(args.absent)
        attendance = [p.id for p in players if p.id not in absent]

        if not attendance:
            print("ERROR: No players available. Please check the roster file.")
            return 1

        print(f"  - {len(players)} players on roster")
        print(f"  - {len(attendance)} players at the game")

        # Step 2: Build schedule
        print("\n[STEP 2] Building schedule...")
        priority_map, point_guard_map = player_maps(players)
        schedule = generate_schedule(attendance, priority_map, point_guard_map)

        # Step 3: Validate schedule
        print("\n[STEP 3] Validating schedule...")
        validator = ScheduleValidator()
        validation_result = validator.validate_schedule(schedule, attendance, point_guard_map)

        print("\n" + "=" * 80)
        print("VALIDATION SUMMARY")
        print("=" * 80)
        print(validation_result.get_summary())
        for violation in validation_result.soft_constraint_violations:
            print(f"  - {violation.constraint_type}: {violation.description}")

        # Step 4: Report
        names = {p.id: p.name for p in players if p.name}
        print("\n" + validator.generate_schedule_report(schedule, attendance, names))

        if args.output:
            with open(args.output, "w", encoding="utf-8") as f:
                json.dump(schedule.to_dict(), f, indent=2)
            print(f"\nSchedule written to {args.output}")

        return 0

    except KeyboardInterrupt:
        print("\n\nScheduling interrupted by user.")
        return 1

    except (OSError, ValueError, KeyError) as e:
        print(f"\n\nERROR: Could not read roster:")
        print(f"{type(e).__name__}: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
