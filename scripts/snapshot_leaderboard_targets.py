from __future__ import annotations

import argparse
import json
import os
import sys

SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.abspath(os.path.join(SCRIPT_DIR, ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


def load_env_file(env_path: str) -> None:
    if not os.path.exists(env_path):
        return
    with open(env_path, "r", encoding="utf-8") as env_file:
        for line in env_file:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            os.environ.setdefault(key, value)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Write live achieved targets and ranks onto stored leaderboard targets."
    )
    parser.add_argument(
        "--env-file",
        default=os.path.join(PROJECT_ROOT, ".env"),
        help="Path to .env file.",
    )
    parser.add_argument("--month", type=int, default=None, help="Month 1-12 (default: current).")
    parser.add_argument("--year", type=int, default=None, help="Year (default: current).")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    load_env_file(os.path.abspath(args.env_file))

    from src.api.dependencies import get_leaderboard_service
    from src.core.config import get_settings
    from src.core.logging import configure_logging
    from src.shared.time import business_now

    configure_logging(get_settings().log_level)
    now = business_now()
    month = args.month or now.month
    year = args.year or now.year

    service = get_leaderboard_service()
    targets = service.snapshot_targets(month, year)
    print(
        json.dumps(
            {
                "period": f"{year}-{month:02d}",
                "updated": len(targets),
                "targets": [target.model_dump(by_alias=True) for target in targets],
            },
            indent=2,
            default=str,
        )
    )


if __name__ == "__main__":
    main()
