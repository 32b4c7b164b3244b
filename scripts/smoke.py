# scripts/smoke.py
"""
Smoke Test Script for the SportEvents loader against a live events API.

Runs every loading strategy once against a throwaway cache directory, so the
user's real cache is never touched, and prints what each strategy served.

Usage
-----
1. Against the server configured in `.env` (SPORTEVENTS_API_URL):
    $ uv run python scripts/smoke.py

2. Against another server, with stale-cache simulation:
    $ uv run python scripts/smoke.py --url http://192.168.0.10:8000 --stale
"""

import argparse
import logging
import sys
import tempfile
from datetime import UTC, datetime, timedelta
from pathlib import Path

from dotenv import load_dotenv

from sportevents.cache import EventCache
from sportevents.core.errors import EventsError
from sportevents.core.settings import load_settings
from sportevents.loader import EventLoader, LoadStrategy
from sportevents.remote import HttpEventSource

# --------------------------------------------------------------------------- #
# Environment Setup
# --------------------------------------------------------------------------- #
env_path = Path(".env")
if env_path.exists():
    load_dotenv(env_path)
    print("✅ Loaded .env file")
else:
    print("⚠️  Warning: No .env file found! Using the default API URL.")

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)


def main() -> None:
    """Execute the smoke test workflow."""
    parser = argparse.ArgumentParser(description="Run SportEvents Smoke Test")
    parser.add_argument("--url", "-u", type=str, help="Base URL of the events API")
    parser.add_argument(
        "--stale", action="store_true", help="Pretend the cache was written two hours ago"
    )
    args = parser.parse_args()

    settings = load_settings()
    source = HttpEventSource.from_settings(settings)
    if args.url:
        source.base_url = args.url
    print(f"\n🌐 Endpoint: {source.events_url}")

    offset = timedelta(hours=2) if args.stale else timedelta(0)

    with tempfile.TemporaryDirectory(prefix="sportevents-smoke-") as tmp:
        cache = EventCache(
            Path(tmp),
            freshness_window=settings.freshness_window,
            clock=lambda: datetime.now(UTC) + offset,
        )
        with EventLoader(cache, source) as loader:
            loader.channel.subscribe(
                lambda events: print(f"  🔄 background refresh delivered {len(events)} events")
            )
            for strategy in LoadStrategy:
                print(f"\n... load({strategy.value}) ...")
                try:
                    result = loader.load(strategy)
                except EventsError as exc:
                    print(f"  ❌ {type(exc).__name__}: {exc}")
                    continue
                print(f"  ✅ {len(result.events)} events from {result.source.value}")
                if result.notice:
                    print(f"  ⚠️  {result.notice}")
            loader.wait_for_background()

        print("\n" + "=" * 60)
        print(f"📦 {cache.status().description}")
        print(f"💾 Snapshot was at: {cache.path}")


if __name__ == "__main__":
    main()
