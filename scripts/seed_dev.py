import argparse
import logging

from rolltheworld.config import Settings
from rolltheworld.db.store import DrawStore
from rolltheworld.identity import hash_identity
from rolltheworld.roll import DrawEngine, LeaderboardService


def main() -> None:
    """Fill today's leaderboard of the development database with fake participants."""
    parser = argparse.ArgumentParser(description=main.__doc__)
    parser.add_argument("--participants", type=int, default=50)
    parser.add_argument("--population", type=int, default=None)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    settings = Settings.from_env()
    population = args.population or settings.population_today
    store = DrawStore(settings, population=lambda _day: population)
    engine = DrawEngine(store)

    for index in range(args.participants):
        engine.perform_daily_roll(hash_identity(f"seed-{index:04d}"))

    today = store.today()
    print(f"Top 10 for {today}:")
    for entry in LeaderboardService(store).top(today, limit=10):
        print(f"  #{entry.rank:>3}  {entry.value:>15,}  {entry.identity[:12]}")


if __name__ == "__main__":
    main()
