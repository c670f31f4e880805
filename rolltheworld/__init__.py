"""Daily draw, ranking and leaderboard engine."""
