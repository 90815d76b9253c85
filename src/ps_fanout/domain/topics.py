"""Topic names. Every fan-out topic is built here so routing never drifts."""

from src.ps_common.enums import LeaderboardKind

GENERAL = "general"
LIVE_SESSION = "live-session"


def player_topic(player_id: str) -> str:
    return f"player:{player_id}"


def user_topic(user_id: str) -> str:
    return f"user:{user_id}"


def portfolio_topic(user_id: str) -> str:
    return f"portfolio:{user_id}"


def leaderboard_topic(kind: LeaderboardKind | str) -> str:
    return f"leaderboard:{LeaderboardKind(kind).value}"
