"""Leaderboard rankings over in-memory portfolios.

season: total portfolio value. live: P&L of the live book, only users holding
live positions. daily: today's P&L.
"""

from collections.abc import Iterable, Mapping

from src.ps_account.application.schemas import LeaderboardEntrySchema
from src.ps_account.domain.models import Portfolio
from src.ps_common.enums import LeaderboardKind
from src.ps_common.money import round_money

DEFAULT_LIMITS = {
    LeaderboardKind.SEASON: 50,
    LeaderboardKind.LIVE: 20,
    LeaderboardKind.DAILY: 10,
}


def _percent(pl: float, base: float) -> float:
    return round_money(pl / base * 100) if base > 0 else 0.0


def build_leaderboard(
    portfolios: Iterable[Portfolio],
    kind: LeaderboardKind,
    usernames: Mapping[str, str] | None = None,
    limit: int | None = None,
) -> list[LeaderboardEntrySchema]:
    usernames = usernames or {}
    rows: list[tuple[float, str, float, float, float]] = []  # (sort key, user, value, pl, pl%)

    for p in portfolios:
        if kind is LeaderboardKind.LIVE:
            if not p.live_holdings:
                continue
            value = p.live_value
            pl = p.live_pl
            rows.append((pl, p.user_id, value, pl, _percent(pl, value - pl)))
        elif kind is LeaderboardKind.DAILY:
            rows.append((p.todays_pl, p.user_id, p.total_value, p.todays_pl,
                         _percent(p.todays_pl, p.total_value)))
        else:
            rows.append((p.total_value, p.user_id, p.total_value, p.todays_pl,
                         _percent(p.todays_pl, p.total_value)))

    # Ties broken by user id so rankings are stable between broadcasts
    rows.sort(key=lambda r: (-r[0], r[1]))
    limit = limit if limit is not None else DEFAULT_LIMITS[kind]

    return [
        LeaderboardEntrySchema(
            rank=i,
            user_id=user_id,
            username=usernames.get(user_id, user_id),
            portfolio_value=value,
            todays_pl=pl,
            todays_pl_percent=pct,
        )
        for i, (_, user_id, value, pl, pct) in enumerate(rows[:limit], start=1)
    ]
