"""PlayerRegistry — owns the live state of every tradable player.

All price mutations go through update_price() so that the 24h change fields
and the bounded price history never drift from current_price.

Note: "24h change" is the change since the previous mutation, not a rolling
24 hour window. Clients have always read it that way.
"""

import logging
import random
from collections.abc import Callable, Iterable
from datetime import datetime

from src.ps_common.datetime_utils import utc_now
from src.ps_common.errors import PlayerNotFoundError
from src.ps_common.money import percent_change, round_money
from src.ps_market.domain.models import PRICE_HISTORY_CAPACITY, Player, PriceChange, PricePoint

logger = logging.getLogger(__name__)


class PlayerRegistry:
    def __init__(
        self,
        players: Iterable[Player] = (),
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._players: dict[str, Player] = {}
        self._rng = rng or random.Random()
        self._clock = clock
        for player in players:
            self.add(player)

    def add(self, player: Player) -> None:
        self._players[player.id] = player

    def get(self, player_id: str) -> Player | None:
        return self._players.get(player_id)

    def require(self, player_id: str) -> Player:
        player = self._players.get(player_id)
        if player is None:
            raise PlayerNotFoundError(player_id)
        return player

    def list_all(self) -> list[Player]:
        return list(self._players.values())

    def list_active(self) -> list[Player]:
        return [p for p in self._players.values() if p.is_active]

    def find_by_name(self, name: str) -> Player | None:
        wanted = name.casefold()
        for player in self._players.values():
            if player.name.casefold() == wanted:
                return player
        return None

    def __len__(self) -> int:
        return len(self._players)

    def __contains__(self, player_id: object) -> bool:
        return player_id in self._players

    def update_price(self, player_id: str, new_price: float) -> PriceChange | None:
        """Set a player's price and refresh derived fields. Unknown id -> None."""
        player = self._players.get(player_id)
        if player is None:
            logger.debug("update_price ignored for unknown player %s", player_id)
            return None

        old_price = player.current_price
        new_price = round_money(new_price)
        player.current_price = new_price
        player.price_change_24h = round_money(new_price - old_price)
        player.price_change_percent_24h = percent_change(old_price, new_price)

        player.price_history.append(
            PricePoint(
                timestamp=self._clock(),
                price=new_price,
                volume=self._rng.randint(500, 5499),
            )
        )
        if len(player.price_history) > PRICE_HISTORY_CAPACITY:
            del player.price_history[:-PRICE_HISTORY_CAPACITY]

        return PriceChange(
            player_id=player_id,
            old_price=old_price,
            new_price=new_price,
            change=player.price_change_24h,
            change_percent=player.price_change_percent_24h,
        )

    def prices(self) -> dict[str, float]:
        return {pid: p.current_price for pid, p in self._players.items()}
