"""WebSocket endpoint: relays fan-out messages and handles subscription commands.

Client -> server frames are JSON objects with an "action" key:
  subscribe / unsubscribe        {"action": "subscribe", "playerId": "..."}
  join_live_session / leave_live_session
  subscribe_leaderboard          {"action": "subscribe_leaderboard", "kind": "season"}
  subscribe_portfolio
  ping

Replies are queued on the connection like any other message, so a single
sender task owns the socket's write side.
"""

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from src.ps_account.application.schemas import PortfolioSchema
from src.ps_common.datetime_utils import to_epoch_ms, utc_now
from src.ps_common.enums import LeaderboardKind
from src.ps_common.errors import AppError, InvalidInputError
from src.ps_fanout.domain import topics
from src.ps_fanout.domain.messages import FlashMultiplierPayload
from src.ps_fanout.engine.hub import Connection
from src.ps_runtime.application.runtime import MarketRuntime

logger = logging.getLogger(__name__)

router = APIRouter()


def _event(name: str, data: Any) -> dict[str, Any]:
    return {"event": name, "data": data}


def _error(e: AppError) -> dict[str, Any]:
    return _event("error", {"code": e.code, "message": e.message})


async def handle_command(
    runtime: MarketRuntime, conn: Connection, frame: Any
) -> dict[str, Any] | None:
    """Apply one client command. Returns the reply frame, if any."""
    if not isinstance(frame, dict):
        return _error(InvalidInputError("frame must be a JSON object"))
    action = frame.get("action")
    hub = runtime.hub

    try:
        if action == "ping":
            return _event("pong", {"timestamp": to_epoch_ms(utc_now())})

        if action in ("subscribe", "unsubscribe"):
            player_id = frame.get("playerId")
            if not isinstance(player_id, str):
                raise InvalidInputError("playerId is required")
            if action == "subscribe":
                runtime.get_player(player_id)
                hub.join(conn, topics.player_topic(player_id))
                return _event("player_subscribed", {"playerId": player_id, "status": "subscribed"})
            hub.leave(conn, topics.player_topic(player_id))
            return _event("player_unsubscribed", {"playerId": player_id, "status": "unsubscribed"})

        if action == "join_live_session":
            hub.join(conn, topics.LIVE_SESSION)
            flashes = [
                FlashMultiplierPayload.from_domain(f).to_wire()
                for f in runtime.get_active_flash_multipliers()
            ]
            return _event("live_session_joined", {"flashMultipliers": flashes})

        if action == "leave_live_session":
            hub.leave(conn, topics.LIVE_SESSION)
            return _event("live_session_left", {})

        if action == "subscribe_leaderboard":
            try:
                kind = LeaderboardKind(frame.get("kind", "season"))
            except ValueError:
                raise InvalidInputError("kind must be season, live or daily") from None
            hub.join(conn, topics.leaderboard_topic(kind))
            entries = runtime.get_leaderboard(kind)
            return _event(
                "leaderboard_update",
                {"type": kind.value, "leaderboard": [e.to_wire() for e in entries],
                 "timestamp": to_epoch_ms(utc_now())},
            )

        if action == "subscribe_portfolio":
            hub.join(conn, topics.portfolio_topic(conn.user_id))
            portfolio = await runtime.get_portfolio(conn.user_id)
            return _event("portfolio_update", PortfolioSchema.from_domain(portfolio).to_wire())

    except AppError as e:
        return _error(e)

    return _error(InvalidInputError(f"unknown action {action!r}"))


async def _pump(websocket: WebSocket, conn: Connection) -> None:
    while True:
        message = await conn.next()
        if message is None:
            return
        await websocket.send_json(message)


async def serve_connection(runtime: MarketRuntime, websocket: WebSocket, token: str | None) -> None:
    """Run one accepted socket until the client leaves or sends an unreadable frame."""
    conn = runtime.hub.connect(token=token)
    runtime.remember(conn.identity)
    conn.push(
        _event(
            "connected",
            {
                "userId": conn.user_id,
                "username": conn.identity.username,
                "isGuest": conn.identity.is_guest,
            },
        )
    )
    sender = asyncio.create_task(_pump(websocket, conn))

    try:
        while True:
            frame = await websocket.receive_json()
            reply = await handle_command(runtime, conn, frame)
            if reply is not None:
                conn.push(reply)
    except WebSocketDisconnect:
        pass
    except (ValueError, KeyError):
        # ValueError: non-JSON text frame. KeyError: binary frame.
        logger.info("Connection %s sent a malformed frame, closing", conn.id)
    finally:
        runtime.hub.disconnect(conn)
        sender.cancel()
        try:
            await sender
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.warning("Sender for connection %s failed", conn.id, exc_info=True)


@router.websocket("/ws")
async def market_socket(
    websocket: WebSocket,
    token: str | None = Query(None),
) -> None:
    runtime: MarketRuntime = websocket.app.state.runtime
    await websocket.accept()
    await serve_connection(runtime, websocket, token)
