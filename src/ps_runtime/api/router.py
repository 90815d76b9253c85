"""Market REST API. Trading and portfolio endpoints require a JWT."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Request

from src.ps_account.application.schemas import PortfolioSchema
from src.ps_common.enums import AccountBook, LeaderboardKind, LimitOrderStatus, TradeDirection
from src.ps_common.response import ApiResponse, success_response
from src.ps_events.domain.models import FlashMultiplier
from src.ps_fanout.domain.messages import FlashMultiplierPayload
from src.ps_fanout.engine.hub import Identity
from src.ps_gateway.auth.dependencies import get_current_identity
from src.ps_market.application.schemas import PlayerSchema
from src.ps_runtime.application.runtime import MarketRuntime
from src.ps_trading.application.schemas import (
    LimitOrderRequest,
    LimitOrderSchema,
    MarketImpactSchema,
    ShockRequest,
    TradeExecutionSchema,
    TradePageSchema,
    TradeRequest,
    TradeSchema,
    TradeVolumeSchema,
)

router = APIRouter(tags=["market"])


def get_runtime(request: Request) -> MarketRuntime:
    return request.app.state.runtime


async def current_identity(
    identity: Annotated[Identity, Depends(get_current_identity)],
    runtime: Annotated[MarketRuntime, Depends(get_runtime)],
) -> Identity:
    runtime.remember(identity)
    return identity


RuntimeDep = Annotated[MarketRuntime, Depends(get_runtime)]
IdentityDep = Annotated[Identity, Depends(current_identity)]


def _ok(request: Request, data: Any, message: str = "success") -> ApiResponse:
    return success_response(data, message, getattr(request.state, "request_id", None))


def _flash_wire(flash: FlashMultiplier) -> dict[str, Any]:
    return FlashMultiplierPayload.from_domain(flash).to_wire()


# ---------------------------------------------------------------------------
# Players / market
# ---------------------------------------------------------------------------


@router.get("/players")
async def list_players(
    runtime: RuntimeDep,
    request: Request,
    active: bool = Query(False, description="Only players currently in a game"),
    history: bool = Query(True, description="Include price history"),
) -> ApiResponse:
    players = runtime.get_players(active_only=active)
    return _ok(request, [PlayerSchema.from_domain(p, include_history=history).to_wire() for p in players])


@router.get("/players/{player_id}")
async def get_player(player_id: str, runtime: RuntimeDep, request: Request) -> ApiResponse:
    return _ok(request, PlayerSchema.from_domain(runtime.get_player(player_id)).to_wire())


@router.get("/market/snapshot")
async def market_snapshot(runtime: RuntimeDep, request: Request) -> ApiResponse:
    return _ok(request, runtime.market_snapshot().to_wire())


@router.get("/market/flash-multipliers")
async def flash_multipliers(runtime: RuntimeDep, request: Request) -> ApiResponse:
    return _ok(request, [_flash_wire(f) for f in runtime.get_active_flash_multipliers()])


@router.post("/market/players/{player_id}/shock")
async def trigger_shock(
    player_id: str,
    body: ShockRequest,
    identity: IdentityDep,
    runtime: RuntimeDep,
    request: Request,
) -> ApiResponse:
    applied = runtime.trigger_shock(player_id, body.multiplier, body.reason)
    player = runtime.get_player(player_id)
    return _ok(request, {"applied": applied, "currentPrice": player.current_price})


@router.post("/live-session")
async def start_live_session(identity: IdentityDep, runtime: RuntimeDep, request: Request) -> ApiResponse:
    count = runtime.start_live_session()
    return _ok(request, {"portfolios": count}, "live session restarted")


# ---------------------------------------------------------------------------
# Trades
# ---------------------------------------------------------------------------


@router.post("/trades")
async def execute_trade(
    body: TradeRequest,
    identity: IdentityDep,
    runtime: RuntimeDep,
    request: Request,
) -> ApiResponse:
    result = await runtime.execute_trade(
        identity.user_id, body.player_id, body.shares, body.direction, body.account_book
    )
    if not result.success or result.trade is None:
        raise result.error
    data = TradeExecutionSchema(
        trade=TradeSchema.from_domain(result.trade),
        market_impact=MarketImpactSchema.from_domain(result.impact) if result.impact else None,
    )
    return _ok(request, data.to_wire(), "trade executed")


@router.get("/trades/history")
async def trade_history(
    identity: IdentityDep,
    runtime: RuntimeDep,
    request: Request,
    account_type: AccountBook | None = Query(None, alias="accountType"),
    trade_type: TradeDirection | None = Query(None, alias="type"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    page_data = runtime.get_trade_history(identity.user_id, account_type, trade_type, page, limit)
    return _ok(request, TradePageSchema.from_domain(page_data).to_wire())


@router.get("/trades/recent")
async def recent_trades(
    runtime: RuntimeDep,
    request: Request,
    limit: int = Query(10, ge=1, le=100),
) -> ApiResponse:
    return _ok(request, [TradeSchema.from_domain(t).to_wire() for t in runtime.get_recent_trades(limit)])


@router.get("/trades/volume/{player_id}")
async def trade_volume(
    player_id: str,
    runtime: RuntimeDep,
    request: Request,
    timeframe: str = Query("24h", description="1h, 24h, 7d or 30d"),
) -> ApiResponse:
    volume = runtime.get_trade_volume(player_id, timeframe)
    return _ok(request, TradeVolumeSchema.from_domain(volume).to_wire())


# ---------------------------------------------------------------------------
# Limit orders
# ---------------------------------------------------------------------------


@router.post("/orders/limit")
async def place_limit_order(
    body: LimitOrderRequest,
    identity: IdentityDep,
    runtime: RuntimeDep,
    request: Request,
) -> ApiResponse:
    order = await runtime.place_limit_order(
        identity.user_id,
        body.player_id,
        body.direction,
        body.shares,
        body.limit_price,
        body.account_book,
    )
    return _ok(request, LimitOrderSchema.from_domain(order).to_wire(), "limit order placed")


@router.get("/orders/limit")
async def list_limit_orders(
    identity: IdentityDep,
    runtime: RuntimeDep,
    request: Request,
    status: LimitOrderStatus | None = Query(None),
) -> ApiResponse:
    orders = runtime.list_limit_orders(identity.user_id, status)
    return _ok(request, [LimitOrderSchema.from_domain(o).to_wire() for o in orders])


@router.delete("/orders/limit/{order_id}")
async def cancel_limit_order(
    order_id: str,
    identity: IdentityDep,
    runtime: RuntimeDep,
    request: Request,
) -> ApiResponse:
    order = runtime.cancel_limit_order(identity.user_id, order_id)
    return _ok(request, LimitOrderSchema.from_domain(order).to_wire(), "limit order cancelled")


# ---------------------------------------------------------------------------
# Portfolio / leaderboard
# ---------------------------------------------------------------------------


@router.get("/portfolio")
async def get_portfolio(identity: IdentityDep, runtime: RuntimeDep, request: Request) -> ApiResponse:
    portfolio = await runtime.get_portfolio(identity.user_id)
    return _ok(request, PortfolioSchema.from_domain(portfolio).to_wire())


@router.get("/portfolio/performance")
async def get_performance(identity: IdentityDep, runtime: RuntimeDep, request: Request) -> ApiResponse:
    performance = await runtime.get_portfolio_performance(identity.user_id)
    return _ok(request, performance.to_wire())


@router.get("/leaderboard/{kind}")
async def get_leaderboard(
    kind: LeaderboardKind,
    runtime: RuntimeDep,
    request: Request,
    limit: int | None = Query(None, ge=1, le=100),
) -> ApiResponse:
    entries = runtime.get_leaderboard(kind, limit)
    return _ok(request, [e.to_wire() for e in entries])
