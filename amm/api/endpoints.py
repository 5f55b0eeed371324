"""API endpoints for pair lookup and swap quotes."""

import structlog
from fastapi import APIRouter, Depends

from amm.errors import PairNotFound
from amm.exchange import Exchange, get_default_exchange
from amm.models.api import AmountsInRequest, AmountsOutRequest, AmountsResponse, PairInfo
from amm.pair import Pair

logger = structlog.get_logger()

router = APIRouter()


def get_exchange() -> Exchange:
    """Dependency provider for the exchange instance.

    Override this in tests to inject a seeded exchange:
        app.dependency_overrides[get_exchange] = lambda: exchange

    Returns:
        The exchange whose factory and router serve the requests.
    """
    return get_default_exchange()


def _pair_info(pair: Pair) -> PairInfo:
    reserve0, reserve1, last_update_time = pair.get_reserves()
    return PairInfo(
        address=pair.address,
        token0=pair.token0,
        token1=pair.token1,
        reserve0=reserve0,
        reserve1=reserve1,
        total_supply=pair.total_supply,
        last_update_time=last_update_time,
    )


@router.get("/pairs")
async def list_pairs(exchange: Exchange = Depends(get_exchange)) -> list[PairInfo]:
    """List every registered pair in creation order."""
    pairs = []
    for address in exchange.factory.all_pairs():
        pair = exchange.factory.pair_at(address)
        if pair is not None:
            pairs.append(_pair_info(pair))
    return pairs


@router.get("/pairs/{token_a}/{token_b}")
async def get_pair(
    token_a: str,
    token_b: str,
    exchange: Exchange = Depends(get_exchange),
) -> PairInfo:
    """Look up the pair for two assets (order independent).

    Error Handling:
        - Malformed or identical assets: 400 via the AMMError handler
        - No such pair: 404 (PairNotFound)
    """
    pair = exchange.factory.pair_for(token_a, token_b)
    if pair is None:
        raise PairNotFound(f"No pair for {token_a}/{token_b}")
    return _pair_info(pair)


@router.post("/quote/amounts-out")
async def quote_amounts_out(
    request: AmountsOutRequest,
    exchange: Exchange = Depends(get_exchange),
) -> AmountsResponse:
    """Quote every hop of an exact-input swap."""
    amounts = exchange.router.get_amounts_out(int(request.amount_in), request.path)
    logger.debug("quoted_amounts_out", path=request.path, amounts=amounts)
    return AmountsResponse(amounts=amounts)


@router.post("/quote/amounts-in")
async def quote_amounts_in(
    request: AmountsInRequest,
    exchange: Exchange = Depends(get_exchange),
) -> AmountsResponse:
    """Quote every hop of an exact-output swap."""
    amounts = exchange.router.get_amounts_in(int(request.amount_out), request.path)
    logger.debug("quoted_amounts_in", path=request.path, amounts=amounts)
    return AmountsResponse(amounts=amounts)
