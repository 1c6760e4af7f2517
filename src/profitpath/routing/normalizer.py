"""Reshape aggregator quote payloads into canonical Quote objects.

Same-chain responses may carry a `quoteCompareList`; each compared route
becomes its own Quote with route-specific output amounts laid over the
shared top-level fields. Cross-chain responses always yield one Quote.
"""

import logging
from decimal import Decimal
from typing import Any, Optional

from profitpath.amounts import parse_amount, to_minimal_units
from profitpath.errors import UpstreamError, ValidationError
from profitpath.routing.base import Quote, QuoteKind, Token
from profitpath.routing.decimals import coerce_decimals
from profitpath.routing.okx import extract_data

logger = logging.getLogger(__name__)

ROUTER_DELIMITER = "--"


def _minimal_units(value: Any, field: str) -> str:
    """Validate an integer minimal-unit amount and return it as a string."""
    if isinstance(value, bool):
        raise UpstreamError(f"Malformed quote: {field} is not an integer amount", payload=value)
    if isinstance(value, int):
        return str(value)
    text = str(value).strip() if value is not None else ""
    if not text.isdigit():
        raise UpstreamError(f"Malformed quote: {field} is not an integer amount", payload=value)
    return text


def _optional_units(value: Any, field: str) -> Optional[str]:
    if value in (None, ""):
        return None
    return _minimal_units(value, field)


def _route_amount(route: dict) -> Any:
    return route.get("amountOut", route.get("toTokenAmount"))


def _compare_list_in_human_units(
    routes: list[dict], top_amount_out: str, decimals: Optional[int]
) -> bool:
    """Decide once, for the whole list, whether route amounts are human units.

    A fractional amount anywhere settles it. Otherwise the first route's
    output is compared in magnitude with the top-level minimal-unit output.
    """
    if decimals is None:
        return False
    amounts = [
        str(value).strip()
        for route in routes
        for value in (_route_amount(route), route.get("minAmountOut"))
        if value not in (None, "")
    ]
    if any("." in amount for amount in amounts):
        return True

    first = str(_route_amount(routes[0]) or "").strip()
    if not first.isdigit():
        return False
    raw = Decimal(first)
    top = Decimal(top_amount_out)
    if raw == 0 or top == 0:
        return False
    distance_as_units = abs(top.adjusted() - raw.adjusted())
    distance_as_human = abs(top.adjusted() - (raw.adjusted() + decimals))
    return distance_as_human < distance_as_units


def _route_units(value: Any, decimals: Optional[int], field: str, human: bool) -> Optional[str]:
    if value in (None, ""):
        return None
    if not human:
        return _minimal_units(value, field)
    try:
        if parse_amount(value) == 0:
            return "0"
        return to_minimal_units(value, decimals, price_probe=True)
    except ValidationError as e:
        raise UpstreamError(f"Malformed quote: {field} {e.message}", payload=value) from e


def _require(item: dict, field: str) -> Any:
    value = item.get(field)
    if value in (None, ""):
        raise UpstreamError(f"Malformed quote: missing {field}", payload=item)
    return value


def _first_record(data: Any) -> dict:
    record = data[0] if isinstance(data, list) else data
    if not isinstance(record, dict):
        raise UpstreamError("Malformed quote: unexpected data shape", payload=data)
    return record


def parse_token(raw: Any, chain: str) -> Token:
    """Build a Token from an aggregator token object.

    Same-chain payloads use `decimal`, cross-chain payloads `decimals`.
    """
    raw = raw if isinstance(raw, dict) else {}
    decimals = raw.get("decimals", raw.get("decimal"))
    return Token(
        symbol=str(raw.get("tokenSymbol", "")),
        name=str(raw.get("tokenName", "")),
        chain=str(chain),
        address=str(raw.get("tokenContractAddress", "")),
        decimals=coerce_decimals(decimals),
        logo_url=raw.get("tokenLogoUrl"),
    )


def router_contract_address(dex_router_list: Any) -> Optional[str]:
    """Contract address from the first router entry.

    The `router` field is a composite string; the address is the part
    before the first `--`.
    """
    if not isinstance(dex_router_list, list) or not dex_router_list:
        return None
    first = dex_router_list[0]
    router = first.get("router") if isinstance(first, dict) else None
    if not router:
        return None
    return str(router).split(ROUTER_DELIMITER)[0] or None


def describe_dex_routes(dex_router_list: Any) -> Optional[str]:
    """Human-readable summary of the DEXes used, in route order."""
    if not isinstance(dex_router_list, list):
        return None
    names: list[str] = []
    for entry in dex_router_list:
        for sub_route in (entry or {}).get("subRouterList") or []:
            for protocol in (sub_route or {}).get("dexProtocol") or []:
                name = (protocol or {}).get("dexName")
                if name and name not in names:
                    names.append(name)
    return " + ".join(names) or None


def parse_same_chain_quotes(payload: Any, chain: str) -> list[Quote]:
    """Normalize a same-chain quote response into candidate Quotes.

    The first element is the primary quote.

    Raises:
        UpstreamError: Error envelope or malformed quote fields
        NotFoundError: No route in the response
    """
    data = extract_data(payload, not_found="No route found for this token pair")
    main = _first_record(data)

    from_token = parse_token(main.get("fromToken"), chain)
    to_token = parse_token(main.get("toToken"), chain)
    amount_in = _minimal_units(_require(main, "fromTokenAmount"), "fromTokenAmount")
    top_amount_out = _minimal_units(_require(main, "toTokenAmount"), "toTokenAmount")

    dex_router_list = main.get("dexRouterList")
    router_address = router_contract_address(dex_router_list)
    route_summary = describe_dex_routes(dex_router_list)
    logger.debug(f"Router contract address: {router_address}")

    compare_list = main.get("quoteCompareList")
    routes = []
    if isinstance(compare_list, list):
        routes = [route for route in compare_list if isinstance(route, dict)]
    if routes:
        human = _compare_list_in_human_units(routes, top_amount_out, to_token.decimals)
        quotes = []
        for route in routes:
            amount_out = _route_units(
                _route_amount(route), to_token.decimals, "amountOut", human
            ) or top_amount_out
            min_amount_out = _route_units(
                route.get("minAmountOut"), to_token.decimals, "minAmountOut", human
            )
            quotes.append(
                Quote(
                    kind=QuoteKind.SAME_CHAIN,
                    from_token=from_token,
                    to_token=to_token,
                    amount_in=amount_in,
                    amount_out=amount_out,
                    min_amount_out=min_amount_out or amount_out,
                    router_address=router_address,
                    route_description=route.get("path") or route.get("dexName") or route_summary,
                    router_name=route.get("routerName") or route.get("dexName"),
                    raw={**main, **route},
                )
            )
        logger.info(f"Normalized {len(quotes)} compared routes on chain {chain}")
        return quotes

    return [
        Quote(
            kind=QuoteKind.SAME_CHAIN,
            from_token=from_token,
            to_token=to_token,
            amount_in=amount_in,
            amount_out=top_amount_out,
            min_amount_out=_optional_units(main.get("minAmountOut"), "minAmountOut"),
            router_address=router_address,
            route_description=route_summary,
            router_name=route_summary,
            raw=dict(main),
        )
    ]


def parse_cross_chain_quote(payload: Any, from_chain: str, to_chain: str) -> Quote:
    """Normalize a cross-chain quote response into exactly one Quote.

    Raises:
        UpstreamError: Error envelope or malformed quote fields
        NotFoundError: No bridge route in the response
    """
    data = extract_data(payload, not_found="No cross-chain route found")
    item = _first_record(data)

    routes = item.get("routerList")
    best = routes[0] if isinstance(routes, list) and routes and isinstance(routes[0], dict) else {}
    bridge = best.get("router") if isinstance(best.get("router"), dict) else {}

    amount_in = _minimal_units(_require(item, "fromTokenAmount"), "fromTokenAmount")
    raw_out = best.get("toTokenAmount") or item.get("toTokenAmount")
    if raw_out in (None, ""):
        raise UpstreamError("Malformed quote: missing toTokenAmount", payload=item)
    amount_out = _minimal_units(raw_out, "toTokenAmount")
    min_amount_out = _optional_units(
        best.get("minimumReceived") or item.get("minimumReceived"), "minimumReceived"
    )

    bridge_name = bridge.get("bridgeName")
    return Quote(
        kind=QuoteKind.CROSS_CHAIN,
        from_token=parse_token(item.get("fromToken"), item.get("fromChainId") or from_chain),
        to_token=parse_token(item.get("toToken"), item.get("toChainId") or to_chain),
        amount_in=amount_in,
        amount_out=amount_out,
        min_amount_out=min_amount_out,
        router_address=None,
        route_description=bridge_name,
        router_name=bridge_name,
        raw=dict(item),
    )
