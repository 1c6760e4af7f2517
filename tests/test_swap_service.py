"""Tests for the swap orchestrator."""

from urllib.parse import parse_qsl

import pytest

from profitpath.errors import NotFoundError, ValidationError
from profitpath.routing.base import Quote, QuoteKind, SwapIntent, Token
from profitpath.routing.okx import (
    AGGREGATOR_APPROVE,
    AGGREGATOR_SWAP,
    AGGREGATOR_SWAP_INSTRUCTION,
    CROSS_CHAIN_BUILD_TX,
)
from profitpath.routing.signing import HEADER_SIGN, HEADER_TIMESTAMP, compute_signature
from profitpath.web.services.swap_service import (
    SwapOrchestrator,
    quote_from_decimals,
    quote_slippage,
)

WALLET = "0x" + "ab" * 20
USDC = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"
WETH = "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2"

SWAP_RESPONSE = {
    "code": "0",
    "data": [
        {
            "routerResult": {"fromTokenAmount": "1500000", "toTokenAmount": "500000000000000"},
            "tx": {"to": "0xrouter", "data": "0xdeadbeef", "value": "0", "minReceiveAmount": "497500000000000"},
        }
    ],
}

BRIDGE_RESPONSE = {
    "code": "0",
    "data": [
        {
            "fromTokenAmount": "1500000",
            "toTokenAmount": "1490000000000000000",
            "minmumReceive": "1480000000000000000",
            "router": {"bridgeName": "Stargate", "bridgeId": 211},
            "tx": {"to": "0xbridge", "data": "0xcafe", "value": "0"},
        }
    ],
}


def intent(**overrides) -> SwapIntent:
    values = dict(
        from_chain="1",
        to_chain="1",
        from_token_address=USDC,
        to_token_address=WETH,
        amount="1.5",
        user_wallet_address=WALLET,
    )
    values.update(overrides)
    return SwapIntent(**values)


def usdc_quote() -> Quote:
    return Quote(
        kind=QuoteKind.SAME_CHAIN,
        from_token=Token(symbol="USDC", chain="1", address=USDC, decimals=6),
        to_token=Token(symbol="WETH", chain="1", address=WETH, decimals=18),
        amount_in="1500000",
        amount_out="500000000000000",
    )


def query(request) -> dict[str, str]:
    return dict(parse_qsl(request.url.query.decode()))


class TestSwapIntentValidation:
    """Tests for validation before any network call."""

    def test_valid_address(self):
        assert intent().validate().user_wallet_address == WALLET

    def test_short_address_rejected(self):
        with pytest.raises(ValidationError) as exc:
            intent(user_wallet_address="0x123").validate()
        assert "0x123" in exc.value.message

    def test_missing_fields_listed(self):
        with pytest.raises(ValidationError) as exc:
            intent(amount="", to_token_address="").validate()
        assert "amount" in exc.value.message
        assert "toToken" in exc.value.message

    def test_receive_address_defaults_to_wallet(self):
        assert intent().effective_receive_address == WALLET
        assert intent(receive_address="0xother").effective_receive_address == "0xother"

    @pytest.mark.asyncio
    async def test_invalid_address_issues_no_call(self, aggregator, okx_client):
        orchestrator = SwapOrchestrator(okx_client)

        with pytest.raises(ValidationError):
            await orchestrator.build_swap(intent(user_wallet_address="0x123"))
        with pytest.raises(ValidationError):
            await orchestrator.build_bridge_transaction(
                intent(to_chain="56", user_wallet_address="0x123")
            )
        assert aggregator.requests == []


class TestQuoteHelpers:
    """Tests for reading decimals and slippage off a quote."""

    def test_decimals_from_quote(self):
        assert quote_from_decimals(usdc_quote()) == 6

    def test_decimals_from_quote_dict(self):
        assert quote_from_decimals({"fromToken": {"decimals": 8}}) == 8
        assert quote_from_decimals({"fromToken": {"decimal": "6"}}) == 6

    def test_decimals_default(self):
        assert quote_from_decimals(None) == 18
        assert quote_from_decimals({"fromToken": {}}) == 18

    def test_slippage_from_quote(self):
        assert quote_slippage({"slippage": "0.02"}) == "0.02"
        assert quote_slippage(None) is None


class TestApproval:
    """Tests for approval data retrieval."""

    @pytest.mark.asyncio
    async def test_returns_raw_data(self, aggregator, okx_client):
        approve = [{"data": "0x095ea7b3", "dexContractAddress": "0xspender", "gasLimit": "50000"}]
        aggregator.routes[AGGREGATOR_APPROVE] = {"code": "0", "data": approve}
        orchestrator = SwapOrchestrator(okx_client)

        data = await orchestrator.get_approval_data("1", USDC, "1500000")

        assert data == approve
        assert query(aggregator.last()) == {
            "chainIndex": "1",
            "tokenContractAddress": USDC,
            "approveAmount": "1500000",
        }

    @pytest.mark.asyncio
    async def test_requires_integer_amount(self, aggregator, okx_client):
        orchestrator = SwapOrchestrator(okx_client)

        with pytest.raises(ValidationError):
            await orchestrator.get_approval_data("1", USDC, "1.5")
        with pytest.raises(ValidationError):
            await orchestrator.get_approval_data("", USDC, "1")
        assert aggregator.requests == []


class TestBuildSwap:
    """Tests for same-chain swap construction."""

    @pytest.mark.asyncio
    async def test_evm_chain_uses_swap_endpoint(self, aggregator, okx_client):
        aggregator.routes[AGGREGATOR_SWAP] = SWAP_RESPONSE
        orchestrator = SwapOrchestrator(okx_client)

        tx = await orchestrator.build_swap(intent(), usdc_quote())

        assert aggregator.paths() == [AGGREGATOR_SWAP]
        params = query(aggregator.last())
        assert params["amount"] == "1500000"
        assert params["slippage"] == "0.5"
        assert params["userWalletAddress"] == WALLET
        assert tx.tx["data"] == "0xdeadbeef"
        assert tx.to_token_amount == "500000000000000"
        assert tx.minimum_receive == "497500000000000"

    @pytest.mark.asyncio
    async def test_non_evm_chain_uses_instruction_endpoint(self, aggregator, okx_client):
        aggregator.routes[AGGREGATOR_SWAP_INSTRUCTION] = {
            "code": "0",
            "data": {"instructionLists": [{"programId": "JUP"}], "routerResult": {}},
        }
        orchestrator = SwapOrchestrator(okx_client)

        tx = await orchestrator.build_swap(intent(from_chain="501", to_chain="501"), usdc_quote())

        assert aggregator.paths() == [AGGREGATOR_SWAP_INSTRUCTION]
        assert tx.tx["instructionLists"] == [{"programId": "JUP"}]

    @pytest.mark.asyncio
    async def test_decimals_fall_back_to_eighteen(self, aggregator, okx_client):
        aggregator.routes[AGGREGATOR_SWAP] = SWAP_RESPONSE
        orchestrator = SwapOrchestrator(okx_client)

        await orchestrator.build_swap(intent(amount="1"))

        assert query(aggregator.last())["amount"] == "1000000000000000000"

    @pytest.mark.asyncio
    async def test_build_dispatches_on_chains(self, aggregator, okx_client):
        aggregator.routes[AGGREGATOR_SWAP] = SWAP_RESPONSE
        aggregator.routes[CROSS_CHAIN_BUILD_TX] = BRIDGE_RESPONSE
        orchestrator = SwapOrchestrator(okx_client)

        await orchestrator.build(intent(), usdc_quote())
        await orchestrator.build(intent(to_chain="56"), usdc_quote())

        assert aggregator.paths() == [AGGREGATOR_SWAP, CROSS_CHAIN_BUILD_TX]


class TestBuildBridgeTransaction:
    """Tests for cross-chain transaction construction."""

    @pytest.mark.asyncio
    async def test_params_and_signature(self, aggregator, okx_client):
        aggregator.routes[CROSS_CHAIN_BUILD_TX] = BRIDGE_RESPONSE
        orchestrator = SwapOrchestrator(okx_client)

        tx = await orchestrator.build_bridge_transaction(intent(to_chain="56"), usdc_quote())

        request = aggregator.last()
        assert parse_qsl(request.url.query.decode()) == [
            ("fromChainIndex", "1"),
            ("toChainIndex", "56"),
            ("fromTokenAddress", USDC),
            ("toTokenAddress", WETH),
            ("amount", "1500000"),
            ("slippage", "0.01"),
            ("userWalletAddress", WALLET),
            ("receiveAddress", WALLET),
            ("sort", "1"),
        ]
        wire_path = request.url.raw_path.decode()
        assert request.headers[HEADER_SIGN] == compute_signature(
            request.headers[HEADER_TIMESTAMP], "GET", wire_path, "", "test-secret"
        )

        assert tx.tx == {"to": "0xbridge", "data": "0xcafe", "value": "0"}
        assert tx.router["bridgeName"] == "Stargate"
        assert tx.minimum_receive == "1480000000000000000"
        assert tx.to_dict()["bridgeInfo"] == {"bridgeName": "Stargate", "bridgeId": 211}

    @pytest.mark.asyncio
    async def test_slippage_precedence(self, aggregator, okx_client):
        aggregator.routes[CROSS_CHAIN_BUILD_TX] = BRIDGE_RESPONSE
        orchestrator = SwapOrchestrator(okx_client)
        quote = {"fromToken": {"decimals": 6}, "slippage": "0.03"}

        await orchestrator.build_bridge_transaction(intent(to_chain="56"), quote)
        assert query(aggregator.last())["slippage"] == "0.03"

        await orchestrator.build_bridge_transaction(intent(to_chain="56", slippage="0.1"), quote)
        assert query(aggregator.last())["slippage"] == "0.1"

    @pytest.mark.asyncio
    async def test_receive_address_passed_through(self, aggregator, okx_client):
        aggregator.routes[CROSS_CHAIN_BUILD_TX] = BRIDGE_RESPONSE
        orchestrator = SwapOrchestrator(okx_client)

        await orchestrator.build_bridge_transaction(
            intent(to_chain="501", receive_address="SoLaNaAddr"), usdc_quote()
        )

        assert query(aggregator.last())["receiveAddress"] == "SoLaNaAddr"

    @pytest.mark.asyncio
    async def test_missing_tx_is_not_found(self, aggregator, okx_client):
        aggregator.routes[CROSS_CHAIN_BUILD_TX] = {"code": "0", "data": [{"router": {}}]}
        orchestrator = SwapOrchestrator(okx_client)

        with pytest.raises(NotFoundError):
            await orchestrator.build_bridge_transaction(intent(to_chain="56"), usdc_quote())
