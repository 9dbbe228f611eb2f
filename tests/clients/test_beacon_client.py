"""Tests for the beacon node client."""

from typing import TYPE_CHECKING

import httpx
import pytest

from balance_exporter.clients.beacon import BeaconNodeClient
from balance_exporter.helpers.errors import (
    NotFoundError,
    UpstreamMalformedError,
    UpstreamUnavailableError,
)
from tests.payloads import CL_NODE_URL, PUBKEY_A


if TYPE_CHECKING:
    from pytest_httpx import HTTPXMock


HEAD_URL = f"{CL_NODE_URL}/eth/v2/beacon/blocks/head"


def validator_url(slot: int, public_key: str) -> str:
    return f"{CL_NODE_URL}/eth/v1/beacon/states/{slot}/validators/{public_key}"


class TestBeaconNodeClientInit:
    """Tests for BeaconNodeClient construction."""

    def test_strips_trailing_slash(self) -> None:
        client = BeaconNodeClient("http://localhost:3500/", timeout=5.0)

        assert client.base_url == "http://localhost:3500"
        assert client.timeout == 5.0

    @pytest.mark.parametrize("url", ["", None])
    def test_empty_url_raises(self, url: str | None) -> None:
        with pytest.raises(ValueError, match="cannot be empty"):
            BeaconNodeClient(url)  # type: ignore[arg-type]


class TestGetHeadSlot:
    """Tests for get_head_slot."""

    @pytest.mark.asyncio
    async def test_returns_slot(
        self,
        httpx_mock: "HTTPXMock",
        http_client: httpx.AsyncClient,
        beacon: BeaconNodeClient,
    ) -> None:
        """Test that the decimal string slot is parsed."""
        httpx_mock.add_response(
            url=HEAD_URL,
            json={"version": "deneb", "data": {"message": {"slot": "1000"}}},
        )

        assert await beacon.get_head_slot(http_client) == 1000

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"data": None},
            {"data": {"message": {}}},
            {"data": {"message": {"slot": "abc"}}},
            {"data": {"message": {"slot": "-3"}}},
        ],
    )
    async def test_missing_slot_raises_malformed(
        self,
        httpx_mock: "HTTPXMock",
        http_client: httpx.AsyncClient,
        beacon: BeaconNodeClient,
        payload: dict,
    ) -> None:
        httpx_mock.add_response(url=HEAD_URL, json=payload)

        with pytest.raises(UpstreamMalformedError, match="no usable slot"):
            await beacon.get_head_slot(http_client)

    @pytest.mark.asyncio
    async def test_unreachable_raises_unavailable(
        self,
        httpx_mock: "HTTPXMock",
        http_client: httpx.AsyncClient,
        beacon: BeaconNodeClient,
    ) -> None:
        httpx_mock.add_exception(httpx.ConnectError("Connection refused"))

        with pytest.raises(UpstreamUnavailableError):
            await beacon.get_head_slot(http_client)


class TestGetValidator:
    """Tests for get_validator."""

    @pytest.mark.asyncio
    async def test_returns_index_and_balance(
        self,
        httpx_mock: "HTTPXMock",
        http_client: httpx.AsyncClient,
        beacon: BeaconNodeClient,
    ) -> None:
        httpx_mock.add_response(
            url=validator_url(999, PUBKEY_A),
            json={
                "execution_optimistic": False,
                "data": {
                    "index": "5",
                    "balance": "32000000000",
                    "status": "active_ongoing",
                    "validator": {"pubkey": PUBKEY_A},
                },
            },
        )

        state = await beacon.get_validator(http_client, 999, PUBKEY_A)

        assert state.index == 5
        assert state.balance == 32_000_000_000

    @pytest.mark.asyncio
    async def test_adds_0x_prefix(
        self,
        httpx_mock: "HTTPXMock",
        http_client: httpx.AsyncClient,
        beacon: BeaconNodeClient,
    ) -> None:
        """Test that keys without a prefix are requested with one."""
        httpx_mock.add_response(
            url=validator_url(42, PUBKEY_A),
            json={"data": {"index": "1", "balance": "0"}},
        )

        state = await beacon.get_validator(http_client, 42, PUBKEY_A.removeprefix("0x"))

        assert state.index == 1
        assert state.balance == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "data",
        [
            {"balance": "32000000000"},
            {"index": "5"},
            {"index": "5", "balance": None},
            {"index": "x", "balance": "1"},
        ],
    )
    async def test_missing_fields_raise_malformed(
        self,
        httpx_mock: "HTTPXMock",
        http_client: httpx.AsyncClient,
        beacon: BeaconNodeClient,
        data: dict,
    ) -> None:
        """Test that a missing index or balance is an explicit failure."""
        httpx_mock.add_response(url=validator_url(999, PUBKEY_A), json={"data": data})

        with pytest.raises(UpstreamMalformedError, match="missing index or balance"):
            await beacon.get_validator(http_client, 999, PUBKEY_A)

    @pytest.mark.asyncio
    async def test_unknown_validator_raises_not_found(
        self,
        httpx_mock: "HTTPXMock",
        http_client: httpx.AsyncClient,
        beacon: BeaconNodeClient,
    ) -> None:
        httpx_mock.add_response(
            url=validator_url(999, PUBKEY_A),
            status_code=404,
            json={"code": 404, "message": "Validator not found"},
        )

        with pytest.raises(NotFoundError):
            await beacon.get_validator(http_client, 999, PUBKEY_A)
