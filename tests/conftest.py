"""Pytest configuration and shared fixtures."""

import pytest
import pytest_asyncio

from typing import TYPE_CHECKING

import httpx
from prometheus_client import CollectorRegistry

from balance_exporter.balance.metrics import BalanceMetrics
from balance_exporter.clients.beacon import BeaconNodeClient
from balance_exporter.clients.explorer import ExplorerClient
from balance_exporter.clients.validator_metrics import ValidatorMetricsClient
from tests.payloads import (
    CL_NODE_URL,
    SCAN_URL,
    VALIDATOR_METRICS_URL,
    FixedIntervalSchedule,
)


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator


@pytest.fixture
def fast_schedule() -> FixedIntervalSchedule:
    """A schedule firing every 20 ms."""
    return FixedIntervalSchedule()


@pytest_asyncio.fixture
async def http_client() -> "AsyncGenerator[httpx.AsyncClient]":
    """Provide an httpx client closed after the test."""
    async with httpx.AsyncClient(timeout=5.0) as client:
        yield client


@pytest.fixture
def beacon() -> BeaconNodeClient:
    return BeaconNodeClient(CL_NODE_URL)


@pytest.fixture
def validator_metrics() -> ValidatorMetricsClient:
    return ValidatorMetricsClient(VALIDATOR_METRICS_URL)


@pytest.fixture
def explorer() -> ExplorerClient:
    return ExplorerClient(SCAN_URL)


@pytest.fixture
def balance_metrics() -> BalanceMetrics:
    """Metrics sink on a private registry."""
    return BalanceMetrics(CollectorRegistry())
