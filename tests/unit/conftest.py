"""Shared fixtures for unit tests."""

from __future__ import annotations

from datetime import datetime

import pytest

from contractmark.annotation.adapter import AttributedRangeAdapter
from contractmark.config import OverlayConfig
from contractmark.overlay import OverlayManager, PointerEvents
from contractmark.richtext import ContractDocument
from contractmark.sync import HostModel, SyncBridge

SAMPLE_TEXT = "Bu bir sözleşmedir. Bu ifade önemlidir."
FIXED_NOW = datetime(2024, 3, 1, 14, 30, 5)


@pytest.fixture
def document() -> ContractDocument:
    return ContractDocument("test-doc", SAMPLE_TEXT)


@pytest.fixture
def adapter(document: ContractDocument) -> AttributedRangeAdapter:
    return AttributedRangeAdapter(document)


@pytest.fixture
def host() -> HostModel:
    return HostModel()


@pytest.fixture
def bridge(host: HostModel) -> SyncBridge:
    return host.bridge()


@pytest.fixture
def pointer_events() -> PointerEvents:
    return PointerEvents()


@pytest.fixture
def manager(bridge: SyncBridge, pointer_events: PointerEvents) -> OverlayManager:
    return OverlayManager(
        bridge, pointer_events, OverlayConfig(), clock=lambda: FIXED_NOW
    )


@pytest.fixture
def sample_text() -> str:
    return SAMPLE_TEXT
