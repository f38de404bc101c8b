"""Shared fixtures: a migrated in-memory SQLite database and in-memory instrument builders."""

from datetime import date
from typing import Optional

import pytest

from wheeler.core.config import settings
from wheeler.db import create_sqlite_engine, dispose_all_engines, get_session_context
from wheeler.models import Dividend, LongPosition, Option, Treasury


@pytest.fixture
def engine():
    engine = create_sqlite_engine("sqlite://")
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with get_session_context(engine) as session:
        yield session


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    """Point DATA_DIR at a temporary directory for pointer-file tests."""
    monkeypatch.setattr(settings, "DATA_DIR", str(tmp_path))
    yield tmp_path
    dispose_all_engines()


@pytest.fixture
def make_option():
    def _make(
        option_id: Optional[int],
        symbol: str,
        option_type: str,
        opened: date,
        expiration: date,
        strike: float = 100.0,
        premium: float = 1.0,
        contracts: int = 1,
        closed: Optional[date] = None,
        exit_price: Optional[float] = None,
    ) -> Option:
        return Option(
            id=option_id,
            symbol=symbol,
            type=option_type,
            opened=opened,
            expiration=expiration,
            strike=strike,
            premium=premium,
            contracts=contracts,
            closed=closed,
            exit_price=exit_price,
            commission=0.65 * contracts,
        )

    return _make


@pytest.fixture
def make_position():
    def _make(
        symbol: str,
        opened: date,
        shares: int,
        buy_price: float,
        closed: Optional[date] = None,
        exit_price: Optional[float] = None,
        position_id: Optional[int] = None,
    ) -> LongPosition:
        return LongPosition(
            id=position_id,
            symbol=symbol,
            opened=opened,
            shares=shares,
            buy_price=buy_price,
            closed=closed,
            exit_price=exit_price,
        )

    return _make


@pytest.fixture
def make_treasury():
    def _make(
        cuspid: str,
        purchased: date,
        amount: float,
        buy_price: Optional[float] = None,
        exit_price: Optional[float] = None,
        current_value: Optional[float] = None,
        maturity: Optional[date] = None,
    ) -> Treasury:
        return Treasury(
            cuspid=cuspid,
            purchased=purchased,
            maturity=maturity or date(purchased.year + 1, purchased.month, 1),
            amount=amount,
            yield_pct=4.5,
            buy_price=buy_price if buy_price is not None else amount * 0.97,
            current_value=current_value,
            exit_price=exit_price,
        )

    return _make


@pytest.fixture
def make_dividend():
    def _make(symbol: str, received: date, amount: float) -> Dividend:
        return Dividend(symbol=symbol, received=received, amount=amount)

    return _make
