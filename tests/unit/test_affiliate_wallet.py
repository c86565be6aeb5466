"""Tests for AffiliateWalletService."""

from decimal import Decimal

import pytest

from rewards_engine.services.referral.affiliate_wallet import AffiliateWalletService
from rewards_engine.utils.exceptions import (
    InsufficientBalanceError,
    TransferDisabledError,
    UserNotFoundError,
)


@pytest.fixture
def wallet(fake_session, wire, store):
    store.add_user(1, affiliate_balance=Decimal("25.00"), wallet_balance=Decimal("5.00"))
    store.set_options(
        affiliates_enabled="1",
        affiliates_levels="2",
        affiliates_percentage="10",
        affiliates_percentage_2="5",
        affiliates_min_withdrawal="10",
        affiliates_money_transfer_enabled="1",
    )
    return wire(AffiliateWalletService(fake_session))


@pytest.fixture
def referrals(store):
    store.add_user(2, username="alice", first_name="Alice", last_name="Smith")
    store.add_user(3, username="bob")
    store.add_user(4, username="carol")
    store.add_edge(1, 2)
    store.add_edge(1, 3)
    store.add_edge(2, 4)


class TestOverview:

    @pytest.mark.asyncio
    async def test_overview(self, wallet, referrals):
        overview = await wallet.get_overview(1)

        assert overview["settings"]["enabled"] is True
        assert overview["settings"]["levels"] == 2
        assert overview["settings"]["percents"] == [Decimal("10"), Decimal("5")]
        assert overview["balance"] == {
            "affiliate": Decimal("25.00"),
            "wallet": Decimal("5.00"),
        }
        assert overview["referrals"] == {"per_level": [2, 1], "total": 3}

    @pytest.mark.asyncio
    async def test_unknown_user(self, wallet):
        with pytest.raises(UserNotFoundError):
            await wallet.get_overview(404)


class TestListReferrals:

    @pytest.mark.asyncio
    async def test_direct_referrals_newest_first(self, wallet, referrals):
        result = await wallet.list_referrals(1)

        assert result["total"] == 2
        assert [item["id"] for item in result["items"]] == [3, 2]
        assert result["items"][1]["full_name"] == "Alice Smith"

    @pytest.mark.asyncio
    async def test_second_level(self, wallet, referrals):
        result = await wallet.list_referrals(1, level=2)
        assert [item["username"] for item in result["items"]] == ["carol"]

    @pytest.mark.asyncio
    async def test_search(self, wallet, referrals):
        result = await wallet.list_referrals(1, search="ali")
        assert [item["id"] for item in result["items"]] == [2]

    @pytest.mark.asyncio
    async def test_empty_level(self, wallet, referrals):
        result = await wallet.list_referrals(1, level=4)

        assert result["items"] == []
        assert result["total"] == 0

    @pytest.mark.asyncio
    async def test_limit_clamped(self, wallet, referrals):
        result = await wallet.list_referrals(1, page=-1, limit=500)

        assert result["page"] == 1
        assert result["limit"] == 100


class TestTransfer:

    @pytest.mark.asyncio
    async def test_transfer(self, wallet, store, fake_session):
        result = await wallet.transfer_to_wallet(1, "12.50")

        assert result == {
            "amount": Decimal("12.50"),
            "affiliate_balance": Decimal("12.50"),
            "wallet_balance": Decimal("17.50"),
        }
        assert store.users[1].affiliate_balance == Decimal("12.50")
        assert fake_session.commits == 1

    @pytest.mark.asyncio
    async def test_disabled(self, wallet, store):
        store.set_options(affiliates_money_transfer_enabled="0")

        with pytest.raises(TransferDisabledError):
            await wallet.transfer_to_wallet(1, 12)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["0", "-3", "abc", "9.99"])
    async def test_invalid_or_below_minimum(self, wallet, store, amount):
        with pytest.raises(ValueError):
            await wallet.transfer_to_wallet(1, amount)
        assert store.writes == 0

    @pytest.mark.asyncio
    async def test_insufficient_balance(self, wallet, store):
        with pytest.raises(InsufficientBalanceError):
            await wallet.transfer_to_wallet(1, "25.01")
        assert store.users[1].affiliate_balance == Decimal("25.00")
