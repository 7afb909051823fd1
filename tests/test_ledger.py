"""Tests for LedgerStore mutations and reads."""

from datetime import date

import pytest

from pantry_ledger.config import AppSettings, StorageSettings
from pantry_ledger.errors import (
    InsufficientStockError,
    InvalidInputError,
    NotAuthenticatedError,
    NotFoundError,
)
from pantry_ledger.inventory import LedgerStore
from pantry_ledger.models.inventory import (
    Currency,
    InboundMethod,
    OutboundPurpose,
    TransactionType,
)
from pantry_ledger.state import AppState


class TestPurchaseScenario:
    """Inbound 10, reject outbound 12, accept outbound 4."""

    def test_inbound_sets_price_and_stock(self, ledger):
        """Test inbound sets price and stock."""
        transaction = ledger.record_inbound("P1", 10, 5.00, "采购", "2024-01-01")

        item = ledger.data.inventory["P1"]
        assert item.stock_quantity == 10
        assert item.current_price == 5.00
        assert len(ledger.data.transactions) == 1
        assert transaction.quantity == 10
        assert transaction.type == TransactionType.INBOUND
        assert transaction.transaction_date == date(2024, 1, 1)
        assert transaction.detail == InboundMethod.PURCHASE.value

    def test_outbound_over_stock_is_rejected_without_effect(self, ledger, state):
        """Test outbound over stock is rejected without effect."""
        ledger.record_inbound("P1", 10, 5.00, "采购", "2024-01-01")
        before = ledger.data.to_document()
        serialized_before = state.serialize()

        with pytest.raises(InsufficientStockError) as exc_info:
            ledger.record_outbound("P1", 12, "自用", "", "2024-01-02")

        assert exc_info.value.requested == 12
        assert exc_info.value.available == 10
        assert ledger.data.to_document() == before
        assert state.serialize() == serialized_before

    def test_outbound_within_stock_is_accepted(self, ledger):
        """Test outbound within stock is accepted."""
        ledger.record_inbound("P1", 10, 5.00, "采购", "2024-01-01")
        transaction = ledger.record_outbound("P1", 4, "自用", "", "2024-01-02")

        assert ledger.data.inventory["P1"].stock_quantity == 6
        assert ledger.data.transactions[0] == transaction
        assert transaction.quantity == 4
        assert transaction.type == TransactionType.OUTBOUND
        assert transaction.price == 5.00
        assert transaction.note is None


class TestMovements:
    """General inbound/outbound behaviour."""

    def test_inbound_then_outbound_restores_stock(self, ledger):
        """Test inbound then outbound restores stock."""
        before = ledger.data.inventory["P3"].stock_quantity
        ledger.record_inbound("P3", 3, 12.0, InboundMethod.AUTO_ORDER, "2024-02-01")
        ledger.record_outbound("P3", 3, OutboundPurpose.KIDS, "school", "2024-02-01")

        assert ledger.data.inventory["P3"].stock_quantity == before
        kinds = [t.type for t in ledger.data.transactions]
        assert kinds == [TransactionType.OUTBOUND, TransactionType.INBOUND]

    def test_last_inbound_price_wins(self, ledger):
        """Test last inbound price wins."""
        ledger.record_inbound("P1", 1, 5.0, "采购", "2024-01-01")
        ledger.record_inbound("P1", 1, 9.5, "赠品", "2024-01-03")

        assert ledger.data.inventory["P1"].current_price == 9.5

    def test_outbound_captures_current_price_and_currency(self, ledger):
        """Test outbound captures current price and currency."""
        ledger.record_inbound("P2", 2, 50.0, "单次订货", "2024-01-01")
        transaction = ledger.record_outbound("P2", 1, "售出", "to neighbour", "2024-01-02")

        assert transaction.price == 50.0
        assert transaction.currency == Currency.CNY
        assert transaction.note == "to neighbour"
        assert transaction.product_name == "Night Cream"

    def test_unknown_product_raises_not_found(self, ledger):
        """Test unknown product raises not found."""
        with pytest.raises(NotFoundError):
            ledger.record_inbound("NOPE", 1, 1.0, "采购", "2024-01-01")
        with pytest.raises(NotFoundError):
            ledger.record_outbound("NOPE", 1, "自用")

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, True])
    def test_invalid_quantity_is_rejected(self, ledger, quantity):
        """Test invalid quantity is rejected."""
        with pytest.raises(InvalidInputError):
            ledger.record_inbound("P1", quantity, 1.0, "采购", "2024-01-01")
        assert ledger.data.transactions == []

    def test_negative_price_is_rejected(self, ledger):
        """Test that a negative unit price leaves stock untouched."""
        with pytest.raises(InvalidInputError):
            ledger.record_inbound("P1", 1, -0.01, "采购", "2024-01-01")
        assert ledger.data.inventory["P1"].stock_quantity == 0

    @pytest.mark.parametrize("price", [float("nan"), float("inf"), "12.5", None])
    def test_non_finite_price_is_rejected(self, ledger, storage, price):
        """Test that NaN, infinity and non-numbers never reach the saved blob."""
        with pytest.raises(InvalidInputError):
            ledger.record_inbound("P1", 1, price, "采购", "2024-01-01")

        assert ledger.data.inventory["P1"].current_price == 5.0
        assert ledger.data.transactions == []
        reloaded = AppState.load(
            storage,
            storage_settings=StorageSettings(state_key="test_state"),
            app_settings=AppSettings(code_version="test-1.0"),
        )
        assert reloaded.global_state.user_stores["alice"].current.inventory["P1"].current_price == 5.0

    def test_bad_date_is_rejected(self, ledger):
        """Test bad date is rejected."""
        with pytest.raises(InvalidInputError):
            ledger.record_inbound("P1", 1, 1.0, "采购", "01/02/2024")

    def test_date_defaults_to_today(self, ledger):
        """Test date defaults to today."""
        transaction = ledger.record_inbound("P1", 1, 1.0, "采购")
        assert transaction.transaction_date == date.today()

    def test_transaction_ids_are_unique_and_increasing(self, ledger):
        """Test transaction ids are unique and increasing."""
        for _ in range(5):
            ledger.record_inbound("P1", 1, 1.0, "采购", "2024-01-01")

        ids = [int(t.id) for t in reversed(ledger.data.transactions)]
        assert ids == sorted(ids)
        assert len(set(ids)) == len(ids)

    def test_every_mutation_is_persisted(self, ledger, storage):
        """Test every mutation is persisted."""
        writes = storage.write_count
        ledger.record_inbound("P1", 1, 1.0, "采购", "2024-01-01")
        ledger.set_threshold("P1", 4)

        assert storage.write_count == writes + 2


class TestTags:
    """Closed tag enumerations at the mutation boundary."""

    def test_unknown_outbound_tag_rejected_when_strict(self, ledger):
        """Test unknown outbound tag rejected when strict."""
        ledger.record_inbound("P1", 2, 1.0, "采购", "2024-01-01")
        with pytest.raises(InvalidInputError, match="Unknown tag"):
            ledger.record_outbound("P1", 1, "gift to cat", None, "2024-01-02")
        assert ledger.data.inventory["P1"].stock_quantity == 2

    def test_unknown_inbound_tag_rejected_when_strict(self, ledger):
        """Test unknown inbound tag rejected when strict."""
        with pytest.raises(InvalidInputError):
            ledger.record_inbound("P1", 1, 1.0, "stolen", "2024-01-01")

    def test_loose_mode_accepts_free_text(self, state, ledger):
        """Test loose mode accepts free text."""
        loose = LedgerStore(state, settings=AppSettings(strict_tags=False))
        loose.record_inbound("P1", 2, 1.0, "market stall", "2024-01-01")
        transaction = loose.record_outbound("P1", 1, "gift to cat", None, "2024-01-02")

        assert transaction.detail == "gift to cat"

    def test_loose_mode_still_rejects_blank_tag(self, state, ledger):
        """Test loose mode still rejects blank tag."""
        loose = LedgerStore(state, settings=AppSettings(strict_tags=False))
        with pytest.raises(InvalidInputError):
            loose.record_inbound("P1", 1, 1.0, "  ", "2024-01-01")


class TestFieldUpdates:
    """Threshold, removal and exchange rate."""

    def test_set_threshold(self, ledger):
        """Test setting the low-stock threshold."""
        ledger.set_threshold("P1", 3)
        assert ledger.data.inventory["P1"].threshold == 3
        assert ledger.data.transactions == []

    def test_negative_threshold_rejected(self, ledger):
        """Test negative threshold rejected."""
        with pytest.raises(InvalidInputError):
            ledger.set_threshold("P1", -1)

    def test_remove_product_keeps_transactions(self, ledger):
        """Test remove product keeps transactions."""
        ledger.record_inbound("P1", 2, 5.0, "采购", "2024-01-01")
        ledger.remove_product("P1")

        assert "P1" not in ledger.data.inventory
        orphans = ledger.transactions_for("P1")
        assert len(orphans) == 1
        assert orphans[0].product_name == "Fish Oil"

    def test_removed_product_cannot_be_moved(self, ledger):
        """Test removed product cannot be moved."""
        ledger.remove_product("P1")
        with pytest.raises(NotFoundError):
            ledger.record_inbound("P1", 1, 1.0, "采购", "2024-01-01")

    def test_set_exchange_rate(self, ledger):
        """Test setting the exchange rate."""
        ledger.set_exchange_rate(5.0)
        assert ledger.data.exchange_rate == 5.0

    @pytest.mark.parametrize("rate", [0, -4.6])
    def test_non_positive_exchange_rate_rejected(self, ledger, rate):
        """Test that the exchange rate stays positive."""
        with pytest.raises(InvalidInputError):
            ledger.set_exchange_rate(rate)
        assert ledger.data.exchange_rate == 4.6

    @pytest.mark.parametrize("rate", [float("nan"), float("inf"), "4.8", True])
    def test_non_finite_exchange_rate_rejected(self, ledger, storage, rate):
        """Test that a non-finite rate is refused and the state still reloads."""
        with pytest.raises(InvalidInputError):
            ledger.set_exchange_rate(rate)

        assert ledger.data.exchange_rate == 4.6
        reloaded = AppState.load(
            storage,
            storage_settings=StorageSettings(state_key="test_state"),
            app_settings=AppSettings(code_version="test-1.0"),
        )
        assert reloaded.global_state.user_stores["alice"].current.exchange_rate == 4.6


class TestReads:
    """Listing, search, low stock and valuation."""

    def test_items_sorted_by_id(self, ledger):
        """Test items sorted by id."""
        assert [item.id for item in ledger.items()] == ["P1", "P2", "P3"]

    def test_search_matches_name_or_id(self, ledger):
        """Test search matches name or id."""
        assert [item.id for item in ledger.search("fish")] == ["P1"]
        assert [item.id for item in ledger.search("p2")] == ["P2"]

    def test_low_stock_uses_threshold(self, ledger):
        """Test low stock uses threshold."""
        ledger.record_inbound("P1", 5, 5.0, "采购", "2024-01-01")
        low = [item.id for item in ledger.low_stock()]
        assert low == ["P2", "P3"]

    def test_total_value_converts_cny_by_division(self, ledger):
        """Test that CNY prices convert to AUD by division."""
        ledger.record_inbound("P1", 2, 5.0, "采购", "2024-01-01")
        ledger.record_inbound("P2", 1, 46.0, "采购", "2024-01-01")

        assert ledger.total_value_aud() == pytest.approx(2 * 5.0 + 46.0 / 4.6)


class TestSession:
    """Mutations need a logged-in account."""

    def test_mutation_without_session_fails(self, ledger, directory):
        """Test mutation without session fails."""
        directory.logout()
        with pytest.raises(NotAuthenticatedError):
            ledger.record_inbound("P1", 1, 1.0, "采购", "2024-01-01")
