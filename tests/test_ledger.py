import asyncio
from decimal import Decimal

import pytest

from golddeck.services.ledger import (
    DuplicateTransactionError,
    InvalidOrderError,
    TransactionLedger,
    UnknownTransactionError,
)
from golddeck.services.model import TransactionStatus
from golddeck.services.pricing import quote_order
from golddeck.services.tasks import TaskRegistry
from golddeck.services.wallet import WalletView

PRICE = Decimal("75.55")


class PriceBoard:
    def __init__(self, price):
        self.price = price

    def __call__(self):
        return self.price


def _ledger(price=PRICE, notifier=None, delay=0.01, wallet=None, registry=None):
    wallet = wallet or WalletView()
    wallet.connect()
    board = PriceBoard(price)
    ledger = TransactionLedger(
        wallet, board, registry=registry, notifier=notifier, settlement_delay=delay
    )
    return ledger, wallet, board


def test_new_transactions_are_pending_and_most_recent_first():
    ledger, _, _ = _ledger()
    t1 = ledger.record(quote_order(1, "BUY", PRICE), "BUY")
    t2 = ledger.record(quote_order(2, "SELL", PRICE), "SELL")

    assert [tx.id for tx in ledger.transactions()] == [t2.id, t1.id]
    assert all(tx.status is TransactionStatus.PENDING for tx in ledger.transactions())
    assert t1.id != t2.id


def test_transaction_copies_the_quote():
    ledger, _, _ = _ledger()
    quote = quote_order(10, "BUY", PRICE)
    tx = ledger.record(quote, "BUY")

    assert (tx.quantity, tx.subtotal, tx.fee, tx.total) == (quote.quantity, quote.subtotal, quote.fee, quote.total)
    assert tx.unit_price == PRICE


def test_external_reference_becomes_the_id():
    ledger, _, _ = _ledger()
    tx = ledger.record(quote_order(1, "BUY", PRICE), "BUY", reference="0xabc123")
    assert tx.id == "0xabc123"
    assert ledger.get("0xabc123").id == "0xabc123"

    with pytest.raises(DuplicateTransactionError):
        ledger.record(quote_order(1, "BUY", PRICE), "BUY", reference="0xabc123")


def test_zero_quantity_and_side_mismatch_are_rejected():
    ledger, _, _ = _ledger()
    with pytest.raises(InvalidOrderError):
        ledger.record(quote_order("abc", "BUY", PRICE), "BUY")
    with pytest.raises(InvalidOrderError):
        ledger.record(quote_order(1, "BUY", PRICE), "SELL")
    assert len(ledger) == 0


def test_settle_buy_credits_tokens_and_values_at_current_price():
    ledger, wallet, board = _ledger()
    tx = ledger.record(quote_order(10, "BUY", PRICE), "BUY")
    board.price = Decimal("80")

    assert ledger.settle(tx.id) is True

    state = wallet.state
    assert state.balance_tokens == Decimal("10")
    assert state.balance_usd == Decimal("800")
    settled = ledger.get(tx.id)
    assert settled.status is TransactionStatus.COMPLETED
    assert settled.settled_at is not None


def test_settle_sell_debits_tokens():
    ledger, wallet, _ = _ledger(wallet=WalletView(balance_tokens=Decimal("12")))
    tx = ledger.record(quote_order(5, "SELL", PRICE), "SELL")

    ledger.settle(tx.id)

    assert wallet.state.balance_tokens == Decimal("7")
    assert wallet.state.balance_usd == Decimal("7") * PRICE


def test_settling_twice_mutates_the_wallet_once():
    ledger, wallet, _ = _ledger()
    tx = ledger.record(quote_order(3, "BUY", PRICE), "BUY")

    assert ledger.settle(tx.id) is True
    assert ledger.settle(tx.id) is False

    assert wallet.state.balance_tokens == Decimal("3")


def test_settling_unknown_id_raises():
    ledger, _, _ = _ledger()
    with pytest.raises(UnknownTransactionError):
        ledger.settle("nope")


def test_returned_transactions_are_copies():
    ledger, _, _ = _ledger()
    tx = ledger.record(quote_order(1, "BUY", PRICE), "BUY")
    tx.status = TransactionStatus.COMPLETED
    assert ledger.get(tx.id).status is TransactionStatus.PENDING


@pytest.mark.asyncio
async def test_create_order_settles_after_the_delay():
    ledger, wallet, _ = _ledger(delay=0.02)
    tx = ledger.create_order(quote_order(2, "BUY", PRICE), "BUY")

    assert ledger.get(tx.id).status is TransactionStatus.PENDING
    await asyncio.sleep(0.1)

    assert ledger.get(tx.id).status is TransactionStatus.COMPLETED
    assert wallet.state.balance_tokens == Decimal("2")


@pytest.mark.asyncio
async def test_pending_settlements_settle_independently():
    ledger, wallet, _ = _ledger(delay=0.02)
    ledger.create_order(quote_order(4, "BUY", PRICE), "BUY")
    ledger.create_order(quote_order(1, "SELL", PRICE), "SELL")

    await asyncio.sleep(0.1)

    assert ledger.pending() == []
    assert wallet.state.balance_tokens == Decimal("3")


@pytest.mark.asyncio
async def test_buy_notifies_once_and_sell_does_not():
    seen = []
    registry = TaskRegistry()
    ledger, _, _ = _ledger(notifier=seen.append, delay=10, registry=registry)

    buy = ledger.create_order(quote_order(1, "BUY", PRICE), "BUY")
    ledger.create_order(quote_order(1, "SELL", PRICE), "SELL")
    await registry.cancel_all()

    assert [tx.id for tx in seen] == [buy.id]


@pytest.mark.asyncio
async def test_notifier_failure_does_not_affect_the_ledger():
    def broken(tx):
        raise OSError("no mail client")

    ledger, wallet, _ = _ledger(notifier=broken, delay=0.01)
    tx = ledger.create_order(quote_order(1, "BUY", PRICE), "BUY")
    await asyncio.sleep(0.05)

    assert ledger.get(tx.id).status is TransactionStatus.COMPLETED
    assert wallet.state.balance_tokens == Decimal("1")


@pytest.mark.asyncio
async def test_cancelling_the_registry_drops_pending_settlements():
    registry = TaskRegistry()
    ledger, wallet, _ = _ledger(delay=0.05, registry=registry)
    tx = ledger.create_order(quote_order(1, "BUY", PRICE), "BUY")

    await registry.cancel_all()
    await asyncio.sleep(0.1)

    assert ledger.get(tx.id).status is TransactionStatus.PENDING
    assert wallet.state.balance_tokens == 0
    assert len(registry) == 0


def test_order_without_a_market_price_is_rejected():
    seen = []
    ledger, wallet, _ = _ledger(price=Decimal("0"), notifier=seen.append)

    with pytest.raises(InvalidOrderError):
        ledger.record(quote_order(10, "BUY", Decimal("0")), "BUY")
    with pytest.raises(InvalidOrderError):
        ledger.create_order(quote_order(10, "BUY", Decimal("0")), "BUY")

    assert len(ledger) == 0
    assert seen == []
    assert wallet.state.balance_tokens == 0
