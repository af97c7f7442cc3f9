import asyncio
from decimal import Decimal

import pytest

from emporium import GatewayError, NetworkError, StoreError, ValidationError
from emporium.cart import CartLine, partition, price_partitions
from emporium.config import CheckoutConfig
from emporium.orders import Order, OrderWriter
from emporium.payments import (
    NETWORK_ERROR,
    SESSION_EXPIRED,
    CardDetails,
    ChargeState,
    GatewayType,
    MobileMoneyDetails,
    PaymentDispatcher,
    PaymentRequest,
    PaymentResult,
    PaymentSelection,
    ResultKind,
    SubMethod,
    friendly_message,
    redact,
)
from emporium.pricing import NO_TAX
from emporium.store import MemoryStore

from tests.conftest import COURIER, VALID_CARD, ScriptedGateway

CARD = PaymentSelection(GatewayType.IVERI, SubMethod.CARD)
ECOCASH = PaymentSelection(GatewayType.IVERI, SubMethod.MOBILE_MONEY)
CARD_DETAILS = CardDetails(VALID_CARD, "1230", "123")


async def _order(store: MemoryStore, method: str = "iveri") -> Order:
    [part] = price_partitions(
        partition([CartLine("p-1", "a", Decimal("10"), 2)]), Decimal("6"), NO_TAX
    )
    return await OrderWriter(store).write(part, COURIER, method, "cust-1")


def _dispatcher(
    store: MemoryStore,
    gateway: ScriptedGateway,
    config: CheckoutConfig | None = None,
) -> PaymentDispatcher:
    return PaymentDispatcher(store, gateway, OrderWriter(store), config)


async def test_cash_is_synthetic_success(store: MemoryStore, gateway: ScriptedGateway) -> None:
    order = await _order(store, "cash")

    result = await _dispatcher(store, gateway).pay(order, PaymentSelection.cash())

    assert result.success
    assert gateway.requests == []
    [row] = store.rows("orders")
    assert (row["status"], row["payment_status"]) == ("pending", "pending")


async def test_card_payment_sends_cleaned_pan_and_marks_paid(
    store: MemoryStore, gateway: ScriptedGateway
) -> None:
    order = await _order(store)

    result = await _dispatcher(store, gateway).pay(order, CARD, CARD_DETAILS)

    assert result.kind is ResultKind.SUCCESS
    [request] = gateway.requests
    assert request.order_id == order.id
    assert request.gateway_type == "iveri"
    assert request.amount == order.total == Decimal("26.00")
    assert request.currency == "USD"
    assert request.return_url == "app://checkout/success"
    assert request.metadata["card_pan"] == "4539148803436467"
    assert request.metadata["card_expiry"] == "1230"
    assert request.metadata["card_cvv"] == "123"
    assert request.metadata["payment_subtype"] == "card"
    assert request.metadata["customer_id"] == "cust-1"
    assert request.metadata["order_ids"] == [order.id]

    [row] = store.rows("orders")
    assert (row["status"], row["payment_status"]) == ("processing", "paid")

    [txn] = store.rows("payment_transactions")
    assert txn["status"] == "completed"
    assert txn["transaction_reference"] == f"tx-{order.id}"
    assert txn["metadata"]["card_pan"] == "****6467"
    assert "card_cvv" not in txn["metadata"]


async def test_mobile_money_sent_as_virtual_card(store: MemoryStore, gateway: ScriptedGateway) -> None:
    order = await _order(store)

    await _dispatcher(store, gateway).pay(order, ECOCASH, MobileMoneyDetails("077 123 4567"))

    [request] = gateway.requests
    assert request.gateway_type == "iveri"
    assert request.metadata["card_pan"] == "9100120771234567"
    assert request.metadata["card_expiry"] == "1228"
    assert request.metadata["card_cvv"] == ""
    assert request.metadata["payment_subtype"] == "ecocash"


async def test_other_gateways_get_common_metadata_only(
    store: MemoryStore, gateway: ScriptedGateway
) -> None:
    order = await _order(store, "paynow")

    await _dispatcher(store, gateway).pay(order, PaymentSelection(GatewayType.PAYNOW))

    [request] = gateway.requests
    assert request.gateway_type == "paynow"
    assert "card_pan" not in request.metadata
    assert "payment_subtype" not in request.metadata


async def test_redirect_leaves_order_untouched(store: MemoryStore) -> None:
    gateway = ScriptedGateway(lambda req: PaymentResult.redirect("https://3ds.example/verify"))
    order = await _order(store)

    result = await _dispatcher(store, gateway).pay(order, CARD, CARD_DETAILS)

    assert result.is_redirect
    assert not result.success
    assert result.redirect_url == "https://3ds.example/verify"
    [row] = store.rows("orders")
    assert (row["status"], row["payment_status"]) == ("pending", "pending")
    [txn] = store.rows("payment_transactions")
    assert txn["status"] == "pending"


async def test_decline_surfaces_gateway_text_and_allows_retry(store: MemoryStore) -> None:
    answers = iter([PaymentResult.failed("Insufficient funds"), PaymentResult.succeeded("tx-2")])
    gateway = ScriptedGateway(lambda req: next(answers))
    dispatcher = _dispatcher(store, gateway)
    order = await _order(store)

    with pytest.raises(GatewayError, match="Insufficient funds"):
        await dispatcher.pay(order, CARD, CARD_DETAILS)

    [row] = store.rows("orders")
    assert (row["status"], row["payment_status"]) == ("pending", "pending")
    assert dispatcher.ledger.state(order.id) is None

    result = await dispatcher.pay(order, CARD, CARD_DETAILS)

    assert result.success
    assert len(gateway.requests) == 2
    assert [t["status"] for t in store.rows("payment_transactions")] == ["failed", "completed"]


async def test_known_messages_remapped(store: MemoryStore) -> None:
    gateway = ScriptedGateway(lambda req: PaymentResult.failed("User not authenticated"))
    order = await _order(store)

    with pytest.raises(GatewayError) as exc:
        await _dispatcher(store, gateway).pay(order, CARD, CARD_DETAILS)

    assert exc.value.message == SESSION_EXPIRED


async def test_structured_error_body_becomes_text(store: MemoryStore) -> None:
    body = {"success": False, "error": {"code": "05", "message": "Card declined"}}
    gateway = ScriptedGateway(lambda req: PaymentResult.from_response(body))
    dispatcher = _dispatcher(store, gateway)
    order = await _order(store)

    with pytest.raises(GatewayError) as exc:
        await dispatcher.pay(order, CARD, CARD_DETAILS)

    assert exc.value.message == "Card declined"
    assert dispatcher.ledger.state(order.id) is None
    [txn] = store.rows("payment_transactions")
    assert txn["error_message"] == "Card declined"


async def test_unexpected_gateway_crash_releases_ledger(store: MemoryStore) -> None:
    def explode(req: PaymentRequest) -> PaymentResult:
        raise RuntimeError("boom")

    dispatcher = _dispatcher(store, ScriptedGateway(explode))
    order = await _order(store)

    with pytest.raises(RuntimeError):
        await dispatcher.pay(order, CARD, CARD_DETAILS)

    assert dispatcher.ledger.state(order.id) is None


async def test_second_pay_does_not_charge_again(store: MemoryStore, gateway: ScriptedGateway) -> None:
    dispatcher = _dispatcher(store, gateway)
    order = await _order(store)

    first = await dispatcher.pay(order, CARD, CARD_DETAILS)
    second = await dispatcher.pay(order, CARD, CARD_DETAILS)

    assert first == second
    assert len(gateway.requests) == 1
    assert dispatcher.ledger.state(order.id) is ChargeState.COMPLETED


async def test_charge_kept_when_order_update_fails(store: MemoryStore, gateway: ScriptedGateway) -> None:
    dispatcher = _dispatcher(store, gateway)
    order = await _order(store)
    store.fail_on("orders", "update")

    with pytest.raises(StoreError):
        await dispatcher.pay(order, CARD, CARD_DETAILS)

    [row] = store.rows("orders")
    assert row["payment_status"] == "pending"
    store.clear_faults()

    result, settled = await dispatcher.charge(order, CARD, CARD_DETAILS)

    assert result.success
    assert len(gateway.requests) == 1
    assert dispatcher.ledger.state(order.id) is ChargeState.COMPLETED
    assert (settled.status.value, settled.payment_status.value) == ("processing", "paid")
    [row] = store.rows("orders")
    assert (row["status"], row["payment_status"]) == ("processing", "paid")


async def test_concurrent_pay_for_same_order_charges_once(store: MemoryStore) -> None:
    release = asyncio.Event()

    class SlowGateway(ScriptedGateway):
        async def initiate(self, request: PaymentRequest) -> PaymentResult:
            self.requests.append(request)
            await release.wait()
            return PaymentResult.succeeded("tx")

    gateway = SlowGateway()
    dispatcher = _dispatcher(store, gateway)
    order = await _order(store)

    first = asyncio.create_task(dispatcher.pay(order, CARD, CARD_DETAILS))
    await asyncio.sleep(0)
    await asyncio.sleep(0)
    with pytest.raises(GatewayError, match="already in progress"):
        await dispatcher.pay(order, CARD, CARD_DETAILS)
    release.set()

    assert (await first).success
    assert len(gateway.requests) == 1


async def test_inactive_gateway_rejected(store: MemoryStore, gateway: ScriptedGateway) -> None:
    order = await _order(store, "stripe")

    with pytest.raises(GatewayError, match="not found or inactive"):
        await _dispatcher(store, gateway).pay(order, PaymentSelection(GatewayType.STRIPE))

    assert gateway.requests == []


async def test_unsupported_currency_rejected(store: MemoryStore, gateway: ScriptedGateway) -> None:
    order = await _order(store)
    config = CheckoutConfig().with_currency("zwg")

    with pytest.raises(GatewayError, match="ZWG"):
        await _dispatcher(store, gateway, config).pay(order, CARD, CARD_DETAILS)

    assert gateway.requests == []


async def test_validation_runs_before_any_call(store: MemoryStore, gateway: ScriptedGateway) -> None:
    order = await _order(store)

    with pytest.raises(ValidationError):
        await _dispatcher(store, gateway).pay(order, CARD, CardDetails("4539148803436468", "1230", "123"))

    assert gateway.requests == []
    assert store.rows("payment_transactions") == []


async def test_stalled_gateway_times_out(store: MemoryStore) -> None:
    class StalledGateway(ScriptedGateway):
        async def initiate(self, request: PaymentRequest) -> PaymentResult:
            await asyncio.sleep(10)
            return PaymentResult.succeeded()

    order = await _order(store)
    config = CheckoutConfig().with_gateway_timeout(seconds=0.01)

    with pytest.raises(NetworkError) as exc:
        await _dispatcher(store, StalledGateway(), config).pay(order, CARD, CARD_DETAILS)

    assert exc.value.message == NETWORK_ERROR
    [txn] = store.rows("payment_transactions")
    assert txn["status"] == "failed"


async def test_active_gateways_sorted_and_filtered(store: MemoryStore, gateway: ScriptedGateway) -> None:
    gateways = await _dispatcher(store, gateway).active_gateways()

    assert [g.gateway_type for g in gateways] == ["iveri", "paynow"]
    assert gateways[0].supports("usd")
    assert not gateways[0].supports("ZWG")
    assert gateways[1].supports("ZWG")


def test_redirect_beats_success_in_response() -> None:
    result = PaymentResult.from_response(
        {"success": True, "redirect_url": "https://3ds.example/verify", "transaction_id": "t-1"}
    )

    assert result.kind is ResultKind.REDIRECT
    assert result.transaction_reference == "t-1"


def test_response_without_success_is_error() -> None:
    result = PaymentResult.from_response({"success": False, "error": "Card declined"})

    assert result.kind is ResultKind.ERROR
    assert result.error == "Card declined"


def test_result_kinds_need_their_payload() -> None:
    with pytest.raises(ValueError):
        PaymentResult(ResultKind.REDIRECT)
    with pytest.raises(ValueError):
        PaymentResult(ResultKind.ERROR)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("User not authenticated", SESSION_EXPIRED),
        ("TypeError: Failed to fetch", NETWORK_ERROR),
        ("Card declined by issuer", "Card declined by issuer"),
        (None, "Payment failed"),
    ],
)
def test_friendly_message(text: str | None, expected: str) -> None:
    assert friendly_message(text) == expected


def test_redact_masks_card_data() -> None:
    safe = redact({"card_pan": "4539148803436467", "card_cvv": "123", "card_expiry": "1230", "order_ids": ["o"]})

    assert safe == {"card_pan": "****6467", "order_ids": ["o"]}
