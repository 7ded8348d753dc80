# sales/services/sale_service.py

"""
CORE SALES DOMAIN SERVICE

SINGLE SOURCE OF TRUTH for:
- Sale + SaleItem creation (price and cost snapshots)
- Stock deduction
- Checkout payments and customer balances
- Ledger posting of the sale

GUARANTEES:
- Fully atomic: any failure (stock, customer credit, missing account,
  unbalanced entry) rolls back every write and surfaces as SaleCreationError
- Required system accounts are resolved BEFORE the first write
- subtotal = sum(price * qty) - discount; total = subtotal + tax
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import F

from accounting.models import Account
from accounting.services.account_resolver import load_account_map
from accounting.services.exceptions import AccountingServiceError
from accounting.services.journal_entry_service import money
from accounting.services.posting import post_customer_payment, post_sale_to_ledger
from audit.services import log_action
from products.models import Product
from products.services.inventory import InsufficientStockError, decrement_stock
from sales.models import Customer, Payment, Sale, SaleItem
from sales.models.sale import generate_transaction_id
from sales.services.exceptions import SaleCreationError, StockValidationError

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")
SALE_STATUSES = {Sale.PAYMENT_PAID, Sale.PAYMENT_UNPAID, Sale.PAYMENT_PARTIAL}


def _load_products(*, store, items) -> dict:
    product_ids = {str(it.get("product_id")) for it in items}
    products = {
        str(p.pk): p
        for p in Product.objects.filter(store=store, pk__in=product_ids, status=Product.STATUS_ACTIVE)
    }
    missing = product_ids - set(products)
    if missing:
        raise SaleCreationError(f"Unknown or inactive product(s): {', '.join(sorted(missing))}")
    return products


def _normalize_items(items) -> list[dict]:
    if not items:
        raise SaleCreationError("Sale must contain at least one item")

    out = []
    for it in items:
        if not isinstance(it, dict) or not it.get("product_id"):
            raise SaleCreationError("Each item needs a product_id")
        try:
            qty = int(it.get("quantity"))
        except (TypeError, ValueError):
            raise SaleCreationError("Item quantity must be an integer")
        if qty <= 0:
            raise SaleCreationError("Item quantity must be > 0")
        out.append({"product_id": it["product_id"], "quantity": qty, "price": it.get("price")})
    return out


def _required_sub_types(*, store_credit_used: Decimal) -> list[str]:
    sub_types = [
        Account.CASH,
        Account.ACCOUNTS_RECEIVABLE,
        Account.SALES_TAX_PAYABLE,
        Account.SALES_REVENUE,
        Account.COGS,
        Account.INVENTORY,
    ]
    if store_credit_used > ZERO:
        sub_types.append(Account.STORE_CREDIT_PAYABLE)
    return sub_types


@transaction.atomic
def create_sale(
    *,
    store,
    actor,
    items,
    tax=ZERO,
    discount=ZERO,
    customer_id=None,
    payment_status: str = Sale.PAYMENT_PAID,
    payments=None,
    store_credit_used=ZERO,
    due_date=None,
) -> Sale:
    """
    items:    [{"product_id": ..., "quantity": int, "price": optional override}, ...]
    payments: [{"amount": ..., "method": "cash"|"card"|...}, ...]

    A paid sale with no payments gets one cash payment for the amount not
    covered by store credit.
    """
    if payment_status not in SALE_STATUSES:
        raise SaleCreationError(f"Invalid payment_status: {payment_status!r}")

    lines = _normalize_items(items)
    tax = money(tax)
    discount = money(discount)
    store_credit_used = money(store_credit_used)

    if tax < ZERO or discount < ZERO or store_credit_used < ZERO:
        raise SaleCreationError("tax, discount and store_credit_used cannot be negative")

    try:
        accounts = load_account_map(store)
        accounts.require(*_required_sub_types(store_credit_used=store_credit_used))
    except AccountingServiceError as exc:
        logger.error("Sale rejected: ledger not configured", extra={"store_id": str(store.pk)})
        raise SaleCreationError("Failed to create sale") from exc

    customer = None
    if customer_id:
        customer = Customer.objects.select_for_update().filter(pk=customer_id, store=store).first()
        if customer is None:
            raise SaleCreationError("Customer not found")

    if payment_status != Sale.PAYMENT_PAID and customer is None:
        raise SaleCreationError("A customer is required for sales on account")
    if store_credit_used > ZERO and customer is None:
        raise SaleCreationError("A customer is required to use store credit")

    products = _load_products(store=store, items=lines)

    gross = ZERO
    for line in lines:
        product = products[str(line["product_id"])]
        line["product"] = product
        line["price"] = money(line["price"] if line["price"] is not None else product.price)
        gross += line["price"] * line["quantity"]

    subtotal = money(gross - discount)
    if subtotal < ZERO:
        raise SaleCreationError("Discount cannot exceed the cart value")
    total = money(subtotal + tax)

    if store_credit_used > total:
        raise SaleCreationError("Store credit used cannot exceed the sale total")

    payment_rows = [
        {"amount": money(p.get("amount")), "method": (p.get("method") or "cash").strip().lower()}
        for p in (payments or [])
    ]
    if payment_status == Sale.PAYMENT_PAID and not payment_rows and total - store_credit_used > ZERO:
        payment_rows = [{"amount": money(total - store_credit_used), "method": "cash"}]
    if any(p["amount"] <= ZERO for p in payment_rows):
        raise SaleCreationError("Payment amounts must be > 0")

    amount_paid = money(store_credit_used + sum((p["amount"] for p in payment_rows), ZERO))
    if payment_status == Sale.PAYMENT_PAID and amount_paid < total:
        raise SaleCreationError("Payments do not cover the sale total")
    if payment_status != Sale.PAYMENT_PAID and amount_paid >= total:
        raise SaleCreationError("Sale is fully covered; record it as paid")
    if payment_status == Sale.PAYMENT_UNPAID and payment_rows:
        raise SaleCreationError("An unpaid sale cannot carry payments")

    prefix = "INV" if payment_status == Sale.PAYMENT_UNPAID else "SALE"

    sale = Sale.objects.create(
        store=store,
        transaction_id=generate_transaction_id(prefix),
        customer=customer,
        subtotal=subtotal,
        tax=tax,
        discount=discount,
        total=total,
        store_credit_used=store_credit_used,
        payment_status=payment_status,
        amount_paid=amount_paid,
        due_date=due_date,
    )

    for line in lines:
        product = line["product"]
        SaleItem.objects.create(
            sale=sale,
            product=product,
            quantity=line["quantity"],
            price_at_sale=line["price"],
            cost_at_sale=product.cost_price,
        )
        try:
            decrement_stock(product_id=product.pk, quantity=line["quantity"])
        except InsufficientStockError as exc:
            raise StockValidationError(
                f"Insufficient stock for {product.name} (requested {line['quantity']})"
            ) from exc

    created_payments = [
        Payment.objects.create(sale=sale, date=sale.timestamp, amount=p["amount"], method=p["method"])
        for p in payment_rows
    ]

    if customer is not None:
        if store_credit_used > ZERO:
            updated = Customer.objects.filter(
                pk=customer.pk, store_credit__gte=store_credit_used
            ).update(store_credit=F("store_credit") - store_credit_used)
            if updated != 1:
                raise SaleCreationError("Customer does not have enough store credit")

        outstanding = money(total - amount_paid)
        if payment_status != Sale.PAYMENT_PAID and outstanding > ZERO:
            Customer.objects.filter(pk=customer.pk).update(
                account_balance=F("account_balance") + outstanding
            )

    log_action(
        store=store,
        actor=actor,
        action="Sale Created",
        details=f"Transaction ID: {sale.transaction_id}, Total: {total:.2f}",
    )

    try:
        post_sale_to_ledger(sale=sale, accounts=accounts)
        if payment_status != Sale.PAYMENT_PAID:
            # On-account sales book the full receivable; checkout payments settle part of it.
            for payment in created_payments:
                post_customer_payment(sale=sale, payment=payment, accounts=accounts)
    except AccountingServiceError as exc:
        logger.exception(
            "Sale ledger posting failed",
            extra={"store_id": str(store.pk), "transaction_id": sale.transaction_id},
        )
        raise SaleCreationError("Failed to create sale") from exc

    logger.info(
        "Sale created",
        extra={
            "store_id": str(store.pk),
            "transaction_id": sale.transaction_id,
            "total": str(total),
            "payment_status": payment_status,
        },
    )
    return sale
