# accounting/services/posting.py

"""
======================================================
PATH: accounting/services/posting.py
======================================================
POSTING ADAPTER (TRANSACTION RECORDERS)

Build postings and call create_journal_entry (the engine).

This module should remain a thin adapter:
- It DOES NOT do workflows (sale/purchase/stock services do).
- It DOES map business events -> accounting postings.
- It ALWAYS calls create_journal_entry (engine) for balance + polarity.

ACCOUNTS:
- Every recorder accepts an optional AccountMap (accounts=...). Workflows
  load it once, BEFORE writing anything, so a missing system account aborts
  the workflow with no partial state.

SALE:
    Debit   Cash (paid) / AR (not paid)    total - store_credit_used
    Debit   Store Credit Payable           store_credit_used
    Credit  Sales Tax Payable              tax
    Credit  Revenue (per account)          price * qty * ratio
    Debit   COGS (per account)             cost_at_sale * qty
    Credit  Inventory                      sum(COGS)

  ratio = subtotal / sum(price * qty)   (1 when the cart value is 0)
  Revenue per account is rounded by largest remainder, so the shares sum
  exactly to subtotal and none goes negative.

RETURN (mirror of the sale, scaled to returned quantities):
  Revenue and tax are cumulative across returns of one sale: each return
  takes (returned so far, this one included) minus (returned before it),
  capped at what the sale booked. The return that completes a sale takes
  back exactly the remainder.

    Debit   Revenue (per account)          price * qty * ratio
    Debit   Sales Tax Payable              tax * returned_revenue / subtotal
    Credit  Cash / Store Credit / AR       revenue + tax
    Debit   Inventory                      cost_at_sale * qty  (restocked only)
    Credit  COGS (per account)             cost_at_sale * qty  (restocked only)
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal
from typing import Any, Iterable

from accounting.models.account import Account
from accounting.models.journal import JournalEntry
from accounting.services.account_resolver import ensure_account_map
from accounting.services.exceptions import PostingRuleError
from accounting.services.journal_entry_service import (
    MIN_LINE_AMOUNT,
    TWOPLACES,
    ZERO,
    create_journal_entry,
    money,
)

logger = logging.getLogger(__name__)

ONE = Decimal("1")

REFUND_METHOD_ACCOUNTS = {
    "cash": Account.CASH,
    "card": Account.CASH,
    "store_credit": Account.STORE_CREDIT_PAYABLE,
    "account": Account.ACCOUNTS_RECEIVABLE,
}


def _debit(account, amount) -> dict:
    return {"account": account, "debit": money(amount), "credit": ZERO}


def _credit(account, amount) -> dict:
    return {"account": account, "debit": ZERO, "credit": money(amount)}


def _merge_postings_by_account(postings: list[dict]) -> list[dict]:
    """
    Combine postings with the same account (keeps journal tidy).

    Opposite sides on one account are netted into a single line.
    """
    merged: "OrderedDict[Any, dict[str, Any]]" = OrderedDict()
    for p in postings:
        acct = p["account"]
        if acct.pk not in merged:
            merged[acct.pk] = {"account": acct, "net": ZERO}
        merged[acct.pk]["net"] += money(p.get("debit")) - money(p.get("credit"))

    out: list[dict] = []
    for p in merged.values():
        net = money(p["net"])
        if net >= MIN_LINE_AMOUNT:
            out.append(_debit(p["account"], net))
        elif -net >= MIN_LINE_AMOUNT:
            out.append(_credit(p["account"], -net))
    return out


def _allocate(amounts: "OrderedDict[Any, Decimal]", target: Decimal) -> "OrderedDict[Any, Decimal]":
    """
    Largest-remainder rounding to cents.

    Every amount is floored to the cent, then the cents still missing from
    target go one at a time to the largest remainders (ties keep key
    order). The result sums exactly to target and no share of non-negative
    inputs drops below zero.
    """
    out: "OrderedDict[Any, Decimal]" = OrderedDict(
        (key, Decimal(amount).quantize(TWOPLACES, rounding=ROUND_DOWN))
        for key, amount in amounts.items()
    )
    if not out:
        return out

    missing = money(target) - sum(out.values(), ZERO)
    cents = int((missing / TWOPLACES).to_integral_value(rounding=ROUND_HALF_UP))

    if cents > 0:
        order = sorted(out, key=lambda k: Decimal(amounts[k]) - out[k], reverse=True)
        for idx in range(cents):
            out[order[idx % len(order)]] += TWOPLACES
    elif cents < 0:
        order = sorted(out, key=lambda k: out[k], reverse=True)
        for idx in range(-cents):
            out[order[idx % len(order)]] -= TWOPLACES
    return out


def _sale_items(sale) -> list:
    return list(sale.items.select_related("product__category").order_by("id"))


def _gross_cart_value(items) -> Decimal:
    return sum((Decimal(it.price_at_sale) * it.quantity for it in items), ZERO)


def _revenue_ratio(*, subtotal: Decimal, gross: Decimal) -> Decimal:
    if gross <= ZERO:
        return ONE
    return subtotal / gross


def _category_of(item):
    product = getattr(item, "product", None)
    return getattr(product, "category", None) if product is not None else None


def _customer_label(sale) -> str:
    customer = getattr(sale, "customer", None)
    name = (getattr(customer, "name", "") or "").strip() if customer is not None else ""
    return name or "customer"


def _booked_revenue(items, *, ratio: Decimal, subtotal: Decimal, accounts):
    """
    Revenue the sale credits, per resolved revenue account.

    Returns ({account_id: amount}, {account_id: Account}); amounts sum
    exactly to subtotal.
    """
    raw: "OrderedDict[Any, Decimal]" = OrderedDict()
    by_id: dict = {}
    for item in items:
        acct = accounts.revenue_account_for(_category_of(item))
        by_id[acct.pk] = acct
        raw[acct.pk] = raw.get(acct.pk, ZERO) + Decimal(item.price_at_sale) * item.quantity * ratio
    return _allocate(raw, subtotal), by_id


def _returned_revenue(items, *, ratio: Decimal, accounts, returned: dict, booked) -> "OrderedDict[Any, Decimal]":
    """
    Cumulative revenue taken back once `returned` ({sale_item_id: qty})
    units have come back, per revenue account. Never above what the sale
    booked; an account whose lines are all returned gets exactly its
    booked amount.
    """
    raw: "OrderedDict[Any, Decimal]" = OrderedDict()
    complete: dict = {}
    for item in items:
        acct_id = accounts.revenue_account_for(_category_of(item)).pk
        qty = min(int(returned.get(item.pk, 0)), int(item.quantity))
        raw[acct_id] = raw.get(acct_id, ZERO) + Decimal(item.price_at_sale) * qty * ratio
        complete[acct_id] = complete.get(acct_id, True) and qty >= int(item.quantity)

    return OrderedDict(
        (acct_id, booked[acct_id] if complete[acct_id] else min(money(amount), booked[acct_id]))
        for acct_id, amount in raw.items()
    )


def _returned_tax(*, tax: Decimal, subtotal: Decimal, revenue: Decimal, fully_returned: bool) -> Decimal:
    if fully_returned:
        return tax
    if subtotal <= ZERO or tax <= ZERO:
        return ZERO
    share = min(revenue / subtotal, ONE)
    return min((tax * share).quantize(TWOPLACES, rounding=ROUND_HALF_UP), tax)


# ============================================================
# SALE
# ============================================================

def post_sale_to_ledger(*, sale, accounts=None) -> JournalEntry | None:
    accounts = ensure_account_map(sale.store, accounts)

    core = accounts.require(
        Account.CASH,
        Account.ACCOUNTS_RECEIVABLE,
        Account.SALES_TAX_PAYABLE,
        Account.SALES_REVENUE,
        Account.COGS,
        Account.INVENTORY,
    )

    items = _sale_items(sale)
    if not items:
        return None

    subtotal = money(sale.subtotal)
    tax = money(sale.tax)
    total = money(sale.total)
    store_credit_used = money(getattr(sale, "store_credit_used", None))

    if money(subtotal + tax) != total:
        raise PostingRuleError(
            f"Sale totals mismatch: subtotal({subtotal}) + tax({tax}) != total({total})"
        )
    if store_credit_used < ZERO or store_credit_used > total:
        raise PostingRuleError(
            f"store_credit_used({store_credit_used}) must be between 0 and total({total})"
        )

    postings: list[dict] = []

    asset_account = core[Account.CASH] if sale.payment_status == "paid" else core[Account.ACCOUNTS_RECEIVABLE]
    postings.append(_debit(asset_account, total - store_credit_used))

    if store_credit_used > ZERO:
        credit_account = accounts.require(Account.STORE_CREDIT_PAYABLE)[Account.STORE_CREDIT_PAYABLE]
        postings.append(_debit(credit_account, store_credit_used))

    postings.append(_credit(core[Account.SALES_TAX_PAYABLE], tax))

    ratio = _revenue_ratio(subtotal=subtotal, gross=_gross_cart_value(items))

    cogs_raw: "OrderedDict[int, Decimal]" = OrderedDict()
    by_id: dict = {}

    for item in items:
        cogs_acct = accounts.cogs_account_for(_category_of(item))
        by_id[cogs_acct.pk] = cogs_acct
        cogs_raw[cogs_acct.pk] = cogs_raw.get(cogs_acct.pk, ZERO) + (
            Decimal(item.cost_at_sale) * item.quantity
        )

    booked, revenue_accounts = _booked_revenue(items, ratio=ratio, subtotal=subtotal, accounts=accounts)
    for account_id, amount in booked.items():
        postings.append(_credit(revenue_accounts[account_id], amount))

    total_cogs = ZERO
    for account_id, amount in cogs_raw.items():
        amount = money(amount)
        total_cogs += amount
        postings.append(_debit(by_id[account_id], amount))

    postings.append(_credit(core[Account.INVENTORY], total_cogs))

    return create_journal_entry(
        store=sale.store,
        date=sale.timestamp,
        description=f"Sale to {_customer_label(sale)} - ID {sale.transaction_id}",
        postings=postings,
        source_type=JournalEntry.SOURCE_SALE,
        source_id=sale.transaction_id,
    )


# ============================================================
# STOCK ADJUSTMENTS
# ============================================================

def post_consolidated_stock_adjustment(
    *,
    store,
    total_adjustment_cost,
    description: str,
    accounts=None,
) -> JournalEntry | None:
    """
    Positive cost = stock gained (Dr Inventory / Cr Inventory Adjustment).
    Negative cost = stock lost (mirror).
    """
    amount = money(total_adjustment_cost)
    if abs(amount) < MIN_LINE_AMOUNT:
        return None

    accounts = ensure_account_map(store, accounts)
    acct = accounts.require(Account.INVENTORY, Account.INVENTORY_ADJUSTMENT)
    inventory = acct[Account.INVENTORY]
    adjustment = acct[Account.INVENTORY_ADJUSTMENT]

    if amount > ZERO:
        postings = [_debit(inventory, amount), _credit(adjustment, amount)]
    else:
        postings = [_credit(inventory, -amount), _debit(adjustment, -amount)]

    return create_journal_entry(
        store=store,
        description=description,
        postings=postings,
        source_type=JournalEntry.SOURCE_MANUAL,
    )


def post_stock_adjustment_to_ledger(
    *,
    product,
    old_quantity: int,
    reason: str,
    accounts=None,
) -> JournalEntry | None:
    """
    product.stock must already hold the new level.
    """
    quantity_change = int(product.stock) - int(old_quantity)
    if quantity_change == 0:
        return None

    cost = money(Decimal(quantity_change) * Decimal(product.cost_price or 0))
    if abs(cost) < MIN_LINE_AMOUNT:
        return None

    return post_consolidated_stock_adjustment(
        store=product.store,
        total_adjustment_cost=cost,
        description=f"Inventory adjustment for {product.name}. Reason: {reason}.",
        accounts=accounts,
    )


# ============================================================
# PURCHASING
# ============================================================

def post_purchase_order_reception(
    *,
    purchase_order,
    received_items: Iterable[dict],
    accounts=None,
) -> JournalEntry | None:
    """
    received_items: [{"quantity": int, "cost_price": Decimal, ...}, ...]
    cost_price is the PO line's cost, never the product's current cost.
    """
    total_cost = ZERO
    for item in received_items:
        qty = int(item.get("quantity") or 0)
        if qty < 0:
            raise PostingRuleError("Received quantity cannot be negative")
        total_cost += Decimal(item.get("cost_price") or 0) * qty

    total_cost = money(total_cost)
    if total_cost <= ZERO:
        return None

    accounts = ensure_account_map(purchase_order.store, accounts)
    acct = accounts.require(Account.INVENTORY, Account.ACCOUNTS_PAYABLE)

    return create_journal_entry(
        store=purchase_order.store,
        description=f"Received stock for PO {purchase_order.po_number}",
        postings=[
            _debit(acct[Account.INVENTORY], total_cost),
            _credit(acct[Account.ACCOUNTS_PAYABLE], total_cost),
        ],
        source_type=JournalEntry.SOURCE_PURCHASE,
        source_id=str(purchase_order.pk),
    )


def post_supplier_payment(*, invoice, payment, accounts=None) -> JournalEntry:
    amount = money(payment.amount)
    if amount <= ZERO:
        raise PostingRuleError("Payment amount must be > 0")

    accounts = ensure_account_map(invoice.store, accounts)
    acct = accounts.require(Account.ACCOUNTS_PAYABLE, Account.CASH)

    return create_journal_entry(
        store=invoice.store,
        date=payment.date,
        description=f"Payment for supplier invoice {invoice.invoice_number}",
        postings=[
            _debit(acct[Account.ACCOUNTS_PAYABLE], amount),
            _credit(acct[Account.CASH], amount),
        ],
        source_type=JournalEntry.SOURCE_PAYMENT,
        source_id=str(invoice.pk),
    )


# ============================================================
# CUSTOMER PAYMENTS
# ============================================================

def post_customer_payment(*, sale, payment, accounts=None) -> JournalEntry:
    amount = money(payment.amount)
    if amount <= ZERO:
        raise PostingRuleError("Payment amount must be > 0")

    accounts = ensure_account_map(sale.store, accounts)
    acct = accounts.require(Account.CASH, Account.ACCOUNTS_RECEIVABLE)

    return create_journal_entry(
        store=sale.store,
        date=payment.date,
        description=f"Payment for Invoice {sale.transaction_id}",
        postings=[
            _debit(acct[Account.CASH], amount),
            _credit(acct[Account.ACCOUNTS_RECEIVABLE], amount),
        ],
        source_type=JournalEntry.SOURCE_PAYMENT,
        source_id=sale.transaction_id,
    )


# ============================================================
# RETURNS
# ============================================================

def compute_return_amounts(*, sale, lines: Iterable[tuple], accounts=None, returned_before=None) -> dict:
    """
    lines: iterable of (sale_item, quantity, add_to_stock)
    returned_before: {sale_item_id: qty} taken back by earlier returns;
      defaults to each sale item's stored returned_quantity.

    Revenue and tax are worked out cumulatively (everything returned after
    this return, minus what earlier returns already took) against the
    amounts the sale booked, so a sale returned piece by piece never
    refunds more than its total.

    Returns:
        {
          "revenue_by_account": OrderedDict[Account, Decimal],
          "revenue": Decimal,
          "tax": Decimal,
          "refund": Decimal,
          "cogs_by_account": OrderedDict[Account, Decimal],  # restocked only
          "restocked_cost": Decimal,
        }
    """
    accounts = ensure_account_map(sale.store, accounts)

    subtotal = money(sale.subtotal)
    tax = money(sale.tax)
    items = _sale_items(sale)
    ratio = _revenue_ratio(subtotal=subtotal, gross=_gross_cart_value(items))

    if returned_before is None:
        returned_before = {it.pk: int(it.returned_quantity) for it in items}
    returned_after = dict(returned_before)

    cogs_by_account: "OrderedDict[Account, Decimal]" = OrderedDict()

    for sale_item, quantity, add_to_stock in lines:
        quantity = int(quantity)
        if quantity <= 0:
            raise PostingRuleError("Returned quantity must be > 0")

        returned_after[sale_item.pk] = int(returned_after.get(sale_item.pk, 0)) + quantity

        if add_to_stock:
            cogs_acct = accounts.cogs_account_for(_category_of(sale_item))
            cogs_by_account[cogs_acct] = cogs_by_account.get(cogs_acct, ZERO) + (
                Decimal(sale_item.cost_at_sale) * quantity
            )

    for acct in cogs_by_account:
        cogs_by_account[acct] = money(cogs_by_account[acct])

    booked, revenue_accounts = _booked_revenue(items, ratio=ratio, subtotal=subtotal, accounts=accounts)
    before = _returned_revenue(items, ratio=ratio, accounts=accounts, returned=returned_before, booked=booked)
    after = _returned_revenue(items, ratio=ratio, accounts=accounts, returned=returned_after, booked=booked)

    revenue_by_account: "OrderedDict[Account, Decimal]" = OrderedDict()
    for acct_id, amount in after.items():
        delta = amount - before[acct_id]
        if delta > ZERO:
            revenue_by_account[revenue_accounts[acct_id]] = delta

    revenue_before = sum(before.values(), ZERO)
    revenue_after = sum(after.values(), ZERO)
    fully_returned_before = all(int(returned_before.get(it.pk, 0)) >= it.quantity for it in items)
    fully_returned_after = all(int(returned_after.get(it.pk, 0)) >= it.quantity for it in items)

    returned_tax = _returned_tax(
        tax=tax, subtotal=subtotal, revenue=revenue_after, fully_returned=fully_returned_after
    ) - _returned_tax(
        tax=tax, subtotal=subtotal, revenue=revenue_before, fully_returned=fully_returned_before
    )
    revenue = sum(revenue_by_account.values(), ZERO)

    return {
        "revenue_by_account": revenue_by_account,
        "revenue": revenue,
        "tax": returned_tax,
        "refund": money(revenue + returned_tax),
        "cogs_by_account": cogs_by_account,
        "restocked_cost": sum(cogs_by_account.values(), ZERO),
    }


def post_return_to_ledger(*, sale_return, accounts=None) -> JournalEntry | None:
    sale = sale_return.sale
    accounts = ensure_account_map(sale.store, accounts)

    refund_sub_type = REFUND_METHOD_ACCOUNTS.get(sale_return.refund_method)
    if refund_sub_type is None:
        raise PostingRuleError(f"Unknown refund method: {sale_return.refund_method!r}")

    acct = accounts.require(
        refund_sub_type,
        Account.SALES_TAX_PAYABLE,
        Account.SALES_REVENUE,
        Account.COGS,
        Account.INVENTORY,
    )

    lines = [
        (ri.sale_item, ri.quantity, ri.add_to_stock)
        for ri in sale_return.items.select_related("sale_item__product__category").order_by("id")
    ]
    if not lines:
        return None

    # returned_quantity already includes this return
    returned_before = {it.pk: int(it.returned_quantity) for it in sale.items.all()}
    for sale_item, quantity, _ in lines:
        returned_before[sale_item.pk] = max(returned_before.get(sale_item.pk, 0) - int(quantity), 0)

    amounts = compute_return_amounts(
        sale=sale, lines=lines, accounts=accounts, returned_before=returned_before
    )
    if amounts["refund"] <= ZERO and amounts["restocked_cost"] <= ZERO:
        return None

    postings: list[dict] = []
    for account, amount in amounts["revenue_by_account"].items():
        postings.append(_debit(account, amount))
    postings.append(_debit(acct[Account.SALES_TAX_PAYABLE], amounts["tax"]))
    postings.append(_credit(acct[refund_sub_type], amounts["refund"]))

    if amounts["restocked_cost"] > ZERO:
        postings.append(_debit(acct[Account.INVENTORY], amounts["restocked_cost"]))
        for account, amount in amounts["cogs_by_account"].items():
            postings.append(_credit(account, amount))

    return create_journal_entry(
        store=sale.store,
        date=sale_return.timestamp,
        description=f"Return for sale {sale.transaction_id}",
        postings=_merge_postings_by_account(postings),
        source_type=JournalEntry.SOURCE_RETURN,
        source_id=str(sale_return.pk),
    )
