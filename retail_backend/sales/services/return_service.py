# sales/services/return_service.py

"""
RETURN SERVICE (DOMAIN-CONTROLLED)

Purpose:
- Take goods back against an earlier sale and refund the customer.

Rules:
- Quantities are capped by what remains returnable on each sale line.
- Items flagged add_to_stock go back on the shelf (and back into the
  Inventory account at their sale-time cost); the rest are written off.
- Refund = returned revenue (after the sale's discount ratio) + prorated tax.
  The amount stored on the Return is the amount the ledger posts.
- refund_method:
    cash / card   -> money leaves the till
    store_credit  -> customer.store_credit += refund
    account       -> customer.account_balance -= refund
- Sale.refund_status becomes "refunded" once every unit has come back,
  otherwise "partially_refunded".
"""

from __future__ import annotations

import logging
from collections import defaultdict

from django.db import transaction
from django.db.models import F

from accounting.models import Account
from accounting.services.account_resolver import load_account_map
from accounting.services.exceptions import AccountingServiceError
from accounting.services.posting import (
    REFUND_METHOD_ACCOUNTS,
    compute_return_amounts,
    post_return_to_ledger,
)
from audit.services import log_action
from products.services.inventory import increment_stock
from sales.models import Customer, Return, ReturnItem, Sale, SaleItem
from sales.services.exceptions import ReturnProcessingError

logger = logging.getLogger(__name__)


def _resolve_sale_item(*, sale_items: list, item: dict, claimed: dict) -> SaleItem:
    """
    Match a requested line by sale_item_id, or by product_id (first line of
    that product with units still returnable).
    """
    sale_item_id = item.get("sale_item_id")
    product_id = item.get("product_id")

    if sale_item_id is not None:
        for si in sale_items:
            if str(si.pk) == str(sale_item_id):
                return si
        raise ReturnProcessingError(f"Sale item {sale_item_id} is not part of this sale")

    if product_id is not None:
        for si in sale_items:
            if str(si.product_id) == str(product_id) and si.returnable_quantity - claimed[si.pk] > 0:
                return si
        raise ReturnProcessingError(f"Product {product_id} has nothing left to return on this sale")

    raise ReturnProcessingError("Each returned item needs a sale_item_id or product_id")


@transaction.atomic
def create_return(
    *,
    store,
    actor,
    transaction_id: str,
    items,
    refund_method: str,
) -> Return:
    """
    items: [{"sale_item_id" | "product_id", "quantity", "reason", "add_to_stock"}, ...]
    """
    refund_sub_type = REFUND_METHOD_ACCOUNTS.get(refund_method)
    if refund_sub_type is None:
        raise ReturnProcessingError(f"Invalid refund method: {refund_method!r}")
    if not items:
        raise ReturnProcessingError("Return must contain at least one item")

    try:
        accounts = load_account_map(store)
        accounts.require(
            refund_sub_type,
            Account.SALES_TAX_PAYABLE,
            Account.SALES_REVENUE,
            Account.COGS,
            Account.INVENTORY,
        )
    except AccountingServiceError as exc:
        raise ReturnProcessingError("Error processing return") from exc

    sale = (
        Sale.objects.select_for_update()
        .filter(store=store, transaction_id=transaction_id)
        .first()
    )
    if sale is None:
        raise ReturnProcessingError("Original sale not found")

    if refund_method in (Return.REFUND_STORE_CREDIT, Return.REFUND_ACCOUNT) and not sale.customer_id:
        raise ReturnProcessingError(
            f"Cannot refund to {refund_method}: no customer on original sale."
        )

    sale_items = list(
        SaleItem.objects.select_for_update(of=("self",))
        .filter(sale=sale)
        .select_related("product__category")
        .order_by("id")
    )

    claimed: dict = defaultdict(int)
    lines = []
    for item in items:
        try:
            qty = int(item.get("quantity"))
        except (TypeError, ValueError):
            raise ReturnProcessingError("Returned quantity must be an integer")
        if qty <= 0:
            raise ReturnProcessingError("Returned quantity must be > 0")

        sale_item = _resolve_sale_item(sale_items=sale_items, item=item, claimed=claimed)
        if claimed[sale_item.pk] + qty > sale_item.returnable_quantity:
            raise ReturnProcessingError(
                f"Cannot return {qty} of {sale_item.product.name}: "
                f"only {sale_item.returnable_quantity - claimed[sale_item.pk]} returnable"
            )
        claimed[sale_item.pk] += qty

        lines.append(
            {
                "sale_item": sale_item,
                "quantity": qty,
                "reason": (item.get("reason") or "").strip(),
                "add_to_stock": bool(item.get("add_to_stock", True)),
            }
        )

    try:
        amounts = compute_return_amounts(
            sale=sale,
            lines=[(ln["sale_item"], ln["quantity"], ln["add_to_stock"]) for ln in lines],
            accounts=accounts,
            returned_before={si.pk: int(si.returned_quantity) for si in sale_items},
        )
    except AccountingServiceError as exc:
        raise ReturnProcessingError("Error processing return") from exc

    refund = amounts["refund"]

    sale_return = Return.objects.create(
        store=store,
        sale=sale,
        refund_amount=refund,
        refund_method=refund_method,
    )

    for ln in lines:
        sale_item = ln["sale_item"]
        ReturnItem.objects.create(
            sale_return=sale_return,
            sale_item=sale_item,
            product_id=sale_item.product_id,
            quantity=ln["quantity"],
            reason=ln["reason"],
            add_to_stock=ln["add_to_stock"],
        )
        SaleItem.objects.filter(pk=sale_item.pk).update(
            returned_quantity=F("returned_quantity") + ln["quantity"]
        )
        if ln["add_to_stock"]:
            increment_stock(product_id=sale_item.product_id, quantity=ln["quantity"])

    if refund_method == Return.REFUND_STORE_CREDIT:
        Customer.objects.filter(pk=sale.customer_id).update(store_credit=F("store_credit") + refund)
    elif refund_method == Return.REFUND_ACCOUNT:
        Customer.objects.filter(pk=sale.customer_id).update(account_balance=F("account_balance") - refund)

    fully_returned = all(
        si.returnable_quantity - claimed[si.pk] == 0 for si in sale_items
    )
    sale.refund_status = Sale.REFUND_FULL if fully_returned else Sale.REFUND_PARTIAL
    sale.save(update_fields=["refund_status"])

    log_action(
        store=store,
        actor=actor,
        action="Return Processed",
        details=f"For Sale ID: {sale.transaction_id}, Amount: {refund:.2f}",
    )

    try:
        post_return_to_ledger(sale_return=sale_return, accounts=accounts)
    except AccountingServiceError as exc:
        logger.exception(
            "Return ledger posting failed",
            extra={"transaction_id": sale.transaction_id, "return_id": str(sale_return.pk)},
        )
        raise ReturnProcessingError("Error processing return") from exc

    logger.info(
        "Return processed",
        extra={
            "transaction_id": sale.transaction_id,
            "return_id": str(sale_return.pk),
            "refund": str(refund),
            "refund_method": refund_method,
        },
    )
    return sale_return
