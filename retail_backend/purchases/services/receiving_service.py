# purchases/services/receiving_service.py


"""
======================================================
PATH: purchases/services/receiving_service.py
======================================================
PURCHASE ORDER RECEIVING SERVICE

Receive goods against a PurchaseOrder atomically.

Flow:
1) Resolve Inventory / Accounts Payable up front (fail before any write)
2) Lock the PO and validate status
3) Per received line: bump received_quantity + product stock (F() updates)
4) Status -> received when every line is complete, else partially_received
5) Audit "PO Stock Received"
6) Post Dr Inventory / Cr Accounts Payable at the PO line cost

Cost rule:
- The ledger books the PO line's cost_price, not Product.cost_price.
  A product's current cost may have drifted since the order was placed.
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from accounting.models import Account
from accounting.services.account_resolver import load_account_map
from accounting.services.exceptions import AccountingServiceError
from accounting.services.posting import post_purchase_order_reception
from audit.services import log_action
from products.services.inventory import increment_stock
from purchases.models import PurchaseOrder, PurchaseOrderItem


logger = logging.getLogger(__name__)


class PurchaseReceivingError(ValueError):
    pass


def _to_positive_int(value) -> int:
    if value is None or value == "" or isinstance(value, bool):
        raise PurchaseReceivingError("Received quantity must be a positive integer")
    try:
        qty = int(value)
    except (TypeError, ValueError) as exc:
        raise PurchaseReceivingError("Received quantity must be a positive integer") from exc
    if qty <= 0:
        raise PurchaseReceivingError("Received quantity must be a positive integer")
    return qty


def _collect_received(received_items) -> dict[str, int]:
    """
    received_items: [{"product_id": <uuid>, "quantity": int}, ...]
    Repeated product ids are summed.
    """
    if not received_items:
        raise PurchaseReceivingError("No items to receive")

    out: dict[str, int] = {}
    for row in received_items:
        product_id = str(row.get("product_id") or "").strip()
        if not product_id:
            raise PurchaseReceivingError("product_id is required for each received item")
        out[product_id] = out.get(product_id, 0) + _to_positive_int(row.get("quantity"))
    return out


@transaction.atomic
def receive_purchase_order(*, store, actor, purchase_order_id, received_items) -> PurchaseOrder:
    """
    RECEIVE PURCHASE ORDER (atomic)

    Quantities beyond what is still outstanding on a line are rejected.
    Any failure (including ledger posting) rolls the whole reception back.
    """
    received = _collect_received(received_items)

    try:
        accounts = load_account_map(store)
        accounts.require(Account.INVENTORY, Account.ACCOUNTS_PAYABLE)
    except AccountingServiceError as exc:
        logger.error(
            "Account resolution failed during PO reception",
            extra={"store_id": str(store.pk), "purchase_order_id": str(purchase_order_id)},
        )
        raise PurchaseReceivingError("Failed to receive purchase order") from exc

    try:
        po = PurchaseOrder.objects.select_for_update().get(id=purchase_order_id, store=store)
    except PurchaseOrder.DoesNotExist as exc:
        raise PurchaseReceivingError("Purchase order not found") from exc

    if po.status not in PurchaseOrder.RECEIVABLE_STATUSES:
        raise PurchaseReceivingError(
            f"Purchase order in status '{po.status}' cannot be received"
        )

    lines = {
        str(line.product_id): line
        for line in PurchaseOrderItem.objects.select_for_update().filter(purchase_order=po)
    }

    posted_items = []
    for product_id, qty in received.items():
        line = lines.get(product_id)
        if line is None:
            raise PurchaseReceivingError(f"Product {product_id} is not on this purchase order")

        if qty > line.outstanding_quantity:
            raise PurchaseReceivingError(
                f"Cannot receive {qty} of product {product_id}; "
                f"only {line.outstanding_quantity} outstanding"
            )

        PurchaseOrderItem.objects.filter(pk=line.pk).update(
            received_quantity=F("received_quantity") + qty
        )
        increment_stock(product_id=line.product_id, quantity=qty)

        posted_items.append(
            {"product_id": product_id, "quantity": qty, "cost_price": line.cost_price}
        )

    all_received = not PurchaseOrderItem.objects.filter(
        purchase_order=po, received_quantity__lt=F("quantity")
    ).exists()

    po.status = (
        PurchaseOrder.STATUS_RECEIVED if all_received else PurchaseOrder.STATUS_PARTIALLY_RECEIVED
    )
    po.received_at = timezone.now()
    po.save(update_fields=["status", "received_at"])

    log_action(
        store=store,
        actor=actor,
        action="PO Stock Received",
        details=f"PO ID: {po.pk} | {len(posted_items)} item types.",
    )

    try:
        je = post_purchase_order_reception(
            purchase_order=po,
            received_items=posted_items,
            accounts=accounts,
        )
    except AccountingServiceError as exc:
        logger.exception(
            "PO reception ledger posting failed",
            extra={"purchase_order_id": str(po.pk)},
        )
        raise PurchaseReceivingError("Failed to receive purchase order") from exc

    logger.info(
        "Purchase order received",
        extra={
            "purchase_order_id": str(po.pk),
            "status": po.status,
            "journal_entry_id": str(je.id) if je else None,
        },
    )
    return po
