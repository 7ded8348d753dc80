# sales/services/payment_service.py

"""
CUSTOMER PAYMENTS ON ACCOUNT

Applies a payment to an unpaid / partially paid sale:
- amount_paid += amount
- payment_status = paid once amount_paid >= total, else partially_paid
- customer.account_balance -= amount
- Dr Cash / Cr Accounts Receivable
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from accounting.models import Account
from accounting.services.account_resolver import load_account_map
from accounting.services.exceptions import AccountingServiceError
from accounting.services.journal_entry_service import money
from accounting.services.posting import post_customer_payment
from audit.services import log_action
from sales.models import Customer, Payment, Sale
from sales.services.exceptions import SalePaymentError

logger = logging.getLogger("payments")

ZERO = Decimal("0.00")


def next_payment_status(*, amount_paid: Decimal, total: Decimal) -> str:
    if amount_paid >= total:
        return Sale.PAYMENT_PAID
    return Sale.PAYMENT_PARTIAL


@transaction.atomic
def record_sale_payment(
    *,
    store,
    actor,
    transaction_id: str,
    amount,
    method: str = "cash",
    date=None,
) -> Sale:
    amount = money(amount)
    if amount <= ZERO:
        raise SalePaymentError("Payment amount must be > 0")

    try:
        accounts = load_account_map(store)
        accounts.require(Account.CASH, Account.ACCOUNTS_RECEIVABLE)
    except AccountingServiceError as exc:
        raise SalePaymentError("Failed to record payment") from exc

    sale = (
        Sale.objects.select_for_update()
        .filter(store=store, transaction_id=transaction_id)
        .first()
    )
    if sale is None:
        raise SalePaymentError("Sale not found")

    if sale.payment_status == Sale.PAYMENT_PAID:
        raise SalePaymentError("Sale is already paid")

    new_amount_paid = money(Decimal(sale.amount_paid) + amount)
    sale.amount_paid = new_amount_paid
    sale.payment_status = next_payment_status(amount_paid=new_amount_paid, total=money(sale.total))
    sale.save(update_fields=["amount_paid", "payment_status"])

    payment = Payment.objects.create(
        sale=sale,
        date=date or timezone.now(),
        amount=amount,
        method=(method or "cash").strip().lower(),
    )

    if sale.customer_id:
        Customer.objects.filter(pk=sale.customer_id).update(
            account_balance=F("account_balance") - amount
        )

    log_action(
        store=store,
        actor=actor,
        action="Payment Recorded",
        details=f"For Invoice {sale.transaction_id}, Amount: {amount:.2f}",
    )

    try:
        post_customer_payment(sale=sale, payment=payment, accounts=accounts)
    except AccountingServiceError as exc:
        logger.exception(
            "Payment ledger posting failed",
            extra={"transaction_id": sale.transaction_id, "amount": str(amount)},
        )
        raise SalePaymentError("Failed to record payment") from exc

    logger.info(
        "Payment recorded",
        extra={
            "transaction_id": sale.transaction_id,
            "amount": str(amount),
            "payment_status": sale.payment_status,
        },
    )
    return sale
