# purchases/services/payment_service.py

import logging
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from accounting.models import Account
from accounting.services.account_resolver import load_account_map
from accounting.services.exceptions import AccountingServiceError, JournalEntryCreationError
from accounting.services.journal_entry_service import money
from accounting.services.posting import post_supplier_payment
from audit.services import log_action
from purchases.models import SupplierInvoice, SupplierPayment


logger = logging.getLogger("payments")


class SupplierPaymentError(ValueError):
    pass


def next_invoice_status(*, amount_paid: Decimal, amount: Decimal) -> str:
    if amount_paid >= amount:
        return SupplierInvoice.STATUS_PAID
    if amount_paid > Decimal("0.00"):
        return SupplierInvoice.STATUS_PARTIALLY_PAID
    return SupplierInvoice.STATUS_UNPAID


@transaction.atomic
def record_supplier_payment(
    *,
    store,
    actor,
    invoice_id,
    amount,
    method: str = "cash",
    reference: str = "",
    date=None,
) -> SupplierPayment:
    """
    CREATE SUPPLIER PAYMENT (atomic)

    Dr Accounts Payable / Cr Cash, invoice amount_paid + status recomputed.
    """

    logger.info(
        "Initiating supplier payment",
        extra={
            "invoice_id": str(invoice_id),
            "amount": str(amount),
            "payment_method": method,
        },
    )

    try:
        amt = money(amount)
    except JournalEntryCreationError as exc:
        raise SupplierPaymentError("Invalid amount") from exc
    if amt <= Decimal("0.00"):
        logger.error(
            "Invalid payment amount",
            extra={"amount": str(amount)},
        )
        raise SupplierPaymentError("Amount must be > 0")

    try:
        accounts = load_account_map(store)
        accounts.require(Account.ACCOUNTS_PAYABLE, Account.CASH)
    except AccountingServiceError as exc:
        logger.exception("Account resolution failed during supplier payment")
        raise SupplierPaymentError("Failed to record supplier payment") from exc

    try:
        invoice = (
            SupplierInvoice.objects.select_for_update()
            .select_related("supplier")
            .get(id=invoice_id, store=store)
        )
    except SupplierInvoice.DoesNotExist as exc:
        logger.error(
            "Supplier invoice not found during payment",
            extra={"invoice_id": str(invoice_id)},
        )
        raise SupplierPaymentError("Invoice not found") from exc

    if invoice.status == SupplierInvoice.STATUS_PAID:
        raise SupplierPaymentError("Invoice is already paid")

    payment = SupplierPayment.objects.create(
        invoice=invoice,
        date=date or timezone.now(),
        amount=amt,
        method=(method or "cash").lower().strip(),
        reference=reference or "",
    )

    invoice.amount_paid = money(Decimal(invoice.amount_paid) + amt)
    invoice.status = next_invoice_status(
        amount_paid=invoice.amount_paid, amount=money(invoice.amount)
    )
    invoice.save(update_fields=["amount_paid", "status"])

    log_action(
        store=store,
        actor=actor,
        action="Supplier Payment Recorded",
        details=f"For Invoice {invoice.invoice_number}, Amount: {amt:.2f}",
    )

    try:
        je = post_supplier_payment(invoice=invoice, payment=payment, accounts=accounts)
    except AccountingServiceError as exc:
        logger.exception(
            "Unexpected failure posting supplier payment to ledger",
            extra={"payment_id": str(payment.id)},
        )
        raise SupplierPaymentError("Failed to record supplier payment") from exc

    logger.info(
        "Supplier payment completed successfully",
        extra={
            "payment_id": str(payment.id),
            "journal_entry_id": str(je.id),
        },
    )
    return payment
