from .sale import (
    PaymentSerializer,
    SaleCreateInputSerializer,
    SaleItemSerializer,
    SalePaymentInputSerializer,
    SaleSerializer,
)
from .sale_return import ReturnCreateInputSerializer, ReturnSerializer

__all__ = [
    "PaymentSerializer",
    "SaleCreateInputSerializer",
    "SaleItemSerializer",
    "SalePaymentInputSerializer",
    "SaleSerializer",
    "ReturnCreateInputSerializer",
    "ReturnSerializer",
]
