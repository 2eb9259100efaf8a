"""Application layer DTOs"""

from src.service.inventory.app.dto.purchase_validation_result import PurchaseValidationResult
from src.service.inventory.app.dto.reconciliation_result import (
    ReconciliationResult,
    TicketCountCheck,
    TicketCountVerification,
)
from src.service.inventory.app.dto.sale_result import SaleRecordResult, WebhookHandlingResult

__all__ = [
    'PurchaseValidationResult',
    'ReconciliationResult',
    'SaleRecordResult',
    'TicketCountCheck',
    'TicketCountVerification',
    'WebhookHandlingResult',
]
