"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.inventory.app.command import (
    apply_completed_sale_use_case,
    cancel_pending_order_use_case,
    check_ticket_counts_use_case,
    complete_pending_order_use_case,
    create_event_use_case,
    create_pending_order_use_case,
    handle_payment_webhook_use_case,
    reconcile_ticket_count_use_case,
    record_box_office_sale_use_case,
    record_checkout_completed_use_case,
    update_ticket_counts_use_case,
)
from src.service.inventory.app.query import (
    get_recorded_sale_use_case,
    get_ticket_count_use_case,
    list_events_use_case,
    validate_ticket_purchase_use_case,
)


WIRE_MODULES: list[ModuleType] = [
    apply_completed_sale_use_case,
    cancel_pending_order_use_case,
    check_ticket_counts_use_case,
    complete_pending_order_use_case,
    create_event_use_case,
    create_pending_order_use_case,
    handle_payment_webhook_use_case,
    reconcile_ticket_count_use_case,
    record_box_office_sale_use_case,
    record_checkout_completed_use_case,
    update_ticket_counts_use_case,
    get_recorded_sale_use_case,
    get_ticket_count_use_case,
    list_events_use_case,
    validate_ticket_purchase_use_case,
]
