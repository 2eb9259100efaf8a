from prometheus_client import Counter, Histogram


class InventoryMetrics:
    """
    Ticket Inventory Core Metrics Collector

    Tracks sales per channel, counter-projection updates, drift found by
    reconciliation and store health (retries / exhaustion)
    """

    def __init__(self):
        # ========== Sale Channel Metrics ==========
        self.sales_recorded = Counter(
            'inventory_sales_recorded_total',
            'Sale attempts per channel',
            ['channel', 'result'],  # result: recorded/duplicate/rejected/failed
        )

        self.sale_quantity = Counter(
            'inventory_sale_tickets_total',
            'Tickets sold per channel',
            ['channel'],
        )

        self.validation_rejections = Counter(
            'inventory_validation_rejections_total',
            'Sale quantity validation rejections',
            ['reason'],  # invalid_quantity/sold_out/insufficient
        )

        # ========== Counter Projection Metrics ==========
        self.counter_updates = Counter(
            'inventory_counter_updates_total',
            'Atomic decrements applied to tickets_remaining',
            ['result'],  # applied/not_found/failed
        )

        self.reconciliations = Counter(
            'inventory_reconciliations_total',
            'Reconciliation runs',
            ['result'],  # in_sync/corrected/dry_run_drift/failed
        )

        self.drift_tickets = Counter(
            'inventory_drift_tickets_total',
            'Absolute ticket drift repaired by reconciliation',
        )

        # ========== Store Health Metrics ==========
        self.store_retries = Counter(
            'inventory_store_retries_total',
            'Retried store operations after a transient failure',
            ['operation'],
        )

        self.store_unavailable = Counter(
            'inventory_store_unavailable_total',
            'Store operations that exhausted the retry policy',
            ['operation'],
        )

        self.store_operation_duration = Histogram(
            'inventory_store_operation_duration_seconds',
            'Duration of store operations run through the retry policy',
            ['operation'],
            buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0],
        )

    # ========== Helper Methods ==========

    def record_sale(self, *, channel: str, result: str, quantity: int = 0):
        self.sales_recorded.labels(channel=channel, result=result).inc()
        if result == 'recorded' and quantity > 0:
            self.sale_quantity.labels(channel=channel).inc(quantity)

    def record_validation_rejection(self, *, reason: str):
        self.validation_rejections.labels(reason=reason).inc()

    def record_counter_update(self, *, result: str):
        self.counter_updates.labels(result=result).inc()

    def record_reconciliation(self, *, result: str, drift: int = 0):
        self.reconciliations.labels(result=result).inc()
        if drift and result == 'corrected':
            self.drift_tickets.inc(abs(drift))

    def record_store_retry(self, *, operation: str):
        self.store_retries.labels(operation=operation).inc()

    def record_store_unavailable(self, *, operation: str):
        self.store_unavailable.labels(operation=operation).inc()

    def observe_store_operation(self, *, operation: str, duration: float):
        self.store_operation_duration.labels(operation=operation).observe(duration)


# Global metrics instance
metrics = InventoryMetrics()
