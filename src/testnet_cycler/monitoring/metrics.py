"""Prometheus counters for transaction and cycle outcomes"""

from prometheus_client import Counter

TRANSACTIONS_SUBMITTED = Counter(
    'cycler_transactions_submitted_total',
    'Number of transactions broadcast to the network',
    ['operation']
)

TRANSACTIONS_CONFIRMED = Counter(
    'cycler_transactions_confirmed_total',
    'Number of transactions confirmed with a successful status',
    ['operation']
)

TRANSACTION_RETRIES = Counter(
    'cycler_transaction_retries_total',
    'Number of retried transaction attempts',
    ['operation']
)

TRANSACTIONS_FAILED = Counter(
    'cycler_transactions_failed_total',
    'Number of operations that exhausted their retry budget',
    ['operation']
)

CYCLES_COMPLETED = Counter(
    'cycler_cycles_completed_total',
    'Number of cycles in which every step succeeded',
    ['sequence']
)

CYCLES_FAILED = Counter(
    'cycler_cycles_failed_total',
    'Number of cycles that aborted a run',
    ['sequence']
)

ERRORS_TOTAL = Counter(
    'cycler_errors_total',
    'Errors recorded by component',
    ['component', 'error_type']
)
