"""Common configuration constants used across the application."""

# HTTP and Network Constants
DEFAULT_TIMEOUT = 30.0
"""Default HTTP request timeout in seconds"""

MAX_KEEPALIVE_CONNECTIONS = 5
"""Maximum number of keepalive connections in pool"""

MAX_CONNECTIONS = 20
"""Maximum total number of connections"""

# Concurrency Limits
DEFAULT_MAX_CONCURRENT_REQUESTS = 10
"""Default number of validator lookups to run in parallel"""

# Units
GWEI_PER_ETH = 1_000_000_000
"""Gwei in one display unit (balances are reported by the node in Gwei)"""

# Metric names
VALIDATOR_STATUSES_METRIC = "validator_statuses"
"""Validator client metric family whose pubkey labels list the active keys"""

VALIDATOR_BALANCE_METRIC = "validator_balance"
"""Exported gauge for the current validator balance"""

VALIDATOR_WITHDRAWAL_METRIC = "validator_withdrawal"
"""Exported gauge for the total validator withdrawal"""

PUBKEY_LABEL = "pubkey"
"""Label carrying the validator public key"""

# Upstream defaults
DEFAULT_CL_NODE_URL = "http://agora-cl-node:3500"
DEFAULT_CL_VALIDATOR_METRICS_URL = "http://agora-cl-validator:8081"
DEFAULT_SCAN_URL = "https://www.agorascan.io"

# Scheduler
DEFAULT_BALANCE_SCHEDULE = "*/10 * * * * *"
"""Six-field cron expression (sec min hour day month weekday)"""

# Metrics exposition
DEFAULT_METRICS_ADDRESS = "0.0.0.0"  # noqa: S104
DEFAULT_METRICS_PORT = 7000


__all__ = [
    "DEFAULT_BALANCE_SCHEDULE",
    "DEFAULT_CL_NODE_URL",
    "DEFAULT_CL_VALIDATOR_METRICS_URL",
    "DEFAULT_MAX_CONCURRENT_REQUESTS",
    "DEFAULT_METRICS_ADDRESS",
    "DEFAULT_METRICS_PORT",
    "DEFAULT_SCAN_URL",
    "DEFAULT_TIMEOUT",
    "GWEI_PER_ETH",
    "MAX_CONNECTIONS",
    "MAX_KEEPALIVE_CONNECTIONS",
    "PUBKEY_LABEL",
    "VALIDATOR_BALANCE_METRIC",
    "VALIDATOR_STATUSES_METRIC",
    "VALIDATOR_WITHDRAWAL_METRIC",
]
