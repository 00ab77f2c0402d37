"""
Pipeline configuration for the flowwatch money-flow analysis.

This module is the single source of truth for every tunable constant used
across the pipeline.  Import directly from here in all flowwatch modules.

Every value can be overridden through an environment variable (or a ``.env``
file in the working directory, loaded via ``python-dotenv``).  Changing a
classification threshold changes which accounts get flagged: treat it as a
behaviour change, not a tuning fix.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# ============================================================================
# INPUT DATA
# ============================================================================
# Cleaned ledger export: one transaction per row, header row first.
DATA_PATH: Path = Path(
    os.getenv("FLOWWATCH_DATA_PATH", "data/cleaned_fraud_dataset.csv")
)

# Positional column layout of the ledger.  The header text itself is ignored;
# columns are always read in this order.
TRANSACTION_COLUMNS: list = ["step", "type", "amount", "nameOrig", "nameDest", "isFraud"]

# When True a single malformed row aborts the whole load instead of being
# skipped with a warning.
STRICT_ROW_PARSING: bool = _env_flag("FLOWWATCH_STRICT_ROWS", False)

# ============================================================================
# LOGGING
# ============================================================================
LOG_LEVEL: str = os.getenv("FLOWWATCH_LOG_LEVEL", "INFO")

# ============================================================================
# COLLECTOR THRESHOLDS
# ============================================================================
# Minimum inbound sample size (strictly greater than).
COLLECTOR_MIN_INCOMING_COUNT: int = int(
    os.getenv("FLOWWATCH_COLLECTOR_MIN_INCOMING_COUNT", 5)
)

# Inbound count must exceed this multiple of the outbound count.
COLLECTOR_COUNT_RATIO: int = int(os.getenv("FLOWWATCH_COLLECTOR_COUNT_RATIO", 3))

# Retention rate must exceed this fraction.
COLLECTOR_MIN_RETENTION: float = float(
    os.getenv("FLOWWATCH_COLLECTOR_MIN_RETENTION", 0.7)
)

# ============================================================================
# MONEY MULE THRESHOLDS
# ============================================================================
# Outgoing volume must exceed this fraction of incoming volume.
MULE_MIN_PASS_THROUGH: float = float(os.getenv("FLOWWATCH_MULE_MIN_PASS_THROUGH", 0.5))

# Retention rate must stay below this fraction.
MULE_MAX_RETENTION: float = float(os.getenv("FLOWWATCH_MULE_MAX_RETENTION", 0.4))

# Materiality floor on incoming volume.
MULE_MIN_INCOMING_VOLUME: float = float(
    os.getenv("FLOWWATCH_MULE_MIN_INCOMING_VOLUME", 10000.0)
)

# ============================================================================
# REPORTING
# ============================================================================
# Maximum rows rendered per category before the "more not shown" notice.
COLLECTOR_DISPLAY_LIMIT: int = int(os.getenv("FLOWWATCH_COLLECTOR_DISPLAY_LIMIT", 1000))
MULE_DISPLAY_LIMIT: int = int(os.getenv("FLOWWATCH_MULE_DISPLAY_LIMIT", 500))
