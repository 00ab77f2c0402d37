"""
Ledger loading for the flowwatch pipeline.

Reads the cleaned transaction CSV into :class:`~flowwatch.data.records.Transaction`
records.  All file-access concerns are isolated here so that the rest of the
pipeline can treat the record list as an opaque input.

Parsing rules
-------------
* The first row is a header and is skipped.  Columns are taken positionally
  in the order of :data:`flowwatch.config.TRANSACTION_COLUMNS`; a header
  with a different number of columns is rejected outright.
* A row with the wrong number of fields, bytes that are not valid UTF-8, or
  a ``step``, ``amount`` or ``isFraud`` field that does not parse, is
  malformed.
* Malformed rows are logged as warnings and skipped (the default), or abort
  the load with :class:`RowParseError` when ``strict=True``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

import numpy as np
import pandas as pd

from flowwatch.config import DATA_PATH, STRICT_ROW_PARSING, TRANSACTION_COLUMNS
from flowwatch.data.records import Transaction
from flowwatch.graph.builder import MoneyFlowGraph, build_money_flow_graph

logger = logging.getLogger(__name__)

# Substituted by the decoder for bytes that are not valid UTF-8.
UNDECODABLE = "\ufffd"


class RowParseError(ValueError):
    """Raised when a ledger row (or the header) cannot be interpreted."""


def _invalid_reasons(raw: pd.DataFrame) -> tuple[np.ndarray, dict[str, pd.Series]]:
    """
    Parse the numeric columns and explain every row that fails.

    Returns the per-row reason (empty string for valid rows) together with
    the parsed ``step``, ``amount`` and ``isFraud`` series.
    """
    step = pd.to_numeric(raw["step"], errors="coerce")
    amount = pd.to_numeric(raw["amount"], errors="coerce")
    is_fraud = pd.to_numeric(raw["isFraud"], errors="coerce")

    # Short rows are padded with NaN by the parser.
    field_counts = raw.notna().sum(axis=1)
    missing = field_counts < len(TRANSACTION_COLUMNS)
    short_reasons = np.array(
        [f"expected {len(TRANSACTION_COLUMNS)} fields, got {count}" for count in field_counts],
        dtype=object,
    )

    # Undecodable bytes were replaced with U+FFFD on read.
    bad_encoding = pd.Series(False, index=raw.index)
    for column in raw.columns:
        bad_encoding |= raw[column].str.contains(UNDECODABLE, regex=False, na=False)

    bad_step = step.isna() | (step % 1 != 0) | (step < 0)
    bad_amount = amount.isna()
    bad_fraud = is_fraud.isna() | (is_fraud % 1 != 0) | (is_fraud < 0)

    reasons = np.select(
        [missing, bad_encoding, bad_step, bad_amount, bad_fraud],
        [
            short_reasons,
            "invalid UTF-8",
            "Failed to parse step",
            "Failed to parse amount",
            "Failed to parse isFraud",
        ],
        default="",
    )
    return reasons, {"step": step, "amount": amount, "isFraud": is_fraud}


def load_transactions(
    file_path: Union[str, Path] = DATA_PATH,
    strict: bool = STRICT_ROW_PARSING,
) -> list[Transaction]:
    """
    Load every well-formed transaction from the ledger CSV at *file_path*.

    Parameters
    ----------
    file_path : str | Path
        Ledger CSV with a header row.  Defaults to
        :data:`flowwatch.config.DATA_PATH`.
    strict : bool
        Raise on the first malformed row instead of skipping it.

    Returns
    -------
    list[Transaction]
        Records in file order.

    Raises
    ------
    FileNotFoundError
        *file_path* does not exist.
    RowParseError
        The header is missing or has the wrong width, or (``strict`` only)
        a data row is malformed.
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    expected_fields = len(TRANSACTION_COLUMNS)
    skipped = 0

    def _on_bad_line(fields: list[str]) -> None:
        nonlocal skipped
        message = f"expected {expected_fields} fields, got {len(fields)}"
        if strict:
            raise RowParseError(f"Malformed record {fields!r}: {message}")
        logger.warning(f"Skipping malformed record {fields!r}: {message}")
        skipped += 1
        return None

    logger.info(f"Loading transactions from {file_path}...")
    read_options = dict(
        dtype=str,
        keep_default_na=False,
        encoding="utf-8",
        encoding_errors="replace",
        engine="python",
    )

    # ------------------------------------------------------------------ #
    # Header row: its width must match TRANSACTION_COLUMNS                #
    # ------------------------------------------------------------------ #
    try:
        header = pd.read_csv(file_path, nrows=0, index_col=False, **read_options).columns
    except pd.errors.EmptyDataError as e:
        raise RowParseError(f"{file_path} has no header row") from e

    if len(header) != expected_fields:
        raise RowParseError(
            f"Expected {expected_fields} columns in header, got {len(header)}: "
            f"{list(header)}"
        )

    # ------------------------------------------------------------------ #
    # Data rows: read with header=None so the header line fixes the      #
    # width and a wide first record is a bad line, not an index column   #
    # ------------------------------------------------------------------ #
    raw = pd.read_csv(
        file_path,
        header=None,
        on_bad_lines=_on_bad_line,
        **read_options,
    )
    raw = raw.iloc[1:].reset_index(drop=True)
    raw.columns = TRANSACTION_COLUMNS

    reasons, parsed = _invalid_reasons(raw)
    invalid = reasons != ""

    if invalid.any():
        for row_values, reason in zip(raw.loc[invalid].values.tolist(), reasons[invalid]):
            if strict:
                raise RowParseError(f"Malformed record {row_values!r}: {reason}")
            logger.warning(f"Skipping malformed record {row_values!r}: {reason}")
        skipped += int(invalid.sum())

    valid = ~invalid
    records = raw.loc[valid]
    transactions = [
        Transaction(
            step=int(step),
            type=tx_type,
            amount=float(amount),
            source=source,
            destination=destination,
            is_fraud=int(is_fraud),
        )
        for step, tx_type, amount, source, destination, is_fraud in zip(
            parsed["step"][valid],
            records["type"],
            parsed["amount"][valid],
            records["nameOrig"],
            records["nameDest"],
            parsed["isFraud"][valid],
        )
    ]

    if skipped:
        logger.warning(f"Skipped {skipped:,} malformed records")
    logger.info(f"Parsed {len(transactions):,} transactions")

    return transactions


def read_transaction_dataset(
    file_path: Union[str, Path] = DATA_PATH,
    strict: bool = STRICT_ROW_PARSING,
    show_progress: bool = False,
) -> MoneyFlowGraph:
    """Load the ledger at *file_path* and build its money-flow graph."""
    transactions = load_transactions(file_path, strict=strict)
    return build_money_flow_graph(transactions, show_progress=show_progress)
