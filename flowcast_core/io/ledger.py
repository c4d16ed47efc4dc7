from __future__ import annotations

from pathlib import Path
from typing import List

import pandas as pd

from flowcast_core.domain.errors import ValidationError
from flowcast_core.domain.models import Transaction
from flowcast_core.logging_setup import get_logger
from flowcast_core.services.aggregator import clean_transactions

logger = get_logger(__name__)

REQUIRED_COLUMNS = {"date", "amount"}
OPTIONAL_COLUMNS = {"type", "kind", "category", "description"}


def load_ledger(csv_path: str | Path) -> List[Transaction]:
    """
    Read a ledger CSV with at least ``date`` and ``amount`` columns.

    Rows without a ``type``/``kind`` are classified by sign. Rows that cannot
    be read are logged and skipped; the rest of the file still loads.
    """
    path = Path(csv_path)
    if not path.exists():
        raise FileNotFoundError(path)

    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.columns = [str(c).strip().lower() for c in df.columns]
    missing = REQUIRED_COLUMNS - set(df.columns)
    if missing:
        raise ValidationError(f"Missing columns in ledger CSV: {sorted(missing)}")

    keep = [c for c in df.columns if c in REQUIRED_COLUMNS | OPTIONAL_COLUMNS]
    records = [
        {key: (value.strip() or None) for key, value in row.items()}
        for row in df[keep].to_dict(orient="records")
    ]
    entries, rejected = clean_transactions(records)
    if rejected:
        logger.warning("Skipped %d of %d rows in %s", len(rejected), len(records), path)
    return entries
