from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path
from typing import Dict

import pandas as pd

from .config import WriteupConfig, save_config_snapshot


def fingerprint(df: pd.DataFrame) -> str:
    """Order-independent md5 of a table's rows."""
    if df.empty:
        return hashlib.md5(b"").hexdigest()
    rows = sorted(df.astype(str).agg("|".join, axis=1).tolist())
    return hashlib.md5("\n".join(rows).encode("utf-8")).hexdigest()


def write_manifest(
    config: WriteupConfig,
    tables: Dict[str, pd.DataFrame],
    artifacts: Dict[str, Path],
) -> Path:
    save_config_snapshot(config)
    manifest = {
        "run_id": config.run_id,
        "command": config.command,
        "output_dir": config.output_dir,
        "row_counts": {name: len(table) for name, table in tables.items()},
        "fingerprints": {name: fingerprint(table) for name, table in tables.items()},
        "artifacts": {name: str(path) for name, path in artifacts.items()},
        "config": json.loads(config.to_json()),
    }
    path = config.output_path("run_manifest.json")
    path.write_text(json.dumps(manifest, indent=2))
    logging.info("Wrote run manifest to %s", path)
    return path
