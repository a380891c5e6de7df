"""
Helper Functions
File and numeric helpers shared across the package
"""

import json
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))

def write_json_atomic(path: Path, payload: Dict[str, Any]):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".json.tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, default=str)
        os.replace(tmp_path, path)
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)

def read_json(path: Path, default: Any = None) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        return default

def replace_tree(source: Path, destination: Path):
    """Copy `source` over `destination`, leaving `destination` untouched if the copy fails."""
    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)
    staging = Path(tempfile.mkdtemp(dir=destination.parent, prefix=f".{destination.name}."))
    staged = staging / destination.name
    previous = staging / "previous"

    try:
        shutil.copytree(source, staged)
        if destination.exists():
            os.replace(destination, previous)
        try:
            os.replace(staged, destination)
        except OSError:
            if previous.exists():
                os.replace(previous, destination)
            raise
    finally:
        shutil.rmtree(staging, ignore_errors=True)

def copy_file(source: Path, destination: Path) -> Optional[Path]:
    if not Path(source).exists():
        return None
    Path(destination).parent.mkdir(parents=True, exist_ok=True)
    return Path(shutil.copy2(source, destination))
