"""SolFlow web backend.

Dev convenience:
When running via `cd web && PYTHONPATH=. uvicorn backend.main:app`, the import
root is `web/`, so the sibling `solflow` package at the repository root is not
importable unless it is installed in the active venv. We add the repository
root to `sys.path` when needed.
"""

__version__ = "0.1.0"

from pathlib import Path
import sys


def _ensure_path(path: Path) -> None:
    value = str(path)
    if value not in sys.path:
        sys.path.insert(0, value)


repo_root = Path(__file__).resolve().parents[2]
if (repo_root / "solflow").is_dir():
    _ensure_path(repo_root)
