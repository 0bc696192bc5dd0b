from __future__ import annotations

import json
import logging
from pathlib import Path

from gemforge.components.ledger import EconomyLedger

logger = logging.getLogger(__name__)


class LedgerStore:
    """JSON file persistence for the economy ledger.

    A missing or unreadable save yields a fresh ledger; a failed write is
    logged and otherwise ignored so gameplay keeps running on the in-memory
    state.
    """

    def __init__(self, save_path: Path | None = None) -> None:
        self._save_path = Path(save_path) if save_path is not None else self._default_save_path()

    @staticmethod
    def _default_save_path() -> Path:
        return Path.home() / ".gemforge" / "ledger.json"

    @property
    def path(self) -> Path:
        return self._save_path

    def load(self) -> EconomyLedger:
        try:
            with self._save_path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except FileNotFoundError:
            return EconomyLedger()
        except (json.JSONDecodeError, UnicodeDecodeError, OSError):
            logger.warning("Ledger save at %s is unreadable; starting fresh", self._save_path, exc_info=True)
            return EconomyLedger()
        if not isinstance(payload, dict):
            logger.warning("Ledger save at %s is not an object; starting fresh", self._save_path)
            return EconomyLedger()
        return EconomyLedger.from_dict(payload)

    def save(self, ledger: EconomyLedger) -> bool:
        try:
            self._save_path.parent.mkdir(parents=True, exist_ok=True)
            with self._save_path.open("w", encoding="utf-8") as handle:
                json.dump(ledger.to_dict(), handle, indent=2)
        except OSError:
            logger.warning("Could not write ledger to %s", self._save_path, exc_info=True)
            return False
        return True

    def __call__(self, ledger: EconomyLedger) -> None:
        self.save(ledger)
