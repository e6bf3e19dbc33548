"""
Stores for reference lookup results.

Every lookup is recorded for diagnostics and replay. The in-memory store
is enough for tests and offline runs; the disk store writes one file pair
per transaction:

    <dir>/<key>_full.json   raw payment response
    <dir>/<key>.txt         "<transaction id>|<description>"

where ``key`` is the digits-only form of the normalized transaction id.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional
import logging
import threading

from ..models.transaction import ReferenceLookupResult, safe_transaction_key

logger = logging.getLogger(__name__)


class ResultStore(ABC):
    """Keyed storage for lookup results."""

    @abstractmethod
    def save(self, result: ReferenceLookupResult) -> None:
        """Record a lookup result, replacing any earlier one for the same id."""
        pass

    @abstractmethod
    def load(self, transaction_id: str) -> Optional[ReferenceLookupResult]:
        """Return the recorded result for a transaction, if any."""
        pass

    def record(self, result: ReferenceLookupResult) -> bool:
        """
        Save a result without letting storage problems escape.

        Returns:
            True when the result was stored
        """
        try:
            self.save(result)
            return True
        except Exception as e:  # noqa: BLE001 - recording never fails the lookup
            logger.warning(
                f"Could not record lookup result for {result.transaction_id}: {e}"
            )
            return False


class InMemoryResultStore(ResultStore):
    """Result store backed by a dict."""

    def __init__(self) -> None:
        self._results: dict[str, ReferenceLookupResult] = {}
        self._lock = threading.Lock()

    def save(self, result: ReferenceLookupResult) -> None:
        with self._lock:
            self._results[safe_transaction_key(result.transaction_id)] = result

    def load(self, transaction_id: str) -> Optional[ReferenceLookupResult]:
        return self._results.get(safe_transaction_key(transaction_id))

    def __len__(self) -> int:
        return len(self._results)


class DiskResultStore(ResultStore):
    """Result store writing diagnostic file pairs to a directory."""

    def __init__(self, directory: Path):
        """
        Initialize the store.

        Args:
            directory: Scratch directory, created on first write
        """
        self.directory = Path(directory)

    def _paths(self, transaction_id: str) -> tuple[Path, Path]:
        key = safe_transaction_key(transaction_id)
        return self.directory / f"{key}_full.json", self.directory / f"{key}.txt"

    def save(self, result: ReferenceLookupResult) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        raw_path, desc_path = self._paths(result.transaction_id)
        raw_path.write_text(result.raw_response, encoding="utf-8")
        desc_path.write_text(
            f"{result.transaction_id}|{result.description}\n", encoding="utf-8"
        )

    def load(self, transaction_id: str) -> Optional[ReferenceLookupResult]:
        raw_path, desc_path = self._paths(transaction_id)
        if not desc_path.exists():
            return None

        line = desc_path.read_text(encoding="utf-8").rstrip("\n")
        stored_id, _, description = line.partition("|")
        raw_response = raw_path.read_text(encoding="utf-8") if raw_path.exists() else ""

        return ReferenceLookupResult(
            transaction_id=stored_id or transaction_id,
            payment_id="",
            raw_response=raw_response,
            description=description,
        )
