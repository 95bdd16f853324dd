"""
Core analysis logic for CLI.
"""
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..config.settings import trade_setup_config
from ..signal_generation.signal_generator import TradeSignalGenerator
from ..utils.clock import Clock
from ..utils.logging import get_logger

logger = get_logger(__name__)


class SnapshotFileError(Exception):
    """Raised when a snapshot file cannot be read."""


def load_snapshots(path: Union[str, Path]) -> List[Any]:
    """
    Load snapshots from a JSON file.

    The file may hold a single snapshot object, a list of snapshots, or an
    object with a ``snapshots`` list.

    Raises:
        SnapshotFileError: If the file is missing or is not valid JSON.
    """
    path = Path(path)
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise SnapshotFileError(f"Snapshot file not found: {path}") from e
    except OSError as e:
        raise SnapshotFileError(f"Unable to read {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise SnapshotFileError(f"Snapshot file is not UTF-8 text: {path}") from e
    except json.JSONDecodeError as e:
        raise SnapshotFileError(f"Invalid JSON in {path}: {e}") from e

    if isinstance(payload, dict) and isinstance(payload.get("snapshots"), list):
        return payload["snapshots"]
    if isinstance(payload, list):
        return payload
    return [payload]


class SnapshotAnalyzer:
    """Handles snapshot evaluation for CLI."""

    def __init__(self, clock: Optional[Clock] = None, config: Optional[Dict] = None):
        """
        Initialize the snapshot analyzer.

        Args:
            clock: Clock to evaluate against; system time when omitted
            config: Pipeline configuration; global settings when omitted
        """
        self.generator = TradeSignalGenerator(config or trade_setup_config.to_dict(), clock=clock)

    def analyze_files(self, paths: List[Union[str, Path]], workers: Optional[int] = None) -> List[Dict[str, Any]]:
        """
        Evaluate every snapshot in the given files.

        Args:
            paths: JSON snapshot files
            workers: Worker threads for batch evaluation

        Returns:
            List of result dictionaries in file order
        """
        snapshots: List[Any] = []
        for path in paths:
            loaded = load_snapshots(path)
            logger.info("Loaded snapshots", path=str(path), count=len(loaded))
            snapshots.extend(loaded)

        results = self.generator.evaluate_all(snapshots, max_workers=workers)

        errors = [result for result in results if result.error]
        if errors:
            logger.warning(
                "Some snapshots degraded to HOLD",
                count=len(errors),
                symbols=[result.symbol for result in errors],
            )

        return [result.to_dict() for result in results]
