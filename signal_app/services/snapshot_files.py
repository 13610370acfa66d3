"""Snapshot provider backed by JSON files on disk."""

import logging
from pathlib import Path

import orjson

from signal_core.models import MarketSnapshot
from signal_core.models.converters import snapshot_from_raw

logger = logging.getLogger(__name__)


class JsonFileSnapshotProvider:
    """Serves snapshots from ``{symbol: path}`` JSON files.

    Each file holds one raw snapshot (candle lists keyed by timeframe, with
    optional ``orderbook`` and ``ticker``).
    """

    def __init__(self, paths: dict[str, Path | str]):
        self._paths = {symbol: Path(path) for symbol, path in paths.items()}

    @classmethod
    def from_files(cls, files: list[Path | str]) -> "JsonFileSnapshotProvider":
        """Key each file by its upper-cased stem (``btcusdt.json`` -> BTCUSDT)."""
        return cls({Path(f).stem.upper(): f for f in files})

    @classmethod
    def from_directory(cls, directory: Path | str, symbols: list[str]) -> "JsonFileSnapshotProvider":
        """Serve ``<symbol>.json`` (lower-cased) for each symbol found in ``directory``."""
        directory = Path(directory)
        paths = {}
        for symbol in symbols:
            path = directory / f"{symbol.lower()}.json"
            if path.is_file():
                paths[symbol] = path
            else:
                logger.warning("No snapshot file for %s in %s", symbol, directory)
        return cls(paths)

    @property
    def symbols(self) -> list[str]:
        return list(self._paths)

    async def fetch_snapshot(self, symbol: str) -> MarketSnapshot:
        path = self._paths.get(symbol)
        if path is None:
            raise KeyError(f"No snapshot file for {symbol}")

        raw = orjson.loads(path.read_bytes())
        if not isinstance(raw, dict):
            raise ValueError(f"{path}: snapshot must be a JSON object")

        snapshot = snapshot_from_raw(symbol, raw)
        logger.debug(
            "Loaded %s from %s (%s)",
            symbol,
            path,
            ", ".join(f"{tf}={len(c)}" for tf, c in snapshot.candles.items()),
        )
        return snapshot
