"""Path configuration for the SYNOP cache."""

from pathlib import Path

# Downloaded files land here unless --cache-dir or the config says otherwise
DEFAULT_CACHE_DIR = Path("data") / "synop"

# Cache key of the station list
STATIONS_KEY = "stations"


def get_cache_path(cache_dir: Path, key: str) -> Path:
    """Get the path of a cached file.

    Args:
        cache_dir: Cache directory
        key: Resolved key (``YYYYMM``, ``YYYYMMDDHH`` or ``stations``)

    Returns:
        Path to the cached file: {cache_dir}/{key}.csv
    """
    return Path(cache_dir) / f"{key}.csv"


def ensure_cache_dir(cache_dir: Path) -> Path:
    """Create the cache directory if it doesn't exist."""
    cache_dir = Path(cache_dir)
    cache_dir.mkdir(parents=True, exist_ok=True)
    return cache_dir
