"""Path utilities for session output directories."""

import datetime
from pathlib import Path
from typing import Iterable, Optional


OUTPUT_DIR_KEYS = ("downloads_dir", "videos_dir", "shots_dir", "traces_dir")


def ensure_directories(config: dict, keys: Iterable[str] = OUTPUT_DIR_KEYS) -> None:
    """Create every configured output directory that does not exist yet."""
    for key in keys:
        directory = config.get(key)
        if directory:
            Path(directory).mkdir(parents=True, exist_ok=True)


def resolve_output_path(output_path: str, default_directory: str) -> str:
    """
    Resolve an output path for a capture.

    Relative paths land under default_directory; absolute paths are kept.
    The parent directory is created so the engine can write the file.
    """
    path = Path(output_path).expanduser()
    if not path.is_absolute():
        path = Path(default_directory) / path
    path = path.resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    return str(path)


def default_trace_path(traces_dir: str, now: Optional[datetime.datetime] = None) -> str:
    """Timestamped trace file name under traces_dir."""
    now = now or datetime.datetime.now(datetime.timezone.utc)
    return str(Path(traces_dir) / f"trace-{now:%Y%m%d-%H%M%S}.zip")
