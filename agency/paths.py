import os
from pathlib import Path


def agency_root() -> Path:
    override = os.environ.get("AGENCY_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".agency"


def package_root() -> Path:
    return Path(__file__).resolve().parent


def config_file() -> Path:
    """Return config file path in the agency root."""
    return agency_root() / "config.yaml"


def default_config_file() -> Path:
    return package_root() / "config.yaml"


def document_path(key: str, suffix: str = ".json", root: Path | None = None) -> Path:
    """Resolve a slash-separated document key to a file under the agency root."""
    parts = [p for p in key.split("/") if p]
    if not parts or any(p in (".", "..") for p in parts):
        raise ValueError(f"Invalid document key: {key!r}")
    base = root if root is not None else agency_root()
    return base.joinpath(*parts[:-1], parts[-1] + suffix)
