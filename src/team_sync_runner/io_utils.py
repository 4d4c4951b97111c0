from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigNotFoundError, ConfigParseError

YAML_SUFFIXES = {".yaml", ".yml"}


def resolve_path(base_dir: Path, relative: str | Path) -> Path:
    """Resolve *relative* against *base_dir* unless it is already absolute."""
    path = Path(relative)
    if path.is_absolute():
        return path
    return base_dir / path


def read_text(path: Path, *, kind: str = "configuration") -> str:
    if not path.is_file():
        raise ConfigNotFoundError(f"{kind.capitalize()} file not found: {path}", str(path))
    return path.read_text(encoding="utf-8")


def parse_document(text: str, *, suffix: str = ".json", source: str = "<string>") -> Any:
    """Parse JSON (or YAML for ``.yaml``/``.yml`` suffixes) into Python data."""
    try:
        if suffix.lower() in YAML_SUFFIXES:
            return yaml.safe_load(text)
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigParseError(f"{source}: JSONDecodeError: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigParseError(f"{source}: YAMLError: {exc}") from exc


def load_document(path: Path, *, kind: str = "configuration") -> Any:
    text = read_text(path, kind=kind)
    return parse_document(text, suffix=path.suffix, source=path.name)


def atomic_write_document(path: Path, data: dict[str, Any]) -> None:
    """Write *data* next to *path* and rename it into place."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=str(path.parent), suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            if path.suffix.lower() in YAML_SUFFIXES:
                yaml.safe_dump(data, handle, default_flow_style=False, sort_keys=False)
            else:
                json.dump(data, handle, indent=2)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise
