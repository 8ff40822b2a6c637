"""
Shot list files.

Reads batches of shot candidates from YAML files or plain text
listings such as "SQ21_SC01_SH02 - 49".
"""

import logging
import re
from pathlib import Path
from typing import Any, List, Union

import yaml

from framecount.core.shots import ShotCandidate

logger = logging.getLogger(__name__)

YAML_SUFFIXES = {".yaml", ".yml"}

# Trailing frame count separated from the name by a dash and/or whitespace
_LISTING_LINE_RE = re.compile(r"^(?P<name>.+?)(?:\s*-\s*|\s+)(?P<frames>\d+)$")


def load_shot_file(path: Union[str, Path]) -> List[ShotCandidate]:
    """Load shot candidates from a file.

    Args:
        path: YAML file (.yaml/.yml) or text listing with one shot per line

    Returns:
        Candidates in file order, not yet normalized or deduplicated

    Raises:
        FileNotFoundError: If the file doesn't exist
        yaml.YAMLError: If a YAML file is invalid
        ValueError: If a YAML file has the wrong structure
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Shot file not found: {path}")

    text = file_path.read_text(encoding="utf-8")
    if file_path.suffix.lower() in YAML_SUFFIXES:
        return _parse_yaml(text, str(path))
    return parse_listing(text)


def parse_listing_line(line: str):
    """Split a listing line into a candidate, or None if it has no frame count."""
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None
    match = _LISTING_LINE_RE.match(stripped)
    if match is None:
        return None
    return ShotCandidate(name=match.group("name").strip(), frames=int(match.group("frames")))


def parse_listing(text: str) -> List[ShotCandidate]:
    """Parse a plain text listing, skipping blanks, comments and bad lines."""
    candidates = []
    for number, line in enumerate(text.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        candidate = parse_listing_line(stripped)
        if candidate is None:
            logger.warning("Skipping line %d without a frame count: %r", number, stripped)
            continue
        candidates.append(candidate)
    return candidates


def _parse_yaml(text: str, path: str) -> List[ShotCandidate]:
    try:
        data: Any = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Invalid YAML in shot file {path}: {e}")

    if data is None:
        return []
    if isinstance(data, dict):
        unknown_keys = set(data.keys()) - {'shots'}
        if unknown_keys:
            raise ValueError(f"Unknown shot file keys: {unknown_keys}")
        data = data.get('shots') or []
    if not isinstance(data, list):
        raise ValueError("Shot file must contain a list of shots")

    candidates = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise ValueError(f"shots[{index}] must be a dictionary")
        unknown_keys = set(item.keys()) - {'name', 'frames'}
        if unknown_keys:
            raise ValueError(f"Unknown keys in shots[{index}]: {unknown_keys}")
        name = item.get('name')
        candidates.append(ShotCandidate(
            name="" if name is None else str(name),
            frames=item.get('frames'),
        ))
    return candidates
