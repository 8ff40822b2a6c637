"""
Shot name normalization.

Canonicalizes free-text shot names into the SQ##_SC##_SH## form used
by production folder listings.
"""

import re
from dataclasses import dataclass
from typing import Optional, Tuple

# Separators are any run of characters that are neither letters nor digits
_SHOT_CODE_RE = re.compile(
    r"SQ([0-9]+)[\W_]*SC([0-9]+)[\W_]*SH([0-9]+)",
    re.IGNORECASE,
)
_SEPARATOR_RUN_RE = re.compile(r"[\s-]+")


@dataclass(frozen=True)
class ShotCode:
    """Sequence, scene and shot numbers of a recognized shot name."""
    sequence: str
    scene: str
    shot: str

    def __str__(self) -> str:
        return f"SQ{self.sequence}_SC{self.scene}_SH{self.shot}"

    @property
    def sort_key(self) -> Tuple[int, int, int]:
        return int(self.sequence), int(self.scene), int(self.shot)


def parse_shot_code(raw: Optional[str]) -> Optional[ShotCode]:
    """Extract the padded shot code from a name, if it has one."""
    if not raw:
        return None
    match = _SHOT_CODE_RE.search(raw.strip().upper())
    if match is None:
        return None
    sequence, scene, shot = (group.zfill(2) for group in match.groups())
    return ShotCode(sequence=sequence, scene=scene, shot=shot)


def normalize_shot_name(raw: Optional[str]) -> str:
    """Normalize a shot name.

    Names containing a sequence/scene/shot pattern are rewritten to
    SQ##_SC##_SH## with each number padded to two digits. Any other
    name is uppercased with runs of spaces and dashes collapsed to a
    single underscore.

    Args:
        raw: Free-text shot name

    Returns:
        Normalized name, empty string for empty input
    """
    if not raw:
        return ""
    cleaned = raw.strip().upper()
    code = parse_shot_code(cleaned)
    if code is not None:
        return str(code)
    return _SEPARATOR_RUN_RE.sub("_", cleaned)
