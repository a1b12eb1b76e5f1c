from pathlib import Path
from typing import Iterable, List, Optional

from .transposition import Box

PREFERRED_ENCODINGS: List[str] = [
    "utf-8",
    "cp1252",
    "latin-1",
]


def format_five_groups(text: str, group_size: int = 5, groups_per_line: int = 5) -> str:
    """
    Upper-case text and split it into groups of five characters.

    Groups are separated by a space, with at most `groups_per_line` groups per
    line, the way radio messages were written down.
    """
    compact = "".join(text.split()).upper()
    groups = [compact[i : i + group_size] for i in range(0, len(compact), group_size)]
    lines = [" ".join(groups[i : i + groups_per_line]) for i in range(0, len(groups), groups_per_line)]
    return "\n".join(lines)


def render_box(box: Box) -> str:
    """Show the current content of a box, one row per line."""
    return "\n".join(" ".join(cell if cell is not None else " " for cell in row) for row in box.rows())


def decode_bytes_best_effort(data: bytes, preferred_encoding: Optional[str] = None, encodings: Optional[Iterable[str]] = None) -> str:
    """
    Decode bytes with a set of common encodings.

    Message files are often written on older German systems, so cp1252 and
    latin-1 are tried after utf-8. latin-1 accepts any byte, so the last
    candidate always succeeds when it is included.
    """
    candidates: List[str] = []
    if preferred_encoding:
        candidates.append(preferred_encoding)
    candidates.extend(list(encodings) if encodings else PREFERRED_ENCODINGS)

    seen = set()
    for enc in candidates:
        if enc.lower() in seen:
            continue
        seen.add(enc.lower())
        try:
            return data.decode(enc)
        except UnicodeDecodeError:
            continue
    return data.decode(candidates[0], errors="replace")


def read_text_file(path: Path, encoding: Optional[str] = None) -> str:
    """Read a plaintext or ciphertext file."""
    return decode_bytes_best_effort(Path(path).read_bytes(), preferred_encoding=encoding)
