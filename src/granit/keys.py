import string
from typing import List, Sequence

from .errors import EmptyKeyError

ALPHABET = string.ascii_lowercase


def clean_key(key: str) -> str:
    """Lower-case the key and keep only the letters a-z."""
    return "".join(ch for ch in key.lower() if ch in ALPHABET)


def derive_order(key: str) -> List[int]:
    """
    Convert a key into its rank permutation.

    Every position of the cleaned key receives the index its letter would have
    if the key were sorted alphabetically; equal letters are numbered from left
    to right. "cab" becomes [2, 0, 1], "ebbe" becomes [2, 0, 1, 3].
    """
    cleaned = clean_key(key)
    if not cleaned:
        raise EmptyKeyError("Key must contain at least one letter.")

    order = [0] * len(cleaned)
    rank = 0
    for letter in ALPHABET:
        for pos, key_letter in enumerate(cleaned):
            if key_letter == letter:
                order[pos] = rank
                rank += 1
    return order


def key_lookup(order: Sequence[int]) -> List[int]:
    """Inverse of a rank permutation: lookup[order[i]] == i."""
    lookup = [0] * len(order)
    for pos, rank in enumerate(order):
        lookup[rank] = pos
    return lookup


def validate_order(order: Sequence[int], columns: int) -> None:
    if columns < 1:
        raise ValueError("A box needs at least one column.")
    if len(order) != columns or sorted(order) != list(range(columns)):
        raise ValueError(f"Order must be a permutation of 0..{columns - 1}.")
