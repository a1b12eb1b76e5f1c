import string
import warnings
from typing import Callable, Dict, List, Optional

from .errors import KeyLengthWarning
from .keys import derive_order
from .substitution import letters_to_numbers, numbers_to_letters
from .transposition import Box, fill_box, fill_box_inverse, read_columns, sort_box
from .utils import render_box

MIN_KEY_LENGTH = 15

# GRANIT has no umlauts; "j" is reserved and written as "ii".
GERMAN_REPLACEMENTS: Dict[str, str] = {
    "ä": "ae",
    "ö": "oe",
    "ü": "ue",
    "ß": "ss",
    "j": "ii",
}
PLAIN_CHARACTERS = set(string.ascii_lowercase + string.digits + ".,")

Trace = Callable[[str], None]


def cleanup_input(text: str) -> str:
    """
    Lower-case text, replace German characters and drop everything that
    can't be encrypted (spaces included).
    """
    text = text.lower()
    for source, target in GERMAN_REPLACEMENTS.items():
        text = text.replace(source, target)
    return "".join(ch for ch in text if ch in PLAIN_CHARACTERS)


def prepare_plain(plain: str) -> str:
    return cleanup_input(plain)


def prepare_key(key: Optional[str]) -> str:
    """Clean a key like plaintext; keys keep letters only."""
    return "".join(ch for ch in cleanup_input(key or "") if ch in string.ascii_lowercase)


def prepare_cipher(cipher: str) -> List[str]:
    """Keep only the digits of a ciphertext, one symbol per digit."""
    return [ch for ch in cipher if ch in string.digits]


def check_keys(key1: str, key2: str, min_length: int = MIN_KEY_LENGTH) -> None:
    """Warn about transposition keys that are too short to be safe."""
    for label, key in (("Key 1", key1), ("Key 2", key2)):
        if len(key) < min_length:
            warnings.warn(
                f"{label} should be at least {min_length} characters long!",
                KeyLengthWarning,
                stacklevel=3,
            )


def _trace_box(trace: Optional[Trace], title: str, box: Box) -> None:
    if trace is not None:
        trace(f"{title}:\n{render_box(box)}")


def encrypt(
    subkey: Optional[str],
    key1: str,
    key2: str,
    plaintext: str,
    trace: Optional[Trace] = None,
    min_key_length: int = MIN_KEY_LENGTH,
) -> str:
    """
    Encrypt a message with GRANIT.

    The plaintext is substituted into numbers, then transposed with key 1
    and again with key 2. Raises EmptyKeyError when a key has no letters.
    """
    plain = prepare_plain(plaintext)
    subkey = prepare_key(subkey)
    key1 = prepare_key(key1)
    key2 = prepare_key(key2)

    order1 = derive_order(key1)
    order2 = derive_order(key2)
    check_keys(key1, key2, min_key_length)

    if trace is not None:
        trace(f"Key 1: {key1}\nKey 2: {key2}\nSubstitution key: {subkey}")
        trace(f"Prepared plain:\n{plain}")

    numbers = letters_to_numbers(plain, subkey)
    if trace is not None:
        trace(f"After substitution:\n{numbers}")

    box = fill_box(len(order1), numbers)
    _trace_box(trace, "Box before transposition", box)
    box = sort_box(box, order1)
    _trace_box(trace, "Box after sorting with first key", box)

    box = fill_box(len(order2), read_columns(box))
    _trace_box(trace, "Box after filling up to new key", box)
    box = sort_box(box, order2)
    _trace_box(trace, "Box after sorting with second key", box)

    return "".join(read_columns(box))


def decrypt(
    subkey: Optional[str],
    key1: str,
    key2: str,
    ciphertext: str,
    trace: Optional[Trace] = None,
    min_key_length: int = MIN_KEY_LENGTH,
) -> str:
    """
    Decrypt a GRANIT message.

    Anything but digits in the ciphertext is ignored. Raises
    ImpossiblePlaintextError when the result can't be a real plaintext.
    """
    cipher = prepare_cipher(ciphertext)
    subkey = prepare_key(subkey)
    key1 = prepare_key(key1)
    key2 = prepare_key(key2)

    order1 = derive_order(key1)
    order2 = derive_order(key2)
    check_keys(key1, key2, min_key_length)

    if trace is not None:
        trace(f"Key 1: {key1}\nKey 2: {key2}\nSubstitution key: {subkey}")
        trace(f"Prepared cipher:\n{''.join(cipher)}")

    box = fill_box_inverse(cipher, order2)
    _trace_box(trace, "Box after filling up and sorting second key", box)
    box = fill_box_inverse(box.read_rows(), order1)
    _trace_box(trace, "Box after filling up and sorting first key", box)

    return numbers_to_letters("".join(box.read_rows()), subkey)
