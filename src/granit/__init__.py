"""
GRANIT: numeric substitution followed by a double columnar transposition.
"""

from .errors import EmptyKeyError, GranitError, ImpossiblePlaintextError, KeyLengthWarning
from .keys import clean_key, derive_order, key_lookup
from .substitution import (
    SubstitutionMap,
    Token,
    build_map,
    letters_to_numbers,
    numbers_to_letters,
    tokenize,
)
from .transposition import (
    Box,
    fill_box,
    fill_box_inverse,
    read_columns,
    sort_box,
    transpose,
    untranspose,
)
from .cipher import (
    MIN_KEY_LENGTH,
    check_keys,
    cleanup_input,
    decrypt,
    encrypt,
    prepare_cipher,
    prepare_key,
    prepare_plain,
)
from .utils import format_five_groups, render_box, read_text_file
from .config import GranitConfig, load_config, save_config, mask_secret
from .history import log_event

__all__ = [
    "Box",
    "EmptyKeyError",
    "GranitConfig",
    "GranitError",
    "ImpossiblePlaintextError",
    "KeyLengthWarning",
    "MIN_KEY_LENGTH",
    "SubstitutionMap",
    "Token",
    "build_map",
    "check_keys",
    "clean_key",
    "cleanup_input",
    "decrypt",
    "derive_order",
    "encrypt",
    "fill_box",
    "fill_box_inverse",
    "format_five_groups",
    "key_lookup",
    "letters_to_numbers",
    "load_config",
    "log_event",
    "mask_secret",
    "numbers_to_letters",
    "prepare_cipher",
    "prepare_key",
    "prepare_plain",
    "read_columns",
    "read_text_file",
    "render_box",
    "save_config",
    "sort_box",
    "tokenize",
    "transpose",
    "untranspose",
]
