import string
from dataclasses import dataclass
from types import MappingProxyType
from typing import List, Literal, Mapping, Optional, Tuple

from .errors import ImpossiblePlaintextError
from .keys import clean_key

# Straddling layout: 0-7 are written with one digit, 80-99 with two.
CODES: Tuple[int, ...] = tuple(range(0, 8)) + tuple(range(80, 100))
RESERVED_LETTER = "j"
LETTERS: Tuple[str, ...] = tuple(ch for ch in string.ascii_lowercase if ch != RESERVED_LETTER)
NUMBER_SIGNAL = "_"
TRAILING_SYMBOLS: Tuple[str, ...] = (NUMBER_SIGNAL, ".", ",")
DEFAULT_SYMBOLS: Tuple[str, ...] = LETTERS + TRAILING_SYMBOLS

TOGGLE_CODE = 97
TOGGLE = str(TOGGLE_CODE)
# The signal "_" never decodes to text; an empty region is "empty-number-mode".
UNLIKELY_PUNCTUATION: Tuple[str, ...] = (",,", ",.", ".,", "..")

TokenKind = Literal["code", "digit", "toggle"]


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: int


@dataclass(frozen=True)
class SubstitutionMap:
    """Bijection between the 28 plaintext symbols and the 28 numeric codes."""

    encoding: Mapping[str, int]
    decoding: Mapping[int, str]

    @property
    def signal(self) -> str:
        """Digits written for the number signal (always the toggle code)."""
        return str(self.encoding[NUMBER_SIGNAL])

    def code_for(self, symbol: str) -> str:
        if symbol == NUMBER_SIGNAL or symbol not in self.encoding:
            raise ValueError(f"Symbol '{symbol}' cannot be substituted.")
        return str(self.encoding[symbol])

    def symbol_for(self, code: int) -> str:
        if code == TOGGLE_CODE or code not in self.decoding:
            raise ValueError(f"Code {code} does not stand for a symbol.")
        return self.decoding[code]


def build_map(subkey: Optional[str] = None) -> SubstitutionMap:
    """
    Build the substitution table, optionally seeded by a subkey.

    The subkey's letters take the first codes (repeats and the reserved letter
    are skipped), the remaining letters follow alphabetically. The number
    signal, "." and "," always close the table, so they keep 97, 98 and 99.
    """
    symbols: List[str] = []
    if subkey:
        for letter in clean_key(subkey):
            if letter != RESERVED_LETTER and letter not in symbols:
                symbols.append(letter)
    symbols.extend(letter for letter in LETTERS if letter not in symbols)
    symbols.extend(TRAILING_SYMBOLS)

    encoding = dict(zip(symbols, CODES))
    decoding = {code: symbol for symbol, code in encoding.items()}
    return SubstitutionMap(encoding=MappingProxyType(encoding), decoding=MappingProxyType(decoding))


def letters_to_numbers(plain: str, subkey: Optional[str] = None) -> str:
    """
    Substitute a prepared plaintext into a number stream.

    Digit runs are wrapped in the number signal and every digit is written
    three times: "a12b" -> "0" "97" "111" "222" "97" "1".
    """
    table = build_map(subkey)
    output: List[str] = []
    number_mode_on = False

    for symbol in plain:
        if symbol in string.digits:
            if not number_mode_on:
                output.append(table.signal)
                number_mode_on = True
            output.append(symbol * 3)
            continue
        if number_mode_on:
            output.append(table.signal)
            number_mode_on = False
        output.append(table.code_for(symbol))

    if number_mode_on:
        output.append(table.signal)
    return "".join(output)


def tokenize(stream: str) -> List[Token]:
    """
    Split a number stream into code, digit and toggle tokens.

    Outside number mode "8" and "9" open a two-digit code and "97" toggles.
    Inside number mode the stream is read in triples: three equal digits are
    one digit, otherwise "97" closes the region. "999" is therefore always a
    nine and never mistaken for the toggle.
    """
    if any(ch not in string.digits for ch in stream):
        raise ValueError("Number stream may only contain the digits 0-9.")

    tokens: List[Token] = []
    number_mode = False
    pos = 0
    length = len(stream)

    while pos < length:
        if number_mode:
            chunk = stream[pos : pos + 3]
            if len(chunk) == 3 and chunk == chunk[0] * 3:
                tokens.append(Token("digit", int(chunk[0])))
                pos += 3
            elif stream.startswith(TOGGLE, pos):
                if tokens[-1].kind == "toggle":
                    raise ImpossiblePlaintextError(
                        "empty-number-mode",
                        f"Number signal at position {pos - 2} is not followed by any number.",
                    )
                tokens.append(Token("toggle", TOGGLE_CODE))
                number_mode = False
                pos += 2
            else:
                raise ImpossiblePlaintextError(
                    "untripled-digits",
                    f"Numbers at position {pos} are present, but they are not tripled.",
                )
            continue

        head = stream[pos]
        if head in "89":
            if pos + 1 >= length:
                raise ImpossiblePlaintextError(
                    "truncated-code",
                    f"Stream ends on '{head}' without the second digit of its code.",
                )
            code = int(stream[pos : pos + 2])
            if code == TOGGLE_CODE:
                tokens.append(Token("toggle", code))
                number_mode = True
            else:
                tokens.append(Token("code", code))
            pos += 2
        else:
            tokens.append(Token("code", int(head)))
            pos += 1

    if number_mode:
        raise ImpossiblePlaintextError(
            "unterminated-number-mode", "Number signal is opened but never closed."
        )
    return tokens


def check_punctuation(text: str) -> None:
    """Reject decoded text with punctuation no operator would have sent."""
    for pattern in UNLIKELY_PUNCTUATION:
        if pattern in text:
            raise ImpossiblePlaintextError("punctuation", f"Unlikely punctuation '{pattern}' in plaintext.")
    if text.endswith(","):
        raise ImpossiblePlaintextError("punctuation", "Plaintext must not end with a comma.")


def numbers_to_letters(stream: str, subkey: Optional[str] = None) -> str:
    """
    Turn a number stream back into letters, validating that it is plausible.

    Raises ImpossiblePlaintextError for truncated codes, unbalanced or empty
    number regions, untripled digits and punctuation collisions.
    """
    table = build_map(subkey)
    letters: List[str] = []
    for token in tokenize(stream):
        if token.kind == "digit":
            letters.append(str(token.value))
        elif token.kind == "code":
            letters.append(table.symbol_for(token.value))

    text = "".join(letters)
    check_punctuation(text)
    return text
