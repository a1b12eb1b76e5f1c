import random
import unittest
import warnings

from granit import (
    Box,
    EmptyKeyError,
    ImpossiblePlaintextError,
    KeyLengthWarning,
    build_map,
    cleanup_input,
    decrypt,
    derive_order,
    encrypt,
    fill_box,
    fill_box_inverse,
    key_lookup,
    letters_to_numbers,
    numbers_to_letters,
    prepare_cipher,
    prepare_key,
    render_box,
    sort_box,
    tokenize,
    transpose,
    untranspose,
)

LONG_KEY = "abcdefghijklmno"


class TestKeys(unittest.TestCase):
    def test_derive_order(self) -> None:
        self.assertEqual(derive_order("cab"), [2, 0, 1])
        self.assertEqual(derive_order("ebbe"), [2, 0, 1, 3])
        self.assertEqual(derive_order("Ca-B!"), [2, 0, 1])
        self.assertEqual(derive_order("a"), [0])

    def test_empty_key(self) -> None:
        with self.assertRaises(EmptyKeyError):
            derive_order("123 !?")
        with self.assertRaises(EmptyKeyError):
            derive_order("")

    def test_order_is_permutation(self) -> None:
        for key in ["gutehaltenichbingewiss", "dasserderfeinstemann", "zzzzaaaa", "rheinast"]:
            order = derive_order(key)
            self.assertEqual(sorted(order), list(range(len(key))))
            lookup = key_lookup(order)
            self.assertEqual([lookup[rank] for rank in order], list(range(len(key))))
            self.assertEqual([order[pos] for pos in lookup], list(range(len(key))))

    def test_key_lookup(self) -> None:
        self.assertEqual(key_lookup([2, 0, 1]), [1, 2, 0])

    def test_prepare_key(self) -> None:
        self.assertEqual(prepare_key("Gute halten. Ich bin gewiß,"), "gutehaltenichbingewiss")
        self.assertEqual(prepare_key("Jäger 99"), "iiaeger")
        self.assertEqual(prepare_key(None), "")


class TestSubstitution(unittest.TestCase):
    def test_default_map(self) -> None:
        table = build_map()
        self.assertEqual(len(table.encoding), 28)
        self.assertEqual(table.encoding["a"], 0)
        self.assertEqual(table.encoding["h"], 7)
        self.assertEqual(table.encoding["i"], 80)
        self.assertEqual(table.encoding["k"], 81)
        self.assertEqual(table.encoding["z"], 96)
        self.assertEqual(table.encoding["_"], 97)
        self.assertEqual(table.encoding["."], 98)
        self.assertEqual(table.encoding[","], 99)
        self.assertNotIn("j", table.encoding)
        self.assertEqual(table.signal, "97")

    def test_subkey_map(self) -> None:
        table = build_map("RHEINAST")
        expected = {"r": 0, "h": 1, "e": 2, "i": 3, "n": 4, "a": 5, "s": 6, "t": 7, "b": 80, "c": 81, "z": 96}
        for symbol, code in expected.items():
            self.assertEqual(table.encoding[symbol], code)
        self.assertEqual(table.encoding["_"], 97)
        self.assertEqual(table.encoding["."], 98)
        self.assertEqual(table.encoding[","], 99)
        # repeats and the reserved letter don't take codes
        self.assertEqual(dict(build_map("rheinastrr").encoding), dict(table.encoding))
        self.assertEqual(build_map("jot").encoding["o"], 0)
        self.assertEqual(build_map("jot").encoding["t"], 1)

    def test_map_is_bijective(self) -> None:
        for subkey in [None, "rheinast", "zyxwvutsrqponmlkihgfedcba", "aaaa"]:
            table = build_map(subkey)
            self.assertEqual(len(set(table.encoding.values())), 28)
            self.assertEqual({code: sym for sym, code in table.encoding.items()}, dict(table.decoding))

    def test_map_is_read_only(self) -> None:
        table = build_map("rheinast")
        with self.assertRaises(TypeError):
            table.encoding["a"] = 5
        with self.assertRaises(TypeError):
            table.decoding[0] = "z"
        self.assertEqual(build_map("rheinast").encoding["a"], 5)

    def test_signal_is_not_a_symbol(self) -> None:
        table = build_map()
        with self.assertRaises(ValueError):
            table.symbol_for(97)
        with self.assertRaises(ValueError):
            table.code_for("_")

    def test_letters_to_numbers(self) -> None:
        self.assertEqual(letters_to_numbers("hello"), "74828285")
        self.assertEqual(letters_to_numbers("a.b,"), "098199")
        self.assertEqual(letters_to_numbers("rhein", "rheinast"), "01234")

    def test_number_signal(self) -> None:
        self.assertEqual(letters_to_numbers("12"), "9711122297")
        self.assertEqual(letters_to_numbers("am12maerz"), "083971112229783048896")
        for k in range(1, 6):
            self.assertEqual(letters_to_numbers("a" + "5" * k + "b"), "0" + "97" + "555" * k + "97" + "1")

    def test_toggle_count_is_even(self) -> None:
        for plain in ["1", "a1b22c333", "2024.", "abc", "9a8b7"]:
            tokens = tokenize(letters_to_numbers(plain))
            toggles = [t for t in tokens if t.kind == "toggle"]
            self.assertEqual(len(toggles) % 2, 0)

    def test_unknown_symbol(self) -> None:
        with self.assertRaises(ValueError):
            letters_to_numbers("a_b")
        with self.assertRaises(ValueError):
            letters_to_numbers("jot")

    def test_numbers_to_letters(self) -> None:
        self.assertEqual(numbers_to_letters("74828285"), "hello")
        self.assertEqual(numbers_to_letters("083971112229783048896"), "am12maerz")
        self.assertEqual(numbers_to_letters("9711122297"), "12")
        self.assertEqual(numbers_to_letters("01234", "rheinast"), "rhein")
        self.assertEqual(numbers_to_letters(""), "")

    def test_punctuation_decodes(self) -> None:
        self.assertEqual(numbers_to_letters("0981"), "a.b")
        self.assertEqual(numbers_to_letters("0991"), "a,b")
        self.assertEqual(numbers_to_letters("098"), "a.")
        # a closing toggle followed by "." or ","
        self.assertEqual(numbers_to_letters("979999798"), "9.")
        self.assertEqual(numbers_to_letters("9799997990"), "9,a")
        self.assertEqual(numbers_to_letters(letters_to_numbers("am12.maerz,9.")), "am12.maerz,9.")

    def test_toggle_next_to_nines(self) -> None:
        # "97" inside a number region is read as 999 777, never as the toggle
        stream = letters_to_numbers("97")
        self.assertEqual(stream, "9799977797")
        self.assertEqual([t.kind for t in tokenize(stream)], ["toggle", "digit", "digit", "toggle"])
        self.assertEqual(numbers_to_letters(stream), "97")
        self.assertEqual(numbers_to_letters(letters_to_numbers("9a")), "9a")
        self.assertEqual(numbers_to_letters(letters_to_numbers("x979y")), "x979y")

    def test_impossible_plaintexts(self) -> None:
        cases = {
            "0748": "truncated-code",
            "07999": "truncated-code",
            "97111": "unterminated-number-mode",
            "01971112229797111": "unterminated-number-mode",
            "9797": "empty-number-mode",
            "0979701": "empty-number-mode",
            "97112": "untripled-digits",
            "971119": "untripled-digits",
            "9898": "punctuation",
            "9998": "punctuation",
            "9899": "punctuation",
            "9999": "punctuation",
            "099": "punctuation",
        }
        for stream, reason in cases.items():
            with self.assertRaises(ImpossiblePlaintextError, msg=stream) as ctx:
                numbers_to_letters(stream)
            self.assertEqual(ctx.exception.reason, reason, msg=stream)

    def test_non_digit_stream(self) -> None:
        with self.assertRaises(ValueError):
            tokenize("12a")


class TestTransposition(unittest.TestCase):
    def test_box_geometry(self) -> None:
        box = Box(5, 17)
        self.assertEqual(box.height, 4)
        self.assertEqual(box.long_columns, 2)
        self.assertEqual(box.column_height(1), 4)
        self.assertEqual(box.column_height(2), 3)
        self.assertEqual(len(box.cells), 20)
        uniform = Box(5, 15)
        self.assertEqual(uniform.height, 3)
        self.assertEqual(uniform.long_columns, 0)
        self.assertEqual(uniform.column_height(4), 3)
        with self.assertRaises(ValueError):
            Box(0, 3)

    def test_transpose_uneven(self) -> None:
        self.assertEqual(transpose(list("abcdefg"), [2, 0, 1]), list("becfadg"))
        self.assertEqual(untranspose(list("becfadg"), [2, 0, 1]), list("abcdefg"))

    def test_transpose_fewer_symbols_than_columns(self) -> None:
        self.assertEqual(transpose(list("ab"), [2, 0, 1]), ["b", "a"])
        self.assertEqual(untranspose(["b", "a"], [2, 0, 1]), ["a", "b"])

    def test_inverse_law(self) -> None:
        orders = [[0], [1, 0], [2, 0, 1], [3, 1, 4, 0, 2], derive_order("gutehaltenichbingewiss")]
        for order in orders:
            for total in range(0, 60):
                symbols = [f"s{i}" for i in range(total)]
                scrambled = transpose(symbols, order)
                self.assertEqual(len(scrambled), total)
                self.assertEqual(untranspose(scrambled, order), symbols, msg=f"{order} / {total}")

    def test_uniform_and_uneven_boxes(self) -> None:
        order = derive_order("knife")
        for total in (15, 17):
            symbols = [str(i) for i in range(total)]
            self.assertEqual(untranspose(transpose(symbols, order), order), symbols)

    def test_sort_box_rejects_bad_order(self) -> None:
        box = fill_box(3, "abcdef")
        with self.assertRaises(ValueError):
            sort_box(box, [0, 0, 1])
        with self.assertRaises(ValueError):
            fill_box_inverse(list("abc"), [1, 2])

    def test_incomplete_box(self) -> None:
        box = Box(3, 4)
        box.cells[0] = "a"
        with self.assertRaises(ValueError):
            box.read_rows()

    def test_render_box(self) -> None:
        self.assertEqual(render_box(fill_box(3, "abcdef")), "a b c\nd e f")


class TestCipher(unittest.TestCase):
    def test_cleanup_input(self) -> None:
        self.assertEqual(cleanup_input("Jeder Zwischenfall, am 12. März!"), "iiederzwischenfall,am12.maerz")
        self.assertEqual(cleanup_input("Öl über Straße"), "oelueberstrasse")
        self.assertEqual(prepare_cipher("1234 5678\n90x"), list("1234567890"))

    def test_hello_with_long_keys(self) -> None:
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            cipher = encrypt(None, LONG_KEY, LONG_KEY, "hello")
            self.assertEqual(cipher, "74828285")
            self.assertEqual(decrypt(None, LONG_KEY, LONG_KEY, cipher), "hello")
        self.assertFalse([w for w in caught if issubclass(w.category, KeyLengthWarning)])

    def test_numbers_with_long_keys(self) -> None:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", KeyLengthWarning)
            cipher = encrypt(None, LONG_KEY, LONG_KEY, "12")
            self.assertEqual(cipher, "9711122297")
            self.assertEqual(decrypt(None, LONG_KEY, LONG_KEY, cipher), "12")

    def test_short_keys(self) -> None:
        with self.assertWarns(KeyLengthWarning):
            cipher = encrypt(None, "cab", "ba", "hello")
        self.assertEqual(cipher, "88784522")
        with self.assertWarns(KeyLengthWarning):
            self.assertEqual(decrypt(None, "cab", "ba", "8878 4522\n"), "hello")

    def test_empty_key(self) -> None:
        with self.assertRaises(EmptyKeyError):
            encrypt(None, "1234", LONG_KEY, "hello")
        with self.assertRaises(EmptyKeyError):
            decrypt(None, LONG_KEY, "...", "74828285")

    def test_decrypt_failure(self) -> None:
        with self.assertRaises(ImpossiblePlaintextError):
            decrypt(None, LONG_KEY, LONG_KEY, "0748")

    def test_message_round_trip(self) -> None:
        plain = (
            "Jeder Zwischenfall bei Unternehmen Edelweiß am 12 März ist möglichst "
            "zu vermeiden Bericht bis 1 April"
        )
        key1 = "gute halten. Ich bin gewiß,"
        key2 = "daß er der feinste Mann"
        cipher = encrypt("RHEINAST", key1, key2, plain)
        self.assertTrue(cipher.isdigit())
        self.assertNotEqual(cipher, letters_to_numbers(cleanup_input(plain), "rheinast"))
        self.assertEqual(decrypt("RHEINAST", key1, key2, cipher), cleanup_input(plain))

    def test_punctuation_round_trip(self) -> None:
        plain = "am 12. maerz, 9."
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", KeyLengthWarning)
            cipher = encrypt(None, LONG_KEY, LONG_KEY, plain)
            self.assertEqual(decrypt(None, LONG_KEY, LONG_KEY, cipher), "am12.maerz,9.")
        key1 = "gute halten. Ich bin gewiß,"
        key2 = "daß er der feinste Mann"
        cipher = encrypt("RHEINAST", key1, key2, plain)
        self.assertEqual(decrypt("RHEINAST", key1, key2, cipher), "am12.maerz,9.")

    def test_random_round_trips(self) -> None:
        rng = random.Random(1985)
        symbols = "abcdefghiklmnopqrstuvwxyz0123456789.,"
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", KeyLengthWarning)
            for _ in range(200):
                key1 = "".join(rng.choice("abcdefghijklmnopqrstuvwxyz") for _ in range(rng.randint(1, 25)))
                key2 = "".join(rng.choice("abcdefghijklmnopqrstuvwxyz") for _ in range(rng.randint(1, 25)))
                subkey = rng.choice([None, "", "rheinast", "kennwort"])
                plain = "".join(rng.choice(symbols) for _ in range(rng.randint(0, 80)))
                if plain.endswith(",") or any(p in plain for p in (",,", ",.", ".,", "..")):
                    continue
                cipher = encrypt(subkey, key1, key2, plain)
                self.assertEqual(decrypt(subkey, key1, key2, cipher), plain)

    def test_trace(self) -> None:
        lines = []
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", KeyLengthWarning)
            cipher = encrypt("rheinast", "cab", "ba", "hello", trace=lines.append)
            decrypt("rheinast", "cab", "ba", cipher, trace=lines.append)
        joined = "\n".join(lines)
        self.assertIn("After substitution", joined)
        self.assertIn("Box after sorting with second key", joined)
        self.assertIn("Box after filling up and sorting first key", joined)


if __name__ == "__main__":
    unittest.main()
