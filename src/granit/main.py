import argparse
import sys
import warnings
from pathlib import Path
from typing import Dict, List, Optional

from .cipher import decrypt, encrypt
from .config import CONFIG_PATH, OUTPUT_FORMATS, GranitConfig, load_config, mask_secret, resolve_keys, save_config
from .errors import GranitError, ImpossiblePlaintextError, KeyLengthWarning
from .history import log_event
from .utils import format_five_groups, read_text_file


def _trace_to_stderr(text: str) -> None:
    print(text, file=sys.stderr)


def _resolve_cipher_keys(args: argparse.Namespace, config: GranitConfig) -> Dict[str, str]:
    keys = resolve_keys(config, args.subkey, args.key1, args.key2)
    if not keys["key1"] or not keys["key2"]:
        raise argparse.ArgumentTypeError(
            "Need a key: pass --key1 and --key2 or store them with 'granit config'."
        )
    return keys


def _load_message(args: argparse.Namespace, inline: Optional[str], path: Optional[str]) -> str:
    if path:
        return read_text_file(Path(path), encoding=args.encoding)
    return inline or ""


def _finish(args: argparse.Namespace, config: GranitConfig, message: str, result: str) -> str:
    output_format = args.format or config.output_format
    output = format_five_groups(result) if output_format == "fiver" else result
    if args.out_file:
        with open(args.out_file, "w", encoding="utf-8") as fh:
            fh.write(output + "\n")
    if not args.no_history:
        log_event(
            action=args.command,
            payload={
                "format": output_format,
                "input_length": len(message),
                "output_length": len(result),
                "in_file": getattr(args, "plainfile", None) or getattr(args, "cipherfile", None),
                "out_file": args.out_file,
            },
        )
    return output


def _run_encrypt(args: argparse.Namespace) -> str:
    config = load_config(args.config)
    keys = _resolve_cipher_keys(args, config)
    plain = _load_message(args, args.plain, args.plainfile)
    if not plain.strip():
        raise argparse.ArgumentTypeError("Need a plain text to encrypt.")
    result = encrypt(
        keys["subkey"],
        keys["key1"],
        keys["key2"],
        plain,
        trace=_trace_to_stderr if args.debug else None,
        min_key_length=config.min_key_length,
    )
    return _finish(args, config, plain, result)


def _run_decrypt(args: argparse.Namespace) -> str:
    config = load_config(args.config)
    keys = _resolve_cipher_keys(args, config)
    cipher = _load_message(args, args.cipher, args.cipherfile)
    if not cipher.strip():
        raise argparse.ArgumentTypeError("Need a cipher text to decrypt.")
    result = decrypt(
        keys["subkey"],
        keys["key1"],
        keys["key2"],
        cipher,
        trace=_trace_to_stderr if args.debug else None,
        min_key_length=config.min_key_length,
    )
    return _finish(args, config, cipher, result)


def _run_config(args: argparse.Namespace) -> str:
    # Only file values are written back; environment keys stay out of the file.
    config = load_config(args.config, use_env=False)

    changed = False
    for field in ["subkey", "key1", "key2", "output_format", "min_key_length"]:
        value = getattr(args, field)
        if value is not None:
            setattr(config, field, value)
            changed = True

    if changed:
        save_config(config, args.config)
    config = load_config(args.config)

    lines = [
        f"config file: {args.config}",
        f"subkey: {mask_secret(config.subkey) or '[not set]'}",
        f"key1: {mask_secret(config.key1) or '[not set]'}",
        f"key2: {mask_secret(config.key2) or '[not set]'}",
        f"format: {config.output_format}",
        f"min key length: {config.min_key_length}",
    ]
    if changed:
        lines.append("Configuration saved; empty fields are still read from GRANIT_* environment variables.")
    return "\n".join(lines)


def _run_gui(args: argparse.Namespace) -> None:
    from .gui import run_gui

    run_gui(args.config)


def _add_cipher_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("--key1", help="First transposition key (default: from config).")
    p.add_argument("--key2", help="Second transposition key (default: from config).")
    p.add_argument("--subkey", help="Key for the character substitution (optional).")
    p.add_argument("--format", choices=OUTPUT_FORMATS, help="plain, or fiver for groups of five characters.")
    p.add_argument("--debug", action="store_true", help="Print the state after each step to stderr.")
    p.add_argument("--out-file", help="Write the result to a file.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Encrypt and decrypt messages with the GRANIT cipher.")
    parser.add_argument(
        "--no-history", action="store_true", help="Do not record the operation in history."
    )
    parser.add_argument("--encoding", help="Encoding of input files (default: try utf-8, cp1252, latin-1).")
    parser.add_argument("--config", type=Path, default=CONFIG_PATH, help="Configuration file to use.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    encrypt_parser = subparsers.add_parser("encrypt", help="Encrypt a plain text")
    plain_source = encrypt_parser.add_mutually_exclusive_group(required=True)
    plain_source.add_argument("--plain", help="Plain text to encrypt.")
    plain_source.add_argument("--plainfile", help="File with the plain text to encrypt.")
    _add_cipher_options(encrypt_parser)
    encrypt_parser.set_defaults(func=_run_encrypt)

    decrypt_parser = subparsers.add_parser("decrypt", help="Decrypt a cipher text")
    cipher_source = decrypt_parser.add_mutually_exclusive_group(required=True)
    cipher_source.add_argument("--cipher", help="Cipher text to decrypt (non-digits are ignored).")
    cipher_source.add_argument("--cipherfile", help="File with the cipher text to decrypt.")
    _add_cipher_options(decrypt_parser)
    decrypt_parser.set_defaults(func=_run_decrypt)

    config_parser = subparsers.add_parser("config", help="Show or update stored keys and defaults")
    config_parser.add_argument("--subkey", help="Substitution key to store.")
    config_parser.add_argument("--key1", help="First transposition key to store.")
    config_parser.add_argument("--key2", help="Second transposition key to store.")
    config_parser.add_argument("--format", dest="output_format", choices=OUTPUT_FORMATS, help="Default output format.")
    config_parser.add_argument("--min-key-length", dest="min_key_length", type=int, help="Key length below which a warning is shown.")
    config_parser.set_defaults(func=_run_config)

    gui_parser = subparsers.add_parser("gui", help="Start the desktop interface (needs PyQt5)")
    gui_parser.set_defaults(func=_run_gui)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always", KeyLengthWarning)
        try:
            result = args.func(args)
        except ImpossiblePlaintextError as exc:
            print(f"Impossible plaintext: {exc}", file=sys.stderr)
            return 1
        except (GranitError, argparse.ArgumentTypeError) as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 1
        finally:
            for warning in caught:
                print(f"warning: {warning.message}", file=sys.stderr)
    if result is not None:
        print(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
