"""
Conditional Huffman coding from the command line.

A Huffman code is built for every three-letter prefix from the frequencies of
the letter that follows it in a corpus. The first three letters of a message
use the code of the all-space prefix; every later letter uses the code of the
three letters before it.

How to run:
  python conditional_huffman.py --corpus mobydick.txt encode "call me ishmael"
  python conditional_huffman.py --corpus mobydick.txt decode 0110100111...
  python conditional_huffman.py --corpus mobydick.txt --workers 4 shell
"""

from __future__ import annotations

import argparse
import sys
import time
from typing import Callable, List, Optional

from alphabet import CONTEXT_LENGTH
from cleaning import clean_file, read_corpus
from code_tables import train
from codec import (
    CodecError,
    ConditionalHuffmanCodec,
    MalformedBitstreamError,
    validate_decode_input,
    validate_encode_input,
)


def build_codec(corpus_text: str, workers: int = 1, lazy: bool = False) -> ConditionalHuffmanCodec:
    return ConditionalHuffmanCodec(train(corpus_text, workers=workers, lazy=lazy))


def _prompt_until_valid(prompt: str, validate: Callable[[str], None],
                        read: Callable[[str], str], write: Callable[[str], None]) -> str:
    while True:
        value = read(prompt)
        try:
            validate(value)
            return value
        except CodecError as e:
            write(f"Not a valid input string. ({e})")


def run_shell(codec: ConditionalHuffmanCodec, read: Callable[[str], str] = input,
              write: Callable[[str], None] = print) -> None:
    """Menu loop: (1) encode, (2) decode, anything else exits."""
    while True:
        write("(1) Encode")
        write("(2) Decode")
        write("Press anything else to exit")
        try:
            choice = read("> ").strip()

            if choice == "1":
                text = _prompt_until_valid("Input string to encode [a-z ]: ", validate_encode_input, read, write)
                encoded = codec.encode(text)
                write(f"encoded: {encoded}")
                write(f"decode back: {codec.decode(encoded)}")

            elif choice == "2":
                bits = _prompt_until_valid("Input string to decode: ", validate_decode_input, read, write)
                decoded = codec.decode(bits)
                write(f"decoded: {decoded}")
                if len(decoded) >= CONTEXT_LENGTH:
                    write(f"encoded back: {codec.encode(decoded)}")

            else:
                write("exiting...")
                return

        except MalformedBitstreamError:
            write("This is not a valid encoding, try again")
        except CodecError as e:
            write(f"Error: {e}")
        except EOFError:
            write("exiting...")
            return


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Conditional (3-letter context) Huffman coding")
    ap.add_argument("--corpus", required=True, help="Training text; it is cleaned to lowercase letters and spaces")
    ap.add_argument("--cleaned-out", default=None, help="Also write the cleaned corpus to this path")
    ap.add_argument("--workers", type=int, default=1, help="Processes used to build the code tables")
    ap.add_argument("--lazy", action="store_true", help="Build each context's table on first use instead of up front")

    sub = ap.add_subparsers(dest="command")
    enc = sub.add_parser("encode", help="Encode a string of lowercase letters and spaces")
    enc.add_argument("text")
    dec = sub.add_parser("decode", help="Decode a string of 0s and 1s")
    dec.add_argument("bits")
    sub.add_parser("shell", help="Interactive encode/decode menu")

    args = ap.parse_args(argv)

    if not args.command:
        ap.print_help()
        return 0

    try:
        if args.cleaned_out:
            corpus = clean_file(args.corpus, args.cleaned_out)
        else:
            corpus = read_corpus(args.corpus)
    except OSError as e:
        print(f"Error: cannot read corpus: {e}", file=sys.stderr)
        return 1

    t0 = time.perf_counter()
    codec = build_codec(corpus, workers=args.workers, lazy=args.lazy)
    print(f"Trained on {len(corpus)} characters in {time.perf_counter() - t0:.2f}s", file=sys.stderr)

    try:
        if args.command == "encode":
            encoded = codec.encode(args.text)
            print(f"encoded: {encoded}")
            print(f"decode back: {codec.decode(encoded)}")

        elif args.command == "decode":
            decoded = codec.decode(args.bits)
            print(f"decoded: {decoded}")
            if len(decoded) >= CONTEXT_LENGTH:
                print(f"encoded back: {codec.encode(decoded)}")

        elif args.command == "shell":
            run_shell(codec)

    except CodecError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
