"""
Corpus normalization: reduce free text to lowercase letters and single spaces.
"""

import re
from pathlib import Path

_NUMBER_AFTER_SEPARATOR = re.compile(r"[\W_]\d+")
_NOT_ALPHABET = re.compile(r"[^a-z ]")
_WHITESPACE_RUN = re.compile(r"\s+")


def clean_line(line: str) -> str:
    line = _NUMBER_AFTER_SEPARATOR.sub(" ", line).lower()
    line = _NOT_ALPHABET.sub(" ", line)
    return _WHITESPACE_RUN.sub(" ", line.strip())


def clean_text(text: str) -> str:
    """Every non-blank line, cleaned and followed by one space."""
    out = []
    for line in text.splitlines():
        cleaned = clean_line(line)
        if cleaned:
            out.append(cleaned + " ")
    return "".join(out)


def clean_file(input_path, output_path) -> str:
    text = Path(input_path).read_text(encoding="utf-8", errors="replace")
    cleaned = clean_text(text)
    Path(output_path).write_text(cleaned, encoding="utf-8")
    return cleaned


def read_corpus(path) -> str:
    return clean_text(Path(path).read_text(encoding="utf-8", errors="replace"))
