from __future__ import annotations

import hashlib
import random
from collections.abc import Iterator
from dataclasses import dataclass

from sqlite_testkit.errors import InvalidArgument


# Latin filler words. Order and length feed the generated output; changing either changes every payload.
WORDS: tuple[str, ...] = (
    "Cras",
    "Fusce",
    "Lorem",
    "Maecenas",
    "Nunc",
    "Orci",
    "Pellentesque",
    "Ut",
    "adipiscing",
    "amet",
    "at",
    "bibendum",
    "commodo",
    "condimentum",
    "consectetur",
    "dapibus",
    "dis",
    "dolor",
    "egestas",
    "elit",
    "eros",
    "et",
    "eu",
    "fringilla",
    "iaculis",
    "id",
    "in",
    "ipsum",
    "lacinia",
    "lorem",
    "magnis",
    "malesuada",
    "mi",
    "montes",
    "nascetur",
    "natoque",
    "nec",
    "nisi",
    "nulla",
    "parturient",
    "pellentesque",
    "penatibus",
    "placerat",
    "purus",
    "quam",
    "ridiculus",
    "risus",
    "sagittis",
    "scelerisque",
    "sed",
    "sem",
    "sit",
    "tincidunt",
    "tortor",
    "ultrices",
    "varius",
    "vel",
    "venenatis",
)


@dataclass(frozen=True)
class Row:
    id: int
    payload: str


def require_int(name: str, value: object, *, minimum: int | None = None) -> int:
    # bool is an int subclass; reject it so `True` never silently means 1.
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgument(f"{name} must be an integer, got {value!r}")
    if minimum is not None and value < minimum:
        raise InvalidArgument(f"{name} must be >= {minimum}, got {value}")
    return value


def _row_seed(seed: int, row_id: int, revision: int) -> int:
    h = hashlib.sha256(f"{seed}:{row_id}:{revision}".encode("utf-8")).hexdigest()
    return int(h[:16], 16)


class RowGenerator:
    """Deterministic rows for one (seed, payload_length) pair.

    Each payload is a pure function of ``(seed, row_id, revision)``: a Mersenne
    Twister seeded from a SHA-256 of those values picks words from ``WORDS``
    until the text is long enough, and the text is cut to exactly
    ``payload_length`` characters. Output is identical across processes and
    platforms.
    """

    def __init__(self, seed: int, payload_length: int) -> None:
        self.seed = require_int("seed", seed)
        self.payload_length = require_int("payload_length", payload_length, minimum=0)

    def payload(self, row_id: int, revision: int = 0) -> str:
        row_id = require_int("row_id", row_id)
        revision = require_int("revision", revision, minimum=0)
        rng = random.Random(_row_seed(self.seed, row_id, revision))
        text = ""
        while len(text) < self.payload_length:
            word = rng.choice(WORDS)
            text = f"{text} {word}" if text else word
        return text[: self.payload_length]

    def row(self, row_id: int, revision: int = 0) -> Row:
        return Row(id=row_id, payload=self.payload(row_id, revision))

    def rows(self, row_count: int, start_id: int = 1) -> Iterator[Row]:
        row_count = require_int("row_count", row_count, minimum=0)
        start_id = require_int("start_id", start_id, minimum=1)
        # Validated eagerly; only the rows themselves are lazy.
        return (self.row(row_id) for row_id in range(start_id, start_id + row_count))


def generate_rows(seed: int, row_count: int, payload_length: int) -> list[Row]:
    """Rows with ids ``1..row_count``."""
    return list(RowGenerator(seed, payload_length).rows(row_count))
