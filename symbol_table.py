# filename: symbol_table.py

"""
SymbolTable

Integer-keyed table used for symbol counts (the frequency map written as the
container header) and for symbol -> codeword pairs. Iteration follows the
order in which keys were first inserted, so a table rebuilt from its own
header iterates exactly like the one that produced it.

Header text form:  {97:3, 98:1, 256:1}
"""

import logging

from huffman_errors import KeyNotFound, MalformedHeader

log = logging.getLogger(__name__)

PSEUDO_EOF = 256
MAX_SYMBOL = PSEUDO_EOF

_OPEN = ord("{")
_CLOSE = ord("}")


class SymbolTable:
    __slots__ = ("_entries",)

    def __init__(self, pairs=None):
        self._entries = {}
        if pairs is not None:
            for key, value in pairs:
                self.put(key, value)

    @classmethod
    def from_mapping(cls, mapping):
        return cls(mapping.items())

    def put(self, key, value):
        if isinstance(key, bool) or not isinstance(key, int):
            raise TypeError(f"symbol table keys must be int, got {type(key).__name__}")
        # overwriting keeps the original position
        self._entries[key] = value

    def get(self, key):
        try:
            return self._entries[key]
        except KeyError:
            raise KeyNotFound(key) from None

    def contains_key(self, key):
        return key in self._entries

    def keys(self):
        return list(self._entries)

    def items(self):
        return list(self._entries.items())

    def size(self):
        return len(self._entries)

    def __contains__(self, key):
        return self.contains_key(key)

    def __len__(self):
        return self.size()

    def __iter__(self):
        return iter(self._entries)

    def __getitem__(self, key):
        return self.get(key)

    def __eq__(self, other):
        if isinstance(other, SymbolTable):
            return self._entries == other._entries
        if isinstance(other, dict):
            return self._entries == other
        return NotImplemented

    def __repr__(self):
        return f"SymbolTable({self.items()!r})"

    def __str__(self):
        body = ", ".join(f"{k}:{v}" for k, v in self._entries.items())
        return "{" + body + "}"


def serialize_table(table):
    """Return the header bytes for a count table."""
    return str(table).encode("ascii")


def _parse_entry(text):
    key_text, sep, value_text = text.partition(":")
    if not sep or not key_text.isdigit() or not value_text.isdigit():
        raise MalformedHeader(f"bad header entry {text!r}")
    # isdigit() accepts non-ASCII digits; the header is ASCII only
    if not (key_text.isascii() and value_text.isascii()):
        raise MalformedHeader(f"bad header entry {text!r}")
    key = int(key_text)
    if key > MAX_SYMBOL:
        raise MalformedHeader(f"header symbol {key} is out of range")
    return key, int(value_text)


def parse_header_text(text):
    """Parse a complete header, braces included, into a SymbolTable."""
    if len(text) < 2 or text[0] != "{" or text[-1] != "}":
        raise MalformedHeader("header must be enclosed in braces")
    body = text[1:-1]
    table = SymbolTable()
    # the empty table is never written but must still parse
    if not body:
        return table
    for chunk in body.split(", "):
        key, value = _parse_entry(chunk)
        if table.contains_key(key):
            raise MalformedHeader(f"header repeats symbol {key}")
        table.put(key, value)
    return table


def deserialize_table(data):
    """Parse a header at the start of data.

    Returns (table, consumed) where consumed is the number of bytes the header
    occupies, so data[consumed:] is the payload.
    """
    if isinstance(data, str):
        data = data.encode("latin-1")
    data = bytes(data)
    if not data or data[0] != _OPEN:
        raise MalformedHeader("container does not start with a header")
    end = data.find(_CLOSE)
    if end < 0:
        raise MalformedHeader("header is not terminated")
    try:
        text = bytes(data[:end + 1]).decode("ascii")
    except UnicodeDecodeError:
        raise MalformedHeader("header contains non-ASCII bytes") from None
    table = parse_header_text(text)
    log.debug("header: %d entries in %d bytes", table.size(), end + 1)
    return table, end + 1


def read_table(stream):
    """Read exactly one header from a binary stream.

    The stream is left positioned on the first payload byte.
    """
    first = stream.read(1)
    if not first or first[0] != _OPEN:
        raise MalformedHeader("container does not start with a header")
    buf = bytearray(first)
    while True:
        ch = stream.read(1)
        if not ch:
            raise MalformedHeader("header is not terminated")
        buf += ch
        if ch[0] == _CLOSE:
            break
    table, _ = deserialize_table(bytes(buf))
    return table
