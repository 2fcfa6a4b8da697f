# filename: huffman_service.py

"""
Container format: [frequency table header][bit-packed payload].

The header is the text form of the frequency table, e.g. {104:1, 105:1, 256:1},
and delimits itself with its closing brace. The payload is the Huffman code of
every input byte followed by the end-of-stream codeword, packed MSB first and
zero-padded to a whole byte.
"""

import io
import logging

from bitstream import BitBuffer, BitReader, BitWriter
from huffman_core import HuffmanLogic
from huffman_errors import MalformedHeader, SourceUnavailable
from symbol_table import PSEUDO_EOF, deserialize_table, read_table, serialize_table

log = logging.getLogger(__name__)


class HuffmanService:
    def __init__(self):
        self.logic = HuffmanLogic()

    def compress(self, data):
        out = io.BytesIO()
        self.compress_stream(data, out)
        return out.getvalue()

    def decompress(self, data):
        if isinstance(data, str):
            # same byte mapping deserialize_table uses for text
            data = data.encode("latin-1")
        table, consumed = deserialize_table(data)
        self._check_table(table)
        tree = self.logic.build_tree(table)
        try:
            return self.logic.decode(BitBuffer.from_bytes(data[consumed:]), tree)
        finally:
            self.logic.free_tree(tree)

    def compress_stream(self, source, dest):
        """Write a container for source to dest.

        Returns the Encoded bits of the payload (before byte packing) so the
        caller can inspect them.
        """
        source = self._replayable(source)
        start = source.tell() if hasattr(source, "read") else None

        table = self.logic.build_frequency_table(source)
        tree = self.logic.build_tree(table)
        try:
            codes = self.logic.generate_codes(tree)
            if start is not None:
                source.seek(start)

            header = serialize_table(table)
            dest.write(header)
            with BitWriter(dest) as writer:
                encoded = self.logic.encode(source, codes, writer)
        finally:
            self.logic.free_tree(tree)

        log.info(
            "compressed %d distinct symbols into %d bytes (%d header + %d payload)",
            table.size(),
            len(header) + (encoded.size + 7) // 8,
            len(header),
            (encoded.size + 7) // 8,
        )
        return encoded

    def decompress_stream(self, source, dest=None):
        """Read a container from source, writing the decoded bytes to dest when given."""
        table = read_table(source)
        self._check_table(table)
        tree = self.logic.build_tree(table)
        try:
            data = self.logic.decode(BitReader(source), tree, dest)
        finally:
            self.logic.free_tree(tree)
        log.info("decompressed %d bytes", len(data))
        return data

    @staticmethod
    def _check_table(table):
        if table.size() == 0:
            raise MalformedHeader("header holds no symbols")
        if not table.contains_key(PSEUDO_EOF):
            raise MalformedHeader("header has no end-of-stream entry")

    @staticmethod
    def _replayable(source):
        # compression reads the source twice: once to count, once to encode
        if isinstance(source, (str, bytes, bytearray, memoryview)):
            return source
        if hasattr(source, "read"):
            try:
                if source.seekable():
                    return source
                return source.read()
            except OSError as exc:
                raise SourceUnavailable(f"cannot read source: {exc}") from exc
        return list(source)
