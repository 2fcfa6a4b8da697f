# filename: huffman_core.py

import heapq
import itertools
import logging
from collections import Counter, namedtuple

from bitstream import BitBuffer
from huffman_errors import SourceUnavailable, TruncatedPayload, UnencodableSymbol
from symbol_table import PSEUDO_EOF, SymbolTable

log = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024

# bits is the '0'/'1' string, size its length in bits
Encoded = namedtuple("Encoded", ["bits", "size"])


class HuffmanNode:
    __slots__ = ("count",)
    is_leaf = False

    def __init__(self, count):
        self.count = count


class Leaf(HuffmanNode):
    __slots__ = ("symbol",)
    is_leaf = True

    def __init__(self, symbol, count):
        super().__init__(count)
        self.symbol = symbol

    def __repr__(self):
        return f"Leaf({self.symbol}, count={self.count})"


class Internal(HuffmanNode):
    __slots__ = ("zero", "one")

    def __init__(self, zero, one):
        super().__init__(zero.count + one.count)
        self.zero = zero
        self.one = one

    def __repr__(self):
        return f"Internal(count={self.count})"


def iter_chunks(source):
    """Yield the symbols of a source in byte-sized batches.

    source may be bytes-like, a str (one latin-1 symbol per character), an
    iterable of ints in 0..255, or a binary stream with read().
    """
    if isinstance(source, str):
        source = source.encode("latin-1")
    if isinstance(source, (bytes, bytearray)):
        yield source
        return
    if isinstance(source, memoryview):
        yield source.tobytes()
        return
    if hasattr(source, "read"):
        while True:
            try:
                chunk = source.read(CHUNK_SIZE)
            except OSError as exc:
                raise SourceUnavailable(f"cannot read source: {exc}") from exc
            if not chunk:
                return
            yield chunk
    values = list(source)
    for value in values:
        if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 255:
            raise ValueError(f"not a byte value: {value!r}")
    yield values


def iter_leaves(tree):
    """Leaves of a tree, zero-branch before one-branch."""
    if tree is None:
        return
    stack = [tree]
    while stack:
        node = stack.pop()
        if node.is_leaf:
            yield node
        else:
            stack.append(node.one)
            stack.append(node.zero)


def tree_depth(tree):
    if tree is None or tree.is_leaf:
        return 0
    return 1 + max(tree_depth(tree.zero), tree_depth(tree.one))


class HuffmanLogic:
    def build_frequency_table(self, source):
        # Frequency analysis in first-occurrence order
        counts = Counter()
        for chunk in iter_chunks(source):
            counts.update(chunk)
        table = SymbolTable(counts.items())
        # end-of-stream is always present, even for empty input
        table.put(PSEUDO_EOF, 1)
        log.debug("frequency table: %d symbols, %d bytes", table.size(), sum(counts.values()))
        return table

    def build_tree(self, table):
        """Greedy minimum-count merge over the table's entries.

        Ties on count are broken by heap arrival: leaves arrive in table
        order, merged nodes after them in creation order, and the earlier
        arrival is popped first. The first node popped becomes the
        zero-branch.
        """
        arrival = itertools.count()
        priority_queue = [(count, next(arrival), Leaf(symbol, count)) for symbol, count in table.items()]
        heapq.heapify(priority_queue)

        while len(priority_queue) > 1:
            _, _, zero = heapq.heappop(priority_queue)
            _, _, one = heapq.heappop(priority_queue)
            merged = Internal(zero, one)
            heapq.heappush(priority_queue, (merged.count, next(arrival), merged))

        if not priority_queue:
            return None
        root = priority_queue[0][2]
        if log.isEnabledFor(logging.DEBUG):
            log.debug(
                "built tree from %d symbols, root count %d, depth %d",
                len(table), root.count, tree_depth(root),
            )
        return root

    def generate_codes(self, node, current_code="", codes=None):
        if codes is None:
            codes = SymbolTable()
        if node is None:
            return codes
        if node.is_leaf:
            # a lone leaf keeps the empty codeword
            codes.put(node.symbol, current_code)
            return codes
        self.generate_codes(node.zero, current_code + "0", codes)
        self.generate_codes(node.one, current_code + "1", codes)
        return codes

    def encode(self, source, codes, sink=None):
        parts = []
        for chunk in iter_chunks(source):
            for symbol in chunk:
                parts.append(self._codeword(codes, symbol))
        parts.append(self._codeword(codes, PSEUDO_EOF))
        bits = "".join(parts)

        if sink is not None:
            write_bits = getattr(sink, "write_bits", None)
            if write_bits is not None:
                write_bits(bits)
            else:
                for bit in bits:
                    sink.write_bit(1 if bit == "1" else 0)
        log.debug("encoded %d symbols into %d bits", len(parts), len(bits))
        return Encoded(bits, len(bits))

    @staticmethod
    def _codeword(codes, symbol):
        try:
            return codes[symbol]
        except KeyError:
            raise UnencodableSymbol(symbol) from None

    def decode(self, source, tree, sink=None):
        if tree is None:
            raise ValueError("cannot decode without a tree")
        if tree.is_leaf and tree.symbol != PSEUDO_EOF:
            raise ValueError(f"tree is a single leaf {tree.symbol} with no end-of-stream marker")
        if isinstance(source, (bytes, bytearray)):
            source = BitBuffer.from_bytes(source)
        elif isinstance(source, str):
            source = BitBuffer(source)

        out = bytearray()
        node = tree
        while True:
            if node.is_leaf:
                if node.symbol == PSEUDO_EOF:
                    break
                out.append(node.symbol)
                if sink is not None:
                    sink.write(bytes([node.symbol]))
                node = tree
                continue
            bit = source.read_bit()
            if bit is None:
                raise TruncatedPayload(
                    f"bit stream ended after {len(out)} bytes without an end-of-stream marker",
                    bytes(out),
                )
            node = node.one if bit else node.zero

        log.debug("decoded %d bytes", len(out))
        return bytes(out)

    def free_tree(self, root):
        """Detach every node from its parent; returns how many nodes were released."""
        released = 0
        stack = [root] if root is not None else []
        while stack:
            node = stack.pop()
            released += 1
            if not node.is_leaf:
                stack.append(node.zero)
                stack.append(node.one)
                node.zero = node.one = None
        return released
