# filename: bitstream.py

"""
Bit-level sinks and sources.

A sink has write_bit(bit); a source has read_bit(), which returns 0 or 1, or
None once the source is exhausted. Two variants of each:

    BitBuffer               in-memory, both a sink and a source (for tests and
                            for inspecting what the encoder produced)
    BitWriter / BitReader   backed by a binary byte stream

Bits are packed most-significant-bit first. The last byte written by
BitWriter is padded with zero bits.
"""

from huffman_errors import SourceUnavailable


def pack_bits(bits):
    """Pack a '0'/'1' string (or sequence of ints) into bytes, MSB first."""
    if isinstance(bits, str):
        if not bits:
            return b""
        padded = bits + "0" * (-len(bits) % 8)
        return int(padded, 2).to_bytes(len(padded) // 8, "big")
    out = bytearray()
    byte = 0
    count = 0
    for bit in bits:
        byte = (byte << 1) | (1 if bit in (1, "1") else 0)
        count += 1
        if count == 8:
            out.append(byte)
            byte = count = 0
    if count:
        out.append(byte << (8 - count))
    return bytes(out)


def unpack_bits(data):
    return "".join(f"{b:08b}" for b in data)


def _check_bit(bit):
    if bit not in (0, 1):
        raise ValueError(f"a bit must be 0 or 1, got {bit!r}")


class BitBuffer:
    __slots__ = ("_bits", "_pos")

    def __init__(self, bits=()):
        self._bits = [1 if b in (1, "1") else 0 for b in bits]
        self._pos = 0

    @classmethod
    def from_bytes(cls, data):
        return cls(unpack_bits(data))

    def write_bit(self, bit):
        _check_bit(bit)
        self._bits.append(bit)

    def write_bits(self, bits):
        for bit in bits:
            self.write_bit(1 if bit == "1" else 0)

    def read_bit(self):
        if self._pos >= len(self._bits):
            return None
        bit = self._bits[self._pos]
        self._pos += 1
        return bit

    def rewind(self):
        self._pos = 0

    @property
    def bits(self):
        return "".join("1" if b else "0" for b in self._bits)

    @property
    def remaining(self):
        return len(self._bits) - self._pos

    def to_bytes(self):
        return pack_bits(self._bits)

    def __len__(self):
        return len(self._bits)


class BitWriter:
    """Write single bits to a binary stream.

    Call flush() (or use the writer as a context manager) to emit the final
    partial byte. The underlying stream is not closed.
    """

    __slots__ = ("stream", "_rack", "_mask", "bits_written")

    def __init__(self, stream):
        self.stream = stream
        self._rack = 0
        self._mask = 0x80
        self.bits_written = 0

    def write_bit(self, bit):
        _check_bit(bit)
        if bit:
            self._rack |= self._mask
        self._mask >>= 1
        self.bits_written += 1
        if self._mask == 0:
            self.stream.write(bytes([self._rack]))
            self._rack = 0
            self._mask = 0x80

    def write_bits(self, bits):
        """Write a '0'/'1' string; whole bytes go out in one write."""
        i = 0
        while i < len(bits) and self._mask != 0x80:
            self.write_bit(1 if bits[i] == "1" else 0)
            i += 1
        whole = (len(bits) - i) // 8 * 8
        if whole:
            self.stream.write(pack_bits(bits[i:i + whole]))
            self.bits_written += whole
            i += whole
        for bit in bits[i:]:
            self.write_bit(1 if bit == "1" else 0)

    def flush(self):
        if self._mask != 0x80:
            self.stream.write(bytes([self._rack]))
            self._rack = 0
            self._mask = 0x80
        flush = getattr(self.stream, "flush", None)
        if flush is not None:
            flush()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.flush()


class BitReader:
    __slots__ = ("stream", "_rack", "_mask", "bits_read")

    def __init__(self, stream):
        self.stream = stream
        self._rack = 0
        self._mask = 0
        self.bits_read = 0

    def read_bit(self):
        if self._mask == 0:
            try:
                chunk = self.stream.read(1)
            except OSError as exc:
                raise SourceUnavailable(f"cannot read bit stream: {exc}") from exc
            if not chunk:
                return None
            self._rack = chunk[0]
            self._mask = 0x80
        bit = 1 if self._rack & self._mask else 0
        self._mask >>= 1
        self.bits_read += 1
        return bit
