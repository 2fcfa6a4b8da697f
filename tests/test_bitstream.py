import io

import pytest

from bitstream import BitBuffer, BitReader, BitWriter, pack_bits, unpack_bits
from huffman_errors import SourceUnavailable


class _FailingStream:
	def read(self, size=-1):
		raise OSError("read error")


def test_pack_bits_msb_first():
	assert pack_bits("1110") == b"\xe0"
	assert pack_bits("") == b""
	assert pack_bits("0000000110000000") == b"\x01\x80"
	assert pack_bits([1, 0, 1]) == b"\xa0"


def test_unpack_bits():
	assert unpack_bits(b"\xe0\x01") == "1110000000000001"


def test_writer_pads_final_byte():
	out = io.BytesIO()
	writer = BitWriter(out)
	for bit in (1, 1, 1, 0):
		writer.write_bit(bit)
	assert out.getvalue() == b""
	writer.flush()
	assert out.getvalue() == b"\xe0"
	assert writer.bits_written == 4


def test_writer_whole_bytes_need_no_padding():
	out = io.BytesIO()
	with BitWriter(out) as writer:
		writer.write_bits("1010101011110000")
	assert out.getvalue() == b"\xaa\xf0"


def test_write_bits_from_unaligned_position():
	out = io.BytesIO()
	with BitWriter(out) as writer:
		writer.write_bit(1)
		writer.write_bits("0000000011111111")
	assert out.getvalue() == b"\x80\x7f\x80"
	assert writer.bits_written == 17


def test_writer_rejects_non_bits():
	with pytest.raises(ValueError):
		BitWriter(io.BytesIO()).write_bit(2)


def test_reader_reads_back_and_signals_exhaustion():
	reader = BitReader(io.BytesIO(b"\xa5"))
	bits = [reader.read_bit() for _ in range(8)]
	assert bits == [1, 0, 1, 0, 0, 1, 0, 1]
	assert reader.read_bit() is None
	assert reader.bits_read == 8


def test_reader_on_empty_stream():
	assert BitReader(io.BytesIO(b"")).read_bit() is None


def test_reader_read_failure():
	with pytest.raises(SourceUnavailable):
		BitReader(_FailingStream()).read_bit()


def test_buffer_is_sink_and_source():
	buf = BitBuffer()
	for bit in (0, 1, 1):
		buf.write_bit(bit)
	buf.write_bits("01")
	assert buf.bits == "01101"
	assert len(buf) == 5
	assert [buf.read_bit() for _ in range(6)] == [0, 1, 1, 0, 1, None]
	buf.rewind()
	assert buf.remaining == 5


def test_buffer_bytes_conversion():
	buf = BitBuffer.from_bytes(b"\x0f")
	assert buf.bits == "00001111"
	assert BitBuffer("1110").to_bytes() == b"\xe0"


def test_buffer_rejects_non_bits():
	with pytest.raises(ValueError):
		BitBuffer().write_bit(-1)
