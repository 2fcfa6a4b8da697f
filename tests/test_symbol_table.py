import io

import pytest

from huffman_errors import KeyNotFound, MalformedHeader
from symbol_table import SymbolTable, deserialize_table, read_table, serialize_table


def test_put_get_and_size():
	table = SymbolTable()
	table.put(97, 3)
	table.put(256, 1)
	assert table.get(97) == 3
	assert table.size() == 2
	assert len(table) == 2
	assert table.contains_key(256)
	assert 98 not in table


def test_overwrite_keeps_position():
	table = SymbolTable([(10, 1), (20, 1), (30, 1)])
	table.put(10, 5)
	assert table.keys() == [10, 20, 30]
	assert table.get(10) == 5
	assert table.size() == 3


def test_missing_key_is_typed_and_recoverable():
	table = SymbolTable([(97, 3)])
	with pytest.raises(KeyNotFound) as excinfo:
		table.get(98)
	assert excinfo.value.key == 98
	# still a KeyError for callers that only know the builtin
	with pytest.raises(KeyError):
		table[98]


def test_keys_must_be_ints():
	with pytest.raises(TypeError):
		SymbolTable().put("a", 1)


def test_text_form():
	assert str(SymbolTable()) == "{}"
	assert str(SymbolTable([(97, 3), (256, 1)])) == "{97:3, 256:1}"
	assert serialize_table(SymbolTable([(10, 2)])) == b"{10:2}"


def test_from_mapping_and_equality():
	table = SymbolTable.from_mapping({1: 2, 3: 4})
	assert table == SymbolTable([(1, 2), (3, 4)])
	assert table == {3: 4, 1: 2}
	assert table != SymbolTable([(1, 2)])


def test_header_roundtrip_preserves_order():
	table = SymbolTable([(114, 2), (97, 5), (0, 7), (255, 1), (256, 1)])
	restored, consumed = deserialize_table(serialize_table(table))
	assert restored == table
	assert restored.keys() == table.keys()
	assert consumed == len(serialize_table(table))


def test_deserialize_stops_at_header_end():
	blob = b"{97:3, 256:1}\xe0}\x00"
	table, consumed = deserialize_table(blob)
	assert table.keys() == [97, 256]
	assert blob[consumed:] == b"\xe0}\x00"


def test_empty_header_parses():
	table, consumed = deserialize_table(b"{}")
	assert table.size() == 0
	assert consumed == 2


def test_deserialize_accepts_text():
	table, _ = deserialize_table("{65:1, 256:1}")
	assert table == {65: 1, 256: 1}


@pytest.mark.parametrize("blob", [
	b"",
	b"97:3}",
	b"{97:3",
	b"{97;3}",
	b"{97:3,256:1}",
	b"{97:3, }",
	b"{97:3,  256:1}",
	b"{:3}",
	b"{97:}",
	b"{-1:2}",
	b"{300:1}",
	b"{97:1, 97:2}",
	b"{9\xb97:1}",
])
def test_malformed_headers(blob):
	with pytest.raises(MalformedHeader):
		deserialize_table(blob)


def test_read_table_leaves_stream_at_payload():
	stream = io.BytesIO(b"{97:3, 256:1}\xe0")
	table = read_table(stream)
	assert table == {97: 3, 256: 1}
	assert stream.read() == b"\xe0"


def test_read_table_unterminated():
	with pytest.raises(MalformedHeader):
		read_table(io.BytesIO(b"{97:3, 256:1"))


def test_read_table_empty_stream():
	with pytest.raises(MalformedHeader):
		read_table(io.BytesIO(b""))
