#!/usr/bin/env python3
# filename: huffman_cli.py

"""
huffman_cli : compress and decompress files, and look at the pieces in between

Usage:
    python -m huffman_cli compress notes.txt              # writes notes.txt.huf
    python -m huffman_cli decompress notes.txt.huf        # writes notes_unc.txt
    python -m huffman_cli freq --string "hello"           # frequency map
    python -m huffman_cli tree notes.txt                  # encoding tree
    python -m huffman_cli codes notes.txt                 # encoding map
    python -m huffman_cli view-binary notes.txt.huf
    python -m huffman_cli view-text notes_unc.txt
"""

import argparse
import logging
import os
import pathlib
import sys
from logging.handlers import RotatingFileHandler

from bitstream import BitReader
from huffman_core import HuffmanLogic
from huffman_errors import HuffmanError, SourceUnavailable
from huffman_service import HuffmanService
from symbol_table import PSEUDO_EOF

log = logging.getLogger(__name__)

COMPRESSED_SUFFIX = ".huf"
UNCOMPRESSED_MARK = "_unc"
_HANDLER_NAME = "huffpack"

_ESCAPES = {
    ord("\n"): "'\\n'",
    ord("\t"): "'\\t'",
    ord("\r"): "'\\r'",
    ord("\f"): "'\\f'",
    ord("\b"): "'\\b'",
    0: "'\\0'",
    ord(" "): "' '",
    PSEUDO_EOF: "EOF",
}


def init_logging(verbose, log_file=None):
    logger = logging.getLogger()
    for handler in list(logger.handlers):
        if handler.get_name() == _HANDLER_NAME:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    formatter = logging.Formatter("[%(asctime)s][%(levelname)s] %(message)s")
    ch = logging.StreamHandler(sys.stderr)
    ch.set_name(_HANDLER_NAME)
    ch.setLevel(logging.DEBUG if verbose else logging.WARNING)
    ch.setFormatter(formatter)
    logger.addHandler(ch)
    if log_file:
        fh = RotatingFileHandler(log_file, maxBytes=5_000_000, backupCount=3)
        fh.set_name(_HANDLER_NAME)
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(formatter)
        logger.addHandler(fh)


#
#File naming
#

def compressed_path(path):
    return str(path) + COMPRESSED_SUFFIX


def uncompressed_path(path):
    """notes.txt.huf -> notes_unc.txt (split on the first dot of the name)."""
    p = pathlib.Path(path)
    name = p.name
    if name.endswith(COMPRESSED_SUFFIX):
        name = name[:-len(COMPRESSED_SUFFIX)]
    stem, dot, ext = name.partition(".")
    return str(p.with_name(f"{stem}{UNCOMPRESSED_MARK}{dot}{ext}"))


def open_file(path, mode):
    try:
        return open(path, mode)
    except FileNotFoundError as exc:
        raise SourceUnavailable(f"{path}: file does not exist") from exc
    except OSError as exc:
        raise SourceUnavailable(f"{path}: {exc.strerror or exc}") from exc


#
#Printing helpers
#

def printable(symbol):
    if symbol is None:
        return "N/A"
    if symbol in _ESCAPES:
        return _ESCAPES[symbol]
    if 32 < symbol < 127:
        return f"'{chr(symbol)}'"
    return f"'\\{symbol}'"


def format_table(table):
    return [f"{key}: \t{printable(key)}\t-->\t{table.get(key)}" for key in table.keys()]


def format_tree(node, indent=""):
    if node is None:
        return []
    if node.is_leaf:
        return [f"{indent}{{{printable(node.symbol)}({node.symbol}), count={node.count}}}"]
    lines = [f"{indent}{{{printable(None)}, count={node.count}}}"]
    lines += format_tree(node.zero, indent + " ")
    lines += format_tree(node.one, indent + " ")
    return lines


def format_bits(bits, group=8, per_line=64):
    lines = []
    for start in range(0, len(bits), per_line):
        row = bits[start:start + per_line]
        lines.append(" ".join(row[i:i + group] for i in range(0, len(row), group)))
    return lines


#
#Commands
#

def compress_file(path, output=None, service=None):
    """Compress path into output (default path + '.huf'); returns (output, Encoded)."""
    service = service or HuffmanService()
    output = output or compressed_path(path)
    if os.path.exists(output) and os.path.exists(path) and os.path.samefile(path, output):
        raise SourceUnavailable(f"{output}: output would overwrite the input")
    with open_file(path, "rb") as src, open_file(output, "wb") as dest:
        encoded = service.compress_stream(src, dest)
    return output, encoded


def decompress_file(path, output=None, service=None):
    """Decompress path into output (default name_unc.ext); returns (output, data)."""
    service = service or HuffmanService()
    output = output or uncompressed_path(path)
    # decode fully before touching output so a bad container leaves it alone
    with open_file(path, "rb") as src:
        data = service.decompress_stream(src)
    with open_file(output, "wb") as dest:
        dest.write(data)
    return output, data


def _load_source(args):
    if args.string is not None:
        return args.string.encode("utf-8")
    if args.file is None:
        raise SourceUnavailable("give a file name or --string")
    with open_file(args.file, "rb") as fp:
        return fp.read()


def cmd_compress(args):
    output, encoded = compress_file(args.file, args.output)
    size = os.path.getsize(output)
    print(f"Compressed file size: {size}")
    if args.show_bits:
        print(encoded.bits)
    log.info("wrote %s", output)
    return 0


def cmd_decompress(args):
    output, data = decompress_file(args.file, args.output)
    print(f"Decompressed file size: {len(data)}")
    log.info("wrote %s", output)
    return 0


def cmd_freq(args):
    logic = HuffmanLogic()
    table = logic.build_frequency_table(_load_source(args))
    print("\n".join(format_table(table)))
    return 0


def cmd_tree(args):
    logic = HuffmanLogic()
    tree = logic.build_tree(logic.build_frequency_table(_load_source(args)))
    print("\n".join(format_tree(tree)))
    logic.free_tree(tree)
    return 0


def cmd_codes(args):
    logic = HuffmanLogic()
    tree = logic.build_tree(logic.build_frequency_table(_load_source(args)))
    codes = logic.generate_codes(tree)
    logic.free_tree(tree)
    for key in codes.keys():
        print(f"{key}: \t{printable(key)}\t-->\t{codes.get(key)}")
    return 0


def cmd_view_binary(args):
    print(args.file)
    with open_file(args.file, "rb") as fp:
        reader = BitReader(fp)
        bits = []
        while True:
            bit = reader.read_bit()
            if bit is None:
                break
            bits.append("1" if bit else "0")
    print("\n".join(format_bits("".join(bits))))
    return 0


def cmd_view_text(args):
    print(args.file)
    with open_file(args.file, "rb") as fp:
        print(fp.read().decode("latin-1"))
    return 0


def build_parser():
    parser = argparse.ArgumentParser(prog="huffpack", description="Huffman file compressor.")
    parser.add_argument("-v", "--verbose", action="store_true", help="log codec details")
    parser.add_argument("--log-file", default=None, help="also log to this file (rotated)")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("compress", help="compress FILE into FILE.huf")
    p.add_argument("file")
    p.add_argument("-o", "--output", default=None)
    p.add_argument("--show-bits", action="store_true", help="print the encoded bit string")
    p.set_defaults(func=cmd_compress)

    p = sub.add_parser("decompress", help="decompress name.ext.huf into name_unc.ext")
    p.add_argument("file")
    p.add_argument("-o", "--output", default=None)
    p.set_defaults(func=cmd_decompress)

    for name, func, text in (
        ("freq", cmd_freq, "print the frequency map"),
        ("tree", cmd_tree, "print the encoding tree"),
        ("codes", cmd_codes, "print the encoding map"),
    ):
        p = sub.add_parser(name, help=text)
        p.add_argument("file", nargs="?")
        p.add_argument("-s", "--string", default=None, help="use this text (UTF-8 encoded) instead of a file")
        p.set_defaults(func=func)

    p = sub.add_parser("view-binary", help="print a file as bits")
    p.add_argument("file")
    p.set_defaults(func=cmd_view_binary)

    p = sub.add_parser("view-text", help="print a file as text")
    p.add_argument("file")
    p.set_defaults(func=cmd_view_text)
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    init_logging(args.verbose, args.log_file)
    try:
        return args.func(args)
    except HuffmanError as exc:
        log.error("%s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
