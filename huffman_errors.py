# filename: huffman_errors.py


class HuffmanError(Exception):
    """Base class for every failure the codec reports."""


class KeyNotFound(HuffmanError, KeyError):
    def __init__(self, key):
        super().__init__(key)
        self.key = key

    def __str__(self):
        return f"key {self.key!r} is not in the table"


class UnencodableSymbol(HuffmanError, KeyError):
    def __init__(self, symbol):
        super().__init__(symbol)
        self.symbol = symbol

    def __str__(self):
        return f"symbol {self.symbol!r} has no codeword"


class SourceUnavailable(HuffmanError, OSError):
    pass


class MalformedHeader(HuffmanError, ValueError):
    pass


class TruncatedPayload(HuffmanError, EOFError):
    # partial holds whatever was decoded before the bits ran out
    def __init__(self, message, partial=b""):
        super().__init__(message)
        self.partial = partial
