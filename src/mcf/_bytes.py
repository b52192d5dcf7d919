"""Byte codecs for byte fields.

Two flavors exist. The standard codec is unpadded base64. The legacy codec
used by bcrypt stores two buffers (salt and hash) back to back in one field,
each encoded with the alternate `./A-Za-z0-9` alphabet. The boundary between
the two runs is positional and derived from the buffer sizes.
"""

__all__ = [
    "ByteCodec",
    "Base64Codec",
    "DualBlobCodec",
    "BASE64",
    "BCRYPT",
    "STANDARD_ALPHABET",
    "BCRYPT_ALPHABET",
    "encoded_width",
]

import base64
import binascii

import mcf


STANDARD_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
BCRYPT_ALPHABET = "./ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"


def encoded_width(size):
    """Number of unpadded base64 symbols needed for `size` bytes.

    Args:
        size: (int) Buffer length in bytes

    Returns:
        (int) Encoded length in symbols
    """
    return (size * 8 + 5) // 6


class ByteCodec:
    """Converts between a byte value and the text of one field.

    Subclasses implement `encode` and `decode`. Codecs are stateless and
    compare equal when configured the same way.
    """

    __slots__ = ()

    name = None

    def encode(self, value):
        """Render a byte value as field text.

        Args:
            value: Byte value, the exact type depends on the codec

        Returns:
            (str) Encoded text

        Raises:
            mcf.CustomError: If the value has the wrong type or size
        """
        raise NotImplementedError

    def decode(self, text):
        """Convert field text back to a byte value.

        Args:
            text: (str) Encoded text

        Returns:
            The decoded byte value

        Raises:
            mcf.EncodingError: If the text is not valid for this codec
        """
        raise NotImplementedError

    def _key(self):
        return ()

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash((type(self).__name__, self._key()))

    def __repr__(self):
        return f"{type(self).__name__}<{self.name or self._key()}>"


class Base64Codec(ByteCodec):
    """Unpadded base64 of a single buffer.

    Args:
        alphabet: (str) The 64 symbols to use, standard alphabet by default

    Attributes:
        alphabet: (str) The 64 symbols in value order
    """

    __slots__ = ("alphabet", "_symbols", "_to_std", "_from_std")

    def __init__(self, alphabet=STANDARD_ALPHABET):
        if len(alphabet) != 64 or len(set(alphabet)) != 64:
            raise mcf.ShapeError("Base64 alphabet needs 64 unique symbols")
        self.alphabet = alphabet
        self._symbols = frozenset(alphabet)
        self._to_std = str.maketrans(alphabet, STANDARD_ALPHABET)
        self._from_std = str.maketrans(STANDARD_ALPHABET, alphabet)

    @property
    def name(self):
        """(str) Short name used by the shape notation."""
        if self.alphabet == STANDARD_ALPHABET:
            return "base64"
        if self.alphabet == BCRYPT_ALPHABET:
            return "bcrypt64"
        return None

    def _key(self):
        return self.alphabet

    def encode(self, value):
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise mcf.CustomError(f"Expected bytes, got {type(value).__name__}")
        text = base64.b64encode(bytes(value)).decode("ascii").rstrip("=")
        return text.translate(self._from_std)

    def decode(self, text):
        invalid = set(text) - self._symbols
        if invalid:
            symbols = "".join(sorted(invalid))
            raise mcf.EncodingError(f"Invalid base64 symbols {symbols!r} in {text!r}")
        if len(text) % 4 == 1:
            raise mcf.EncodingError(f"Invalid base64 length {len(text)} for {text!r}")

        standard = text.translate(self._to_std)
        padded = standard + "=" * (-len(standard) % 4)
        try:
            data = base64.b64decode(padded, validate=True)
        except binascii.Error as e:
            raise mcf.EncodingError(f"Invalid base64 {text!r}: {e}") from e

        # Leftover bits in the final symbol must be zero
        if base64.b64encode(data).decode("ascii").rstrip("=") != standard:
            raise mcf.EncodingError(f"Non-canonical base64 {text!r}")
        return data


class DualBlobCodec(ByteCodec):
    """Two fixed size buffers encoded back to back without a separator.

    The value is a `(first, second)` pair of byte strings. Each buffer is
    encoded on its own, so the split point in the text is the encoded width
    of the first buffer, never something found in the content.

    Args:
        first_size: (int) Length in bytes of the first buffer
        second_size: (int) Length in bytes of the second buffer
        alphabet: (str) The 64 symbols to use, bcrypt alphabet by default

    Attributes:
        first_size: (int) Length in bytes of the first buffer
        second_size: (int) Length in bytes of the second buffer
        split: (int) Text offset where the second run starts
        width: (int) Total text length of a valid field
    """

    __slots__ = ("first_size", "second_size", "split", "width", "_run")

    def __init__(self, first_size, second_size, alphabet=BCRYPT_ALPHABET):
        if first_size <= 0 or second_size <= 0:
            raise mcf.ShapeError("Dual blob buffers need a positive size")
        self.first_size = first_size
        self.second_size = second_size
        self.split = encoded_width(first_size)
        self.width = self.split + encoded_width(second_size)
        self._run = Base64Codec(alphabet)

    @property
    def alphabet(self):
        """(str) The 64 symbols in value order."""
        return self._run.alphabet

    @property
    def name(self):
        """(str) Short name used by the shape notation."""
        if self == BCRYPT:
            return "bcrypt"
        return None

    def _key(self):
        return (self.first_size, self.second_size, self.alphabet)

    def encode(self, value):
        if not isinstance(value, (tuple, list)) or len(value) != 2:
            raise mcf.CustomError(f"Expected a pair of byte strings, got {value!r}")
        first, second = value
        for data, size in ((first, self.first_size), (second, self.second_size)):
            if not isinstance(data, (bytes, bytearray, memoryview)):
                raise mcf.CustomError(f"Expected bytes, got {type(data).__name__}")
            if len(data) != size:
                raise mcf.CustomError(f"Expected {size} bytes, got {len(data)}")
        return self._run.encode(first) + self._run.encode(second)

    def decode(self, text):
        if len(text) != self.width:
            raise mcf.EncodingError(
                f"Expected {self.width} symbols ({self.split} + {self.width - self.split}), "
                f"got {len(text)}"
            )
        first = self._run.decode(text[: self.split])
        second = self._run.decode(text[self.split :])
        return (first, second)


BASE64 = Base64Codec()

# bcrypt: 16 byte salt and 23 byte hash, 22 + 31 symbols
BCRYPT = DualBlobCodec(16, 23)
