"""Algorithm identifier table

Maps the textual identifiers found in the first field of a hash, like
`argon2i` or `2a`, to logical algorithm names. The codec itself never
consults a table; calling code builds one and derives shapes from it.
"""

__all__ = ["Algorithm", "AlgorithmTable", "KNOWN_ALGORITHMS"]

import dataclasses
import types

import mcf


@dataclasses.dataclass(frozen=True)
class Algorithm:
    """A known hash algorithm.

    Attributes:
        name: (str) Logical algorithm name
        ident: (str) Identifier written in the hash text
    """

    name: str
    ident: str


class AlgorithmTable:
    """Immutable lookup between algorithms and their identifiers.

    Args:
        algorithms: (Iterable[Algorithm | tuple[str, str]]) Entries, given
            as `Algorithm` or `(name, ident)` pairs

    Raises:
        mcf.ShapeError: If a name or identifier is repeated or invalid
    """

    __slots__ = ("_by_ident", "_by_name")

    def __init__(self, algorithms):
        by_ident = {}
        by_name = {}
        for entry in algorithms:
            if not isinstance(entry, Algorithm):
                entry = Algorithm(*entry)
            if not entry.ident or mcf.FIELD_DELIMITER in entry.ident:
                raise mcf.ShapeError(f"Invalid algorithm identifier {entry.ident!r}")
            if entry.ident in by_ident:
                raise mcf.ShapeError(f"Duplicate algorithm identifier {entry.ident!r}")
            if entry.name in by_name:
                raise mcf.ShapeError(f"Duplicate algorithm name {entry.name!r}")
            by_ident[entry.ident] = entry
            by_name[entry.name] = entry
        self._by_ident = types.MappingProxyType(by_ident)
        self._by_name = types.MappingProxyType(by_name)

    def from_id(self, ident):
        """Find the algorithm for an identifier.

        Args:
            ident: (str) Identifier from hash text

        Returns:
            (Algorithm | None) Matching algorithm
        """
        return self._by_ident.get(ident)

    def to_id(self, name):
        """Find the identifier for an algorithm.

        Args:
            name: (str | Algorithm) Logical name or algorithm entry

        Returns:
            (str) Identifier to write in hash text

        Raises:
            KeyError: If the algorithm is not in the table
        """
        if isinstance(name, Algorithm):
            name = name.name
        return self._by_name[name].ident

    def shape(self):
        """Build an enum shape with a unit variant per identifier.

        Returns:
            (Enum) Shape accepting exactly the identifiers in this table
        """
        return mcf.Enum([(ident, mcf.Unit()) for ident in self._by_ident])

    def __contains__(self, ident):
        return ident in self._by_ident

    def __iter__(self):
        return iter(self._by_ident.values())

    def __len__(self):
        return len(self._by_ident)

    def __repr__(self):
        return f"AlgorithmTable<{len(self)}>"


# Source: https://passlib.readthedocs.io/en/stable/modular_crypt_format.html
KNOWN_ALGORITHMS = AlgorithmTable([
    ("Md5Crypt", "1"),
    ("Bcrypt", "2"),
    ("Bcrypta", "2a"),
    ("Bcryptx", "2x"),
    ("Bcrypty", "2y"),
    ("Bcryptb", "2b"),
    ("BcryptMcf", "2y-mcf"),
    ("BsdNtHash", "3"),
    ("Sha256Crypt", "5"),
    ("Sha512Crypt", "6"),
    ("SunMd5Crypt", "md5"),
    ("Sha1Crypt", "sha1"),
    ("AprMd5Crypt", "apr1"),  # Apache htdigest files
    ("Argon2i", "argon2i"),
    ("Argon2d", "argon2d"),
    ("BcryptSha256", "bcrypt-sha256"),  # passlib
    ("Phpassp", "P"),  # PHPass based applications
    ("Phpassh", "H"),
    ("Pbkdf2Sha1", "pbkdf2"),  # passlib
    ("Pbkdf2Sha256", "pbkdf2-sha256"),
    ("Pbkdf2Sha512", "pbkdf2-sha512"),
    ("Scram", "scram"),  # passlib
    ("CtaPbkdf2Sha1", "p5k2"),
    ("Scrypt", "scrypt"),  # passlib
    ("ScryptMcf", "scrypt-mcf"),
    ("Hmac", "hmac"),
    ("Custom", "custom"),  # anything else, details go in the parameters
])
