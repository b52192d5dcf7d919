"""Hash records built on the codec.

`McfHash` is the generic record: an algorithm identifier, an open map of
parameters, a salt and a hash. `BcryptHash` is the legacy layout where the
cost is a bare number and salt and hash share one field.

    $argon2i$m=262144,p=1,t=2$c29tZXNhbHQ$Pmiaqj0op3zyvHKlGsUxZnYXURgvHuKS4/Z3p9pMJGc
    $2a$10$ckjEeyTD6estWyoofn4EROM9Ik2PqVcfcrepX.uGp6.aqRdCMN/Oe
"""

__all__ = [
    "McfHash",
    "BcryptHash",
    "mcf_hash_shape",
    "bcrypt_hash_shape",
    "parse_hash",
    "format_hash",
]

import dataclasses
import functools

import mcf


@dataclasses.dataclass
class McfHash:
    """Algorithm agnostic hash record.

    Attributes:
        algorithm: (Variant) Unit variant named by the algorithm identifier
        parameters: (dict[str, str]) Algorithm parameters in written order
        salt: (bytes) Salt
        hash: (bytes) Hash output
    """

    algorithm: mcf.Variant
    parameters: dict
    salt: bytes
    hash: bytes

    def lookup(self, table=None):
        """(Algorithm | None) Table entry for this hash's identifier."""
        table = table if table is not None else mcf.KNOWN_ALGORITHMS
        return table.from_id(self.algorithm.name)


@dataclasses.dataclass
class BcryptHash:
    """Legacy bcrypt hash record.

    Attributes:
        algorithm: (Variant) Unit variant named by the algorithm identifier
        cost: (int) Log2 of the round count
        salt: (bytes) 16 byte salt
        hash: (bytes) 23 byte hash output
    """

    algorithm: mcf.Variant
    cost: int
    salt: bytes
    hash: bytes

    @classmethod
    def _from_fields(cls, algorithm, cost, salthash):
        salt, hash = salthash
        return cls(algorithm, cost, salt, hash)

    @property
    def salthash(self):
        """(tuple[bytes, bytes]) Salt and hash as written in the shared field."""
        return (self.salt, self.hash)

    def to_generic(self):
        """Convert to the generic record, moving the cost into the parameters.

        Returns:
            (McfHash) Equivalent generic record
        """
        return McfHash(self.algorithm, {"cost": str(self.cost)}, self.salt, self.hash)


@functools.lru_cache(maxsize=8)
def mcf_hash_shape(table=None):
    """Shape of `McfHash` for the algorithms in a table.

    Args:
        table: (AlgorithmTable | None) Accepted algorithms, defaults to
            `mcf.KNOWN_ALGORITHMS`

    Returns:
        (Struct) Shape producing `McfHash` records
    """
    table = table if table is not None else mcf.KNOWN_ALGORITHMS
    rest = mcf.parse_shape("{parameters: map<str, str>, salt: bytes, hash: bytes}")
    return mcf.Struct((("algorithm", table.shape()), *rest.fields), McfHash)


@functools.lru_cache(maxsize=8)
def bcrypt_hash_shape(table=None):
    """Shape of `BcryptHash` for the algorithms in a table.

    Args:
        table: (AlgorithmTable | None) Accepted algorithms, defaults to
            `mcf.KNOWN_ALGORITHMS`

    Returns:
        (Struct) Shape producing `BcryptHash` records
    """
    table = table if table is not None else mcf.KNOWN_ALGORITHMS
    rest = mcf.parse_shape("{cost: u8, salthash: bytes(bcrypt)}")
    return mcf.Struct((("algorithm", table.shape()), *rest.fields), BcryptHash._from_fields)


def parse_hash(text, table=None):
    """Decode hash text as a generic or a legacy bcrypt record.

    The generic layout is tried first.

    Args:
        text: (str) Hash text
        table: (AlgorithmTable | None) Accepted algorithms

    Returns:
        (McfHash | BcryptHash) Decoded record

    Raises:
        mcf.McfError: If neither layout matches
    """
    shapes = [mcf_hash_shape(table), bcrypt_hash_shape(table)]
    _, record = mcf.decode_first(text, shapes)
    return record


def format_hash(record, table=None):
    """Encode a hash record.

    Args:
        record: (McfHash | BcryptHash) Record to encode
        table: (AlgorithmTable | None) Accepted algorithms

    Returns:
        (str) Hash text
    """
    if isinstance(record, McfHash):
        return mcf.encode(record, mcf_hash_shape(table))
    if isinstance(record, BcryptHash):
        return mcf.encode(record, bcrypt_hash_shape(table))
    raise TypeError(f"Expected McfHash or BcryptHash, got {type(record).__name__}")
