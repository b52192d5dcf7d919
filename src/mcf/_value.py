"""Runtime values that have no direct Python equivalent."""

__all__ = ["Variant"]


class Variant:
    """An enum instance: the variant name plus its payload.

    The payload depends on the variant shape. Unit variants carry None,
    newtype variants carry the single value, tuple variants carry a tuple
    and struct variants carry a dict or the struct's record.

    Args:
        name: (str) Variant discriminant
        payload: Variant data, None for unit variants

    Attributes:
        name: (str) Variant discriminant
        payload: Variant data
    """

    __slots__ = ("name", "payload")

    def __init__(self, name, payload=None):
        self.name = name
        self.payload = payload

    def __eq__(self, other):
        if not isinstance(other, Variant):
            return NotImplemented
        return self.name == other.name and self.payload == other.payload

    def __hash__(self):
        # Payloads are often dicts, so only the name participates
        return hash(self.name)

    def __repr__(self):
        if self.payload is None:
            return f"Variant<{self.name}>"
        return f"Variant<{self.name} {self.payload!r}>"
