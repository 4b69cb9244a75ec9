"""Shared helpers for tests."""

from src.idvault.core.models.crypto import EncryptedField


class FakeClock:
    """Manually advanced clock returning epoch seconds."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def flip_hex_char(value: str, index: int = 0) -> str:
    """Return ``value`` with one hex digit changed, so the decoded byte differs."""
    chars = list(value)
    chars[index] = "0" if chars[index] != "0" else "1"
    return "".join(chars)


def tamper(field: EncryptedField, component: str, index: int = 0) -> EncryptedField:
    return field.model_copy(
        update={component: flip_hex_char(getattr(field, component), index)}
    )
