from pydantic import BaseModel, ConfigDict, Field


class EncryptedField(BaseModel):
    """Ciphertext, nonce and authentication tag of one encrypted value, hex encoded.

    The three parts are only meaningful together and are always replaced as a unit.
    """

    model_config = ConfigDict(frozen=True)

    ciphertext: str = Field(description="Hex-encoded ciphertext without the tag")
    iv: str = Field(description="Hex-encoded 96-bit nonce, unique per encryption")
    auth_tag: str = Field(description="Hex-encoded 128-bit GCM tag")

    def __repr__(self) -> str:
        return "EncryptedField(ciphertext=..., iv=..., auth_tag=...)"
