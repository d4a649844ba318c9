"""
AuthenticatedIdentity model representing the caller supplied by the session layer.
"""

from pydantic import BaseModel, Field, SecretStr


class AuthenticatedIdentity(BaseModel):
    """
    The currently authenticated caller.

    The core never manages credentials. An identity only matters for
    anchoring: a wallet address makes it a signer, and a private key lets
    the anchor client sign locally instead of relying on the node's account.

    Attributes:
        user_id: Identifier of the user in the session layer
        role: Role name (e.g. "MANUFACTURER", "DISTRIBUTOR")
        wallet_address: Blockchain account used as the anchoring signer
        private_key: Optional key for local transaction signing
    """

    user_id: str = Field(..., min_length=1)
    role: str
    wallet_address: str | None = None
    private_key: SecretStr | None = None

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "user_id": "usr_81f2",
                "role": "MANUFACTURER",
                "wallet_address": "0x90F8bf6A479f320ead074411a4B0e7944Ea8c9C1",
            }
        }

    @property
    def can_sign(self) -> bool:
        return bool(self.wallet_address)
