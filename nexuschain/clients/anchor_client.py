"""
Blockchain anchoring client.

Anchoring submits a product's canonical fields (product key and name) to
the product registry contract and returns the transaction id. The
orchestrator treats anchoring as best-effort, so this client only has to
report success or raise AnchorError.
"""

from abc import ABC, abstractmethod
from typing import Any

from web3 import Web3

from nexuschain.config import Settings
from nexuschain.core.errors import AnchorError
from nexuschain.core.models import AuthenticatedIdentity
from nexuschain.observability.logger import get_logger
from nexuschain.observability.metrics import collaborator_call

logger = get_logger(__name__)

# Minimal ABI of the product registry contract
PRODUCT_REGISTRY_ABI = [
    {
        "inputs": [
            {"internalType": "string", "name": "productId", "type": "string"},
            {"internalType": "string", "name": "name", "type": "string"},
        ],
        "name": "registerProduct",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]


class AnchorClient(ABC):
    """Interface for anchoring a product to a blockchain."""

    @abstractmethod
    def anchor(self, product_key: str, name: str, signer: AuthenticatedIdentity) -> str:
        """
        Anchor a product and return the transaction id.

        Args:
            product_key: The product's SKU
            name: The product's name
            signer: Identity whose wallet signs the transaction

        Raises:
            AnchorError: If submission or confirmation fails
        """
        pass


class Web3AnchorClient(AnchorClient):
    """
    Anchors products through the registry contract using web3.

    When the signer carries a private key the transaction is signed locally
    and sent raw; otherwise the node is asked to send it from the signer's
    (unlocked) account. Either way the call waits for the receipt, bounded
    by the anchor timeout, and a reverted transaction is an AnchorError.
    """

    def __init__(self, web3: Web3, contract_address: str, timeout: float = 120.0):
        """
        Initialize the anchor client.

        Args:
            web3: Connected Web3 instance
            contract_address: Address of the product registry contract
            timeout: Seconds to wait for the transaction receipt
        """
        self.web3 = web3
        self.timeout = timeout
        self.contract = web3.eth.contract(
            address=Web3.to_checksum_address(contract_address),
            abi=PRODUCT_REGISTRY_ABI,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Web3AnchorClient":
        if not settings.anchoring_enabled:
            raise ValueError("Anchoring requires BLOCKCHAIN_RPC_URL and CONTRACT_ADDRESS")
        provider = Web3.HTTPProvider(
            settings.blockchain_rpc_url,
            request_kwargs={"timeout": settings.anchor_timeout},
        )
        return cls(Web3(provider), settings.contract_address, timeout=settings.anchor_timeout)

    def anchor(self, product_key: str, name: str, signer: AuthenticatedIdentity) -> str:
        if not signer.can_sign:
            raise AnchorError("Signer has no wallet address")

        try:
            with collaborator_call("blockchain", "anchor"):
                tx_hash = self._submit(product_key, name, signer)
                receipt = self.web3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.timeout)
        except Exception as e:
            # Any RPC, signing or timeout failure is an anchoring failure
            raise AnchorError(f"Anchoring failed: {type(e).__name__}: {e}") from e

        reference = Web3.to_hex(tx_hash)
        if receipt.get("status") != 1:
            raise AnchorError(f"Anchor transaction {reference} reverted")

        logger.info(
            "Product anchored",
            extra={"product_key": product_key, "anchor_reference": reference},
        )
        return reference

    def _submit(self, product_key: str, name: str, signer: AuthenticatedIdentity) -> Any:
        account = Web3.to_checksum_address(signer.wallet_address)
        call = self.contract.functions.registerProduct(product_key, name)

        if signer.private_key is None:
            return call.transact({"from": account})

        tx = call.build_transaction({
            "from": account,
            "nonce": self.web3.eth.get_transaction_count(account),
        })
        signed = self.web3.eth.account.sign_transaction(
            tx, private_key=signer.private_key.get_secret_value()
        )
        # web3 v7 renamed rawTransaction to raw_transaction
        raw = getattr(signed, "raw_transaction", None) or signed.rawTransaction
        return self.web3.eth.send_raw_transaction(raw)
