# arbmon/chain_client.py
"""
Chain Client
Read and write access to a single JSON-RPC endpoint
"""

import time
import logging
from decimal import Decimal
from typing import Optional, Tuple

from web3 import Web3

from arbmon.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class ChainClient:
    """
    Thin wrapper around one Web3 connection.

    Reads: block number, gas price, contract objects for view calls.
    Writes: build/sign/send a contract transaction, wait for its receipt.
    """

    def __init__(
        self,
        rpc_url: str,
        chain_id: int,
        private_key: Optional[str] = None,
        timeout: float = 10,
        w3: Optional[Web3] = None,
    ):
        self.rpc_url = rpc_url
        self.chain_id = chain_id
        self.w3 = w3 or Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": timeout}))

        self.account = None
        if private_key:
            self.account = self.w3.eth.account.from_key(private_key)

    @property
    def address(self) -> Optional[str]:
        return self.account.address if self.account else None

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def is_connected(self) -> bool:
        return self.w3.is_connected()

    def block_number(self) -> int:
        return self.w3.eth.block_number

    def gas_price_wei(self) -> int:
        return self.w3.eth.gas_price

    def gas_price_gwei(self) -> Decimal:
        return Web3.from_wei(self.gas_price_wei(), "gwei")

    def contract(self, address: str, abi: list):
        return self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)

    def check_health(self, max_latency: float = 2.0) -> Tuple[bool, str]:
        """
        Check RPC health
        Returns (is_healthy: bool, status_message: str)
        """
        try:
            start = time.time()
            latest = self.w3.eth.block_number
            latency = time.time() - start

            if latency > max_latency:
                return False, f"High latency {latency:.2f}s"

            return True, f"OK (latency={latency:.2f}s, block={latest})"

        except Exception as e:
            return False, str(e)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def send_transaction(self, contract_function, gas_price_wei: int) -> bytes:
        """Build, sign and broadcast a contract call. Returns the tx hash."""
        if self.account is None:
            raise ConfigurationError("No signing key configured")

        tx = contract_function.build_transaction({
            "from": self.account.address,
            "nonce": self.w3.eth.get_transaction_count(self.account.address, "pending"),
            "gasPrice": gas_price_wei,
            "chainId": self.chain_id,
        })

        signed = self.account.sign_transaction(tx)
        tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)

        logger.info(f"Tx sent: {Web3.to_hex(tx_hash)}")
        return tx_hash

    def wait_for_receipt(self, tx_hash: bytes, timeout: float = 120):
        return self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)
