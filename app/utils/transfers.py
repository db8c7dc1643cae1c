# app/utils/transfers.py
import asyncio
import logging
import secrets
from dataclasses import dataclass

from app.core.auth import is_valid_wallet_address
from app.core.config import settings
from app.core.errors import InsufficientBalanceError, TransferTimeoutError, WalletInvalidError
from app.models.transaction import Network

logger = logging.getLogger(__name__)

APP_WALLET_ADDRESS = "WhoLeCoinAppWa11et1111111111111111111111111"


def generate_signature() -> str:
    return secrets.token_hex(32)


def current_network() -> Network:
    return Network.DEVNET if settings.SOLANA_NETWORK.lower() == "devnet" else Network.MAINNET


@dataclass(frozen=True)
class TransferReceipt:
    signature: str
    from_address: str
    to_address: str
    amount: float
    network: Network


class SimulatedTransferClient:
    """
    Stands in for the app wallet: checks the destination and the wallet's
    balance, waits for a (simulated) confirmation and returns a signature.
    """

    def __init__(
        self,
        balance: float,
        network: Network,
        timeout_seconds: float = 30.0,
        confirmation_delay: float = 0.0,
        from_address: str = APP_WALLET_ADDRESS,
    ):
        self.balance = balance
        self.network = network
        self.timeout_seconds = timeout_seconds
        self.confirmation_delay = confirmation_delay
        self.from_address = from_address

    async def _confirm(self, signature: str) -> str:
        if self.confirmation_delay:
            await asyncio.sleep(self.confirmation_delay)
        return signature

    async def transfer(self, to_address: str, amount: float) -> TransferReceipt:
        if not is_valid_wallet_address(to_address):
            raise WalletInvalidError()
        if amount > self.balance:
            logger.error(f"App wallet balance {self.balance} is below requested {amount}")
            raise InsufficientBalanceError()

        signature = generate_signature()
        try:
            await asyncio.wait_for(self._confirm(signature), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.error(f"Transfer {signature[:12]} to {to_address} not confirmed within {self.timeout_seconds}s")
            raise TransferTimeoutError()

        logger.info(f"Simulated transfer {signature[:12]}: {amount} to {to_address} on {self.network.value}")
        return TransferReceipt(
            signature=signature,
            from_address=self.from_address,
            to_address=to_address,
            amount=amount,
            network=self.network,
        )


def build_transfer_client() -> SimulatedTransferClient:
    return SimulatedTransferClient(
        balance=settings.APP_WALLET_BALANCE,
        network=current_network(),
        timeout_seconds=settings.TRANSFER_TIMEOUT_SECONDS,
    )
