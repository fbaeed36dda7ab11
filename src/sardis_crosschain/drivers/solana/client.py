"""Solana JSON-RPC client collaborator."""
from __future__ import annotations

import base64
import logging
import time
from typing import Any, Optional

import httpx

from ...amount import BlockchainAmount
from ...assets import ChainConfig, TokenAssetConfig
from ...builder import TransferArgs
from ...client import Client, ClientError, classify_message
from ...exceptions import BroadcastError, InsufficientFundsError, RPCError
from ...logging_utils import mask_address
from ...rpc import JsonRpcTransport
from ...tx import Tx
from .address import decode_address, find_associated_token_address
from .builder import MAX_TOKEN_TRANSFERS, SolanaBuilder
from .tx import SolanaTx
from .tx_input import SolanaTxInput, TokenAccount

logger = logging.getLogger(__name__)

COMMITMENT = "finalized"
# floor averaged into recent prioritization fees, micro-lamports per unit
MIN_PRIORITIZATION_FEE = 100

FAILURE_PATTERNS = (
    "insufficient funds",
    "insufficient lamports",
    "custom program error",
    "invalid account data",
)
NETWORK_PATTERNS = ("timeout", "timed out", "connection", "http 5", "request failed", "blockhash not found")
EXISTS_PATTERNS = ("already been processed",)


def classify_broadcast_error(message: str) -> ClientError:
    return classify_message(
        message,
        failure=FAILURE_PATTERNS,
        network=NETWORK_PATTERNS,
        exists=EXISTS_PATTERNS,
    )


def average_prioritization_fee(fees: list[dict[str, Any]]) -> int:
    """Average of the positive recent fees, seeded with the minimum fee."""
    total = MIN_PRIORITIZATION_FEE
    count = 0
    for fee in fees:
        paid = int(fee.get("prioritizationFee", 0))
        if paid > 0:
            total += paid
            count += 1
    if count:
        return total // count
    return MIN_PRIORITIZATION_FEE


class SolanaClient(Client):
    """Async Solana JSON-RPC client.

    Uses raw httpx instead of solana-py; transactions are assembled with
    solders and sent base64-encoded.
    """

    def __init__(
        self,
        chain: ChainConfig,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__(chain)
        self._rpc = JsonRpcTransport(chain.url, timeout=timeout, client=http_client)

    async def get_latest_blockhash(self) -> str:
        result = await self._rpc.call("getLatestBlockhash", [{"commitment": COMMITMENT}])
        return result["value"]["blockhash"]

    async def get_account_info(self, pubkey: str) -> Optional[dict[str, Any]]:
        """Account info, or None if the account does not exist."""
        result = await self._rpc.call(
            "getAccountInfo", [pubkey, {"encoding": "base64", "commitment": COMMITMENT}]
        )
        return result.get("value")

    async def is_token_account(self, pubkey: str) -> bool:
        try:
            await self._rpc.call("getTokenAccountBalance", [pubkey, {"commitment": COMMITMENT}])
        except RPCError:
            return False
        return True

    async def get_token_accounts_by_owner(self, owner: str, mint: str) -> list[TokenAccount]:
        """Funded token accounts for an owner and mint, largest first."""
        result = await self._rpc.call(
            "getTokenAccountsByOwner",
            [
                owner,
                {"mint": mint},
                {"encoding": "jsonParsed", "commitment": COMMITMENT},
            ],
        )
        accounts = []
        for entry in result.get("value", []):
            amount = entry["account"]["data"]["parsed"]["info"]["tokenAmount"]["amount"]
            balance = BlockchainAmount.from_str(amount)
            if balance.sign() > 0:
                accounts.append(TokenAccount(account=entry["pubkey"], balance=balance))
        accounts.sort(key=lambda acc: int(acc.balance), reverse=True)
        return accounts[:MAX_TOKEN_TRANSFERS]

    async def get_prioritization_fee(self, accounts: list[str]) -> int:
        fees = await self._rpc.call("getRecentPrioritizationFees", [accounts])
        return average_prioritization_fee(fees or [])

    async def fetch_transfer_input(self, args: TransferArgs) -> SolanaTxInput:
        tx_input = SolanaTxInput(
            recent_block_hash=await self.get_latest_blockhash(),
            timestamp=int(time.time()),
        )
        locked = [args.from_address]

        asset = args.asset
        if isinstance(asset, TokenAssetConfig):
            mint_info = await self.get_account_info(asset.contract)
            if mint_info is None:
                raise RPCError(f"mint account {asset.contract} not found")
            tx_input.token_program = mint_info["owner"]

            tx_input.to_is_ata = await self.is_token_account(args.to_address)
            destination = args.to_address
            if not tx_input.to_is_ata:
                destination = str(
                    find_associated_token_address(
                        decode_address(args.to_address),
                        decode_address(asset.contract),
                        decode_address(tx_input.token_program),
                    )
                )
            # a missing destination ATA is created by the transfer itself
            tx_input.should_create_ata = await self.get_account_info(destination) is None

            tx_input.source_token_accounts = await self.get_token_accounts_by_owner(
                args.from_address, asset.contract
            )
            if not tx_input.source_token_accounts:
                raise InsufficientFundsError(
                    "no balance to send solana token",
                    available="0",
                    chain=self.chain.chain.value,
                )
            locked = [asset.contract]

        fee = BlockchainAmount(await self.get_prioritization_fee(locked))
        tx_input.prioritization_fee = fee.apply_gas_price_multiplier(self.chain)

        logger.info(
            "Fetched SOL input for %s: token_accounts=%d priority_fee=%s",
            mask_address(args.from_address),
            len(tx_input.source_token_accounts),
            tx_input.prioritization_fee,
        )
        return tx_input

    async def broadcast(self, tx: Tx) -> None:
        payload = base64.b64encode(tx.serialize()).decode("ascii")
        try:
            await self._rpc.call(
                "sendTransaction",
                [payload, {"encoding": "base64", "skipPreflight": False}],
            )
        except RPCError as exc:
            reason = classify_broadcast_error(exc.message)
            raise BroadcastError(exc.message, reason=reason.value, tx_hash=tx.hash()) from exc
        logger.info("Solana tx sent: %s", tx.hash())

    async def estimate_fee(self, args: TransferArgs) -> BlockchainAmount:
        """Network fee in lamports for the message a transfer would sign."""
        tx_input = await self.fetch_transfer_input(args)
        tx: SolanaTx = SolanaBuilder(self.chain).transfer(args, tx_input)
        message = base64.b64encode(tx.sighashes()[0]).decode("ascii")
        result = await self._rpc.call("getFeeForMessage", [message, {"commitment": COMMITMENT}])
        if result.get("value") is None:
            raise RPCError("fee for message unavailable, blockhash may have expired")
        return BlockchainAmount(int(result["value"]))

    async def close(self) -> None:
        await self._rpc.close()


__all__ = ["SolanaClient", "average_prioritization_fee", "classify_broadcast_error"]
