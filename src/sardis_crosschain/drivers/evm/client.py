"""EVM JSON-RPC client collaborator."""
from __future__ import annotations

import logging
from typing import Any, Optional, Union

import httpx

from ...amount import BlockchainAmount
from ...assets import ChainConfig, TokenAssetConfig
from ...blockchains import Blockchain
from ...builder import TransferArgs
from ...client import Client, ClientError, classify_message
from ...exceptions import BroadcastError, RPCError
from ...logging_utils import mask_address
from ...rpc import JsonRpcTransport
from ...tx import Tx
from . import abi
from .address import decode_address, normalize_address
from .builder import NATIVE_TRANSFER_GAS_LIMIT, TOKEN_TRANSFER_GAS_LIMIT
from .tx_input import EvmLegacyTxInput, EvmTxInput

logger = logging.getLogger(__name__)

FAILURE_PATTERNS = (
    "nonce too low",
    "replacement transaction underpriced",
    "insufficient funds",
    "intrinsic gas too low",
    "execution reverted",
)
NETWORK_PATTERNS = ("timeout", "timed out", "connection", "http 5", "request failed")
EXISTS_PATTERNS = ("already known", "known transaction")


def classify_broadcast_error(message: str) -> ClientError:
    return classify_message(
        message,
        failure=FAILURE_PATTERNS,
        network=NETWORK_PATTERNS,
        exists=EXISTS_PATTERNS,
    )


def _int(value: str) -> int:
    return int(value, 16)


class EvmClient(Client):
    """Fetches nonce and gas pricing, broadcasts raw transactions."""

    def __init__(
        self,
        chain: ChainConfig,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__(chain)
        self._rpc = JsonRpcTransport(chain.url, timeout=timeout, client=http_client)

    @property
    def legacy(self) -> bool:
        return self.chain.driver == Blockchain.EVM_LEGACY

    def _call_object(self, args: TransferArgs) -> dict[str, Any]:
        sender = normalize_address(args.from_address)
        if isinstance(args.asset, TokenAssetConfig):
            data = abi.erc20_transfer(decode_address(args.to_address), int(args.amount))
            return {
                "from": sender,
                "to": normalize_address(args.asset.contract),
                "value": "0x0",
                "data": "0x" + data.hex(),
            }
        return {
            "from": sender,
            "to": normalize_address(args.to_address),
            "value": hex(int(args.amount)),
        }

    async def _estimate_gas(self, args: TransferArgs) -> int:
        default = TOKEN_TRANSFER_GAS_LIMIT if isinstance(args.asset, TokenAssetConfig) else NATIVE_TRANSFER_GAS_LIMIT
        try:
            return _int(await self._rpc.call("eth_estimateGas", [self._call_object(args)]))
        except RPCError as exc:
            logger.warning("eth_estimateGas failed, using default %d: %s", default, exc.message)
            return default

    async def fetch_transfer_input(self, args: TransferArgs) -> Union[EvmTxInput, EvmLegacyTxInput]:
        sender = normalize_address(args.from_address)
        nonce = _int(await self._rpc.call("eth_getTransactionCount", [sender, "pending"]))
        chain_id = _int(await self._rpc.call("eth_chainId"))
        gas_limit = await self._estimate_gas(args)

        if self.legacy:
            gas_price = BlockchainAmount(_int(await self._rpc.call("eth_gasPrice")))
            tx_input: Union[EvmTxInput, EvmLegacyTxInput] = EvmLegacyTxInput(
                nonce=nonce,
                gas_limit=gas_limit,
                chain_id=chain_id,
                gas_price=gas_price.apply_gas_price_multiplier(self.chain),
            )
        else:
            block = await self._rpc.call("eth_getBlockByNumber", ["latest", False])
            base_fee = BlockchainAmount(_int(block.get("baseFeePerGas", "0x0")))
            tip = BlockchainAmount(_int(await self._rpc.call("eth_maxPriorityFeePerGas")))
            tip = tip.apply_gas_price_multiplier(self.chain)
            fee_cap = base_fee.mul(2).apply_gas_price_multiplier(self.chain) + tip
            tx_input = EvmTxInput(
                nonce=nonce,
                gas_limit=gas_limit,
                chain_id=chain_id,
                gas_fee_cap=fee_cap,
                gas_tip_cap=tip,
            )

        logger.info(
            "Fetched %s input for %s: nonce=%d gas_limit=%d",
            self.chain.chain.value,
            mask_address(sender),
            nonce,
            gas_limit,
        )
        return tx_input

    async def broadcast(self, tx: Tx) -> None:
        raw = "0x" + tx.serialize().hex()
        try:
            await self._rpc.call("eth_sendRawTransaction", [raw])
        except RPCError as exc:
            reason = classify_broadcast_error(exc.message)
            raise BroadcastError(exc.message, reason=reason.value, tx_hash=tx.hash()) from exc
        logger.info("Broadcast %s transaction %s", self.chain.chain.value, tx.hash())

    async def estimate_fee(self, args: TransferArgs) -> BlockchainAmount:
        tx_input = await self.fetch_transfer_input(args)
        return tx_input.max_fee()

    async def close(self) -> None:
        await self._rpc.close()


__all__ = ["EvmClient", "classify_broadcast_error"]
