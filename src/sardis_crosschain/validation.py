"""Request validation helpers shared by builders and callers."""
from __future__ import annotations

from .amount import BlockchainAmount, HumanAmount
from .assets import ChainConfig
from .blockchains import Blockchain
from .exceptions import InvalidAddressError, NotSupportedError, ValidationError

ETH_DECIMALS = 18
ETH_STAKE_CHUNK = HumanAmount(32)


def count_32_eth_chunks(amount: BlockchainAmount) -> int:
    """Number of 32 ETH validator deposits ``amount`` (in wei) represents.

    Raises:
        ValidationError: If the amount is below 32 ETH or not a multiple of it.
    """
    human = amount.to_human(ETH_DECIMALS)
    if human < ETH_STAKE_CHUNK:
        raise ValidationError(
            f"must stake at least 32 ether, requested {human}",
            field="amount",
        )
    chunks = human.div(ETH_STAKE_CHUNK)
    if not chunks.is_integral():
        raise ValidationError(
            f"must stake a multiple of 32 ether, requested {human}",
            field="amount",
        )
    return int(chunks.decimal)


def validate_address(chain: ChainConfig, address: str) -> None:
    """Check that ``address`` decodes for ``chain``.

    Raises:
        InvalidAddressError: If it does not.
        NotSupportedError: For drivers without an address decoder.
    """
    if not address:
        raise InvalidAddressError(address, chain.chain.value, "empty address")

    driver = chain.driver
    if driver.is_utxo:
        from .drivers.bitcoin.address import decode_address as decode_bitcoin

        decode_bitcoin(address, chain)
    elif driver in (Blockchain.EVM, Blockchain.EVM_LEGACY):
        from .drivers.evm.address import decode_address as decode_evm

        decode_evm(address)
    elif driver in (Blockchain.COSMOS, Blockchain.EVMOS):
        from .drivers.cosmos.address import decode_address as decode_cosmos

        decode_cosmos(address, chain)
    elif driver == Blockchain.SOLANA:
        from .drivers.solana.address import decode_address as decode_solana

        decode_solana(address)
    elif driver == Blockchain.TRON:
        from .drivers.tron.address import decode_address as decode_tron

        decode_tron(address)
    else:
        raise NotSupportedError("address validation", chain=chain.chain.value)


__all__ = ["count_32_eth_chunks", "validate_address"]
