"""Bitcoin-family transfer builder."""
from __future__ import annotations

import logging

from bitcoin.core import CMutableTransaction, CMutableTxIn, CMutableTxOut, COutPoint, lx

from ...amount import BlockchainAmount
from ...blockchains import Blockchain
from ...builder import TransferArgs, TxBuilder, expect_input
from ...exceptions import InsufficientFundsError, ValidationError
from ...tx_input import TxInput
from .address import P2PKH, P2WPKH, decode_address
from .tx import BitcoinTx, SpentInput
from .tx_input import BitcoinTxInput

logger = logging.getLogger(__name__)

# Estimated bytes contributed per spent output
SIZE_PER_SPENT_OUTPUT = 255
SIZE_PER_SPENT_OUTPUT_BCH = 300


class BitcoinBuilder(TxBuilder):
    """Spends every output in the input: destination first, then change."""

    @property
    def fork_id(self) -> bool:
        return self.chain.driver == Blockchain.BITCOIN_CASH

    def estimate_fee(self, tx_input: BitcoinTxInput) -> BlockchainAmount:
        size = SIZE_PER_SPENT_OUTPUT_BCH if self.fork_id else SIZE_PER_SPENT_OUTPUT
        return tx_input.gas_price_per_byte.mul(size * len(tx_input.unspent_outputs))

    def new_native_transfer(self, args: TransferArgs, tx_input: TxInput) -> BitcoinTx:
        tx_input = expect_input(tx_input, BitcoinTxInput, self.chain)
        if not tx_input.unspent_outputs:
            raise InsufficientFundsError(
                "no unspent outputs to spend",
                available="0",
                chain=self.chain.chain.value,
            )

        owner = decode_address(args.from_address, self.chain)
        if owner.kind not in (P2PKH, P2WPKH):
            raise ValidationError(
                f"cannot spend from {owner.kind} address {args.from_address}",
                field="from",
            )
        destination = decode_address(args.to_address, self.chain)

        total = tx_input.sum_utxo()
        fee = self.estimate_fee(tx_input)
        left = total - args.amount
        change = left - fee
        if change.sign() < 0:
            decimals = self.chain.decimals
            fee_human = fee.to_human(decimals)
            left_human = left.to_human(decimals)
            raise InsufficientFundsError(
                f"not enough funds for fees, estimated fee is {fee_human} "
                f"but only {left_human} is left after transfer",
                available=str(total.to_human(decimals)),
                required=str((args.amount + fee).to_human(decimals)),
                shortfall=str(change.abs().to_human(decimals)),
                chain=self.chain.chain.value,
            )

        vin = []
        spent = []
        for output in tx_input.unspent_outputs:
            outpoint = COutPoint(lx(output.outpoint.hash), output.outpoint.index)
            vin.append(CMutableTxIn(outpoint))
            spent.append(SpentInput(owner=owner, value=int(output.value)))

        vout = [CMutableTxOut(int(args.amount), destination.script_pubkey)]
        if change.sign() > 0:
            vout.append(CMutableTxOut(int(change), owner.script_pubkey))

        logger.info(
            "Bitcoin transfer uses %d outputs, fee=%s change=%s",
            len(vin),
            fee,
            change,
        )
        return BitcoinTx(
            CMutableTransaction(vin, vout),
            spent,
            public_key=tx_input.from_public_key,
            fork_id=self.fork_id,
        )


__all__ = ["BitcoinBuilder", "SIZE_PER_SPENT_OUTPUT", "SIZE_PER_SPENT_OUTPUT_BCH"]
