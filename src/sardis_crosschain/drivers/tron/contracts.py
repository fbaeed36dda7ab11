"""Protobuf encodings of the Tron system contracts the builder emits."""
from __future__ import annotations

from typing import Optional

from ...protobuf import ProtoWriter, any_message

TYPE_URL_PREFIX = "type.googleapis.com/protocol."

TRANSFER_CONTRACT = 1
TRIGGER_SMART_CONTRACT = 31
FREEZE_BALANCE_V2_CONTRACT = 54
UNFREEZE_BALANCE_V2_CONTRACT = 55
WITHDRAW_EXPIRE_UNFREEZE_CONTRACT = 56

_CONTRACT_NAMES = {
    TRANSFER_CONTRACT: "TransferContract",
    TRIGGER_SMART_CONTRACT: "TriggerSmartContract",
    FREEZE_BALANCE_V2_CONTRACT: "FreezeBalanceV2Contract",
    UNFREEZE_BALANCE_V2_CONTRACT: "UnfreezeBalanceV2Contract",
    WITHDRAW_EXPIRE_UNFREEZE_CONTRACT: "WithdrawExpireUnfreezeContract",
}


def contract(contract_type: int, parameter: ProtoWriter) -> ProtoWriter:
    """Transaction.Contract wrapping ``parameter`` in an Any."""
    type_url = TYPE_URL_PREFIX + _CONTRACT_NAMES[contract_type]
    return ProtoWriter().varint(1, contract_type).message(2, any_message(type_url, parameter.finish()))


def transfer_contract(owner: bytes, to: bytes, amount: int) -> ProtoWriter:
    params = ProtoWriter().raw(1, owner).raw(2, to).varint(3, amount)
    return contract(TRANSFER_CONTRACT, params)


def trigger_smart_contract(owner: bytes, contract_address: bytes, data: bytes, call_value: int = 0) -> ProtoWriter:
    params = ProtoWriter().raw(1, owner).raw(2, contract_address).varint(3, call_value).raw(4, data)
    return contract(TRIGGER_SMART_CONTRACT, params)


def freeze_balance_v2(owner: bytes, amount: int, resource: int) -> ProtoWriter:
    params = ProtoWriter().raw(1, owner).varint(2, amount).varint(3, resource)
    return contract(FREEZE_BALANCE_V2_CONTRACT, params)


def unfreeze_balance_v2(owner: bytes, amount: int, resource: int) -> ProtoWriter:
    params = ProtoWriter().raw(1, owner).varint(2, amount).varint(3, resource)
    return contract(UNFREEZE_BALANCE_V2_CONTRACT, params)


def withdraw_expire_unfreeze(owner: bytes) -> ProtoWriter:
    return contract(WITHDRAW_EXPIRE_UNFREEZE_CONTRACT, ProtoWriter().raw(1, owner))


def raw_data(
    tx_contract: ProtoWriter,
    ref_block_bytes: bytes,
    ref_block_hash: bytes,
    expiration_ms: int,
    timestamp_ms: int,
    memo: str = "",
    fee_limit: Optional[int] = None,
) -> bytes:
    """Transaction.raw with fields in field-number order."""
    writer = (
        ProtoWriter()
        .raw(1, ref_block_bytes)
        .raw(4, ref_block_hash)
        .varint(8, expiration_ms)
        .string(10, memo)
        .message(11, tx_contract)
        .varint(14, timestamp_ms)
    )
    if fee_limit:
        writer.varint(18, fee_limit)
    return writer.finish()
