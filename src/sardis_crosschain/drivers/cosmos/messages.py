"""Protobuf encodings of the Cosmos messages the builder emits."""
from __future__ import annotations

import json

from ...protobuf import ProtoWriter, any_message

MSG_SEND = "/cosmos.bank.v1beta1.MsgSend"
MSG_EXECUTE_CONTRACT = "/cosmwasm.wasm.v1.MsgExecuteContract"
MSG_DELEGATE = "/cosmos.staking.v1beta1.MsgDelegate"
MSG_UNDELEGATE = "/cosmos.staking.v1beta1.MsgUndelegate"
MSG_WITHDRAW_DELEGATOR_REWARD = "/cosmos.distribution.v1beta1.MsgWithdrawDelegatorReward"

SIGN_MODE_DIRECT = 1


def coin(denom: str, amount: int) -> ProtoWriter:
    return ProtoWriter().string(1, denom).string(2, str(amount))


def msg_send(sender: str, recipient: str, denom: str, amount: int) -> ProtoWriter:
    value = ProtoWriter().string(1, sender).string(2, recipient).message(3, coin(denom, amount))
    return any_message(MSG_SEND, value.finish())


def cw20_transfer_msg(recipient: str, amount: int) -> bytes:
    return json.dumps({"transfer": {"amount": str(amount), "recipient": recipient}}).encode("utf-8")


def msg_execute_contract(sender: str, contract: str, msg: bytes) -> ProtoWriter:
    value = ProtoWriter().string(1, sender).string(2, contract).raw(3, msg)
    return any_message(MSG_EXECUTE_CONTRACT, value.finish())


def msg_delegate(delegator: str, validator: str, denom: str, amount: int) -> ProtoWriter:
    value = ProtoWriter().string(1, delegator).string(2, validator).message(3, coin(denom, amount))
    return any_message(MSG_DELEGATE, value.finish())


def msg_undelegate(delegator: str, validator: str, denom: str, amount: int) -> ProtoWriter:
    value = ProtoWriter().string(1, delegator).string(2, validator).message(3, coin(denom, amount))
    return any_message(MSG_UNDELEGATE, value.finish())


def msg_withdraw_delegator_reward(delegator: str, validator: str) -> ProtoWriter:
    value = ProtoWriter().string(1, delegator).string(2, validator)
    return any_message(MSG_WITHDRAW_DELEGATOR_REWARD, value.finish())


def tx_body(message: ProtoWriter, memo: str) -> bytes:
    return ProtoWriter().message(1, message).string(2, memo).finish()


def auth_info(
    pubkey_type: str,
    public_key: bytes,
    sequence: int,
    fee_coins: list[tuple[str, int]],
    gas_limit: int,
) -> bytes:
    pubkey = any_message(pubkey_type, ProtoWriter().raw(1, public_key).finish())
    mode_info = ProtoWriter().message(1, ProtoWriter().varint(1, SIGN_MODE_DIRECT))
    signer_info = ProtoWriter().message(1, pubkey).message(2, mode_info).varint(3, sequence)
    fee = (
        ProtoWriter()
        .repeated_messages(1, [coin(denom, amount) for denom, amount in fee_coins])
        .varint(2, gas_limit)
    )
    return ProtoWriter().message(1, signer_info).message(2, fee).finish()
