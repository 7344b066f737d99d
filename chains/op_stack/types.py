from enum import StrEnum
from typing import NamedTuple, Optional, TypedDict

from eth_typing import ChecksumAddress
from hexbytes import HexBytes


class WithdrawalParams(NamedTuple):
    nonce: int
    sender: ChecksumAddress
    target: ChecksumAddress
    value: int
    gasLimit: int
    data: bytes


class Withdrawal(NamedTuple):
    """
    - `withdrawal_hash`: 32-byte hash emitted in the `MessagePassed` event.
    - `block_number`: L2 block that included the initiating transaction.
    - `params`: decoded withdrawal struct, when extracted from an event.
    """

    withdrawal_hash: HexBytes
    block_number: int
    params: Optional[WithdrawalParams] = None


class WithdrawalStatus(StrEnum):
    WAITING_TO_PROVE = "waiting-to-prove"
    READY_TO_PROVE = "ready-to-prove"
    WAITING_TO_FINALIZE = "waiting-to-finalize"
    READY_TO_FINALIZE = "ready-to-finalize"
    FINALIZED = "finalized"


class L2Output(TypedDict):
    output_index: int
    output_root: bytes
    timestamp: int
    l2_block_number: int


class ProvenWithdrawal(TypedDict):
    """
    - `timestamp`: L1 time the withdrawal was proven, `None` while unproven.
    """

    output_root: bytes
    timestamp: Optional[int]
    l2_output_index: int


class TimeToFinalize(TypedDict):
    period: int
    seconds: int
    timestamp: int
