"""
Resolve the lifecycle status of an OP Stack L2 -> L1 withdrawal.

The status is derived from four reads that are issued together and always
awaited to completion before any of them is interpreted.
"""

import asyncio
import logging
from typing import List, Protocol

from hexbytes import HexBytes
from web3.types import TxReceipt

from .custom_errors import CheckpointNotYetPublished, NoWithdrawalFound
from .types import (
    L2Output,
    ProvenWithdrawal,
    TimeToFinalize,
    Withdrawal,
    WithdrawalStatus,
)

logger = logging.getLogger(__name__)


class WithdrawalQueries(Protocol):
    """Reads required to resolve a withdrawal status. See `OPStackReader`."""

    def get_withdrawals(self, receipt: TxReceipt) -> List[Withdrawal]: ...

    async def get_l2_output(self, l2_block_number: int) -> L2Output: ...

    async def get_proven_withdrawal(
        self, withdrawal_hash: HexBytes
    ) -> ProvenWithdrawal: ...

    async def is_finalized_withdrawal(self, withdrawal_hash: HexBytes) -> bool: ...

    async def get_time_to_finalize(
        self, withdrawal_hash: HexBytes
    ) -> TimeToFinalize: ...


async def get_withdrawal_status(
    queries: WithdrawalQueries, receipt: TxReceipt
) -> WithdrawalStatus:
    """
    Return the current status of the first withdrawal initiated in ``receipt``.

    Parameters
    ----------
    queries : WithdrawalQueries
        Reads bound to the OP-Stack chain the withdrawal belongs to.

    receipt : TxReceipt
        Receipt of the L2 transaction that initiated the withdrawal.

    Returns
    -------
    WithdrawalStatus

    Raises
    ------
    NoWithdrawalFound
        If the receipt does not emit any withdrawal. No read is issued.

    Any error raised by ``queries`` other than `CheckpointNotYetPublished`
    is re-raised as is.
    """
    withdrawals = queries.get_withdrawals(receipt)

    if not withdrawals:
        raise NoWithdrawalFound(receipt.get("transactionHash"))

    withdrawal = withdrawals[0]

    output, proven, finalized, time_to_finalize = await asyncio.gather(
        queries.get_l2_output(withdrawal.block_number),
        queries.get_proven_withdrawal(withdrawal.withdrawal_hash),
        queries.is_finalized_withdrawal(withdrawal.withdrawal_hash),
        queries.get_time_to_finalize(withdrawal.withdrawal_hash),
        return_exceptions=True,
    )

    status = _decide(output, proven, finalized, time_to_finalize)

    logger.debug(
        "Withdrawal %s is %s", withdrawal.withdrawal_hash.to_0x_hex(), status
    )

    return status


def _decide(output, proven, finalized, time_to_finalize) -> WithdrawalStatus:
    # Order matters: a finalized withdrawal may still read a positive window.
    if isinstance(output, CheckpointNotYetPublished):
        return WithdrawalStatus.WAITING_TO_PROVE

    for result in (output, proven, finalized, time_to_finalize):
        if isinstance(result, BaseException):
            raise result

    if not proven["timestamp"]:
        return WithdrawalStatus.READY_TO_PROVE

    if finalized:
        return WithdrawalStatus.FINALIZED

    if time_to_finalize["seconds"] > 0:
        return WithdrawalStatus.WAITING_TO_FINALIZE

    return WithdrawalStatus.READY_TO_FINALIZE
