"""Shared fixtures for the withdrawal status test suite."""

import asyncio

import pytest
from hexbytes import HexBytes

from chains.op_stack.types import Withdrawal

WITHDRAWAL_HASH = HexBytes("0x" + "ab" * 32)
TXN_HASH = HexBytes("0x" + "cd" * 32)
WITHDRAWAL_BLOCK = 1_234_567
PROVE_TIMESTAMP = 1_700_000_000


class StubQueries:
    """
    `WithdrawalQueries` pre-seeded with one outcome per read. An outcome that
    is an exception is raised instead of returned.
    """

    def __init__(
        self,
        withdrawals,
        output,
        proven,
        finalized,
        time_to_finalize,
        delays=None,
    ):
        self.withdrawals = withdrawals
        self.outcomes = {
            "get_l2_output": output,
            "get_proven_withdrawal": proven,
            "is_finalized_withdrawal": finalized,
            "get_time_to_finalize": time_to_finalize,
        }
        self.delays = delays or {}
        self.calls = []
        self.completed = []
        self.issued_before_first_completion = None

    def get_withdrawals(self, receipt):
        self.calls.append(("get_withdrawals", receipt["transactionHash"]))
        return list(self.withdrawals)

    async def _settle(self, name, arg):
        self.calls.append((name, arg))
        await asyncio.sleep(self.delays.get(name, 0))
        if not self.completed:
            self.issued_before_first_completion = len(self.calls)
        self.completed.append(name)

        outcome = self.outcomes[name]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def get_l2_output(self, l2_block_number):
        return await self._settle("get_l2_output", l2_block_number)

    async def get_proven_withdrawal(self, withdrawal_hash):
        return await self._settle("get_proven_withdrawal", withdrawal_hash)

    async def is_finalized_withdrawal(self, withdrawal_hash):
        return await self._settle("is_finalized_withdrawal", withdrawal_hash)

    async def get_time_to_finalize(self, withdrawal_hash):
        return await self._settle("get_time_to_finalize", withdrawal_hash)


@pytest.fixture
def withdrawal():
    return Withdrawal(withdrawal_hash=WITHDRAWAL_HASH, block_number=WITHDRAWAL_BLOCK)


@pytest.fixture
def receipt():
    return {"transactionHash": TXN_HASH, "blockNumber": WITHDRAWAL_BLOCK, "logs": []}


@pytest.fixture
def l2_output():
    return {
        "output_index": 42,
        "output_root": b"\x01" * 32,
        "timestamp": PROVE_TIMESTAMP - 3_600,
        "l2_block_number": WITHDRAWAL_BLOCK + 100,
    }


@pytest.fixture
def proven():
    return {
        "output_root": b"\x01" * 32,
        "timestamp": PROVE_TIMESTAMP,
        "l2_output_index": 42,
    }


@pytest.fixture
def unproven():
    return {"output_root": b"\x00" * 32, "timestamp": None, "l2_output_index": 0}


@pytest.fixture
def make_queries(withdrawal, l2_output, proven):
    """Build a `StubQueries` where every read succeeds unless overridden."""

    def _make(**overrides):
        seeded = {
            "withdrawals": [withdrawal],
            "output": l2_output,
            "proven": proven,
            "finalized": False,
            "time_to_finalize": {
                "period": 604_800,
                "seconds": 120,
                "timestamp": PROVE_TIMESTAMP + 120,
            },
        }
        seeded.update(overrides)
        return StubQueries(**seeded)

    return _make
