"""
OP Stack read-only queries used to follow an L2 -> L1 withdrawal.

This module provides a composable class for reading the withdrawal related
state of OP Stack chains (Optimism, Base, etc.) from Ethereum.
"""

import asyncio
import logging
from typing import Dict, List, Optional, cast

from eth_typing import ChecksumAddress
from eth_utils.address import to_checksum_address
from hexbytes import HexBytes
from web3 import AsyncWeb3, Web3
from web3.logs import DISCARD
from web3.types import TxReceipt

from utils.chain import get_abi
from utils.config import (
    FINALIZATION_BUFFER_SECONDS,
    OP_STACK_ETHEREUM,
    OP_STACK_ETHEREUM_ABIS,
    OP_STACK_ETHEREUM_CONTRACTS,
    OP_STACK_L2,
    OP_STACK_L2_CONTRACTS,
    OP_STACK_SETTLEMENT_CHAIN,
    OPStackChainName,
)
from utils.providers import get_async_web3
from .custom_errors import CheckpointNotYetPublished, InvalidChainError
from .types import (
    L2Output,
    ProvenWithdrawal,
    TimeToFinalize,
    Withdrawal,
    WithdrawalParams,
)

logger = logging.getLogger(__name__)


class OPStackReader:
    """
    This class reads the withdrawal state of OP-Stack compatible chains
    like Optimism, Base, etc. from their settlement layer.

    Parameters
    ----------
    chain_name: OPStackChainName
        Canonical identifier of the OP-Stack chain the withdrawals belong to.

    l1_provider: AsyncWeb3, optional
        Async provider connected to the settlement layer. If omitted, one is
        built from the RPC url stored in `.env`.

    portal_address: str, optional
        L1 `OptimismPortal` of the chain. Overrides `OP_STACK_ETHEREUM_CONTRACTS`.

    l2_output_oracle_address: str, optional
        L1 `L2OutputOracle` of the chain. Overrides `OP_STACK_ETHEREUM_CONTRACTS`.

    MORE INFO
    ----------
    A withdrawal initiated on L2 via `L2ToL1MessagePasser.initiateWithdrawal()` goes
    through the following states on L1:

    1. `waiting-to-prove`: the `L2OutputOracle` has no output proposed yet for
       the L2 block that contains the withdrawal.
    2. `ready-to-prove`: an output exists, but `OptimismPortal.provenWithdrawals`
       has no record for the withdrawal hash.
    3. `waiting-to-finalize`: proven, but the finalization period
       (`FINALIZATION_PERIOD_SECONDS`) has not elapsed yet.
    4. `ready-to-finalize`: the finalization period has elapsed.
    5. `finalized`: `OptimismPortal.finalizedWithdrawals` is set.

    Only the `L2OutputOracle` based `OptimismPortal` is supported. Chains running
    `OptimismPortal2` (fault proofs), such as OP Sepolia and Base Sepolia today,
    expose `provenWithdrawals(bytes32, address)` and cannot be read with this class.

    Every method here is a read. Nothing is signed or sent.
    """

    def __init__(
        self,
        chain_name: OPStackChainName,
        l1_provider: Optional[AsyncWeb3] = None,
        portal_address: Optional[str] = None,
        l2_output_oracle_address: Optional[str] = None,
    ):
        self.chain_name = chain_name
        self.l1_provider = l1_provider or get_async_web3(OP_STACK_SETTLEMENT_CHAIN)

        self.l1_addresses: Dict[OP_STACK_ETHEREUM, ChecksumAddress] = {}
        if portal_address:
            self.l1_addresses[OP_STACK_ETHEREUM.OPTIMISM_PORTAL] = (
                to_checksum_address(portal_address)
            )
        if l2_output_oracle_address:
            self.l1_addresses[OP_STACK_ETHEREUM.L2_OUTPUT_ORACLE] = (
                to_checksum_address(l2_output_oracle_address)
            )

    def _get_l1_contract(self, contract: OP_STACK_ETHEREUM):
        """
        Retrieve the instantiated L1 contract related to OP-Stack chain.
        Addresses passed to the constructor take precedence over the registry.

        Parameters
        ----------
        contract : OP_STACK_ETHEREUM

        Returns
        -------
        web3.contract.AsyncContract
        """
        address = self.l1_addresses.get(contract)

        if address is None:
            contracts = OP_STACK_ETHEREUM_CONTRACTS.get(
                cast(OPStackChainName, self.chain_name)
            )

            if not contracts:
                raise InvalidChainError(
                    f"No L1 contracts known for `{self.chain_name}`. "
                    "Pass `portal_address` and `l2_output_oracle_address`."
                )

            info = contracts.get(contract)

            if not info:
                raise InvalidChainError("Invalid contract name provided.")

            address = info.get("address")

        return self.l1_provider.eth.contract(
            address=address, abi=get_abi(OP_STACK_ETHEREUM_ABIS[contract])
        )

    def _get_l2_contract(self, contract: OP_STACK_L2):
        """
        Retrieve the L2 contract related to OP-Stack chain. The contract is only
        used to decode logs, hence it is not bound to any L2 provider.

        Parameters
        ----------
        contract : OP_STACK_L2

        Returns
        -------
        web3.contract.Contract
        """
        contracts = OP_STACK_L2_CONTRACTS.get(cast(OPStackChainName, self.chain_name))

        if not contracts:
            raise InvalidChainError("Invalid chain initialized.")

        info = contracts.get(contract)

        if not info:
            raise InvalidChainError("Invalid contract name provided.")

        return Web3().eth.contract(
            address=info.get("address"), abi=get_abi(info.get("ABI"))
        )

    def get_withdrawals(self, receipt: TxReceipt) -> List[Withdrawal]:
        """
        Extract every withdrawal emitted by the ``MessagePassed`` events of an L2
        `initiateWithdrawal` transaction receipt, in log order.

        Parameters
        ----------
        receipt : TxReceipt
            Receipt of the L2 transaction. Logs of other contracts are ignored.

        Returns
        -------
        List[Withdrawal]
            Empty when the receipt does not emit ``MessagePassed``.
        """
        events = (
            self._get_l2_contract(OP_STACK_L2.L2_TO_L1_MESSAGE_PASSER)
            .events.MessagePassed()
            .process_receipt(receipt, errors=DISCARD)
        )

        withdrawals: List[Withdrawal] = []

        for event in events:
            args = event.get("args")

            params = WithdrawalParams(
                nonce=args.get("nonce"),
                sender=args.get("sender"),
                target=args.get("target"),
                value=args.get("value"),
                gasLimit=args.get("gasLimit"),
                data=args.get("data"),
            )

            withdrawals.append(
                Withdrawal(
                    withdrawal_hash=HexBytes(args.get("withdrawalHash")),
                    block_number=receipt["blockNumber"],
                    params=params,
                )
            )

        return withdrawals

    async def get_l2_output(self, l2_block_number: int) -> L2Output:
        """
        Retrieve the first L2 output proposed to the `L2OutputOracle` that
        covers ``l2_block_number``.

        Parameters
        ----------
        l2_block_number : int
            L2 block that included the withdrawal.

        Returns
        -------
        L2Output

        Raises
        ------
        CheckpointNotYetPublished
            If the oracle has not received an output for that block yet.
        """
        oracle = self._get_l1_contract(OP_STACK_ETHEREUM.L2_OUTPUT_ORACLE)

        try:
            output_index = await oracle.functions.getL2OutputIndexAfter(
                l2_block_number
            ).call()
        except Exception as e:
            not_published = CheckpointNotYetPublished.from_contract_error(
                l2_block_number, e
            )
            if not_published is not None:
                raise not_published from e
            raise

        output = await oracle.functions.getL2Output(output_index).call()

        logger.debug(
            "L2 output %s covers L2 block %s", output_index, l2_block_number
        )

        return {
            "output_index": output_index,
            "output_root": output[0],
            "timestamp": output[1],
            "l2_block_number": output[2],
        }

    async def get_proven_withdrawal(self, withdrawal_hash: HexBytes) -> ProvenWithdrawal:
        """
        Retrieve the proof record of a withdrawal on the L1 `OptimismPortal`.

        Parameters
        ----------
        withdrawal_hash : HexBytes
            32-byte withdrawal hash emitted in the ``MessagePassed`` event.

        Returns
        -------
        ProvenWithdrawal
            ``timestamp`` is ``None`` if the withdrawal has not been proven.
        """
        portal = self._get_l1_contract(OP_STACK_ETHEREUM.OPTIMISM_PORTAL)

        proven_withdrawal = await portal.functions.provenWithdrawals(
            withdrawal_hash
        ).call()

        return {
            "output_root": proven_withdrawal[0],
            "timestamp": proven_withdrawal[1] or None,
            "l2_output_index": proven_withdrawal[2],
        }

    async def is_finalized_withdrawal(self, withdrawal_hash: HexBytes) -> bool:
        """
        Check whether a withdrawal has already been finalized on L1.

        Parameters
        ----------
        withdrawal_hash : HexBytes

        Returns
        -------
        bool
        """
        portal = self._get_l1_contract(OP_STACK_ETHEREUM.OPTIMISM_PORTAL)

        return await portal.functions.finalizedWithdrawals(withdrawal_hash).call()

    async def get_time_to_finalize(self, withdrawal_hash: HexBytes) -> TimeToFinalize:
        """
        Compute how long is left before a proven withdrawal can be finalized.

        The remaining time is measured against the timestamp of the latest L1
        block. While time remains, a buffer of ``FINALIZATION_BUFFER_SECONDS``
        is added to it; once elapsed, ``seconds`` is ``0``. An unproven
        withdrawal reports the whole period.

        Parameters
        ----------
        withdrawal_hash : HexBytes

        Returns
        -------
        TimeToFinalize
            * ``period`` – finalization period of the chain, in seconds
            * ``seconds`` – seconds left before finalization is permitted
            * ``timestamp`` – unix time at which finalization is permitted
        """
        portal = self._get_l1_contract(OP_STACK_ETHEREUM.OPTIMISM_PORTAL)
        oracle = self._get_l1_contract(OP_STACK_ETHEREUM.L2_OUTPUT_ORACLE)

        proven_withdrawal, period, latest_block = await asyncio.gather(
            portal.functions.provenWithdrawals(withdrawal_hash).call(),
            oracle.functions.FINALIZATION_PERIOD_SECONDS().call(),
            self.l1_provider.eth.get_block("latest"),
        )

        if latest_block is None:
            raise ValueError("Can't fetch latest block")

        latest_block_timestamp = latest_block.get("timestamp")

        if latest_block_timestamp is None:
            raise ValueError("Can't fetch timestamp for latest block")

        prove_timestamp = proven_withdrawal[1]

        if prove_timestamp == 0:
            remaining = period
        else:
            remaining = period - (latest_block_timestamp - prove_timestamp)

        seconds = 0 if remaining < 0 else remaining + FINALIZATION_BUFFER_SECONDS

        return {
            "period": period,
            "seconds": seconds,
            "timestamp": latest_block_timestamp + seconds,
        }
