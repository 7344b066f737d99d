import os
from enum import Enum, StrEnum
from typing import Dict, Final, Literal, TypedDict

from eth_typing import ChecksumAddress
from eth_utils.address import to_checksum_address


class ENV(StrEnum):
    ALCHEMY_API_KEY = "ALCHEMY_API_KEY"
    ETH_SEPOLIA_RPC_URL = "ETH_SEPOLIA_RPC_URL"
    BASE_SEPOLIA_RPC_URL = "BASE_SEPOLIA_RPC_URL"
    OP_SEPOLIA_RPC_URL = "OP_SEPOLIA_RPC_URL"
    OPTIMISM_PORTAL_ADDRESS = "OPTIMISM_PORTAL_ADDRESS"
    L2_OUTPUT_ORACLE_ADDRESS = "L2_OUTPUT_ORACLE_ADDRESS"


class ChainName(StrEnum):
    ETH_SEPOLIA = "ETH_SEPOLIA"
    BASE_SEPOLIA = "BASE_SEPOLIA"
    OP_SEPOLIA = "OP_SEPOLIA"


class ContractType(TypedDict):
    address: ChecksumAddress
    ABI: str


def _contract(address: str, abi_path: str) -> ContractType:
    return {
        "address": to_checksum_address(address),
        "ABI": abi_path,
    }


PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


# OP STACK CONFIG

ABI_OPTIMISM_PORTAL = os.path.join(
    PROJECT_ROOT, "chains", "op_stack", "ABI", "OptimismPortal.json"
)
ABI_L2_OUTPUT_ORACLE = os.path.join(
    PROJECT_ROOT, "chains", "op_stack", "ABI", "L2OutputOracle.json"
)
ABI_L2_TO_L1_MESSAGE_PASSER = os.path.join(
    PROJECT_ROOT, "chains", "op_stack", "ABI", "L2ToL1MessagePasser.json"
)

OPStackChainName = Literal[ChainName.OP_SEPOLIA, ChainName.BASE_SEPOLIA]

# Chain every OP-Stack rollup above settles on.
OP_STACK_SETTLEMENT_CHAIN: Final = ChainName.ETH_SEPOLIA

# Revert reason of `L2OutputOracle.getL2OutputIndexAfter` while the output
# covering the requested L2 block has not been proposed yet.
L2_OUTPUT_NOT_PROPOSED: Final = (
    "L2OutputOracle: cannot get output for a block that has not been proposed"
)

# Seconds added on top of the remaining finalization period so a status of
# `ready-to-finalize` is not reported a few blocks too early.
FINALIZATION_BUFFER_SECONDS: Final = 10


class OP_STACK_ETHEREUM(Enum):
    OPTIMISM_PORTAL = "OPTIMISM_PORTAL"
    L2_OUTPUT_ORACLE = "L2_OUTPUT_ORACLE"


class OP_STACK_L2(Enum):
    L2_TO_L1_MESSAGE_PASSER = "L2_TO_L1_MESSAGE_PASSER"


OP_STACK_ETHEREUM_ABIS: Final[Dict[OP_STACK_ETHEREUM, str]] = {
    OP_STACK_ETHEREUM.OPTIMISM_PORTAL: ABI_OPTIMISM_PORTAL,
    OP_STACK_ETHEREUM.L2_OUTPUT_ORACLE: ABI_L2_OUTPUT_ORACLE,
}

# L1 deployments that still run the `L2OutputOracle` based `OptimismPortal`.
# OP Sepolia and Base Sepolia moved to `OptimismPortal2` (fault proofs), whose
# `provenWithdrawals(bytes32, address)` is not readable with the ABI above, so
# they are not listed. Pass the addresses to `OPStackReader` instead.
OP_STACK_ETHEREUM_CONTRACTS: Final[
    Dict[OPStackChainName, Dict[OP_STACK_ETHEREUM, ContractType]]
] = {}


OP_STACK_L2_CONTRACTS: Final[
    Dict[OPStackChainName, Dict[OP_STACK_L2, ContractType]]
] = {
    ChainName.OP_SEPOLIA: {
        OP_STACK_L2.L2_TO_L1_MESSAGE_PASSER: _contract(
            "0x4200000000000000000000000000000000000016", ABI_L2_TO_L1_MESSAGE_PASSER
        ),
    },
    ChainName.BASE_SEPOLIA: {
        OP_STACK_L2.L2_TO_L1_MESSAGE_PASSER: _contract(
            "0x4200000000000000000000000000000000000016", ABI_L2_TO_L1_MESSAGE_PASSER
        )
    },
}
