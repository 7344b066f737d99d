import asyncio
import logging
import os
import sys
from typing import cast

from dotenv import load_dotenv
from hexbytes import HexBytes

from chains.op_stack.op_stack import OPStackReader
from chains.op_stack.withdrawal_status import get_withdrawal_status
from utils.config import ENV, OP_STACK_L2_CONTRACTS, ChainName, OPStackChainName
from utils.providers import get_web3


def main():
    load_dotenv()
    logging.basicConfig(level=logging.INFO)

    if len(sys.argv) != 3:
        print(f"Usage: python main.py <{'|'.join(OP_STACK_L2_CONTRACTS)}> <L2_TXN_HASH>")
        sys.exit(1)

    chain_name = ChainName(sys.argv[1])

    if chain_name not in OP_STACK_L2_CONTRACTS:
        raise ValueError(f"`{chain_name}` is not an OP Stack chain.")

    txn_hash = HexBytes(sys.argv[2])

    # STEP 1

    l2p = get_web3(chain_name)
    withdraw_receipt = l2p.eth.get_transaction_receipt(txn_hash)

    # STEP 2

    reader = OPStackReader(
        cast(OPStackChainName, chain_name),
        portal_address=os.getenv(ENV.OPTIMISM_PORTAL_ADDRESS),
        l2_output_oracle_address=os.getenv(ENV.L2_OUTPUT_ORACLE_ADDRESS),
    )
    status = asyncio.run(get_withdrawal_status(reader, withdraw_receipt))

    print("-" * 75)
    print(f"Withdrawal txn: {txn_hash.to_0x_hex()}")
    print(f"Withdrawal status: {status}")
    print("-" * 75)


if __name__ == "__main__":
    main()
