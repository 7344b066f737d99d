import os
import json
from typing import Optional

from eth_abi.abi import decode
from eth_abi.exceptions import DecodingError
from eth_utils.conversions import to_bytes
from web3.exceptions import ContractLogicError

# 4-byte selector of the solidity `Error(string)` revert payload.
ERROR_STRING_SELECTOR = bytes.fromhex("08c379a0")

EXECUTION_REVERTED_PREFIX = "execution reverted: "


def get_abi(path: str) -> list:
    if os.path.isfile(path):
        with open(path, "r") as file:
            abi = json.load(file)

        return abi
    else:
        raise FileNotFoundError(f"File path not found: {path}")


def get_revert_reason(error: Exception) -> Optional[str]:
    """
    Extract the `require`/`revert` reason string from a failed contract call.

    Args:
        error: Exception raised by a contract call

    Returns:
        The revert reason if `error` is a `ContractLogicError` carrying one,
        None otherwise

    Example:
        >>> try:
        >>>     await oracle.functions.getL2OutputIndexAfter(block_number).call()
        >>> except Exception as e:
        >>>     reason = get_revert_reason(e)
    """
    if not isinstance(error, ContractLogicError):
        return None

    data = getattr(error, "data", None)

    # Some providers hand back the RPC error object instead of the raw payload.
    if isinstance(data, dict):
        data = data.get("data")

    if isinstance(data, str) and data.startswith("0x"):
        data = to_bytes(hexstr=data)

    if isinstance(data, bytes) and data[:4] == ERROR_STRING_SELECTOR:
        try:
            (reason,) = decode(["string"], data[4:])
            return reason
        except DecodingError:
            pass

    # `str(error)` renders every constructor arg, so read the message itself.
    message = getattr(error, "message", None)
    if not isinstance(message, str):
        message = error.args[0] if error.args and isinstance(error.args[0], str) else ""

    if message.startswith(EXECUTION_REVERTED_PREFIX):
        return message[len(EXECUTION_REVERTED_PREFIX) :]

    return message or None
