from typing import Optional

from hexbytes import HexBytes

from utils.chain import get_revert_reason
from utils.config import L2_OUTPUT_NOT_PROPOSED


class OPStackError(Exception):
    """Base Exception for OP Stack operations."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.original_error = original_error


class InvalidChainError(OPStackError):
    """Raised when an invalid chain is specified"""

    pass


class NoWithdrawalFound(OPStackError):
    """Raised when a receipt does not contain any `MessagePassed` event"""

    def __init__(self, transaction_hash: Optional[HexBytes] = None):
        self.transaction_hash = transaction_hash

        if transaction_hash is None:
            message = "Receipt does not contain any withdrawal."
        else:
            message = (
                f"Receipt of `{HexBytes(transaction_hash).to_0x_hex()}` "
                "does not contain any withdrawal."
            )

        super().__init__(message)


class CheckpointNotYetPublished(OPStackError):
    """Raised when no L2 output has been proposed for the requested L2 block yet."""

    def __init__(
        self,
        l2_block_number: int,
        original_error: Optional[Exception] = None,
    ):
        self.l2_block_number = l2_block_number
        super().__init__(
            f"No L2 output proposed for L2 block `{l2_block_number}` yet.",
            original_error=original_error,
        )

    @classmethod
    def from_contract_error(
        cls, l2_block_number: int, error: Exception
    ) -> Optional["CheckpointNotYetPublished"]:
        if get_revert_reason(error) == L2_OUTPUT_NOT_PROPOSED:
            return cls(l2_block_number, original_error=error)

        return None
