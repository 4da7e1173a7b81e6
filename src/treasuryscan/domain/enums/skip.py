from enum import Enum


class SkipReason(str, Enum):
    """Why a window, log, event or record did not end up in the ledger."""

    WINDOW_FAILED = "WINDOW_FAILED"
    UNTRACKED_TOKEN = "UNTRACKED_TOKEN"
    MALFORMED_LOG = "MALFORMED_LOG"
    MISSING_TRANSACTION = "MISSING_TRANSACTION"
    PERSISTENCE_ERROR = "PERSISTENCE_ERROR"
    DUPLICATE = "DUPLICATE"
