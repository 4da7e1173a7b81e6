from treasuryscan.db.repos.transfer_repo import TransferRecordRepo

__all__ = ["TransferRecordRepo"]
