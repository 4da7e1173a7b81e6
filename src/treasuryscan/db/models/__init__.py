from treasuryscan.db.models.transfer_record import TransferRecord

__all__ = ["TransferRecord"]
