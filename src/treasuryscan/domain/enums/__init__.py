from treasuryscan.domain.enums.skip import SkipReason

__all__ = ["SkipReason"]
