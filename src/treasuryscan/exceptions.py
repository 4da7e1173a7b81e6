"""Exception hierarchy for treasuryscan."""


class TreasuryScanError(Exception):
    """Base for all indexer errors."""


class ConfigError(TreasuryScanError):
    """Invalid or incomplete run configuration. Aborts the run."""


class ExternalServiceError(TreasuryScanError):
    """RPC provider failure: transport error, rate limit, or JSON-RPC error member."""


class DecodeError(TreasuryScanError):
    """A log from a tracked token does not have the Transfer(address,address,uint256) shape."""


class ResultLimitError(ExternalServiceError):
    """eth_getLogs refused the query because the window matches too many logs."""
