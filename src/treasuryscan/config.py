from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from treasuryscan.domain.models.run import IndexerConfig
from treasuryscan.domain.models.transfer import TokenDescriptor
from treasuryscan.exceptions import ConfigError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    db_host: str = "localhost"
    db_port: int = 5432
    db_user: str = "postgres"
    db_password: str = "postgres"
    db_name: str = "treasuryscan"
    database_url_override: str = ""
    create_schema: bool = False
    debug: bool = False

    rpc_url: str = "http://localhost:8545"
    rpc_rate_per_second: float = 10.0
    rpc_timeout: float = 30.0
    rpc_max_attempts: int = 3
    rpc_backoff: float = 1.0

    from_block: int = 0
    to_block: int = 0
    block_span: int = 2000
    max_concurrency: int = 5
    batch_delay_ms: int = 1000
    window_timeout: float | None = None
    treasury_address: str = ""
    proxy_addresses: list[str] = []
    tokens: list[TokenDescriptor] = []

    @property
    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override
        return f"postgresql+asyncpg://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    def indexer_config(self) -> IndexerConfig:
        """Validated, immutable run parameters. Raises ConfigError."""
        try:
            return IndexerConfig(
                from_block=self.from_block,
                to_block=self.to_block,
                block_span=self.block_span,
                max_concurrency=self.max_concurrency,
                batch_delay_ms=self.batch_delay_ms,
                treasury_address=self.treasury_address,
                proxy_addresses=tuple(self.proxy_addresses),
                tokens=tuple(self.tokens),
                window_timeout=self.window_timeout,
            )
        except ValidationError as e:
            raise ConfigError(f"Invalid indexer configuration: {e}") from e


settings = Settings()
