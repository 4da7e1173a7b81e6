from dependency_injector import containers, providers

from treasuryscan.config import Settings
from treasuryscan.db.session import build_engine, build_session_factory
from treasuryscan.indexer.pipeline import TreasuryIndexer
from treasuryscan.infra.blockchain.evm.rpc_client import EVMRPCClient
from treasuryscan.infra.http.rate_limited_client import RateLimitedClient


class Container(containers.DeclarativeContainer):
    settings = providers.Singleton(Settings)

    engine = providers.Singleton(
        build_engine,
        database_url=settings.provided.database_url,
        echo=settings.provided.debug,
    )

    session_factory = providers.Singleton(
        build_session_factory,
        engine=engine,
    )

    http_client = providers.Singleton(
        RateLimitedClient,
        rate_per_second=settings.provided.rpc_rate_per_second,
        timeout=settings.provided.rpc_timeout,
    )

    rpc_client = providers.Singleton(
        EVMRPCClient,
        rpc_url=settings.provided.rpc_url,
        http_client=http_client,
        max_attempts=settings.provided.rpc_max_attempts,
        backoff=settings.provided.rpc_backoff,
    )

    indexer_config = settings.provided.indexer_config.call()

    indexer = providers.Factory(
        TreasuryIndexer,
        config=indexer_config,
        provider=rpc_client,
        session_factory=session_factory,
    )
