import json

import pytest

from treasuryscan.config import Settings
from treasuryscan.exceptions import ConfigError

TREASURY = "0x" + "11" * 20
TOKEN_A = "0x" + "aa" * 20
PROXY = "0x" + "22" * 20


@pytest.fixture()
def env(monkeypatch):
    monkeypatch.setenv("FROM_BLOCK", "100")
    monkeypatch.setenv("TO_BLOCK", "5000")
    monkeypatch.setenv("BLOCK_SPAN", "500")
    monkeypatch.setenv("MAX_CONCURRENCY", "4")
    monkeypatch.setenv("BATCH_DELAY_MS", "250")
    monkeypatch.setenv("TREASURY_ADDRESS", TREASURY)
    monkeypatch.setenv("PROXY_ADDRESSES", json.dumps([PROXY]))
    monkeypatch.setenv(
        "TOKENS", json.dumps([{"symbol": "USDA", "contract_address": TOKEN_A, "decimals": 6}])
    )
    return monkeypatch


class TestSettings:
    def test_reads_environment(self, env):
        s = Settings(_env_file=None)
        cfg = s.indexer_config()
        assert cfg.from_block == 100
        assert cfg.to_block == 5000
        assert cfg.block_span == 500
        assert cfg.max_concurrency == 4
        assert cfg.batch_delay_ms == 250
        assert cfg.proxy_set == frozenset({PROXY})
        assert cfg.tokens[0].symbol == "USDA"
        assert cfg.tokens[0].decimals == 6

    def test_database_url_default(self):
        s = Settings(_env_file=None, db_host="db", db_port=6543, db_name="ledger")
        assert s.database_url == "postgresql+asyncpg://postgres:postgres@db:6543/ledger"

    def test_database_url_override(self):
        s = Settings(_env_file=None, database_url_override="sqlite+aiosqlite:///ledger.db")
        assert s.database_url == "sqlite+aiosqlite:///ledger.db"

    def test_missing_treasury_is_config_error(self, env):
        env.setenv("TREASURY_ADDRESS", "")
        with pytest.raises(ConfigError, match="treasury"):
            Settings(_env_file=None).indexer_config()

    def test_inverted_range_is_config_error(self, env):
        env.setenv("TO_BLOCK", "99")
        with pytest.raises(ConfigError):
            Settings(_env_file=None).indexer_config()

    def test_no_tokens_is_config_error(self, env):
        env.setenv("TOKENS", "[]")
        with pytest.raises(ConfigError):
            Settings(_env_file=None).indexer_config()

    def test_configs_independent(self, env):
        a = Settings(_env_file=None, from_block=1, to_block=10).indexer_config()
        b = Settings(_env_file=None, from_block=20, to_block=30).indexer_config()
        assert (a.from_block, b.from_block) == (1, 20)
