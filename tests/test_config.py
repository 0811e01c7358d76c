import pytest

from query_hub.config.db_configs import default_db_config_set, parse_db_config_set
from query_hub.config.settings import Settings, load_settings
from query_hub.exceptions.errors import ConfigurationError

YAML = """
app:
  log_level: WARNING
logging:
  file: logs/app.log
  backup_count: 3
execution:
  execution_dir: runs
  keep_execution_folders: false
database:
  engine: PostgreSQL
  connect_timeout: 4
  configs:
    - name: primary
      host: pg.local
      port: 5432
      user: app
      password: secret
      database: sales
"""

_ENV_KEYS = (
    "APP_ENV", "LOG_LEVEL", "LOG_FILE", "EXECUTION_DIR", "KEEP_EXECUTION_FOLDERS",
    "DB_TYPE", "DB_CONNECT_TIMEOUT", "FALLBACK_ENCODINGS",
)


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    (tmp_path / "dev.yaml").write_text(YAML, encoding="utf-8")
    return tmp_path


def test_load_settings_reads_yaml(config_dir):
    s = load_settings(str(config_dir))
    assert s.env == "dev"
    assert s.log_level == "WARNING"
    assert s.log_file == "logs/app.log"
    assert s.log_backup_count == 3
    assert s.execution_dir == "runs"
    assert s.keep_execution_folders is False
    assert s.archive_compression_level == 9
    assert s.db_engine == "postgresql"
    assert s.connect_timeout == 4
    assert s.db_configs[0]["host"] == "pg.local"


def test_environment_overrides_yaml(config_dir, monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("KEEP_EXECUTION_FOLDERS", "yes")
    monkeypatch.setenv("DB_TYPE", "MySQL")
    monkeypatch.setenv("FALLBACK_ENCODINGS", "utf-8, cp1252")
    s = load_settings(str(config_dir))
    assert s.log_level == "DEBUG"
    assert s.keep_execution_folders is True
    assert s.db_engine == "mysql"
    assert s.fallback_encodings == ["utf-8", "cp1252"]


def test_missing_config_file(tmp_path, monkeypatch):
    monkeypatch.setenv("APP_ENV", "prod")
    with pytest.raises(FileNotFoundError):
        load_settings(str(tmp_path))


def test_parse_db_config_set():
    cs = parse_db_config_set(
        {
            "type": "sqlserver",
            "configs": [
                {"name": "a", "server": "mssql.local", "port": 1433, "user": "sa", "password": "hunter2", "database": "db"},
                {"name": "b", "host": "other"},
            ],
        }
    )
    assert cs.engine_type == "mssql"
    assert cs.names() == ["a", "b"]
    assert cs.configs[0].host == "mssql.local"
    assert cs.configs[1].password == ""
    assert "hunter2" not in repr(cs.configs[0])


@pytest.mark.parametrize(
    "payload",
    [
        None,
        ["not", "a", "mapping"],
        {"type": "oracle", "configs": [{"name": "a"}]},
        {"type": "mysql"},
        {"type": "mysql", "configs": []},
        {"type": "mysql", "configs": ["a"]},
        {"type": "mysql", "configs": [{"host": "h"}]},
        {"type": "mysql", "configs": [{"name": "a"}, {"name": "a"}]},
    ],
)
def test_invalid_db_config_sets(payload):
    with pytest.raises(ConfigurationError):
        parse_db_config_set(payload)


def test_default_db_config_set_applies_env_to_first_entry(tmp_path):
    settings = Settings(
        env="test",
        log_level="INFO",
        db_engine="mysql",
        db_configs=[{"name": "local", "host": "localhost", "port": 3306}, {"name": "replica", "host": "r"}],
    )
    cs = default_db_config_set(settings, environ={"DB_USER": "ci", "DB_PASSWORD": "pw", "DB_PORT": "3307"})
    local, replica = cs.configs
    assert (local.user, local.password, local.port, local.host) == ("ci", "pw", "3307", "localhost")
    assert replica.user == ""
    # settings are not mutated
    assert "user" not in settings.db_configs[0]


def test_default_db_config_set_requires_configs():
    with pytest.raises(ConfigurationError):
        default_db_config_set(Settings(env="test", log_level="INFO"), environ={})
