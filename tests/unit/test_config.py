import pytest
import yaml

from gestion_eau.config import DEFAULTS, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("DATABASE_URL", "REDIS_URL", "LOG_LEVEL", "GESTION_EAU_CONFIG"):
        monkeypatch.delenv(var, raising=False)


def test_missing_file_gives_defaults(tmp_path):
    assert load_config(str(tmp_path / "absent.yaml")) == DEFAULTS


def test_file_merged_over_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({"tarification": {"prix_transport_defaut": 250}}))
    config = load_config(str(path))
    assert config["tarification"]["prix_transport_defaut"] == 250
    assert config["tarification"]["taux_tva_transport_defaut"] == 0.19
    assert config["cache"]["ttl"] == 3600


def test_environment_wins(tmp_path, monkeypatch):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({"database": {"url": "sqlite:///fichier.db"}}))
    monkeypatch.setenv("DATABASE_URL", "postgresql://eau@localhost/eau")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    config = load_config(str(path))
    assert config["database"]["url"] == "postgresql://eau@localhost/eau"
    assert config["logging"]["level"] == "DEBUG"


def test_defaults_not_mutated(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({"cache": {"ttl": 5}}))
    load_config(str(path))
    assert DEFAULTS["cache"]["ttl"] == 3600


def test_malformed_file_raises(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("database: [unclosed")
    with pytest.raises(yaml.YAMLError):
        load_config(str(path))
