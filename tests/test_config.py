import pytest
import yaml

from zenith_tracker.config import DEFAULT_CONFIG, load_config, save_config


def test_missing_file_gives_defaults(tmp_path):
    cfg = load_config(tmp_path / "nope.yaml")
    assert cfg == DEFAULT_CONFIG
    cfg["storage"]["backend"] = "sqlite"
    assert DEFAULT_CONFIG["storage"]["backend"] == "json"


def test_partial_file_is_merged(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({"storage": {"backend": "sqlite"}, "cache_ttl_seconds": 5}))
    cfg = load_config(path)
    assert cfg["storage"]["backend"] == "sqlite"
    assert cfg["storage"]["transactions_key"] == "zenith-txns"
    assert cfg["cache_ttl_seconds"] == 5
    assert cfg["llm"]["max_tokens"] == 150


def test_non_mapping_file_is_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(ValueError):
        load_config(path)


def test_save_and_reload(tmp_path):
    path = tmp_path / "sub" / "config.yaml"
    save_config({"currency_symbol": "$"}, path)
    assert load_config(path)["currency_symbol"] == "$"
