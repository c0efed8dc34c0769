import pytest

from utils.config import Config, Evaluation, Telemetry
from utils.load_config import DEFAULT_CONFIG_PATH, load_config


def test_load_config_maps_tables(tmp_path):
    p = tmp_path / "config.toml"
    p.write_text(
        """
[telemetry]
endpoint = "http://dataprepper:21890/v1/traces"
project = "my-agent"
batch = false

[telemetry.headers]
authorization = "Bearer abc"

[evaluation]
emit_scores = false

[logging]
level = "DEBUG"
""",
        encoding="utf-8",
    )

    cfg = load_config(p)

    assert cfg.telemetry.endpoint == "http://dataprepper:21890/v1/traces"
    assert cfg.telemetry.project == "my-agent"
    assert cfg.telemetry.batch is False
    assert cfg.telemetry.auth == "auto"
    assert cfg.telemetry.headers == {"authorization": "Bearer abc"}
    assert cfg.evaluation == Evaluation(emit_scores=False)


def test_missing_tables_use_defaults(tmp_path):
    p = tmp_path / "empty.toml"
    p.write_text("", encoding="utf-8")
    assert load_config(p) == Config(telemetry=Telemetry(), evaluation=Evaluation())


def test_repository_config_loads():
    cfg = load_config(DEFAULT_CONFIG_PATH)
    assert cfg.evaluation.emit_scores is True
    assert cfg.telemetry.auto_instrument is True


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.toml")


def test_invalid_toml_raises(tmp_path):
    p = tmp_path / "bad.toml"
    p.write_text("[telemetry\nendpoint = ", encoding="utf-8")
    with pytest.raises(ValueError, match="Invalid TOML"):
        load_config(p)
