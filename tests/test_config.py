import json

import pytest

from forumwatch.config import CONFIG_ENV_VAR, Config


def test_defaults():
    config = Config()
    assert config.base_url == "http://forum.sa-mp.com/"
    assert config.poll_interval == 10
    assert config.fetch_reputation is True
    assert config.discord_webhook_url is None


def test_base_url_gets_trailing_slash():
    assert Config(base_url="http://forum.example.com").base_url == "http://forum.example.com/"


def test_url_helpers():
    config = Config(base_url="http://forum.example.com/")
    assert config.profile_url("3") == "http://forum.example.com/member.php?u=3"
    assert config.post_search_url("3") == "http://forum.example.com/search.php?do=finduser&u=3"


def test_rejects_non_positive_interval():
    with pytest.raises(ValueError):
        Config(poll_interval=0)


def test_save_and_load(tmp_path):
    path = tmp_path / "config.json"
    Config(base_url="http://forum.example.com/", poll_interval=30, fetch_reputation=False).save(path)

    loaded = Config.from_file(path)
    assert loaded.base_url == "http://forum.example.com/"
    assert loaded.poll_interval == 30
    assert loaded.fetch_reputation is False


def test_missing_file_gives_defaults(tmp_path):
    assert Config.from_file(tmp_path / "nope.json").to_dict() == Config().to_dict()


def test_invalid_json_gives_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    assert Config.from_file(path).to_dict() == Config().to_dict()


def test_unknown_keys_are_ignored():
    config = Config.from_dict({'poll_interval': 5, 'mongo_host': 'localhost'})
    assert config.poll_interval == 5
    assert not hasattr(config, 'mongo_host')


def test_env_var_selects_config_file(tmp_path, monkeypatch):
    path = tmp_path / "env.json"
    path.write_text(json.dumps({'discord_webhook_url': 'https://discord.example/hook'}))
    monkeypatch.setenv(CONFIG_ENV_VAR, str(path))

    assert Config.resolve_path() == path
    assert Config.from_file().discord_webhook_url == 'https://discord.example/hook'


def test_explicit_path_beats_env_var(tmp_path, monkeypatch):
    monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "env.json"))
    assert Config.resolve_path(tmp_path / "explicit.json") == tmp_path / "explicit.json"
