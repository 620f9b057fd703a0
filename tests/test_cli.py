import json

import pytest

from cli.helper_functions import create_default_config, load_server_config, save_results_to_file


class TestServerConfig:
    def test_default_config_is_written(self, tmp_path, monkeypatch):
        monkeypatch.setenv("MCP_SERVER_URL", "http://crypto:4000")
        path = tmp_path / "config" / "servers.json"

        config = create_default_config(str(path))

        assert config == {"crypto": {"transport": "http", "url": "http://crypto:4000"}}
        assert load_server_config(str(path)) == config

    def test_server_without_url_rejected(self, tmp_path):
        path = tmp_path / "servers.json"
        path.write_text(json.dumps({"crypto": {"transport": "http"}}))

        with pytest.raises(ValueError, match="crypto"):
            load_server_config(str(path))


def test_save_results(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    file_path = save_results_to_file({"query": "q", "response": "r"}, "answer.json")

    with open(file_path) as f:
        assert json.load(f) == {"query": "q", "response": "r"}
