"""
Tests for configuration loading
"""

import os

from src.config import Config, get_config, set_config


class TestConfig:
    """Test defaults, YAML and environment overrides"""

    def test_defaults(self):
        config = Config()

        assert config.map.palette == ['orange', 'yellow', 'lightblue', 'green', 'red']
        assert config.map.focus_zoom == 16
        assert config.map.autonomous_mode == "AUTO"
        assert config.assets.battery_icon_dir == "battery"
        assert config.interface.rest_port == 8080

    def test_palette_not_shared(self):
        a, b = Config(), Config()
        a.map.palette.append("pink")
        assert "pink" not in b.map.palette

    def test_load_yaml(self, tmp_path, monkeypatch):
        for key in list(os.environ):
            if key.startswith("GCSMAP_"):
                monkeypatch.delenv(key)

        path = tmp_path / "map.yaml"
        path.write_text(
            "map:\n"
            "  focus_zoom: 14\n"
            "  palette: [blue, white]\n"
            "interface:\n"
            "  rest_port: 9000\n"
            "  unknown_key: 1\n"
            "bogus_section:\n"
            "  x: 1\n"
        )

        config = Config.load(str(path))

        assert config.map.focus_zoom == 14
        assert config.map.palette == ["blue", "white"]
        assert config.interface.rest_port == 9000
        assert not hasattr(config.interface, "unknown_key")

    def test_missing_file_uses_defaults(self, tmp_path):
        config = Config.load(str(tmp_path / "nope.yaml"))
        assert config.map.initial_zoom == 19

    def test_env_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("GCSMAP_MAP_FOCUS_ZOOM", "17")
        monkeypatch.setenv("GCSMAP_MAP_CENTER_LAT", "48.85")
        monkeypatch.setenv("GCSMAP_MAP_PALETTE", "blue, white ,red")
        monkeypatch.setenv("GCSMAP_INTERFACE_REST_ENABLED", "false")
        monkeypatch.setenv("GCSMAP_ASSETS_PIN_BASE_URL", "/pins/")

        config = Config.load(str(tmp_path / "nope.yaml"))

        assert config.map.focus_zoom == 17
        assert config.map.center_lat == 48.85
        assert config.map.palette == ["blue", "white", "red"]
        assert config.interface.rest_enabled is False
        assert config.assets.pin_base_url == "/pins/"

    def test_save_and_reload(self, tmp_path):
        config = Config()
        config.map.initial_zoom = 11
        path = tmp_path / "saved.yaml"

        config.save(str(path))
        reloaded = Config.load(str(path))

        assert reloaded.map.initial_zoom == 11

    def test_global_config(self):
        config = Config()
        config.map.focus_zoom = 3
        set_config(config)
        try:
            assert get_config() is config
        finally:
            set_config(None)

    def test_yaml_int_widened_to_float(self, tmp_path, monkeypatch):
        monkeypatch.delenv("GCSMAP_MAP_CENTER_LAT", raising=False)
        path = tmp_path / "map.yaml"
        path.write_text("map:\n  center_lat: 48\n")

        config = Config.load(str(path))

        assert config.map.center_lat == 48.0
        assert isinstance(config.map.center_lat, float)

    def test_env_unknown_key_ignored(self, tmp_path, monkeypatch):
        monkeypatch.setenv("GCSMAP_MAP_NOT_A_SETTING", "1")

        config = Config.load(str(tmp_path / "nope.yaml"))

        assert not hasattr(config.map, "not_a_setting")
