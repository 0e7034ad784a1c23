import pytest

from zkgame.config import Settings
from zkgame.errors import ConfigurationError


class TestSettings:
    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings.artifact_dir == "artifacts"
        assert settings.curve == "bn254"
        assert settings.db_path == "db.json"
        assert settings.log_level == "INFO"

    def test_from_env(self):
        settings = Settings.from_env({
            "ZKGAME_ARTIFACT_DIR": "/srv/circuits",
            "ZKGAME_CURVE": "bls12_381",
            "ZKGAME_LOG_LEVEL": "debug",
        })
        assert settings.artifact_dir == "/srv/circuits"
        assert settings.curve == "bls12_381"
        assert settings.log_level == "DEBUG"

    def test_unknown_curve(self):
        with pytest.raises(ConfigurationError):
            Settings.from_env({"ZKGAME_CURVE": "secp256k1"})

    def test_unknown_log_level(self):
        with pytest.raises(ConfigurationError):
            Settings.from_env({"ZKGAME_LOG_LEVEL": "LOUD"})
