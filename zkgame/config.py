"""
서비스 설정
===========

환경 변수에서 읽는다. 값이 없으면 기본값을 쓴다.

  ZKGAME_ARTIFACT_DIR   회로 아티팩트 디렉터리        (artifacts)
  ZKGAME_CURVE          곡선 이름                      (bn254)
  ZKGAME_DB_PATH        증명 기록 TinyDB 파일           (db.json)
  ZKGAME_LOG_LEVEL      로그 레벨                      (INFO)
"""

import logging
import os
from dataclasses import dataclass

from zkgame.errors import ConfigurationError
from zkgame.field import get_curve


ENV_PREFIX = "ZKGAME_"


@dataclass(frozen=True)
class Settings:
    artifact_dir: str = "artifacts"
    curve: str = "bn254"
    db_path: str = "db.json"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ=None):
        environ = os.environ if environ is None else environ
        defaults = cls()
        settings = cls(
            artifact_dir=environ.get(ENV_PREFIX + "ARTIFACT_DIR", defaults.artifact_dir),
            curve=environ.get(ENV_PREFIX + "CURVE", defaults.curve),
            db_path=environ.get(ENV_PREFIX + "DB_PATH", defaults.db_path),
            log_level=environ.get(ENV_PREFIX + "LOG_LEVEL", defaults.log_level).upper(),
        )
        settings.validate()
        return settings

    def validate(self):
        try:
            get_curve(self.curve)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ConfigurationError(f"알 수 없는 로그 레벨입니다: {self.log_level}")


def configure_logging(settings):
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
