"""
zkgame 증명 서비스
==================

  flask --app app run

설정은 환경 변수 (zkgame.config.Settings) 에서 읽는다.
회로 아티팩트는 ZKGAME_ARTIFACT_DIR 아래 <variant>.wasm / .r1cs / .zkey.json 이며
첫 요청에서 한 번 로드된다.
"""

from flask import Flask
from tinydb import TinyDB

from proof_routes import proof_bp, init_proof_bp
from zkgame.config import Settings, configure_logging
from zkgame.registry import CircuitRegistry


def create_app(settings=None, db=None, registry=None):
    """Flask 앱을 만든다. db/registry 를 넘기면 그것을 쓴다 (테스트용)."""
    settings = settings or Settings.from_env()
    configure_logging(settings)

    if db is None:
        db = TinyDB(settings.db_path)
    if registry is None:
        registry = CircuitRegistry.from_directory(
            settings.artifact_dir, curve=settings.curve
        )

    app = Flask(__name__)
    app.config["ZKGAME_SETTINGS"] = settings
    init_proof_bp(db.table("proofs"), registry)
    app.register_blueprint(proof_bp)
    return app


if __name__ == "__main__":
    create_app().run()
