"""
증명 Flask Blueprint
====================

  POST /prove/<variant>    게임 상태 JSON → 증명 + 공개 입력 + ABI 바이트 (hex)
  POST /verify/<variant>   {proof, publicSignals} 또는 {abi} → {valid}
  GET  /proofs/<id>        저장된 증명 기록

오류 응답은 {"error": 종류, "message": ..., (field/variant/signal)} 형태이다.
  InputConversionError, EncodingError, WitnessError → 400
  ConfigurationError → 503
  ProvingError → 500
  알 수 없는 variant / 증명 기록 → 404
"""

import logging
import time
import uuid

from flask import Blueprint, jsonify, request
from tinydb import Query

from zkgame.codec import decode_from_chain, encode_for_chain
from zkgame.errors import (
    ConfigurationError,
    EncodingError,
    InputConversionError,
    ProvingError,
    WitnessError,
)
from zkgame.inputs import parse_input, to_variant
from zkgame.prover import prove
from zkgame.serializers import (
    deserialize_fr_list,
    deserialize_proof,
    serialize_fr_list,
    serialize_proof,
)
from zkgame.verifier import verify


logger = logging.getLogger(__name__)

proof_bp = Blueprint("proof", __name__)

DATA = Query()

# DB, REGISTRY 는 app.py 에서 주입
DB = None
REGISTRY = None


def init_proof_bp(db, registry):
    """app.py 에서 TinyDB 테이블과 CircuitRegistry 를 주입받는다."""
    global DB, REGISTRY
    DB = db
    REGISTRY = registry


# ─── DB 헬퍼 ───

def db_get(proof_id):
    result = DB.search(DATA.id == proof_id)
    if not result:
        return None
    return result[0]


def db_insert(record):
    DB.insert(record)


# ─── 오류 응답 ───

def error_response(kind, message, status, **context):
    body = {"error": kind, "message": message}
    body.update(context)
    return jsonify(body), status


def _zk_error(exc, kind, status):
    return error_response(kind, exc.message, status, **exc.context)


@proof_bp.errorhandler(InputConversionError)
def handle_input_error(exc):
    return _zk_error(exc, "input_conversion", 400)


@proof_bp.errorhandler(EncodingError)
def handle_encoding_error(exc):
    return _zk_error(exc, "encoding", 400)


@proof_bp.errorhandler(WitnessError)
def handle_witness_error(exc):
    return _zk_error(exc, "witness", 400)


@proof_bp.errorhandler(ConfigurationError)
def handle_configuration_error(exc):
    logger.error("configuration error: %s", exc)
    return _zk_error(exc, "configuration", 503)


@proof_bp.errorhandler(ProvingError)
def handle_proving_error(exc):
    logger.error("proving error: %s", exc)
    return _zk_error(exc, "proving", 500)


def _lookup_variant(name):
    try:
        return to_variant(name)
    except InputConversionError:
        return None


def _hex(data):
    return "0x" + data.hex()


def _unhex(text):
    if not isinstance(text, str):
        raise TypeError(f"hex 문자열이 필요합니다: {type(text).__name__}")
    if text.startswith("0x"):
        text = text[2:]
    return bytes.fromhex(text)


# ──────────────────────────────────────────────────────────────
# 엔드포인트
# ──────────────────────────────────────────────────────────────

@proof_bp.route("/prove/<name>", methods=["POST"])
def prove_route(name):
    """게임 상태에 대한 증명을 만들고 기록한다."""
    variant = _lookup_variant(name)
    if variant is None:
        return error_response("not_found", f"unknown variant: {name}", 404)
    data = request.get_json(silent=True)
    if data is None:
        return error_response("invalid_request", "JSON body required", 400)

    record = parse_input(variant, data)
    public_inputs, proof = prove(REGISTRY, variant, record)
    curve = REGISTRY.curve
    public_bytes, proof_bytes = encode_for_chain(public_inputs, proof, curve)

    doc = {
        "id": uuid.uuid4().hex,
        "variant": variant.value,
        "curve": curve.name,
        "created": int(time.time()),
        "publicSignals": serialize_fr_list(public_inputs),
        "proof": serialize_proof(proof, curve),
        "abi": {
            "publicInputs": _hex(public_bytes),
            "proof": _hex(proof_bytes),
        },
    }
    db_insert(doc)
    logger.info("proof %s created for %s", doc["id"], variant.value)
    return jsonify(doc)


@proof_bp.route("/verify/<name>", methods=["POST"])
def verify_route(name):
    """snarkjs 형태 {proof, publicSignals} 또는 {abi: {publicInputs, proof}} 를 검증한다."""
    variant = _lookup_variant(name)
    if variant is None:
        return error_response("not_found", f"unknown variant: {name}", 404)
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return error_response("invalid_request", "JSON object required", 400)

    curve = REGISTRY.curve
    try:
        if "abi" in data:
            public_inputs, proof = decode_from_chain(
                _unhex(data["abi"]["publicInputs"]),
                _unhex(data["abi"]["proof"]),
                curve,
            )
        else:
            proof = deserialize_proof(data["proof"], curve)
            public_inputs = deserialize_fr_list(data["publicSignals"])
    except (KeyError, IndexError, TypeError, ValueError) as exc:
        return error_response("invalid_request", f"malformed proof: {exc}", 400)

    valid = verify(REGISTRY, variant, public_inputs, proof)
    return jsonify({"valid": valid})


@proof_bp.route("/proofs/<proof_id>", methods=["GET"])
def get_proof(proof_id):
    doc = db_get(proof_id)
    if doc is None:
        return error_response("not_found", f"unknown proof: {proof_id}", 404)
    return jsonify(dict(doc))
