"""
직렬화/역직렬화 헬퍼
====================

아티팩트 I/O 와 JSON 형태 변환을 모은다.

  - read_source: bytes 또는 파일 경로 → bytes
  - G1/G2 점 ↔ 문자열 리스트 (snarkjs JSON 관례: G2 는 [[x.c0, x.c1], [y.c0, y.c1]])
  - 증명 ↔ snarkjs 형태 dict {"pi_a", "pi_b", "pi_c", "protocol", "curve"}
  - 공개 입력 ↔ 10진 문자열 리스트

무한원점은 [0, 0] (G2 는 [[0, 0], [0, 0]]) 으로 표현한다.
"""

import os

from zkgame.field import get_curve


def read_source(source):
    """bytes 류는 그대로, 경로면 파일을 읽는다."""
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source)
    if isinstance(source, (str, os.PathLike)):
        with open(source, "rb") as f:
            return f.read()
    raise TypeError(f"bytes 또는 파일 경로가 필요합니다: {type(source).__name__}")


# ─── G1 point ───

def serialize_g1(point, curve):
    """G1 point → [str, str]"""
    affine = curve.to_affine(point)
    if affine is None:
        return ["0", "0"]
    return [str(affine[0]), str(affine[1])]


def _coordinate(value, curve):
    """10진 문자열 → 기저 필드 좌표. p 이상이면 축소하지 않고 거부한다."""
    v = int(value)
    if not 0 <= v < curve.field_modulus:
        raise ValueError(f"좌표가 기저 필드 범위를 넘습니다: {value}")
    return v


def deserialize_g1(data, curve):
    """[str, str] → G1 point. 곡선 위에 있는지는 검사하지 않는다."""
    return curve.g1_from_affine(_coordinate(data[0], curve), _coordinate(data[1], curve))


# ─── G2 point ───

def serialize_g2(point, curve):
    """G2 point → [[str, str], [str, str]]"""
    affine = curve.to_affine(point)
    if affine is None:
        return [["0", "0"], ["0", "0"]]
    (x0, x1), (y0, y1) = affine
    return [[str(x0), str(x1)], [str(y0), str(y1)]]


def deserialize_g2(data, curve):
    """[[str, str], [str, str]] → G2 point"""
    return curve.g2_from_affine(
        (_coordinate(data[0][0], curve), _coordinate(data[0][1], curve)),
        (_coordinate(data[1][0], curve), _coordinate(data[1][1], curve)),
    )


# ─── FR list ───

def serialize_fr_list(values):
    """list[int] → list[str]"""
    return [str(int(v)) for v in values]


def deserialize_fr_list(data):
    """list[str | int] → list[int]"""
    return [int(v) for v in data]


# ─── Proof ───

def serialize_proof(proof, curve):
    """Proof → snarkjs 형태 dict"""
    return {
        "protocol": "groth16",
        "curve": curve.name,
        "pi_a": serialize_g1(proof.a, curve),
        "pi_b": serialize_g2(proof.b, curve),
        "pi_c": serialize_g1(proof.c, curve),
    }


def deserialize_proof(data, curve=None):
    """snarkjs 형태 dict → Proof.

    snarkjs 는 사영 좌표의 z 성분까지 적어 두므로 ("pi_a": [x, y, "1"])
    앞의 두 성분만 사용한다.
    """
    # 순환 import 방지
    from zkgame.groth16.proving import Proof

    if curve is None:
        curve = get_curve(data.get("curve", "bn254"))
    return Proof(
        a=deserialize_g1(data["pi_a"][:2], curve),
        b=deserialize_g2(data["pi_b"][:2], curve),
        c=deserialize_g1(data["pi_c"][:2], curve),
    )
