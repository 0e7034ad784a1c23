"""
증명 코덱 (Proof Codec)
=======================

(공개 입력, 증명) → 온체인 검증 컨트랙트가 받는 고정 폭 big-endian ABI 바이트.

**공개 입력**: 원소마다 32바이트 big-endian 워드.

**증명**: 좌표마다 워드 하나.
  A.x | A.y | B.x.c1 | B.x.c0 | B.y.c1 | B.y.c0 | C.x | C.y

  G2 좌표는 Fp² 원소 c0 + c1·u 이며, 이더리움 프리컴파일 관례에 따라
  허수부(c1)를 먼저 쓴다. 내부 표현 (c0, c1) 과 순서가 반대이다.

**워드 폭**: BN254 는 32바이트. BLS12-381 의 기저 필드(381비트)는 32바이트에
  들어가지 않으므로 64바이트 워드 (EIP-2537 배치, 상위 16바이트 0) 를 쓴다.

무한원점은 모든 좌표가 0 인 워드로 인코딩한다.
"""

from zkgame.errors import EncodingError
from zkgame.field import BN254
from zkgame.groth16.proving import Proof


PUBLIC_WORD = 32


def _word(value, width):
    return int(value).to_bytes(width, "big")


def _words(data, width):
    return [int.from_bytes(data[i:i + width], "big") for i in range(0, len(data), width)]


def encode_public_inputs(public_inputs, curve=BN254):
    out = []
    for idx, value in enumerate(public_inputs):
        if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value < curve.order:
            raise EncodingError(f"공개 입력 #{idx} 가 필드 원소가 아닙니다", field="public_inputs")
        out.append(_word(value, PUBLIC_WORD))
    return b"".join(out)


def encode_proof(proof, curve=BN254):
    width = curve.coordinate_bytes
    ax, ay = curve.to_affine(proof.a) or (0, 0)
    (bx0, bx1), (by0, by1) = curve.to_affine(proof.b) or ((0, 0), (0, 0))
    cx, cy = curve.to_affine(proof.c) or (0, 0)
    words = [ax, ay, bx1, bx0, by1, by0, cx, cy]
    return b"".join(_word(w, width) for w in words)


def encode_for_chain(public_inputs, proof, curve=BN254):
    """(공개 입력, 증명) → (공개 입력 바이트, 증명 바이트).

    예시:
        >>> pub, prf = encode_for_chain([9], proof)
        >>> len(pub), len(prf)   # (32, 256)
    """
    return encode_public_inputs(public_inputs, curve), encode_proof(proof, curve)


def decode_from_chain(public_bytes, proof_bytes, curve=BN254):
    """encode_for_chain 의 역. 점이 곡선 위에 있는지는 검증 단계에서 확인한다.

    Raises:
        EncodingError: 바이트 길이가 워드 폭과 맞지 않을 때
    """
    width = curve.coordinate_bytes
    if len(public_bytes) % PUBLIC_WORD:
        raise EncodingError("공개 입력 바이트 길이가 32의 배수가 아닙니다", field="public_inputs")
    if len(proof_bytes) != 8 * width:
        raise EncodingError(
            f"증명 바이트 길이가 {8 * width} 이어야 합니다: {len(proof_bytes)}", field="proof"
        )
    public_inputs = _words(public_bytes, PUBLIC_WORD)
    coords = _words(proof_bytes, width)
    if any(c >= curve.field_modulus for c in coords):
        raise EncodingError("좌표가 기저 필드 범위를 넘습니다", field="proof")
    ax, ay, bx1, bx0, by1, by0, cx, cy = coords
    proof = Proof(
        a=curve.g1_from_affine(ax, ay),
        b=curve.g2_from_affine((bx0, bx1), (by0, by1)),
        c=curve.g1_from_affine(cx, cy),
    )
    return public_inputs, proof
