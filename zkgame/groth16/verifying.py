"""
Groth16 Verifying
=================

  e(A, B) == e(α, β) · e(vk_x, γ) · e(C, δ)

  vk_x = IC₀ + Σ xᵢ · ICᵢ   (xᵢ: 공개 입력)

검증 전에 증명 점들이 곡선 위에 있고 위수 r 부분군에 속하는지 확인한다.
검사에 실패하면 예외 대신 False 를 돌려준다.
"""

import logging


logger = logging.getLogger(__name__)


def _valid_g1(curve, point):
    if not curve.is_g1_point(point):
        return False
    return curve.is_on_curve_g1(point) and curve.in_subgroup(point)


def _valid_g2(curve, point):
    if not curve.is_g2_point(point):
        return False
    return curve.is_on_curve_g2(point) and curve.in_subgroup(point)


def compute_vk_x(vk, public_inputs):
    curve = vk.curve
    return curve.ec_add(vk.ic[0], curve.msm(vk.ic[1:], public_inputs, curve.Z1))


def verify(vk, public_inputs, proof):
    """증명 검증.

    Returns:
        bool: 공개 입력 개수/범위, 점 유효성, 페어링 등식이 모두 맞으면 True
    """
    curve = vk.curve
    if len(public_inputs) != vk.n_public:
        logger.debug("public input count mismatch: %d != %d",
                     len(public_inputs), vk.n_public)
        return False
    for x in public_inputs:
        if isinstance(x, bool) or not isinstance(x, int) or not 0 <= x < curve.order:
            logger.debug("public input out of range")
            return False
    if not (_valid_g1(curve, proof.a) and _valid_g2(curve, proof.b)
            and _valid_g1(curve, proof.c)):
        logger.debug("proof point is malformed or not in the prime-order subgroup")
        return False

    lhs = curve.pairing(proof.b, proof.a)
    vk_x = compute_vk_x(vk, public_inputs)
    rhs = vk.alphabeta * curve.pairing(vk.gamma2, vk_x) * curve.pairing(vk.delta2, proof.c)
    return lhs == rhs
