"""
Groth16 Setup (회로별 신뢰 설정)
================================

R1CS 하나에 대해 toxic waste (τ, α, β, γ, δ) 를 뽑고 ProvingKey 를 만든다.

**QAP 도메인**:
  제약 m' 개 + 공개 입력 결합 제약 (nPublic + 1) 개를 크기 m (2의 거듭제곱) 인
  단위근 도메인 {1, ω, ..., ω^(m-1)} 에 올린다.
  공개 입력 결합 제약 wᵢ * 0 = 0 (A = {i: 1}) 은 snarkjs 와 같은 방식으로
  공개 와이어의 uᵢ 들을 선형 독립으로 만든다.

**라그랑주 기저의 τ 평가** (보간 없이 바로 계산):
  Lⱼ(τ) = (τ^m - 1) · ωʲ / (m · (τ - ωʲ))

  uᵢ(τ) = Σⱼ Aⱼ[i] · Lⱼ(τ)    (vᵢ, wᵢ 도 B, C 로 같은 방식)

toxic waste 는 이 함수 밖으로 나가지 않는다.
"""

import logging
import secrets

from zkgame.groth16.keys import ProvingKey
from zkgame.polynomial import next_power_of_2


logger = logging.getLogger(__name__)


def qap_constraints(r1cs):
    """R1CS 제약 + 공개 입력 결합 제약."""
    binding = [({i: 1}, {}, {}) for i in range(r1cs.n_public + 1)]
    return list(r1cs.constraints) + binding


def domain_size(r1cs):
    return next_power_of_2(r1cs.n_constraints + r1cs.n_public + 1)


def _random_nonzero(fr, order, rng):
    return fr(rng.randrange(1, order))


def lagrange_at(curve, m, tau):
    """[L₀(τ), ..., L_{m-1}(τ)]"""
    fr = curve.FR
    omega = curve.root_of_unity(m)
    z_tau = tau ** m - fr(1)
    m_inv = fr(1) / fr(m)
    out = []
    omega_j = fr(1)
    for _ in range(m):
        out.append(z_tau * omega_j * m_inv / (tau - omega_j))
        omega_j = omega_j * omega
    return out


def qap_at(r1cs, curve, m, tau):
    """(u(τ), v(τ), w(τ)) 를 와이어별 FR 리스트로 돌려준다."""
    fr = curve.FR
    lagrange = lagrange_at(curve, m, tau)
    n = r1cs.n_wires
    u = [fr(0)] * n
    v = [fr(0)] * n
    w = [fr(0)] * n
    for j, (a, b, c) in enumerate(qap_constraints(r1cs)):
        for target, lc in ((u, a), (v, b), (w, c)):
            for wire, coeff in lc.items():
                target[wire] += lagrange[j] * coeff
    return u, v, w


def setup(r1cs, curve, rng=None):
    """회로별 Groth16 CRS 생성.

    Args:
        r1cs: R1CS (prime 은 curve.order 와 같아야 한다)
        curve: Curve 디스크립터
        rng: randrange 를 제공하는 난수 생성기. 없으면 secrets.SystemRandom()

    Returns:
        ProvingKey
    """
    if r1cs.prime != curve.order:
        raise ValueError(f"R1CS 필드가 {curve.name} 스칼라 필드와 다릅니다")
    rng = rng or secrets.SystemRandom()
    fr = curve.FR
    m = domain_size(r1cs)

    # τ 는 도메인 밖에 있어야 Lⱼ(τ) 가 정의된다
    tau = _random_nonzero(fr, curve.order, rng)
    while tau ** m == fr(1):
        tau = _random_nonzero(fr, curve.order, rng)
    alpha, beta, gamma, delta = (
        _random_nonzero(fr, curve.order, rng) for _ in range(4)
    )

    u, v, w = qap_at(r1cs, curve, m, tau)
    n_public = r1cs.n_public
    gamma_inv = fr(1) / gamma
    delta_inv = fr(1) / delta

    g1, g2 = curve.G1, curve.G2
    mul = curve.ec_mul

    ic = tuple(
        mul(g1, (beta * u[i] + alpha * v[i] + w[i]) * gamma_inv)
        for i in range(n_public + 1)
    )
    c_query = tuple(
        mul(g1, (beta * u[i] + alpha * v[i] + w[i]) * delta_inv)
        for i in range(n_public + 1, r1cs.n_wires)
    )
    a_query = tuple(mul(g1, x) for x in u)
    b1_query = tuple(mul(g1, x) for x in v)
    b2_query = tuple(mul(g2, x) for x in v)

    z_over_delta = (tau ** m - fr(1)) * delta_inv
    h_query = []
    tau_k = fr(1)
    for _ in range(m - 1):
        h_query.append(mul(g1, tau_k * z_over_delta))
        tau_k = tau_k * tau

    logger.info(
        "groth16 setup done: curve=%s wires=%d public=%d domain=%d",
        curve.name, r1cs.n_wires, n_public, m,
    )
    return ProvingKey(
        curve=curve,
        n_vars=r1cs.n_wires,
        n_public=n_public,
        domain_size=m,
        alpha1=mul(g1, alpha),
        beta1=mul(g1, beta),
        delta1=mul(g1, delta),
        beta2=mul(g2, beta),
        gamma2=mul(g2, gamma),
        delta2=mul(g2, delta),
        ic=ic,
        a_query=a_query,
        b1_query=b1_query,
        b2_query=b2_query,
        c_query=c_query,
        h_query=tuple(h_query),
    )
