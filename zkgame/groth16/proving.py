"""
Groth16 Proving
===============

ProvingKey 와 만족하는 위트니스 w 로 증명 π = (A, B, C) 를 만든다.

  A  = [α]₁ + Σ wᵢ·[uᵢ]₁ + r·[δ]₁
  B  = [β]₂ + Σ wᵢ·[vᵢ]₂ + s·[δ]₂
  B' = [β]₁ + Σ wᵢ·[vᵢ]₁ + s·[δ]₁                (C 계산용, G1)
  C  = Σ_{i>ℓ} wᵢ·[Kᵢ/δ]₁ + Σ hₖ·[τᵏZ(τ)/δ]₁ + s·A + r·B' - r·s·[δ]₁

r, s 는 증명마다 새로 뽑는다. 같은 입력이라도 증명은 매번 다르다.

**몫 다항식 h(x)**:
  도메인 위 평가값 aⱼ = ⟨Aⱼ, w⟩, bⱼ, cⱼ 를 IFFT 로 계수로 바꾸고,
  코셋 g·H 로 FFT 한 뒤 점별로 (a·b - c) / (gᵐ - 1) 을 계산하고
  다시 코셋 IFFT 하면 h 의 계수가 나온다 (deg h ≤ m - 2).
"""

import secrets
from dataclasses import dataclass

from zkgame.groth16.setup import qap_constraints
from zkgame.polynomial import coset_fft, coset_ifft, ifft


@dataclass(frozen=True)
class Proof:
    """Groth16 증명. a, c 는 G1, b 는 G2 (사영 좌표)."""
    a: tuple
    b: tuple
    c: tuple


def compute_h(r1cs, witness, m, curve):
    """몫 다항식 h(x) 의 계수 [h₀, ..., h_{m-2}] (FR)."""
    fr = curve.FR
    omega = curve.root_of_unity(m)
    g = curve.coset_generator

    constraints = qap_constraints(r1cs)
    if len(constraints) > m:
        raise ValueError(f"제약 수 {len(constraints)} 가 도메인 크기 {m} 보다 큽니다")
    evals = ([], [], [])
    for constraint in constraints:
        for out, lc in zip(evals, constraint):
            out.append(fr(r1cs.evaluate(lc, witness, curve.order)))
    for out in evals:
        out.extend([fr(0)] * (m - len(out)))

    a_coset, b_coset, c_coset = (
        coset_fft(ifft(out, omega), omega, g) for out in evals
    )
    z_inv = fr(1) / (g ** m - fr(1))
    quotient = [
        (a * b - c) * z_inv for a, b, c in zip(a_coset, b_coset, c_coset)
    ]
    h = coset_ifft(quotient, omega, g)
    if h[m - 1] != fr(0):
        raise ValueError("위트니스가 제약을 만족하지 않습니다 (h 의 차수 초과)")
    return h[:m - 1]


def prove(pk, r1cs, witness, rng=None):
    """Groth16 증명 생성.

    Args:
        pk: ProvingKey
        r1cs: pk 를 만든 R1CS
        witness: 만족하는 위트니스 (int 리스트, w[0] = 1)
        rng: randrange 를 제공하는 난수 생성기. 없으면 secrets.SystemRandom()

    Returns:
        Proof

    Raises:
        ValueError: 위트니스 길이가 키와 맞지 않거나 제약을 만족하지 않을 때
    """
    curve = pk.curve
    if len(witness) != pk.n_vars:
        raise ValueError(f"위트니스 길이 {len(witness)} != {pk.n_vars}")
    rng = rng or secrets.SystemRandom()
    order = curve.order
    witness = [int(x) % order for x in witness]

    h = compute_h(r1cs, witness, pk.domain_size, curve)

    r = rng.randrange(1, order)
    s = rng.randrange(1, order)

    msm, add, mul = curve.msm, curve.ec_add, curve.ec_mul

    proof_a = add(add(pk.alpha1, msm(pk.a_query, witness, curve.Z1)),
                  mul(pk.delta1, r))
    proof_b = add(add(pk.beta2, msm(pk.b2_query, witness, curve.Z2)),
                  mul(pk.delta2, s))
    temp_b = add(add(pk.beta1, msm(pk.b1_query, witness, curve.Z1)),
                 mul(pk.delta1, s))

    private = witness[pk.n_public + 1:]
    proof_c = msm(pk.c_query, private, curve.Z1)
    proof_c = add(proof_c, msm(pk.h_query, h, curve.Z1))
    proof_c = add(proof_c, mul(proof_a, s))
    proof_c = add(proof_c, mul(temp_b, r))
    proof_c = add(proof_c, curve.ec_neg(mul(pk.delta1, r * s)))

    return Proof(a=proof_a, b=proof_b, c=proof_c)
