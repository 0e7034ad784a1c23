"""
Groth16 키 (ProvingKey / VerifyingKey)
======================================

setup() 이 만든 CRS 를 담는 불변 데이터 구조와 JSON ("zkey.json") 직렬화.

**ProvingKey** (snarkjs zkey 와 같은 구성):
  alpha1, beta1, delta1          [α]₁, [β]₁, [δ]₁
  beta2, gamma2, delta2          [β]₂, [γ]₂, [δ]₂
  ic[i]      (i ≤ nPublic)       [(β·uᵢ(τ) + α·vᵢ(τ) + wᵢ(τ)) / γ]₁
  a_query[i]                     [uᵢ(τ)]₁
  b1_query[i], b2_query[i]       [vᵢ(τ)]₁, [vᵢ(τ)]₂
  c_query[i] (i > nPublic)       [(β·uᵢ(τ) + α·vᵢ(τ) + wᵢ(τ)) / δ]₁
  h_query[k] (k < m-1)           [τᵏ · Z(τ) / δ]₁

**VerifyingKey**:
  alpha1, beta2, gamma2, delta2, ic.
  e(α, β) 는 증명마다 같으므로 한 번만 계산해 둔다 (alphabeta).

JSON 에서 점은 serializers 의 규칙을 따른다 (G1: [x, y], G2: [[x0, x1], [y0, y1]]).
"""

import json
from dataclasses import dataclass
from functools import cached_property

from zkgame.field import get_curve
from zkgame.serializers import (
    deserialize_g1,
    deserialize_g2,
    read_source,
    serialize_g1,
    serialize_g2,
)


@dataclass(frozen=True, eq=False)
class VerifyingKey:
    curve: object
    alpha1: tuple
    beta2: tuple
    gamma2: tuple
    delta2: tuple
    ic: tuple

    @property
    def n_public(self):
        return len(self.ic) - 1

    @cached_property
    def alphabeta(self):
        """e(α, β) ∈ GT"""
        return self.curve.pairing(self.beta2, self.alpha1)

    def to_snarkjs(self):
        """snarkjs verification_key.json 형태.

        snarkjs 는 사영 좌표 z 성분까지 적는다 (G1: [x, y, "1"], G2: [..., ["1", "0"]]).
        """
        curve = self.curve

        def g1(p):
            return serialize_g1(p, curve) + ["1"]

        def g2(p):
            return serialize_g2(p, curve) + [["1", "0"]]

        return {
            "protocol": "groth16",
            "curve": "bn128" if curve.name == "bn254" else curve.name,
            "nPublic": self.n_public,
            "vk_alpha_1": g1(self.alpha1),
            "vk_beta_2": g2(self.beta2),
            "vk_gamma_2": g2(self.gamma2),
            "vk_delta_2": g2(self.delta2),
            "IC": [g1(p) for p in self.ic],
        }

    @classmethod
    def from_snarkjs(cls, data):
        curve = get_curve(data.get("curve", "bn254"))
        return cls(
            curve=curve,
            alpha1=deserialize_g1(data["vk_alpha_1"][:2], curve),
            beta2=deserialize_g2(data["vk_beta_2"][:2], curve),
            gamma2=deserialize_g2(data["vk_gamma_2"][:2], curve),
            delta2=deserialize_g2(data["vk_delta_2"][:2], curve),
            ic=tuple(deserialize_g1(p[:2], curve) for p in data["IC"]),
        )


@dataclass(frozen=True, eq=False)
class ProvingKey:
    curve: object
    n_vars: int
    n_public: int
    domain_size: int
    alpha1: tuple
    beta1: tuple
    delta1: tuple
    beta2: tuple
    gamma2: tuple
    delta2: tuple
    ic: tuple
    a_query: tuple
    b1_query: tuple
    b2_query: tuple
    c_query: tuple
    h_query: tuple

    @cached_property
    def verifying_key(self):
        return VerifyingKey(
            curve=self.curve,
            alpha1=self.alpha1,
            beta2=self.beta2,
            gamma2=self.gamma2,
            delta2=self.delta2,
            ic=self.ic,
        )

    # ── JSON ──

    def to_json(self):
        curve = self.curve

        def g1s(points):
            return [serialize_g1(p, curve) for p in points]

        return {
            "protocol": "groth16",
            "curve": curve.name,
            "nVars": self.n_vars,
            "nPublic": self.n_public,
            "domainSize": self.domain_size,
            "vk_alpha_1": serialize_g1(self.alpha1, curve),
            "vk_beta_1": serialize_g1(self.beta1, curve),
            "vk_delta_1": serialize_g1(self.delta1, curve),
            "vk_beta_2": serialize_g2(self.beta2, curve),
            "vk_gamma_2": serialize_g2(self.gamma2, curve),
            "vk_delta_2": serialize_g2(self.delta2, curve),
            "IC": g1s(self.ic),
            "A": g1s(self.a_query),
            "B1": g1s(self.b1_query),
            "B2": [serialize_g2(p, curve) for p in self.b2_query],
            "C": g1s(self.c_query),
            "H": g1s(self.h_query),
        }

    @classmethod
    def from_json(cls, data):
        """to_json() 의 역. 형식이 틀리면 KeyError/ValueError/TypeError."""
        if not isinstance(data, dict):
            raise TypeError(f"proving key JSON 은 객체여야 합니다: {type(data).__name__}")
        if data.get("protocol") != "groth16":
            raise ValueError(f"groth16 키가 아닙니다: {data.get('protocol')!r}")
        curve = get_curve(data["curve"])

        def g1s(key):
            return tuple(deserialize_g1(p, curve) for p in data[key])

        pk = cls(
            curve=curve,
            n_vars=int(data["nVars"]),
            n_public=int(data["nPublic"]),
            domain_size=int(data["domainSize"]),
            alpha1=deserialize_g1(data["vk_alpha_1"], curve),
            beta1=deserialize_g1(data["vk_beta_1"], curve),
            delta1=deserialize_g1(data["vk_delta_1"], curve),
            beta2=deserialize_g2(data["vk_beta_2"], curve),
            gamma2=deserialize_g2(data["vk_gamma_2"], curve),
            delta2=deserialize_g2(data["vk_delta_2"], curve),
            ic=g1s("IC"),
            a_query=g1s("A"),
            b1_query=g1s("B1"),
            b2_query=tuple(deserialize_g2(p, curve) for p in data["B2"]),
            c_query=g1s("C"),
            h_query=g1s("H"),
        )
        pk.check_shape()
        return pk

    def check_shape(self):
        """쿼리 길이가 와이어 수/공개 입력 수/도메인 크기와 맞는지 확인한다."""
        expected = {
            "IC": (len(self.ic), self.n_public + 1),
            "A": (len(self.a_query), self.n_vars),
            "B1": (len(self.b1_query), self.n_vars),
            "B2": (len(self.b2_query), self.n_vars),
            "C": (len(self.c_query), self.n_vars - self.n_public - 1),
            "H": (len(self.h_query), self.domain_size - 1),
        }
        for name, (got, want) in expected.items():
            if got != want:
                raise ValueError(f"{name} 길이가 {want} 이어야 합니다: {got}")


def dump_proving_key(pk):
    """ProvingKey → zkey.json 텍스트"""
    return json.dumps(pk.to_json())


def load_proving_key(source):
    """zkey.json (bytes 또는 경로) → ProvingKey"""
    return ProvingKey.from_json(json.loads(read_source(source)))
