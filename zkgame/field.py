"""
유한체(Finite Field) 및 타원곡선 연산
======================================

증명 파이프라인 전체에서 쓰이는 대수적 도구를 곡선별로 묶어 제공한다.

**곡선 디스크립터 Curve**:
  페어링 친화 곡선 하나에 대한 모든 것을 담는다.
  - FR: 스칼라 필드 (필드 원소, 위트니스, 공개 입력이 사는 곳)
  - G1: 기본 곡선 위의 점 (좌표는 Fp)
  - G2: 이차 확장체 Fp² 위의 twist 곡선 점
  - pairing: e(G2, G1) → GT

  지원 곡선:
  - BN254 (= bn128, alt_bn128). 이더리움 프리컴파일이 지원하는 기본 곡선.
  - BLS12-381.

**점 표현**:
  py_ecc 의 optimized 백엔드를 사용하므로 점은 사영 좌표 (x, y, z) 이다.
  무한원점은 z = 0. 외부로 내보낼 때는 to_affine() 으로 정규화한다.

사용 예시:
    >>> from zkgame.field import BN254
    >>> P = BN254.ec_mul(BN254.G1, 5)
    >>> BN254.to_affine(BN254.G1)   # (1, 2)
"""

from py_ecc import optimized_bn128
from py_ecc import optimized_bls12_381
from py_ecc.fields import bn128_FQ
from py_ecc.fields import bls12_381_FQ


# ─────────────────────────────────────────────────────────────────────
# 스칼라 필드 FR
# ─────────────────────────────────────────────────────────────────────

class BN254FR(bn128_FQ):
    """BN254 스칼라 필드 원소. 위수 r ≈ 2^254, r - 1 = 2^28 × (홀수)."""
    field_modulus = optimized_bn128.curve_order


class BLS12381FR(bls12_381_FQ):
    """BLS12-381 스칼라 필드 원소. 위수 r ≈ 2^255, r - 1 = 2^32 × (홀수)."""
    field_modulus = optimized_bls12_381.curve_order


# ─────────────────────────────────────────────────────────────────────
# 곡선 디스크립터
# ─────────────────────────────────────────────────────────────────────

class Curve:
    """페어링 친화 곡선 하나의 연산 모음.

    속성:
        name: 곡선 이름 ("bn254", "bls12_381")
        FR: 스칼라 필드 클래스
        order: 스칼라 필드 위수 r (= 그룹 위수)
        field_modulus: 기저 필드 Fp 의 소수 p
        G1, G2: 생성자 (사영 좌표)
        Z1, Z2: 무한원점
        coset_generator: FR*의 이차 비잉여원. 단위근 생성과 코셋 FFT 에 사용
        two_adicity: r - 1 을 나누는 2의 최대 지수
        coordinate_bytes: 기저 필드 좌표 하나를 담는 ABI 워드 폭
    """

    def __init__(self, name, backend, fr, coset_generator, two_adicity):
        self.name = name
        self._ec = backend
        self.FR = fr
        self.order = backend.curve_order
        self.field_modulus = backend.field_modulus
        self.G1 = backend.G1
        self.G2 = backend.G2
        self.Z1 = backend.Z1
        self.Z2 = backend.Z2
        self.coset_generator = fr(coset_generator)
        self.two_adicity = two_adicity
        # 32바이트 워드 단위로 올림 (BN254: 32, BLS12-381: 64)
        words = (self.field_modulus.bit_length() + 255) // 256
        self.coordinate_bytes = 32 * words

    def __repr__(self):
        return f"Curve({self.name})"

    # ── 그룹 연산 ──

    def ec_mul(self, point, scalar):
        """스칼라 곱셈 scalar · point. scalar 는 r 로 축소된다."""
        return self._ec.multiply(point, int(scalar) % self.order)

    def ec_add(self, p1, p2):
        return self._ec.add(p1, p2)

    def ec_neg(self, point):
        return self._ec.neg(point)

    def ec_eq(self, p1, p2):
        return self._ec.eq(p1, p2)

    def is_inf(self, point):
        return self._ec.is_inf(point)

    def pairing(self, g2_point, g1_point):
        """쌍선형 페어링 e(G1, G2) → GT.

        주의: py_ecc 의 인자 순서는 (G2, G1) 이다.
        """
        return self._ec.pairing(g2_point, g1_point)

    def msm(self, points, scalars, zero):
        """다중 스칼라 곱 Σ sᵢ·Pᵢ.

        스칼라가 0 이거나 점이 무한원점인 항은 건너뛴다.
        """
        acc = zero
        for point, scalar in zip(points, scalars):
            s = int(scalar) % self.order
            if s == 0 or point is None or self.is_inf(point):
                continue
            acc = self._ec.add(acc, self._ec.multiply(point, s))
        return acc

    # ── 곡선 소속 검사 ──

    def is_g1_point(self, point):
        """좌표가 Fp 원소인 사영 좌표 (x, y, z) 튜플인지."""
        return (isinstance(point, tuple) and len(point) == 3
                and all(isinstance(c, self._ec.FQ) for c in point))

    def is_g2_point(self, point):
        """좌표가 Fp² 원소인 사영 좌표 (x, y, z) 튜플인지."""
        return (isinstance(point, tuple) and len(point) == 3
                and all(isinstance(c, self._ec.FQ2) for c in point))

    def is_on_curve_g1(self, point):
        return self._ec.is_on_curve(point, self._ec.b)

    def is_on_curve_g2(self, point):
        return self._ec.is_on_curve(point, self._ec.b2)

    def in_subgroup(self, point):
        """r·P == O 인지 확인한다 (cofactor 가 있는 그룹의 부분군 검사)."""
        return self._ec.is_inf(self._ec.multiply(point, self.order))

    # ── 아핀 좌표 변환 ──

    def g1_from_affine(self, x, y):
        """정수 좌표 (x, y) → G1 점. (0, 0) 은 무한원점으로 본다."""
        x, y = int(x), int(y)
        if x == 0 and y == 0:
            return self.Z1
        fq = self._ec.FQ
        return (fq(x), fq(y), fq.one())

    def g2_from_affine(self, x, y):
        """정수 좌표 ((x.c0, x.c1), (y.c0, y.c1)) → G2 점."""
        x0, x1 = int(x[0]), int(x[1])
        y0, y1 = int(y[0]), int(y[1])
        if x0 == 0 and x1 == 0 and y0 == 0 and y1 == 0:
            return self.Z2
        fq2 = self._ec.FQ2
        return (fq2([x0, x1]), fq2([y0, y1]), fq2.one())

    def to_affine(self, point):
        """사영 좌표 점 → 정수 아핀 좌표.

        Returns:
            G1: (x, y)
            G2: ((x.c0, x.c1), (y.c0, y.c1))
            무한원점: None
        """
        if self.is_inf(point):
            return None
        x, y = self._ec.normalize(point)
        if hasattr(x, "coeffs"):
            return (
                (int(x.coeffs[0]), int(x.coeffs[1])),
                (int(y.coeffs[0]), int(y.coeffs[1])),
            )
        return (int(x), int(y))

    # ── 단위근 ──

    def root_of_unity(self, n):
        """n차 원시 단위근 ω (n 은 2의 거듭제곱).

        ω = g^((r-1)/n), g 는 이차 비잉여원.
        """
        if n < 1 or (n & (n - 1)) != 0:
            raise ValueError(f"n은 2의 거듭제곱이어야 합니다: {n}")
        if n > (1 << self.two_adicity):
            raise ValueError(f"n은 2^{self.two_adicity} 이하여야 합니다: {n}")
        if n == 1:
            return self.FR(1)
        return self.coset_generator ** ((self.order - 1) // n)


BN254 = Curve("bn254", optimized_bn128, BN254FR, coset_generator=5, two_adicity=28)
BLS12_381 = Curve("bls12_381", optimized_bls12_381, BLS12381FR,
                  coset_generator=7, two_adicity=32)

CURVES = {
    "bn254": BN254,
    "bn128": BN254,
    "alt_bn128": BN254,
    "bls12_381": BLS12_381,
    "bls12-381": BLS12_381,
}


def get_curve(name):
    """이름으로 곡선을 찾는다. 이미 Curve 이면 그대로 돌려준다."""
    if isinstance(name, Curve):
        return name
    try:
        return CURVES[str(name).lower()]
    except KeyError:
        raise ValueError(f"지원하지 않는 곡선입니다: {name}") from None
