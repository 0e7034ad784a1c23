"""
FFT 와 코셋 연산
================

Groth16 몫 다항식 h(x) 계산에 필요한 최소한의 다항식 도구.

**FFT/IFFT (Number Theoretic Transform)**:
  유한체 위의 다항식을 평가 표현 ↔ 계수 표현으로 변환한다.
  재귀적 Cooley-Tukey radix-2 알고리즘.

**코셋 FFT**:
  소거 다항식 Z(x) = x^n - 1 은 도메인 H 위에서 0 이므로
  (A·B - C)/Z 를 H 에서 직접 나눌 수 없다.
  코셋 k·H 에서는 Z(k·ωⁱ) = kⁿ - 1 ≠ 0 (상수) 이므로 점별 나눗셈이 가능하다.

모든 함수는 omega 의 타입(곡선별 FR 클래스)을 따라 동작한다.

사용 예시:
    >>> omega = BN254.root_of_unity(4)
    >>> evals = fft([FR(1), FR(2), FR(3), FR(0)], omega)
    >>> ifft(evals, omega)  # [1, 2, 3, 0]
"""


def fft(coeffs, omega):
    """계수 → 도메인 {1, ω, ..., ω^(n-1)} 에서의 평가값.

    Args:
        coeffs: FR 원소 리스트 (길이는 2의 거듭제곱)
        omega: n차 원시 단위근

    Returns:
        list[FR]: [p(1), p(ω), ..., p(ω^(n-1))]
    """
    fr = type(omega)
    n = len(coeffs)
    if n == 1:
        c = coeffs[0]
        return [c if isinstance(c, fr) else fr(c)]

    even_vals = fft(coeffs[0::2], omega * omega)
    odd_vals = fft(coeffs[1::2], omega * omega)

    # 버터플라이 결합
    result = [fr(0)] * n
    omega_k = fr(1)
    half = n // 2
    for k in range(half):
        t = omega_k * odd_vals[k]
        result[k] = even_vals[k] + t
        result[k + half] = even_vals[k] - t
        omega_k = omega_k * omega
    return result


def ifft(evals, omega):
    """평가값 → 계수. ω^{-1} 로 FFT 한 뒤 n 으로 나눈다."""
    fr = type(omega)
    coeffs = fft(evals, fr(1) / omega)
    n_inv = fr(1) / fr(len(evals))
    return [c * n_inv for c in coeffs]


def coset_fft(coeffs, omega, k):
    """코셋 k·H 에서의 평가: [c₀, k·c₁, k²·c₂, ...] 를 FFT 한다."""
    fr = type(omega)
    shifted = []
    k_power = fr(1)
    for c in coeffs:
        shifted.append(c * k_power)
        k_power = k_power * k
    return fft(shifted, omega)


def coset_ifft(evals, omega, k):
    """코셋 FFT 의 역변환: IFFT 후 cᵢ / kⁱ."""
    fr = type(omega)
    coeffs = ifft(evals, omega)
    k_inv = fr(1) / k
    k_inv_power = fr(1)
    result = []
    for c in coeffs:
        result.append(c * k_inv_power)
        k_inv_power = k_inv_power * k_inv
    return result


def next_power_of_2(n):
    """n 이상의 가장 작은 2의 거듭제곱."""
    if n <= 1:
        return 1
    p = 1
    while p < n:
        p <<= 1
    return p
