"""
증명 생성 오케스트레이션 (Prover)
=================================

  입력 레코드 ─normalize─▶ 필드 할당 맵 ─위트니스 계산─▶ w ─groth16.prove─▶ π
                                                         └─▶ 공개 입력 w[1..ℓ]

공개 입력은 항상 계산된 위트니스에서 가져온다. 호출자가 넘길 수 없다.
증명 난수는 호출마다 새로 만든다 (기본값: OS CSPRNG).
"""

import logging
import secrets
import time

from zkgame.errors import InputConversionError, ProvingError, WitnessError
from zkgame.groth16 import proving
from zkgame.inputs import normalize, to_variant


logger = logging.getLogger(__name__)


def calculate_witness(config, assignment):
    """할당 맵 → 검증된 위트니스.

    위트니스 계산기 오류, 길이 불일치, R1CS 불만족을 모두 WitnessError 로 바꾼다.
    """
    variant = config.variant
    r1cs = config.r1cs
    try:
        witness = config.witness_calculator.calculate(assignment)
    except WitnessError as exc:
        raise WitnessError(exc.message, variant=variant, signal=exc.signal) from exc

    if len(witness) != r1cs.n_wires:
        raise WitnessError(
            f"위트니스 길이 {len(witness)} 가 와이어 수 {r1cs.n_wires} 와 다릅니다",
            variant=variant,
        )
    try:
        idx = r1cs.first_unsatisfied(witness)
    except ValueError as exc:
        raise WitnessError(str(exc), variant=variant) from exc
    if idx is not None:
        raise WitnessError(f"제약 #{idx} 를 만족하지 않습니다", variant=variant)
    return witness


def prove(registry, variant, record, rng=None):
    """게임 상태 레코드에 대한 Groth16 증명을 만든다.

    Args:
        registry: CircuitRegistry
        variant: Variant 또는 그 이름
        record: variant 에 맞는 입력 레코드
        rng: randrange 를 제공하는 난수 생성기 (테스트용). 없으면 호출마다
            secrets.SystemRandom() 을 새로 만든다.

    Returns:
        (list[int], Proof): 공개 입력 벡터와 증명

    Raises:
        InputConversionError, ConfigurationError, WitnessError, ProvingError
    """
    start = time.perf_counter()
    variant = to_variant(variant)
    if getattr(record, "variant", None) is not variant:
        raise InputConversionError(
            f"입력 레코드 {type(record).__name__} 가 variant 와 맞지 않습니다",
            variant=variant,
        )

    assignment = normalize(record, registry.curve.order)
    config = registry.get(variant)

    t = time.perf_counter()
    witness = calculate_witness(config, assignment)
    logger.debug("%s witness: %.3fs", variant.value, time.perf_counter() - t)

    public_inputs = config.r1cs.public_inputs(witness)

    t = time.perf_counter()
    try:
        proof = proving.prove(
            config.proving_key, config.r1cs, witness,
            rng=rng or secrets.SystemRandom(),
        )
    except (ValueError, ArithmeticError, TypeError) as exc:
        raise ProvingError(f"증명 생성 실패: {exc}", variant=variant) from exc
    logger.debug("%s prove: %.3fs", variant.value, time.perf_counter() - t)
    logger.debug("%s total: %.3fs", variant.value, time.perf_counter() - start)

    return public_inputs, proof
