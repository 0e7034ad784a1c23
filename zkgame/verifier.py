"""
증명 검증 오케스트레이션 (Verifier)
===================================

variant 의 verifying key 로 (공개 입력, 증명) 을 검증한다.
ConfigurationError 외에는 예외를 던지지 않고, 잘못된 입력은 모두 False 가 된다.
"""

from zkgame.groth16 import verifying
from zkgame.groth16.proving import Proof


def verify(registry, variant, public_inputs, proof):
    """
    Returns:
        bool

    Raises:
        ConfigurationError: 레지스트리 로드 실패 또는 등록되지 않은 variant
    """
    config = registry.get(variant)
    if not isinstance(proof, Proof):
        return False
    return verifying.verify(config.verifying_key, list(public_inputs), proof)
