"""
예외 계층 (Error Taxonomy)
==========================

증명 파이프라인의 각 단계는 자신에게 해당하는 예외만 던진다.

  EncodingError         스칼라 리터럴이 잘못됨 (예: 숫자가 아닌 10진 문자열)
  InputConversionError  variant 의 신호 테이블에 필요한 필드가 없거나 잘못됨
  ConfigurationError    회로 아티팩트 로드/파싱 실패, 레지스트리 초기화 실패
  WitnessError          할당이 회로 배선과 맞지 않거나 제약을 만족하지 않음
  ProvingError          증명 알고리즘 자체의 실패 (예: 손상된 proving key)

검증 불일치는 예외가 아니다. verify() 는 False 를 반환한다.
"""


class ZkGameError(Exception):
    """zkgame 의 모든 예외의 기반 클래스."""

    def __init__(self, message, **context):
        self.message = message
        # Variant 같은 Enum 은 값으로 표시
        self.context = {
            k: getattr(v, "value", v) for k, v in context.items() if v is not None
        }
        super().__init__(message)

    def __str__(self):
        if not self.context:
            return self.message
        details = ", ".join(f"{k}={v}" for k, v in self.context.items())
        return f"{self.message} ({details})"


class EncodingError(ZkGameError, ValueError):
    def __init__(self, message, field=None):
        super().__init__(message, field=field)
        self.field = field


class InputConversionError(ZkGameError, ValueError):
    """입력 레코드 → 필드 할당 맵 변환 실패. 문제가 된 필드 이름을 담는다."""

    def __init__(self, message, field=None, variant=None):
        super().__init__(message, field=field, variant=variant)
        self.field = field
        self.variant = variant


class ConfigurationError(ZkGameError):
    def __init__(self, message, variant=None):
        super().__init__(message, variant=variant)
        self.variant = variant


class WitnessError(ZkGameError):
    """위트니스 계산 실패: 신호 누락, 개수 불일치, 제약 불만족."""

    def __init__(self, message, variant=None, signal=None):
        super().__init__(message, variant=variant, signal=signal)
        self.variant = variant
        self.signal = signal


class ProvingError(ZkGameError):
    def __init__(self, message, variant=None):
        super().__init__(message, variant=variant)
        self.variant = variant
