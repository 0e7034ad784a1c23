"""
필드 값 인코더 (Field Value Encoder)
====================================

게임 상태의 원시 값(고정 폭 정수, 10진 문자열 큰 정수)을
정규형 필드 원소(0 ≤ v < r 인 int)로 바꾼다.

원칙:
  - 정확해야 하는 값은 절대 조용히 축소(mod r)하지 않는다.
    r 이상이면 EncodingError.
  - 선언된 비트 폭을 넘는 값은 거부한다 (packed 보드 인코딩이 잘리는 것 방지).
  - encode_field 만이 전체 함수(total)다. 회로가 이미 축소된 값으로 다루는
    양에만 사용한다.
"""

from zkgame.errors import EncodingError


def _require_int(value, field):
    # bool 은 int 의 서브클래스지만 게임 상태의 정수로 받지 않는다
    if isinstance(value, bool) or not isinstance(value, int):
        raise EncodingError(
            f"정수가 필요합니다: {type(value).__name__}", field=field
        )


def encode_uint(value, bits, field, modulus):
    """부호 없는 고정 폭 정수 (u8, u64, u128 ...).

    Raises:
        EncodingError: 음수, 2^bits 이상, 또는 r 이상인 값
    """
    _require_int(value, field)
    if value < 0:
        raise EncodingError(f"음수는 u{bits} 로 인코딩할 수 없습니다: {value}", field=field)
    if value >> bits:
        raise EncodingError(f"값이 u{bits} 범위를 넘습니다: {value}", field=field)
    if value >= modulus:
        raise EncodingError("값이 필드 위수 이상입니다", field=field)
    return value


def encode_int(value, bits, field, modulus):
    """부호 있는 고정 폭 정수. 음수 v 는 r - |v| 로 표현된다."""
    _require_int(value, field)
    bound = 1 << (bits - 1)
    if not -bound <= value < bound:
        raise EncodingError(f"값이 i{bits} 범위를 넘습니다: {value}", field=field)
    if value >= modulus:
        raise EncodingError("값이 필드 위수 이상입니다", field=field)
    return value % modulus


def encode_decimal(text, field, modulus):
    """10진 문자열로 인코딩된 임의 정밀도 음이 아닌 정수.

    ASCII 숫자만 허용한다. 부호, 공백, 0x 접두사, 밑줄은 모두 거부.

    예시:
        >>> encode_decimal("6789", "address", BN254.order)  # 6789
        >>> encode_decimal("67a9", "address", BN254.order)  # EncodingError
    """
    if not isinstance(text, str):
        raise EncodingError(
            f"10진 문자열이 필요합니다: {type(text).__name__}", field=field
        )
    # str.isdigit() 은 '²' 같은 유니코드 숫자도 받아들이므로 직접 검사
    if not text or any(ch not in "0123456789" for ch in text):
        raise EncodingError(f"올바른 10진 정수 리터럴이 아닙니다: {text!r}", field=field)
    value = int(text)
    if value >= modulus:
        raise EncodingError("값이 필드 위수 이상입니다 (축소하지 않음)", field=field)
    return value


def encode_field(value, modulus):
    """이미 축소된 양으로 취급되는 정수를 r 로 축소한다. 범위 검사 없음."""
    return int(value) % modulus
