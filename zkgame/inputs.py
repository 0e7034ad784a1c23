"""
입력 정규화 (Input Normalizer)
==============================

게임 variant 별 입력 레코드를 회로가 기대하는 필드 할당 맵으로 바꾼다.

  입력 레코드 ──(신호 테이블)──▶ {"신호 이름": [필드 원소, ...], ...}

**신호 테이블**:
  각 variant 의 레코드 클래스는 SIGNALS 라는 순서 있는 규칙 테이블을 갖는다.
  규칙 하나는 (회로 신호 이름, 레코드 필드, 인코딩 종류, 비트 폭, 모양) 이다.
  행렬은 행 우선(row-major)으로 펼친다.

  이 테이블이 신뢰할 수 없는 게임 상태와 신뢰되는 회로 사이의 유일한 접점이다.
  런타임에 회로와 교차 검증하는 장치는 없으므로(신호 이름/개수 불일치는
  위트니스 계산 단계에서야 드러난다) 회로의 입력 선언과 항상 동기화해야 한다.

**지원 variant**:
  | Variant        | 게임                         | 레코드             |
  |----------------|------------------------------|--------------------|
  | grid_movement  | 격자 이동 게임 (2048 류)     | GridMovementInput  |
  | match_puzzle   | 6×6 매치 퍼즐 (크립토 럼블 류)| MatchPuzzleInput   |

사용 예시:
    >>> record = parse_input("grid_movement", json.loads(body))
    >>> assignment = normalize(record)
    >>> assignment["address"]   # [6789]
"""

import enum
from dataclasses import dataclass, fields
from collections.abc import Mapping

from zkgame.encoding import encode_decimal, encode_uint
from zkgame.errors import EncodingError, InputConversionError
from zkgame.field import BN254


class Variant(enum.Enum):
    GRID_MOVEMENT = "grid_movement"
    MATCH_PUZZLE = "match_puzzle"


def to_variant(value):
    """문자열/Variant → Variant. 모르는 이름이면 InputConversionError."""
    if isinstance(value, Variant):
        return value
    try:
        return Variant(value)
    except ValueError:
        raise InputConversionError(
            f"지원하지 않는 게임 variant 입니다: {value!r}", field="variant"
        ) from None


# ─────────────────────────────────────────────────────────────────────
# 신호 규칙
# ─────────────────────────────────────────────────────────────────────

UINT = "uint"          # 고정 폭 정수 하나
DECIMAL = "decimal"    # 10진 문자열 큰 정수 하나
LIST = "list"          # 고정 폭 정수의 1차원 리스트
MATRIX = "matrix"      # 고정 폭 정수의 2차원 리스트 (행 우선으로 펼침)


@dataclass(frozen=True)
class SignalRule:
    """회로 신호 하나를 레코드에서 뽑아내는 규칙.

    속성:
        signal: 회로의 입력 신호 이름 (camelCase, 회로 선언과 동일)
        field: 레코드의 필드 이름
        kind: UINT / DECIMAL / LIST / MATRIX
        bits: 정수 원소의 비트 폭 (DECIMAL 은 사용하지 않음)
        shape: MATRIX 의 (행 수, 열 수). None 인 차원은 검사하지 않는다.
    """
    signal: str
    field: str
    kind: str
    bits: int = 0
    shape: tuple = None

    def extract(self, record, modulus):
        value = getattr(record, self.field)
        if self.kind == DECIMAL:
            return [encode_decimal(value, self.field, modulus)]
        if self.kind == UINT:
            return [encode_uint(value, self.bits, self.field, modulus)]
        if self.kind == LIST:
            return [encode_uint(v, self.bits, self.field, modulus) for v in value]
        if self.kind == MATRIX:
            self._check_shape(value)
            return [
                encode_uint(v, self.bits, self.field, modulus)
                for row in value
                for v in row
            ]
        raise ValueError(f"알 수 없는 규칙 종류: {self.kind}")

    def _check_shape(self, matrix):
        rows = len(matrix)
        widths = {len(row) for row in matrix}
        if len(widths) > 1:
            raise EncodingError("행렬의 행 길이가 서로 다릅니다", field=self.field)
        if self.shape is None:
            return
        want_rows, want_cols = self.shape
        cols = widths.pop() if widths else 0
        if want_rows is not None and rows != want_rows:
            raise EncodingError(f"행 수가 {want_rows} 이어야 합니다: {rows}", field=self.field)
        if want_cols is not None and rows and cols != want_cols:
            raise EncodingError(f"열 수가 {want_cols} 이어야 합니다: {cols}", field=self.field)


# ─────────────────────────────────────────────────────────────────────
# 입력 레코드
# ─────────────────────────────────────────────────────────────────────

def _coerce(rule, value, variant):
    """JSON 값 → 레코드 필드 값 (불변 형태). 원소 단위 검사는 인코더가 한다."""
    def fail(message):
        return InputConversionError(message, field=rule.field, variant=variant)

    if rule.kind == DECIMAL:
        if not isinstance(value, str):
            raise fail("10진 문자열이어야 합니다")
        return value
    if rule.kind == UINT:
        if isinstance(value, bool) or not isinstance(value, int):
            raise fail("정수여야 합니다")
        return value
    if not isinstance(value, (list, tuple)):
        raise fail("리스트여야 합니다")
    if rule.kind == LIST:
        return tuple(value)
    if any(not isinstance(row, (list, tuple)) for row in value):
        raise fail("2차원 리스트여야 합니다")
    return tuple(tuple(row) for row in value)


class _Record:
    """레코드 공통 동작: dict 파싱."""

    variant = None
    SIGNALS = ()

    @classmethod
    def from_dict(cls, data):
        """snake_case 키를 갖는 JSON 유사 dict 에서 레코드를 만든다.

        모르는 키는 무시한다. 누락되거나 타입이 틀린 필드는
        InputConversionError(field=...) 로 실패한다.
        """
        if not isinstance(data, Mapping):
            raise InputConversionError(
                "입력은 JSON 객체여야 합니다", variant=cls.variant
            )
        rules = {rule.field: rule for rule in cls.SIGNALS}
        values = {}
        for f in fields(cls):
            if f.name not in data:
                raise InputConversionError(
                    "필수 필드가 없습니다", field=f.name, variant=cls.variant
                )
            values[f.name] = _coerce(rules[f.name], data[f.name], cls.variant)
        return cls(**values)


@dataclass(frozen=True)
class GridMovementInput(_Record):
    """격자 이동 게임 (2048 류) 상태.

    board: 보드 스냅샷들 (행 = 스냅샷 하나의 셀 값, 셀은 u8 지수)
    packed_board: 보드를 u128 로 압축한 값들
    packed_dir: 방향 시퀀스를 압축한 u128
    direction: 방향 시퀀스 (u8)
    address: 플레이어 주소 (10진 문자열)
    nonce: 게임 nonce (10진 문자열)
    step, step_after: 이동 전/후 스텝 번호
    """
    board: tuple
    packed_board: tuple
    packed_dir: int
    direction: tuple
    address: str
    nonce: str
    step: int
    step_after: int

    variant = Variant.GRID_MOVEMENT
    SIGNALS = (
        SignalRule("board", "board", MATRIX, 8),
        SignalRule("packedBoard", "packed_board", LIST, 128),
        SignalRule("packedDir", "packed_dir", UINT, 128),
        SignalRule("direction", "direction", LIST, 8),
        SignalRule("address", "address", DECIMAL),
        SignalRule("step", "step", UINT, 8),
        SignalRule("stepAfter", "step_after", UINT, 8),
        SignalRule("nonce", "nonce", DECIMAL),
    )


@dataclass(frozen=True)
class MatchPuzzleInput(_Record):
    """6×6 매치 퍼즐 게임 상태.

    from_board, to_board 는 이동 전/후 6×6 보드이고,
    moves 는 (x, y, 동작) 3-튜플의 리스트, arg 는 이동별 u64 인자다.
    *_packed 필드는 회로가 보드/점수/위치/아이템을 압축해 비교하는 값이다.
    """
    from_seed: str
    to_seed: str
    from_board: tuple
    to_board: tuple
    step: int
    step_after: int
    from_board_packed: str
    to_board_packed: str
    score_packed: int
    pos_packed: str
    item_packed: str
    moves: tuple
    arg: tuple

    variant = Variant.MATCH_PUZZLE
    SIGNALS = (
        SignalRule("fromSeed", "from_seed", DECIMAL),
        SignalRule("toSeed", "to_seed", DECIMAL),
        SignalRule("fromBoard", "from_board", MATRIX, 8, shape=(6, 6)),
        SignalRule("toBoard", "to_board", MATRIX, 8, shape=(6, 6)),
        SignalRule("step", "step", UINT, 8),
        SignalRule("stepAfter", "step_after", UINT, 8),
        SignalRule("fromBoardPacked", "from_board_packed", DECIMAL),
        SignalRule("toBoardPacked", "to_board_packed", DECIMAL),
        SignalRule("scorePacked", "score_packed", UINT, 128),
        SignalRule("posPacked", "pos_packed", DECIMAL),
        SignalRule("itemPacked", "item_packed", DECIMAL),
        SignalRule("move", "moves", MATRIX, 8, shape=(None, 3)),
        SignalRule("arg", "arg", LIST, 64),
    )


RECORD_TYPES = {
    Variant.GRID_MOVEMENT: GridMovementInput,
    Variant.MATCH_PUZZLE: MatchPuzzleInput,
}


def parse_input(variant, data):
    """variant 에 맞는 레코드 클래스로 dict 를 파싱한다."""
    return RECORD_TYPES[to_variant(variant)].from_dict(data)


def signal_table(variant):
    return RECORD_TYPES[to_variant(variant)].SIGNALS


def normalize(record, modulus=BN254.order):
    """입력 레코드 → 필드 할당 맵 (순수 함수).

    Args:
        record: GridMovementInput 또는 MatchPuzzleInput
        modulus: 스칼라 필드 위수 r. 10진 문자열 값은 r 미만이어야 한다.

    Returns:
        dict[str, list[int]]: 신호 테이블 순서의 할당 맵

    Raises:
        InputConversionError: 추출/인코딩 실패. field 에 문제 필드 이름이 담긴다.
    """
    if type(record) not in RECORD_TYPES.values():
        raise InputConversionError(
            f"알 수 없는 입력 레코드 타입입니다: {type(record).__name__}"
        )
    assignment = {}
    for rule in record.SIGNALS:
        try:
            assignment[rule.signal] = rule.extract(record, modulus)
        except EncodingError as exc:
            raise InputConversionError(
                exc.message, field=rule.field, variant=record.variant
            ) from exc
        except TypeError as exc:
            # 리스트 자리에 스칼라가 오는 등 모양이 틀린 경우
            raise InputConversionError(
                f"값의 모양이 올바르지 않습니다: {exc}",
                field=rule.field,
                variant=record.variant,
            ) from exc
    return assignment
