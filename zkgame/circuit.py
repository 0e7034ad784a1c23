"""
회로 빌더 (Circuit Builder)
===========================

파이썬으로 작은 R1CS 회로를 선언하고, 그 회로에 맞는 위트니스 계산기를 함께 만든다.
외부 circom 아티팩트 없이 테스트 픽스처나 로컬 실험용 회로를 만들 때 쓴다.

  c = Circuit()
  x = c.input("x", public=False)          # 비공개 입력 신호 (와이어 id 리스트)
  y = c.mul(x[0], x[0])                   # 내부 와이어 y = x·x  (제약: x * x = y)
  c.output("out", {y: 1, x[0]: 1, 0: 5})  # 공개 출력 out = y + x + 5
  r1cs, calculator = c.compile()

**선형 결합**:
  {와이어 id: 계수} dict. 와이어 0 은 상수 1 이다.
  와이어 id 하나(int)를 넘기면 {id: 1} 로 취급한다.

**와이어 번호**:
  선언 중에는 임시 id 를 쓰고, compile() 에서 circom 순서로 다시 매긴다.
    0 | 공개 출력 | 공개 입력 | 비공개 입력 | 내부 와이어

**위트니스 계산기** (PythonWitnessCalculator):
  circom wasm 계산기(WasmWitnessCalculator)와 같은 인터페이스와 같은 검사를 한다.
  - 회로에 없는 신호 이름 → WitnessError (Signal not found)
  - 신호 원소 개수 불일치 → WitnessError
  - 선언된 입력이 누락됨 → WitnessError
  - assert_equal / assert_mul 제약 위반 → WitnessError (Assert Failed)
"""

from zkgame.errors import WitnessError
from zkgame.field import BN254
from zkgame.r1cs import R1CS


ONE = 0

OUTPUT = "output"
PUBLIC = "public"
PRIVATE = "private"
INTERNAL = "internal"

_ORDER = (OUTPUT, PUBLIC, PRIVATE, INTERNAL)


def as_lc(value):
    """와이어 id 또는 dict → 선형 결합 dict (복사본)."""
    if isinstance(value, dict):
        return dict(value)
    if isinstance(value, int) and not isinstance(value, bool):
        return {value: 1}
    raise TypeError(f"선형 결합이 아닙니다: {value!r}")


class Circuit:
    """R1CS 회로 선언기.

    Args:
        prime: 스칼라 필드 위수 (기본값 BN254 r)
    """

    def __init__(self, prime=BN254.order):
        self.prime = prime
        self._kinds = [None]        # 임시 id → 와이어 종류 (0 은 상수)
        self._inputs = {}           # 신호 이름 → [임시 id, ...]
        self._outputs = []          # (이름, 임시 id)
        self._constraints = []      # (A, B, C) 임시 id 기준
        self._steps = []            # (대상 임시 id, 계산 함수)
        self._checks = []           # (제약 인덱스, 설명)

    def _new_wire(self, kind):
        self._kinds.append(kind)
        return len(self._kinds) - 1

    # ── 신호 선언 ──

    def input(self, name, size=1, public=False):
        """입력 신호 선언. size 개의 와이어 id 리스트를 돌려준다."""
        if name in self._inputs:
            raise ValueError(f"이미 선언된 신호입니다: {name}")
        if size < 1:
            raise ValueError("신호 크기는 1 이상이어야 합니다")
        kind = PUBLIC if public else PRIVATE
        wires = [self._new_wire(kind) for _ in range(size)]
        self._inputs[name] = wires
        return wires

    def output(self, name, lc):
        """공개 출력 신호 out = lc 를 선언한다."""
        lc = as_lc(lc)
        wire = self._new_wire(OUTPUT)
        self._outputs.append((name, wire))
        self._constraints.append((lc, {ONE: 1}, {wire: 1}))
        self._steps.append((wire, lambda w, lc=lc: self._eval(lc, w)))
        return wire

    # ── 제약 ──

    def mul(self, a, b):
        """내부 와이어 c = a·b 와 제약 a * b = c 를 추가한다."""
        a, b = as_lc(a), as_lc(b)
        wire = self._new_wire(INTERNAL)
        self._constraints.append((a, b, {wire: 1}))
        self._steps.append(
            (wire, lambda w, a=a, b=b: self._eval(a, w) * self._eval(b, w))
        )
        return wire

    def assert_mul(self, a, b, c, label=None):
        """제약 a * b = c 만 추가한다 (새 와이어 없음)."""
        self._checks.append((len(self._constraints), label))
        self._constraints.append((as_lc(a), as_lc(b), as_lc(c)))

    def assert_equal(self, a, b, label=None):
        """제약 (a - b) * 1 = 0."""
        diff = as_lc(a)
        for wire, coeff in as_lc(b).items():
            diff[wire] = diff.get(wire, 0) - coeff
        self.assert_mul(diff, {ONE: 1}, {}, label=label)

    def _eval(self, lc, values):
        return sum(coeff * values[wire] for wire, coeff in lc.items()) % self.prime

    # ── 컴파일 ──

    def compile(self):
        """(R1CS, PythonWitnessCalculator) 를 만든다."""
        ordered = [ONE]
        counts = {}
        for kind in _ORDER:
            wires = [i for i, k in enumerate(self._kinds) if k == kind]
            counts[kind] = len(wires)
            ordered.extend(wires)
        # 임시 id → 최종 id
        final = {tmp: idx for idx, tmp in enumerate(ordered)}

        def remap(lc):
            return {final[wire]: coeff for wire, coeff in lc.items()}

        constraints = [
            (remap(a), remap(b), remap(c)) for a, b, c in self._constraints
        ]
        r1cs = R1CS(
            prime=self.prime,
            n_wires=len(ordered),
            n_pub_out=counts[OUTPUT],
            n_pub_in=counts[PUBLIC],
            n_prv_in=counts[PRIVATE],
            constraints=constraints,
        )
        calculator = PythonWitnessCalculator(
            prime=self.prime,
            inputs={name: list(wires) for name, wires in self._inputs.items()},
            steps=list(self._steps),
            checks=list(self._checks),
            constraints=list(self._constraints),
            order=ordered,
        )
        return r1cs, calculator


class PythonWitnessCalculator:
    """Circuit.compile() 이 만드는 위트니스 계산기."""

    def __init__(self, prime, inputs, steps, checks, constraints, order):
        self.prime = prime
        self._inputs = inputs
        self._steps = steps
        self._checks = checks
        self._constraints = constraints
        self._order = order

    @property
    def witness_size(self):
        return len(self._order)

    def input_signals(self):
        """{신호 이름: 원소 개수}"""
        return {name: len(wires) for name, wires in self._inputs.items()}

    def calculate(self, assignment):
        """필드 할당 맵 → 위트니스 (최종 와이어 순서의 int 리스트).

        Raises:
            WitnessError: 신호 이름/개수 불일치, 누락, assert 위반
        """
        values = [0] * len(self._order)
        values[ONE] = 1
        for name, elements in assignment.items():
            wires = self._inputs.get(name)
            if wires is None:
                raise WitnessError("Signal not found", signal=name)
            if len(elements) != len(wires):
                raise WitnessError(
                    f"신호 원소 개수가 맞지 않습니다: {len(elements)} != {len(wires)}",
                    signal=name,
                )
            for wire, value in zip(wires, elements):
                values[wire] = int(value) % self.prime
        missing = [name for name in self._inputs if name not in assignment]
        if missing:
            raise WitnessError("Not all inputs have been set", signal=missing[0])

        for wire, compute in self._steps:
            values[wire] = compute(values)

        for idx, label in self._checks:
            a, b, c = self._constraints[idx]
            lhs = self._eval(a, values) * self._eval(b, values) % self.prime
            if lhs != self._eval(c, values):
                raise WitnessError("Assert Failed", signal=label)

        return [values[tmp] for tmp in self._order]

    def _eval(self, lc, values):
        return sum(coeff * values[wire] for wire, coeff in lc.items()) % self.prime
