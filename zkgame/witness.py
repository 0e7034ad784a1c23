"""
circom WebAssembly 위트니스 계산기
==================================

circom 2 가 생성한 위트니스 계산 모듈(<circuit>.wasm)을 wasmtime 으로 실행한다.
모듈 내부 바이트코드는 블랙박스이며, circom 의 JS witness_calculator 와 같은
호출 규약으로만 다룬다.

**호출 규약**:
  1. init(sanity_check)
  2. 입력 신호마다 FNV-1a 64비트 해시 (hMSB, hLSB) 로 크기 조회
       getInputSignalSize(hMSB, hLSB) → 원소 수 (없으면 음수)
  3. 원소마다 공유 메모리에 32비트 limb 를 little-endian 으로 쓰고
       writeSharedRWMemory(j, limb_j)
       setInputSignal(hMSB, hLSB, i)
  4. 모든 입력이 설정되면 getWitness(i) → readSharedRWMemory(j) 로 읽는다.

**호스트 import** (모듈 "runtime"):
  exceptionHandler(code)   오류 코드 → WitnessError
  printErrorMessage()      getMessageChar() 로 메시지를 모은다
  writeBufferMessage()     로그 출력 (log 함수)
  showSharedRWMemory()     공유 메모리 덤프 (디버그)

Module 은 한 번만 컴파일하고, 호출마다 새 Store/인스턴스를 만든다.
따라서 여러 스레드가 같은 계산기를 동시에 써도 상태를 공유하지 않는다.
"""

import logging

from wasmtime import Engine, FuncType, Linker, Module, Store, Trap, ValType, WasmtimeError

from zkgame.errors import ConfigurationError, WitnessError
from zkgame.serializers import read_source


logger = logging.getLogger(__name__)

FNV_OFFSET = 0xCBF29CE484222325
FNV_PRIME = 0x100000001B3
MASK64 = (1 << 64) - 1
MASK32 = (1 << 32) - 1

ERROR_MESSAGES = {
    1: "Signal not found",
    2: "Too many signals set",
    3: "Signal already set",
    4: "Assert Failed",
    5: "Not enough memory",
    6: "Input signal array access exceeds the size",
}


def fnv_hash(name):
    """신호 이름의 FNV-1a 64비트 해시 → (상위 32비트, 하위 32비트)."""
    h = FNV_OFFSET
    for byte in name.encode("utf-8"):
        h ^= byte
        h = (h * FNV_PRIME) & MASK64
    return h >> 32, h & MASK32


def _i32(value):
    """u32 → wasm i32 인자 (부호 있는 표현)."""
    value &= MASK32
    return value - (1 << 32) if value >= (1 << 31) else value


def _limbs_to_int(limbs):
    value = 0
    for limb in reversed(limbs):
        value = (value << 32) | (limb & MASK32)
    return value


class _Session:
    """인스턴스 하나에 대한 호출 세션. calculate() 한 번의 수명."""

    def __init__(self, engine, module):
        self.store = Store(engine)
        self.error_lines = []
        self.message_buffer = []
        self.current_signal = None

        linker = Linker(engine)
        i32 = ValType.i32()
        linker.define_func("runtime", "exceptionHandler",
                           FuncType([i32], []), self._on_exception)
        linker.define_func("runtime", "printErrorMessage",
                           FuncType([], []), self._on_error_message)
        linker.define_func("runtime", "writeBufferMessage",
                           FuncType([], []), self._on_buffer_message)
        linker.define_func("runtime", "showSharedRWMemory",
                           FuncType([], []), self._on_show_memory)
        instance = linker.instantiate(self.store, module)
        self.exports = instance.exports(self.store)
        self.n32 = self.call("getFieldNumLen32")

    def call(self, name, *args):
        return self.exports[name](self.store, *args)

    def has(self, name):
        return self.exports.get(name) is not None

    # ── 공유 메모리 ──

    def read_shared(self):
        return _limbs_to_int(
            [self.call("readSharedRWMemory", j) for j in range(self.n32)]
        )

    def write_shared(self, value):
        for j in range(self.n32):
            self.call("writeSharedRWMemory", j, _i32(value >> (32 * j)))

    def get_message(self):
        chars = []
        while True:
            code = self.call("getMessageChar")
            if code == 0:
                break
            chars.append(chr(code))
        return "".join(chars)

    # ── 호스트 콜백 ──

    def _on_exception(self, code):
        message = ERROR_MESSAGES.get(code, "Unknown error")
        if self.error_lines:
            message = f"{message}: {' / '.join(self.error_lines)}"
        raise WitnessError(message, signal=self.current_signal)

    def _on_error_message(self):
        self.error_lines.append(self.get_message())

    def _on_buffer_message(self):
        msg = self.get_message()
        # 빈 메시지는 줄 바꿈을 뜻한다
        if msg == "":
            logger.info("circuit log: %s", "".join(self.message_buffer))
            self.message_buffer = []
        else:
            if self.message_buffer:
                self.message_buffer.append(" ")
            self.message_buffer.append(msg)

    def _on_show_memory(self):
        logger.debug("shared RW memory: %d", self.read_shared())


class WasmWitnessCalculator:
    """circom 2 위트니스 모듈 래퍼.

    보통 from_source() 로 만든다.

    Args:
        module: 컴파일된 wasmtime Module
        engine: module 을 컴파일한 Engine

    속성:
        prime: 모듈이 선언한 스칼라 필드 위수
        witness_size: 위트니스 길이 (와이어 수)
        input_size: 설정해야 하는 입력 원소 총 개수
        version: circom 버전 (major, minor, patch). 모듈이 내보내지 않으면 None
    """

    def __init__(self, module, engine):
        self._engine = engine
        self._module = module
        try:
            session = _Session(self._engine, self._module)
            self.n32 = session.n32
            session.call("getRawPrime")
            self.prime = session.read_shared()
            self.witness_size = session.call("getWitnessSize")
            self.input_size = session.call("getInputSize")
            self.version = None
            if session.has("getVersion"):
                self.version = tuple(
                    session.call(name) if session.has(name) else 0
                    for name in ("getVersion", "getMinorVersion", "getPatchVersion")
                )
        except (Trap, WasmtimeError, KeyError) as exc:
            raise ConfigurationError(f"위트니스 모듈을 초기화할 수 없습니다: {exc}") from exc
        logger.debug(
            "wasm witness module loaded: prime bits=%d, witness=%d, inputs=%d",
            self.prime.bit_length(), self.witness_size, self.input_size,
        )

    @classmethod
    def from_source(cls, source):
        """bytes/경로 (또는 WAT 문자열) 에서 모듈을 컴파일한다.

        Raises:
            ConfigurationError: 읽기 또는 컴파일 실패
        """
        engine = Engine()
        try:
            if isinstance(source, str) and source.lstrip().startswith("("):
                module = Module(engine, source)
            else:
                module = Module(engine, read_source(source))
        except (OSError, WasmtimeError) as exc:
            raise ConfigurationError(f"위트니스 모듈을 읽을 수 없습니다: {exc}") from exc
        return cls(module, engine=engine)

    def calculate(self, assignment, sanity_check=False):
        """필드 할당 맵 → 위트니스 (int 리스트).

        Raises:
            WitnessError: 신호 누락/개수 불일치/assert 실패 등
        """
        session = _Session(self._engine, self._module)
        try:
            return self._calculate(session, assignment, sanity_check)
        except (Trap, WasmtimeError) as exc:
            raise WitnessError(
                f"위트니스 모듈 실행 실패: {exc}", signal=session.current_signal
            ) from exc

    def _calculate(self, session, assignment, sanity_check):
        session.call("init", 1 if sanity_check else 0)
        counter = 0
        for name, elements in assignment.items():
            session.current_signal = name
            msb, lsb = fnv_hash(name)
            size = session.call("getInputSignalSize", _i32(msb), _i32(lsb))
            if size < 0:
                raise WitnessError("Signal not found", signal=name)
            if len(elements) < size:
                raise WitnessError(
                    f"Not enough values for input signal ({len(elements)} < {size})",
                    signal=name,
                )
            if len(elements) > size:
                raise WitnessError(
                    f"Too many values for input signal ({len(elements)} > {size})",
                    signal=name,
                )
            for i, value in enumerate(elements):
                session.write_shared(int(value) % self.prime)
                session.call("setInputSignal", _i32(msb), _i32(lsb), i)
                counter += 1
        session.current_signal = None

        if counter < self.input_size:
            raise WitnessError(
                f"Not all inputs have been set. Only {counter} out of {self.input_size}"
            )

        witness = []
        for i in range(self.witness_size):
            session.call("getWitness", i)
            witness.append(session.read_shared())
        return witness
