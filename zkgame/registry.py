"""
회로 설정 레지스트리 (Circuit Configuration Registry)
=====================================================

variant 별 회로 아티팩트(위트니스 모듈, R1CS, proving key)를 프로세스 수명 동안
한 번만 로드해서 보관한다.

**수명 주기**:
  미등록 ──register()──▶ 등록됨 ──initialize()/get()──▶ 로드 완료 (읽기 전용)
                                                  └──▶ 로드 실패 (실패가 캐시됨)

  - 로드는 threading.Lock 으로 보호되는 double-checked 1회 실행이다.
    여러 스레드가 동시에 get() 해도 로드는 정확히 한 번 일어난다.
  - 로드 결과는 MappingProxyType 으로 설치되며 이후 읽기는 잠금 없이 한다.
  - all-or-nothing: 한 variant 라도 실패하면 어떤 variant 도 사용할 수 없다.
    실패는 캐시되어 이후 모든 호출에서 같은 ConfigurationError 가 다시 발생한다.
    프로세스 안에서 자동 재시도는 없다.
  - 로드 후 register() 는 아무 일도 하지 않고 False 를 돌려준다.

**아티팩트**:
  CircuitArtifacts(wasm, r1cs, zkey) 의 각 항목은
  bytes, 파일 경로, 또는 이미 로드된 객체(위트니스 계산기, R1CS, ProvingKey) 다.

사용 예시:
    >>> registry = CircuitRegistry.from_directory("artifacts")
    >>> registry.initialize()
    >>> config = registry.get("grid_movement")
"""

import logging
import os
import threading
import time
from dataclasses import dataclass
from types import MappingProxyType

from zkgame.errors import ConfigurationError, InputConversionError
from zkgame.field import BN254, get_curve
from zkgame.groth16.keys import ProvingKey, load_proving_key
from zkgame.inputs import Variant, signal_table, to_variant
from zkgame.r1cs import R1CS, read_r1cs
from zkgame.witness import WasmWitnessCalculator


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CircuitArtifacts:
    wasm: object
    r1cs: object
    zkey: object


@dataclass(frozen=True)
class CircuitConfig:
    """로드가 끝난 회로 하나."""
    variant: Variant
    witness_calculator: object
    r1cs: R1CS
    proving_key: ProvingKey

    @property
    def verifying_key(self):
        return self.proving_key.verifying_key


def _load_witness_calculator(source):
    if hasattr(source, "calculate"):
        return source
    return WasmWitnessCalculator.from_source(source)


def load_config(variant, artifacts, curve=BN254):
    """아티팩트 → CircuitConfig. 교차 검사까지 수행한다.

    Raises:
        ConfigurationError: 읽기/파싱 실패 또는 아티팩트 간 불일치
    """
    def fail(message):
        return ConfigurationError(message, variant=variant)

    try:
        calculator = _load_witness_calculator(artifacts.wasm)
        r1cs = artifacts.r1cs if isinstance(artifacts.r1cs, R1CS) else read_r1cs(artifacts.r1cs)
        if isinstance(artifacts.zkey, ProvingKey):
            pk = artifacts.zkey
        else:
            pk = load_proving_key(artifacts.zkey)
    except ConfigurationError as exc:
        raise fail(exc.message) from exc
    except (OSError, ValueError, KeyError, TypeError, AttributeError, ArithmeticError) as exc:
        raise fail(f"아티팩트를 읽을 수 없습니다: {exc}") from exc

    if r1cs.prime != curve.order:
        raise fail(f"R1CS 필드가 {curve.name} 스칼라 필드와 다릅니다")
    if pk.curve.name != curve.name:
        raise fail(f"proving key 곡선 {pk.curve.name} 이 {curve.name} 과 다릅니다")
    if pk.n_vars != r1cs.n_wires or pk.n_public != r1cs.n_public:
        raise fail(
            f"proving key (wires={pk.n_vars}, public={pk.n_public}) 가 "
            f"R1CS (wires={r1cs.n_wires}, public={r1cs.n_public}) 와 맞지 않습니다"
        )
    if calculator.prime != curve.order:
        raise fail("위트니스 모듈의 필드가 곡선과 다릅니다")
    if calculator.witness_size != r1cs.n_wires:
        raise fail(
            f"위트니스 크기 {calculator.witness_size} 가 와이어 수 {r1cs.n_wires} 와 다릅니다"
        )
    input_signals = getattr(calculator, "input_signals", None)
    if input_signals is not None:
        declared = set(input_signals())
        expected = {rule.signal for rule in signal_table(variant)}
        if declared != expected:
            raise fail(
                f"회로 입력 신호가 variant 신호 테이블과 다릅니다: "
                f"{sorted(declared ^ expected)}"
            )
    return CircuitConfig(variant=variant, witness_calculator=calculator,
                         r1cs=r1cs, proving_key=pk)


class CircuitRegistry:
    """variant → CircuitConfig 의 1회 로드 레지스트리.

    Args:
        sources: {Variant: CircuitArtifacts}
        curve: 곡선 (이름 또는 Curve). 모든 회로가 같은 곡선을 쓴다.
    """

    def __init__(self, sources=None, curve=BN254):
        self.curve = get_curve(curve)
        self._sources = {
            to_variant(v): artifacts for v, artifacts in (sources or {}).items()
        }
        self._lock = threading.Lock()
        self._configs = None
        self._failure = None

    @classmethod
    def from_directory(cls, path, variants=None, curve=BN254):
        """<variant>.wasm, <variant>.r1cs, <variant>.zkey.json 을 찾아 등록한다.

        파일 존재 여부는 로드할 때 확인한다.
        """
        variants = list(Variant) if variants is None else [to_variant(v) for v in variants]
        sources = {}
        for variant in variants:
            base = os.path.join(path, variant.value)
            sources[variant] = CircuitArtifacts(
                wasm=base + ".wasm",
                r1cs=base + ".r1cs",
                zkey=base + ".zkey.json",
            )
        return cls(sources, curve=curve)

    @property
    def loaded(self):
        return self._configs is not None

    @property
    def failed(self):
        return self._failure is not None

    def variants(self):
        return list(self._sources)

    def register(self, variant, wasm, r1cs, zkey):
        """로드 전에만 아티팩트를 등록한다.

        Returns:
            bool: 등록했으면 True, 이미 로드(또는 실패)되어 무시했으면 False
        """
        variant = to_variant(variant)
        with self._lock:
            if self._configs is not None or self._failure is not None:
                logger.warning(
                    "circuit registry already initialized; ignoring registration of %s",
                    variant.value,
                )
                return False
            self._sources[variant] = CircuitArtifacts(wasm=wasm, r1cs=r1cs, zkey=zkey)
            return True

    def initialize(self, variant=None, wasm=None, r1cs=None, zkey=None):
        """(선택적으로 등록한 뒤) 모든 회로를 로드한다. 반복 호출은 no-op."""
        if variant is not None:
            self.register(variant, wasm, r1cs, zkey)
        self._ensure_loaded()

    def get(self, variant):
        """variant 의 CircuitConfig. 필요하면 로드를 일으킨다.

        Raises:
            ConfigurationError: 로드 실패, 또는 등록되지 않은 variant
        """
        try:
            variant = to_variant(variant)
        except InputConversionError as exc:
            raise ConfigurationError(exc.message) from exc
        configs = self._ensure_loaded()
        try:
            return configs[variant]
        except KeyError:
            raise ConfigurationError("등록되지 않은 회로입니다", variant=variant) from None

    def _ensure_loaded(self):
        configs = self._configs
        if configs is not None:
            return configs
        with self._lock:
            if self._configs is not None:
                return self._configs
            if self._failure is not None:
                raise self._failure
            if not self._sources:
                raise ConfigurationError("등록된 회로가 없습니다")

            start = time.perf_counter()
            try:
                loaded = {
                    variant: load_config(variant, artifacts, self.curve)
                    for variant, artifacts in self._sources.items()
                }
            except ConfigurationError as exc:
                self._failure = exc
                logger.error("circuit registry load failed: %s", exc)
                raise
            except Exception as exc:
                # 예상하지 못한 로더 오류도 실패로 캐시한다
                self._failure = ConfigurationError(f"회로 로드 실패: {exc!r}")
                logger.exception("circuit registry load failed")
                raise self._failure from exc
            self._configs = MappingProxyType(loaded)
            logger.info(
                "circuit registry loaded: curve=%s variants=%s (%.2fs)",
                self.curve.name,
                ",".join(v.value for v in loaded),
                time.perf_counter() - start,
            )
            return self._configs
