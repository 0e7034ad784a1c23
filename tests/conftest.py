import copy
import os
import random
import sys

import pytest

# 프로젝트 루트와 tests 디렉터리를 sys.path에 추가
tests_dir = os.path.abspath(os.path.dirname(__file__))
project_root = os.path.dirname(tests_dir)
for path in (project_root, tests_dir):
    if path not in sys.path:
        sys.path.insert(0, path)

from zkgame.field import BN254
from zkgame.groth16 import setup
from zkgame.inputs import Variant, parse_input
from zkgame.prover import prove
from zkgame.registry import CircuitArtifacts, CircuitRegistry

from circuits import grid_movement_circuit, match_puzzle_circuit


# ── 테스트 상수 ──
SETUP_SEED = 1357
PROVER_SEED = 4106

GRID_INPUT = {
    "board": [
        [0, 0, 0, 0, 0, 0, 1, 0, 1, 0, 0, 0, 0, 0, 0, 0],
        [0, 2, 4, 6, 0, 1, 2, 4, 0, 0, 0, 5, 0, 0, 1, 3],
    ],
    "packed_board": [35218731827200, 2515675923718842875939],
    "packed_dir": 311800516178808354245949615821275955,
    "direction": [
        0, 3, 3, 0, 0, 0, 3, 0, 3, 3, 0, 3, 3, 0, 3, 0, 2, 0, 3, 3,
        0, 2, 0, 3, 0, 0, 3, 0, 2, 0, 3, 3, 0, 0, 3, 0, 3, 3, 0, 3,
        3, 3, 3, 3, 0, 0, 3, 2, 3, 3, 0, 3, 3, 0, 0, 3, 0, 3, 0, 3,
    ],
    "address": "6789",
    "step": 0,
    "step_after": 60,
    "nonce": "456",
}

MATCH_INPUT = {
    "from_seed": "16938986816621673014406792984620325385232245869428348395053494538472250137768",
    "to_seed": "18809534718515133310982073931212903285152506282303066166330452480033125747936",
    "from_board": [
        [2, 5, 2, 3, 3, 4],
        [4, 4, 5, 1, 4, 3],
        [1, 2, 4, 5, 2, 3],
        [1, 4, 2, 3, 5, 1],
        [2, 3, 2, 1, 5, 3],
        [1, 3, 3, 2, 2, 5],
    ],
    "to_board": [
        [5, 2, 2, 3, 4, 5],
        [4, 2, 2, 5, 1, 1],
        [2, 3, 5, 2, 3, 4],
        [5, 1, 2, 2, 4, 3],
        [2, 5, 3, 3, 2, 1],
        [3, 2, 2, 1, 4, 2],
    ],
    "step": 0,
    "step_after": 19,
    "from_board_packed": "103361923205923181585452685177869704657870687575312453",
    "to_board_packed": "242543694228480640306188505874996485086797052824847490",
    "score_packed": 387165653630999,
    "pos_packed": "407069173718415000365340272682837370791232631116922880",
    "item_packed": "13803492696795028375627839078134363494882806125467409972850288729522176",
    "moves": [
        [2, 1, 2], [0, 0, 0], [0, 0, 0], [0, 0, 0], [4, 0, 2],
        [0, 0, 0], [1, 3, 1], [3, 4, 2], [2, 4, 2], [1, 5, 1],
        [0, 0, 0], [0, 0, 0], [0, 2, 1], [2, 2, 2], [0, 1, 1],
        [0, 0, 0], [0, 3, 1], [0, 1, 1], [0, 3, 1], [0, 3, 2],
        [0, 3, 1], [0, 1, 1], [0, 2, 1], [2, 2, 2], [0, 0, 0],
        [0, 2, 1], [0, 5, 1], [0, 0, 0], [0, 0, 0], [0, 0, 0],
    ],
    "arg": [0] * 30,
}


@pytest.fixture
def grid_input():
    """격자 이동 게임 입력 (테스트마다 새 복사본)."""
    return copy.deepcopy(GRID_INPUT)


@pytest.fixture(scope="session")
def grid_payload():
    """변경하지 않는 테스트끼리 공유하는 격자 이동 입력."""
    return copy.deepcopy(GRID_INPUT)


@pytest.fixture
def match_input():
    return copy.deepcopy(MATCH_INPUT)


@pytest.fixture(scope="session")
def grid_circuit():
    """(R1CS, 위트니스 계산기)"""
    return grid_movement_circuit()


@pytest.fixture(scope="session")
def match_circuit():
    return match_puzzle_circuit()


@pytest.fixture(scope="session")
def grid_key(grid_circuit):
    r1cs, _ = grid_circuit
    return setup(r1cs, BN254, rng=random.Random(SETUP_SEED))


@pytest.fixture(scope="session")
def match_key(match_circuit):
    r1cs, _ = match_circuit
    return setup(r1cs, BN254, rng=random.Random(SETUP_SEED + 1))


@pytest.fixture(scope="session")
def artifacts(grid_circuit, grid_key, match_circuit, match_key):
    """variant → 이미 로드된 객체로 채운 CircuitArtifacts"""
    grid_r1cs, grid_calc = grid_circuit
    match_r1cs, match_calc = match_circuit
    return {
        Variant.GRID_MOVEMENT: CircuitArtifacts(grid_calc, grid_r1cs, grid_key),
        Variant.MATCH_PUZZLE: CircuitArtifacts(match_calc, match_r1cs, match_key),
    }


@pytest.fixture(scope="session")
def registry(artifacts):
    """두 variant 가 모두 로드된 레지스트리."""
    reg = CircuitRegistry(artifacts)
    reg.initialize()
    return reg


@pytest.fixture(scope="session")
def grid_proof(registry):
    """격자 이동 입력에 대한 (공개 입력, 증명)."""
    record = parse_input(Variant.GRID_MOVEMENT, GRID_INPUT)
    return prove(registry, Variant.GRID_MOVEMENT, record,
                 rng=random.Random(PROVER_SEED))


@pytest.fixture(scope="session")
def match_proof(registry):
    record = parse_input(Variant.MATCH_PUZZLE, MATCH_INPUT)
    return prove(registry, Variant.MATCH_PUZZLE, record,
                 rng=random.Random(PROVER_SEED))
