"""
zkgame: 게임 상태 → Groth16 증명 → 온체인 ABI 페이로드
"""

from zkgame.codec import decode_from_chain, encode_for_chain
from zkgame.errors import (
    ConfigurationError,
    EncodingError,
    InputConversionError,
    ProvingError,
    WitnessError,
    ZkGameError,
)
from zkgame.field import BLS12_381, BN254, get_curve
from zkgame.groth16 import Proof
from zkgame.inputs import (
    GridMovementInput,
    MatchPuzzleInput,
    Variant,
    normalize,
    parse_input,
)
from zkgame.prover import prove
from zkgame.registry import CircuitArtifacts, CircuitConfig, CircuitRegistry
from zkgame.verifier import verify
