from zkgame.groth16.keys import (
    ProvingKey,
    VerifyingKey,
    dump_proving_key,
    load_proving_key,
)
from zkgame.groth16.proving import Proof, prove
from zkgame.groth16.setup import setup
from zkgame.groth16.verifying import verify
