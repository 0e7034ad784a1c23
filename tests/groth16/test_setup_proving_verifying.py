import json
import random

import pytest

from zkgame.field import BN254, BLS12_381
from zkgame.groth16 import (
    Proof,
    ProvingKey,
    VerifyingKey,
    dump_proving_key,
    load_proving_key,
    prove,
    setup,
    verify,
)
from zkgame.groth16.proving import compute_h
from zkgame.groth16.setup import domain_size, lagrange_at, qap_at, qap_constraints

from circuits import square_circuit


@pytest.fixture(scope="module")
def square():
    r1cs, calc = square_circuit()
    pk = setup(r1cs, BN254, rng=random.Random(3926))
    witness = calc.calculate({"x": [3]})
    return r1cs, pk, witness


@pytest.fixture(scope="module")
def square_proof(square):
    r1cs, pk, witness = square
    return prove(pk, r1cs, witness, rng=random.Random(4565))


class TestQAP:
    def test_domain_size(self, square):
        r1cs, pk, _ = square
        # 제약 2 개 + 공개 입력 결합 2 개 → 4
        assert domain_size(r1cs) == 4
        assert pk.domain_size == 4

    def test_binding_constraints(self, square):
        r1cs, _, _ = square
        constraints = qap_constraints(r1cs)
        assert constraints[-2:] == [({0: 1}, {}, {}), ({1: 1}, {}, {})]

    def test_lagrange_partition_of_unity(self):
        """Σ Lⱼ(τ) = 1"""
        fr = BN254.FR
        tau = fr(123456789)
        assert sum(lagrange_at(BN254, 8, tau), fr(0)) == fr(1)

    def test_qap_identity_at_tau(self, square):
        """u(τ)·v(τ) - w(τ) = h(τ)·Z(τ)"""
        r1cs, _, witness = square
        fr = BN254.FR
        m = domain_size(r1cs)
        tau = fr(987654321)
        u, v, w = qap_at(r1cs, BN254, m, tau)
        a = sum((u[i] * x for i, x in enumerate(witness)), fr(0))
        b = sum((v[i] * x for i, x in enumerate(witness)), fr(0))
        c = sum((w[i] * x for i, x in enumerate(witness)), fr(0))
        h = compute_h(r1cs, witness, m, BN254)
        h_tau = sum((coeff * tau ** k for k, coeff in enumerate(h)), fr(0))
        assert a * b - c == h_tau * (tau ** m - fr(1))

    def test_h_rejects_bad_witness(self, square):
        r1cs, _, witness = square
        bad = list(witness)
        bad[3] += 1
        with pytest.raises(ValueError):
            compute_h(r1cs, bad, domain_size(r1cs), BN254)


class TestProvingKey:
    def test_shape(self, square):
        _, pk, _ = square
        pk.check_shape()
        assert len(pk.ic) == 2
        assert len(pk.c_query) == 2
        assert len(pk.h_query) == 3

    def test_json_round_trip(self, square, square_proof):
        r1cs, pk, witness = square
        loaded = load_proving_key(dump_proving_key(pk).encode())
        assert isinstance(loaded, ProvingKey)
        assert BN254.ec_eq(loaded.delta2, pk.delta2)
        assert verify(loaded.verifying_key, [17], square_proof)

    def test_from_json_rejects_wrong_shape(self, square):
        _, pk, _ = square
        data = pk.to_json()
        data["H"] = data["H"][:-1]
        with pytest.raises(ValueError):
            ProvingKey.from_json(data)

    def test_snarkjs_vk(self, square):
        _, pk, _ = square
        data = pk.verifying_key.to_snarkjs()
        assert data["protocol"] == "groth16"
        assert data["curve"] == "bn128"
        assert data["nPublic"] == 1
        assert data["vk_alpha_1"][2] == "1"
        vk = VerifyingKey.from_snarkjs(json.loads(json.dumps(data)))
        assert BN254.ec_eq(vk.alpha1, pk.alpha1)
        assert len(vk.ic) == 2


class TestProveVerify:
    def test_valid(self, square, square_proof):
        _, pk, _ = square
        assert verify(pk.verifying_key, [17], square_proof)

    def test_proof_points_on_curve(self, square_proof):
        assert BN254.is_on_curve_g1(square_proof.a)
        assert BN254.is_on_curve_g2(square_proof.b)
        assert BN254.is_on_curve_g1(square_proof.c)

    def test_wrong_public_input(self, square, square_proof):
        _, pk, _ = square
        assert not verify(pk.verifying_key, [18], square_proof)

    def test_wrong_public_count(self, square, square_proof):
        _, pk, _ = square
        assert not verify(pk.verifying_key, [], square_proof)
        assert not verify(pk.verifying_key, [17, 0], square_proof)

    def test_public_input_out_of_range(self, square, square_proof):
        _, pk, _ = square
        assert not verify(pk.verifying_key, [17 + BN254.order], square_proof)

    def test_swapped_points(self, square, square_proof):
        _, pk, _ = square
        swapped = Proof(a=square_proof.c, b=square_proof.b, c=square_proof.a)
        assert not verify(pk.verifying_key, [17], swapped)

    def test_off_curve_point(self, square, square_proof):
        _, pk, _ = square
        bad = Proof(a=BN254.g1_from_affine(1, 3), b=square_proof.b, c=square_proof.c)
        assert not verify(pk.verifying_key, [17], bad)

    def test_randomized(self, square, square_proof):
        """같은 위트니스라도 난수가 다르면 증명이 다르다"""
        r1cs, pk, witness = square
        other = prove(pk, r1cs, witness, rng=random.Random(1))
        assert not BN254.ec_eq(other.a, square_proof.a)
        assert verify(pk.verifying_key, [17], other)

    def test_wrong_witness_length(self, square):
        r1cs, pk, witness = square
        with pytest.raises(ValueError):
            prove(pk, r1cs, witness[:-1], rng=random.Random(1))

    def test_curve_mismatch(self):
        r1cs, _ = square_circuit()
        with pytest.raises(ValueError):
            setup(r1cs, BLS12_381, rng=random.Random(1))


class TestBLS12381:
    def test_prove_verify(self):
        r1cs, calc = square_circuit(BLS12_381.order)
        pk = setup(r1cs, BLS12_381, rng=random.Random(11))
        proof = prove(pk, r1cs, calc.calculate({"x": [5]}), rng=random.Random(12))
        assert verify(pk.verifying_key, [35], proof)
        assert not verify(pk.verifying_key, [36], proof)
