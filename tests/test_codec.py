import pytest

from zkgame.codec import decode_from_chain, encode_for_chain
from zkgame.errors import EncodingError
from zkgame.field import BN254, BLS12_381
from zkgame.groth16 import Proof
from zkgame.inputs import Variant
from zkgame.verifier import verify


def words(*values, width=32):
    return b"".join(v.to_bytes(width, "big") for v in values)


def simple_proof(curve=BN254):
    """곡선 위에 있을 필요 없는 작은 좌표의 증명."""
    return Proof(
        a=curve.g1_from_affine(1, 2),
        b=curve.g2_from_affine((3, 4), (5, 6)),
        c=curve.g1_from_affine(7, 8),
    )


class TestGoldenBytes:
    def test_public_inputs(self):
        public_bytes, _ = encode_for_chain([9, 0x1234], simple_proof())
        assert public_bytes == words(9, 0x1234)
        assert public_bytes[31] == 9
        assert public_bytes[62:64] == b"\x12\x34"

    def test_proof_layout_reverses_g2_components(self):
        """G2 좌표는 (c1, c0) 순서로 쓴다"""
        _, proof_bytes = encode_for_chain([9], simple_proof())
        assert len(proof_bytes) == 256
        assert proof_bytes == words(1, 2, 4, 3, 6, 5, 7, 8)

    def test_generators(self):
        (x0, x1), (y0, y1) = BN254.to_affine(BN254.G2)
        proof = Proof(a=BN254.G1, b=BN254.G2, c=BN254.G1)
        _, proof_bytes = encode_for_chain([], proof)
        assert proof_bytes == words(1, 2, x1, x0, y1, y0, 1, 2)
        assert x0 == 10857046999023057135944570762232829481370756359578518086990519993285655852781

    def test_empty_public_inputs(self):
        public_bytes, _ = encode_for_chain([], simple_proof())
        assert public_bytes == b""

    def test_infinity_is_zero(self):
        proof = Proof(a=BN254.Z1, b=BN254.Z2, c=BN254.G1)
        _, proof_bytes = encode_for_chain([], proof)
        assert proof_bytes[:192] == bytes(192)

    def test_projective_points_normalized(self):
        """사영 좌표 표현이 달라도 같은 아핀 좌표로 인코딩된다"""
        doubled = BN254.ec_add(BN254.G1, BN254.G1)
        proof = Proof(a=doubled, b=BN254.G2, c=BN254.ec_mul(BN254.G1, 2))
        _, proof_bytes = encode_for_chain([], proof)
        assert proof_bytes[:64] == proof_bytes[192:]


class TestPublicInputValidation:
    def test_out_of_range(self):
        with pytest.raises(EncodingError):
            encode_for_chain([BN254.order], simple_proof())

    def test_negative(self):
        with pytest.raises(EncodingError):
            encode_for_chain([-1], simple_proof())


class TestBLS12381:
    def test_word_width(self):
        public_bytes, proof_bytes = encode_for_chain([9], simple_proof(BLS12_381), BLS12_381)
        assert len(public_bytes) == 32
        assert len(proof_bytes) == 8 * 64
        assert proof_bytes == words(1, 2, 4, 3, 6, 5, 7, 8, width=64)

    def test_generator_fits(self):
        proof = Proof(a=BLS12_381.G1, b=BLS12_381.G2, c=BLS12_381.G1)
        _, proof_bytes = encode_for_chain([], proof, BLS12_381)
        x = BLS12_381.to_affine(BLS12_381.G1)[0]
        assert int.from_bytes(proof_bytes[:64], "big") == x
        # 상위 16 바이트는 0
        assert proof_bytes[:16] == bytes(16)


class TestDecode:
    def test_inverse(self):
        public_bytes, proof_bytes = encode_for_chain([9, 0x1234], simple_proof())
        public_inputs, proof = decode_from_chain(public_bytes, proof_bytes)
        assert public_inputs == [9, 0x1234]
        assert BN254.to_affine(proof.b) == ((3, 4), (5, 6))
        assert BN254.to_affine(proof.c) == (7, 8)

    def test_zero_words_are_infinity(self):
        _, proof = decode_from_chain(b"", bytes(256))
        assert BN254.is_inf(proof.a)
        assert BN254.is_inf(proof.b)

    def test_bad_length(self):
        with pytest.raises(EncodingError):
            decode_from_chain(b"\x00" * 31, bytes(256))
        with pytest.raises(EncodingError):
            decode_from_chain(b"", bytes(255))

    def test_coordinate_out_of_field(self):
        data = bytearray(words(1, 2, 4, 3, 6, 5, 7, 8))
        data[:32] = BN254.field_modulus.to_bytes(32, "big")
        with pytest.raises(EncodingError):
            decode_from_chain(b"", bytes(data))


class TestChainPayloadVerifies:
    """온체인 검증기가 받는 바이트를 그대로 디코딩해 페어링 검증한다."""

    def test_grid_payload(self, registry, grid_proof):
        public_bytes, proof_bytes = encode_for_chain(*grid_proof)
        public_inputs, proof = decode_from_chain(public_bytes, proof_bytes)
        assert public_inputs == grid_proof[0]
        assert verify(registry, Variant.GRID_MOVEMENT, public_inputs, proof)

    def test_unreversed_g2_fails(self, registry, grid_proof):
        """G2 성분을 뒤집지 않은 페이로드는 검증되지 않는다"""
        public_bytes, proof_bytes = encode_for_chain(*grid_proof)
        w = [proof_bytes[i:i + 32] for i in range(0, 256, 32)]
        swapped = b"".join([w[0], w[1], w[3], w[2], w[5], w[4], w[6], w[7]])
        public_inputs, proof = decode_from_chain(public_bytes, swapped)
        assert not verify(registry, Variant.GRID_MOVEMENT, public_inputs, proof)

    @pytest.mark.parametrize("word", [2, 3, 4, 5, 6, 7])
    def test_single_bit_flip_fails(self, registry, grid_proof, word):
        """B, C 좌표 워드의 비트 하나만 바뀌어도 검증되지 않는다"""
        public_bytes, proof_bytes = encode_for_chain(*grid_proof)
        flipped = bytearray(proof_bytes)
        flipped[word * 32 + 31] ^= 0x01
        public_inputs, proof = decode_from_chain(public_bytes, bytes(flipped))
        assert not verify(registry, Variant.GRID_MOVEMENT, public_inputs, proof)
