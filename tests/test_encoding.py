import pytest

from zkgame.encoding import encode_decimal, encode_field, encode_int, encode_uint
from zkgame.errors import EncodingError
from zkgame.field import BN254, BLS12_381

R = BN254.order


class TestEncodeUint:
    def test_basic(self):
        assert encode_uint(0, 8, "step", R) == 0
        assert encode_uint(255, 8, "step", R) == 255

    def test_u128_max(self):
        assert encode_uint((1 << 128) - 1, 128, "packed_dir", R) == (1 << 128) - 1

    def test_exceeds_width(self):
        with pytest.raises(EncodingError) as exc_info:
            encode_uint(256, 8, "step", R)
        assert exc_info.value.field == "step"

    def test_negative(self):
        with pytest.raises(EncodingError):
            encode_uint(-1, 8, "step", R)

    def test_bool_rejected(self):
        """bool 은 정수로 받지 않는다"""
        with pytest.raises(EncodingError):
            encode_uint(True, 8, "step", R)

    def test_non_int(self):
        with pytest.raises(EncodingError):
            encode_uint("5", 8, "step", R)
        with pytest.raises(EncodingError):
            encode_uint(5.0, 8, "step", R)


class TestEncodeInt:
    def test_negative_maps_to_r_minus(self):
        assert encode_int(-1, 8, "delta", R) == R - 1
        assert encode_int(-128, 8, "delta", R) == R - 128

    def test_positive(self):
        assert encode_int(127, 8, "delta", R) == 127

    def test_range(self):
        with pytest.raises(EncodingError):
            encode_int(128, 8, "delta", R)
        with pytest.raises(EncodingError):
            encode_int(-129, 8, "delta", R)


class TestEncodeDecimal:
    def test_basic(self):
        assert encode_decimal("6789", "address", R) == 6789
        assert encode_decimal("0", "address", R) == 0

    def test_leading_zeros(self):
        assert encode_decimal("000456", "nonce", R) == 456

    def test_max_value(self):
        assert encode_decimal(str(R - 1), "seed", R) == R - 1

    def test_not_reduced(self):
        """r 이상인 값은 mod r 로 축소하지 않고 거부한다"""
        with pytest.raises(EncodingError):
            encode_decimal(str(R), "seed", R)

    def test_depends_on_modulus(self):
        # BLS12-381 의 r 은 BN254 의 r 보다 크다
        assert BLS12_381.order > R
        assert encode_decimal(str(R), "seed", BLS12_381.order) == R

    @pytest.mark.parametrize("text", [
        "", "67a9", "-5", "+5", " 5", "5 ", "0x10", "1_000", "1.5", "²",
    ])
    def test_invalid_literal(self, text):
        with pytest.raises(EncodingError) as exc_info:
            encode_decimal(text, "address", R)
        assert exc_info.value.field == "address"

    def test_non_string(self):
        with pytest.raises(EncodingError):
            encode_decimal(6789, "address", R)


class TestEncodeField:
    def test_reduces(self):
        assert encode_field(R + 5, R) == 5
        assert encode_field(-1, R) == R - 1


class TestEncodingErrorMessage:
    def test_str_contains_field(self):
        err = EncodingError("bad", field="address")
        assert "address" in str(err)
        assert isinstance(err, ValueError)
