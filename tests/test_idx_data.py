"""Tests for the typed IDX scalar."""
import math
import typing

import numpy as np
import pytest

from idxio.errors import UnrecognizedTypeCodeError
from idxio.idx_data import ABSENT, IdxData, IdxType


class TestIdxType:
    """Tests for the element type tag."""

    @pytest.mark.parametrize(
        "code, kind, width",
        [
            (0x08, IdxType.UNSIGNED_BYTE, 1),
            (0x09, IdxType.SIGNED_BYTE, 1),
            (0x0B, IdxType.SHORT, 2),
            (0x0C, IdxType.INT, 4),
            (0x0D, IdxType.FLOAT, 4),
            (0x0E, IdxType.DOUBLE, 8),
        ],
    )
    def test_code_table(self, code, kind, width):
        """Each recognized code maps to its type and element width."""
        assert IdxType.from_code(code) is kind
        assert kind.width == width
        assert kind.dtype.itemsize == width

    @pytest.mark.parametrize("code", [0x00, 0x07, 0x0A, 0x0F, 0xFF])
    def test_unknown_code_rejected(self, code):
        """Codes outside the table are errors, never coerced."""
        with pytest.raises(UnrecognizedTypeCodeError) as excinfo:
            IdxType.from_code(code)
        assert excinfo.value.code == code


class TestAddition:
    """Tests for the variant-aware addition policy."""

    def test_same_variant_sums(self):
        """Adding two scalars of one variant keeps the variant."""
        result = IdxData(IdxType.INT, 40) + IdxData(IdxType.INT, 2)
        assert result == IdxData(IdxType.INT, 42)

    def test_unequal_values_of_same_variant_sum(self):
        """Values need not be equal, only variants."""
        result = IdxData(IdxType.UNSIGNED_BYTE, 3) + IdxData(IdxType.UNSIGNED_BYTE, 4)
        assert result.kind is IdxType.UNSIGNED_BYTE
        assert result.value == 7

    def test_mismatched_variants_give_absent(self):
        """u8(3) + i8(3) is absent, not an error and not 6."""
        result = IdxData(IdxType.UNSIGNED_BYTE, 3) + IdxData(IdxType.SIGNED_BYTE, 3)
        assert result.is_absent
        assert result == ABSENT

    def test_absent_operand_gives_absent(self):
        """Absent on either side gives absent."""
        value = IdxData(IdxType.DOUBLE, 1.5)
        assert (value + ABSENT).is_absent
        assert (ABSENT + value).is_absent
        assert (ABSENT + ABSENT).is_absent

    def test_integer_sum_wraps_to_width(self):
        """Integer sums stay within the variant's width."""
        assert (IdxData(IdxType.UNSIGNED_BYTE, 200) + IdxData(IdxType.UNSIGNED_BYTE, 100)).value == 44
        assert (IdxData(IdxType.SIGNED_BYTE, 127) + IdxData(IdxType.SIGNED_BYTE, 1)).value == -128

    def test_float_sum_is_single_precision(self):
        """FLOAT sums round to 32-bit precision."""
        result = IdxData(IdxType.FLOAT, 0.1) + IdxData(IdxType.FLOAT, 0.2)
        assert result.value == float(np.float32(np.float32(0.1) + np.float32(0.2)))

    def test_non_scalar_operand_unsupported(self):
        """Adding a plain number is a TypeError."""
        with pytest.raises(TypeError):
            IdxData(IdxType.INT, 1) + 1

    def test_reduction_over_object_array(self):
        """numpy reductions use the scalar addition."""
        values = np.array([IdxData(IdxType.SHORT, v) for v in (1, 2, 3)], dtype=object)
        assert values.sum() == IdxData(IdxType.SHORT, 6)


class TestZero:
    """Tests for the additive identity."""

    def test_zero_is_absent(self):
        assert IdxData.zero() is ABSENT
        assert IdxData.zero().is_zero()

    def test_numeric_zero_is_not_identity(self):
        """Only the absent variant counts as zero."""
        assert not IdxData(IdxType.INT, 0).is_zero()
        assert not IdxData(IdxType.DOUBLE, 0.0).is_zero()


class TestConvert:
    """Tests for conversion to native numeric types."""

    def test_unsigned_byte_to_float64(self):
        result = IdxData(IdxType.UNSIGNED_BYTE, 255).convert(np.float64)
        assert isinstance(result, np.float64)
        assert result == 255.0

    def test_to_builtin_types(self):
        assert IdxData(IdxType.SHORT, -5).convert(float) == -5.0
        assert IdxData(IdxType.DOUBLE, -2.75).convert(int) == -2

    def test_absent_converts_to_none(self):
        assert ABSENT.convert(float) is None

    def test_out_of_range_narrowing_is_none(self):
        assert IdxData(IdxType.SHORT, 300).convert(np.uint8) is None
        assert IdxData(IdxType.SIGNED_BYTE, -1).convert(np.uint16) is None

    def test_non_finite_to_integer_is_none(self):
        assert IdxData(IdxType.DOUBLE, math.inf).convert(int) is None
        assert IdxData(IdxType.FLOAT, math.nan).convert(np.int32) is None


class TestConstruction:
    """Tests for payload normalization and validation."""

    def test_payload_normalized_to_variant(self):
        assert IdxData(IdxType.UNSIGNED_BYTE, -1).value == 255
        assert IdxData(IdxType.SHORT, 0x8000).value == -32768
        assert isinstance(IdxData(IdxType.DOUBLE, 1).value, float)

    def test_absent_cannot_carry_value(self):
        with pytest.raises(ValueError):
            IdxData(None, 3)

    def test_variant_requires_value(self):
        with pytest.raises(ValueError):
            IdxData(IdxType.INT)

    def test_repr(self):
        assert repr(ABSENT) == "IdxData()"
        assert repr(IdxData(IdxType.INT, 256)) == "IdxData(IdxType.INT, 256)"


class TestAnnotations:
    """Tests that public annotations resolve to the real classes."""

    def test_return_annotations_resolve(self):
        assert typing.get_type_hints(IdxType.from_code)["return"] is IdxType
        assert typing.get_type_hints(IdxData.zero)["return"] is IdxData
        assert typing.get_type_hints(IdxData.__add__)["return"] is IdxData
