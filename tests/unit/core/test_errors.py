"""Tests for the error kinds."""

import pytest

from dex.errors import (
    ConstantProductViolated,
    DexError,
    ErrorKind,
    IdenticalTokenAddresses,
    InsufficientInputAmount,
    InsufficientLiquidity,
    InvalidInputAmount,
    Locked,
    PairAlreadyExists,
    UnknownToken,
)

ALL_ERRORS = [
    IdenticalTokenAddresses,
    PairAlreadyExists,
    InsufficientInputAmount,
    InvalidInputAmount,
    InsufficientLiquidity,
    UnknownToken,
    Locked,
    ConstantProductViolated,
]


class TestErrorKinds:
    def test_one_class_per_kind(self):
        """Every kind has exactly one exception class."""
        kinds = [error.kind for error in ALL_ERRORS]
        assert sorted(kinds, key=lambda k: k.value) == sorted(ErrorKind, key=lambda k: k.value)

    @pytest.mark.parametrize("error", ALL_ERRORS)
    def test_is_dex_error(self, error):
        assert issubclass(error, DexError)
        with pytest.raises(DexError) as exc_info:
            raise error("boom")
        assert exc_info.value.kind is error.kind
        assert str(exc_info.value) == "boom"

    def test_kind_values(self):
        assert IdenticalTokenAddresses.kind.value == "identical_token_addresses"
        assert PairAlreadyExists.kind.value == "pair_already_exists"
        assert InsufficientInputAmount.kind.value == "insufficient_input_amount"
        assert InvalidInputAmount.kind.value == "invalid_input_amount"
        assert InsufficientLiquidity.kind.value == "insufficient_liquidity"

    def test_every_kind_exported_from_package(self):
        import dex

        exported = {getattr(dex, name) for name in dex.__all__}
        for error in ALL_ERRORS:
            assert error in exported
