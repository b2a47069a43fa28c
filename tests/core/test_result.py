"""Tests for the Ok/Err result envelope."""

from __future__ import annotations

import pytest

from sample_services.core.errors import DeliveryError
from sample_services.core.result import Err, Ok, try_result


class TestOk:
    def test_basics(self):
        r = Ok(3)
        assert r.is_ok() and not r.is_err()
        assert r.unwrap() == 3
        assert r.unwrap_or(0) == 3

    def test_flat_map(self):
        assert Ok(2).flat_map(lambda n: Ok(n + 1)).unwrap() == 3
        assert Ok(2).flat_map(lambda n: Err(ValueError("x"))).is_err()

    def test_map_err_is_noop(self):
        r = Ok(1)
        assert r.map_err(lambda e: RuntimeError(str(e))) is r


class TestErr:
    def test_basics(self):
        r = Err(ValueError("boom"))
        assert r.is_err() and not r.is_ok()
        assert r.unwrap_or(7) == 7

    def test_unwrap_raises(self):
        with pytest.raises(ValueError, match="boom"):
            Err(ValueError("boom")).unwrap()

    def test_flat_map_passes_error_through(self):
        err = ValueError("boom")
        chained = Err(err).flat_map(lambda n: Ok(n * 2))
        assert chained.is_err()
        assert chained.error is err

    def test_map_err_transforms_error(self):
        r = Err(ValueError("SMTP server unavailable")).map_err(
            lambda e: DeliveryError(str(e), step="send_email_smtp")
        )
        assert isinstance(r.error, DeliveryError)
        assert r.error.step == "send_email_smtp"


class TestTryResult:
    def test_value_becomes_ok(self):
        assert try_result(lambda: 42) == Ok(42)

    def test_exception_becomes_err(self):
        r = try_result(lambda: 1 / 0)
        assert r.is_err()
        assert isinstance(r.error, ZeroDivisionError)
