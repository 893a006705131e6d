"""
Unit tests for Result and DomainError.
"""

import pytest

from wms_kernel.domain.result import DomainError, ErrorKind, Result
from wms_kernel.exceptions import ResultAccessError


class TestResult:
    """Result carries exactly one of a value or an error."""

    def test_success(self):
        result = Result.success(42)
        assert result.is_success
        assert not result.is_failure
        assert bool(result)
        assert result.value == 42

    def test_success_without_value(self):
        result = Result.success()
        assert result.is_success
        assert result.value is None

    def test_failure(self):
        error = DomainError.validation("Thing.Field", "bad")
        result = Result.failure(error)
        assert result.is_failure
        assert not result
        assert result.error is error

    def test_failure_requires_error(self):
        with pytest.raises(ResultAccessError):
            Result.failure(None)

    def test_reading_value_of_failure_raises(self):
        result = Result.failure(DomainError.not_found("Thing.Id", "missing"))
        with pytest.raises(ResultAccessError, match="Thing.Id"):
            result.value

    def test_reading_error_of_success_raises(self):
        with pytest.raises(ResultAccessError):
            Result.success(1).error

    def test_map_and_bind_short_circuit(self):
        error = DomainError.conflict("Thing.Key", "taken")
        failed = Result.failure(error)
        assert failed.map(lambda v: v + 1).error is error
        assert failed.bind(lambda v: Result.success(v)).error is error

    def test_map_and_bind_on_success(self):
        assert Result.success(1).map(lambda v: v + 1).value == 2
        assert Result.success(1).bind(lambda v: Result.success(v * 10)).value == 10

    def test_unwrap_or(self):
        assert Result.success(3).unwrap_or(0) == 3
        assert Result.failure(DomainError.validation("X", "y")).unwrap_or(0) == 0


class TestDomainError:
    """Factory methods pin the error kind."""

    @pytest.mark.parametrize("factory, kind", [
        (DomainError.validation, ErrorKind.VALIDATION),
        (DomainError.conflict, ErrorKind.CONFLICT),
        (DomainError.not_found, ErrorKind.NOT_FOUND),
    ])
    def test_kind(self, factory, kind):
        assert factory("Code", "message").kind is kind

    def test_str_includes_kind_and_code(self):
        error = DomainError.conflict("PurchaseOrder.OrderNumber", "taken")
        assert str(error) == "conflict:PurchaseOrder.OrderNumber: taken"
