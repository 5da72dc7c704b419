"""Tests for sqlcrud/domain/exceptions.py."""

import pytest

from sqlcrud.domain.exceptions import (
    CreateRecordError,
    DeleteRecordError,
    RepositoryError,
    UpdateRecordError,
    __all__ as exceptions_all,
)


@pytest.mark.parametrize("cls", [CreateRecordError, UpdateRecordError, DeleteRecordError])
def test_record_errors_share_repository_base(cls):
    assert issubclass(cls, RepositoryError)


def test_repository_error_is_runtime_error():
    assert issubclass(RepositoryError, RuntimeError)


def test_record_error_keeps_message():
    assert str(UpdateRecordError("record: widgets not found to update")) == (
        "record: widgets not found to update"
    )


def test_record_error_chains_cause():
    cause = ValueError("boom")
    try:
        raise CreateRecordError("create widgets record failed") from cause
    except CreateRecordError as err:
        assert err.__cause__ is cause


def test_exceptions_exports_four_names():
    assert len(exceptions_all) == 4
