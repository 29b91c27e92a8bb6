import pytest

from libos.errors import (
    BadTreeError,
    ErrorCode,
    LibosError,
    NoMemoryError,
    NoResourceError,
    OutOfRangeError,
    error_for_code,
)


def test_documented_code_values():
    bad_tree = error_for_code(-256)
    assert isinstance(bad_tree, BadTreeError)
    assert int(bad_tree.code) == -256

    no_mem = error_for_code(-257)
    assert isinstance(no_mem, NoMemoryError)
    assert int(no_mem.code) == -257

    no_resource = error_for_code(-269)
    assert isinstance(no_resource, NoResourceError)
    assert int(no_resource.code) == -269


def test_error_for_code_returns_matching_class():
    err = error_for_code(-257)
    assert isinstance(err, NoMemoryError)
    assert err.code == ErrorCode.NOMEM


@pytest.mark.parametrize("code", list(ErrorCode))
def test_round_trip_every_code(code):
    err = error_for_code(int(code))
    assert isinstance(err, LibosError)
    assert err.code == code


def test_codes_map_to_distinct_classes():
    classes = {type(error_for_code(c)) for c in ErrorCode}
    assert len(classes) == len(ErrorCode)


def test_unknown_code_rejected():
    with pytest.raises(ValueError):
        error_for_code(0)


def test_errors_can_be_raised_and_caught_as_base():
    err = error_for_code(-263)
    assert isinstance(err, OutOfRangeError)
    with pytest.raises(LibosError) as info:
        raise err
    assert info.value is err
    assert info.value.code == ErrorCode.RANGE


def test_custom_message_kept():
    err = BadTreeError("bad cells")
    assert str(err) == "bad cells"


def test_default_message_is_description():
    err = NoResourceError()
    assert str(err) == NoResourceError.description