"""Tests for updates and record validation."""

import pytest

from keystate import InvalidValueError, Replacement, Computed, as_update
from keystate.update import validate


class TestValidate:
    def test_returns_copy(self):
        src = {"a": 1}
        out = validate(src)
        assert out == {"a": 1}
        assert out is not src

    @pytest.mark.parametrize("bad", [42, None, [1, 2, 3], (1,), "abc", b"abc", 1.5])
    def test_rejects_non_mappings(self, bad):
        with pytest.raises(InvalidValueError) as info:
            validate(bad)
        assert info.value.value is bad

    def test_rejects_non_string_keys(self):
        with pytest.raises(InvalidValueError, match="keys must be str"):
            validate({1: "x"})

    def test_is_a_type_error(self):
        assert issubclass(InvalidValueError, TypeError)


class TestAsUpdate:
    def test_mapping_becomes_replacement(self):
        u = as_update({"a": 1})
        assert isinstance(u, Replacement)
        assert u.resolve({}) == {"a": 1}

    def test_callable_becomes_computed(self):
        u = as_update(lambda prev: {"n": prev["n"] + 1})
        assert isinstance(u, Computed)
        assert u.resolve({"n": 1}) == {"n": 2}

    def test_update_passes_through(self):
        u = Replacement({"a": 1})
        assert as_update(u) is u

    def test_invalid_value_fails_on_resolve(self):
        u = as_update(42)
        with pytest.raises(InvalidValueError):
            u.resolve({})

    def test_computed_result_is_validated(self):
        u = Computed(lambda prev: [1, 2])
        with pytest.raises(InvalidValueError):
            u.resolve({})

    def test_computed_gets_a_copy(self):
        current = {"a": 1}

        def mutate(prev):
            prev["a"] = 99
            return {}

        Computed(mutate).resolve(current)
        assert current == {"a": 1}

    def test_repr(self):
        def bump(prev):
            return prev

        assert "Replacement({'a': 1})" == repr(Replacement({"a": 1}))
        assert "Computed(bump)" == repr(Computed(bump))
