"""Tests for naming-convention predicates."""

import pytest

from importplane.core.naming import (
    is_constant_name,
    is_dunder_name,
    is_private_name,
    is_private_or_protected_name,
    is_protected_name,
    is_public_constant_or_type_alias,
    is_type_alias_name,
)


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("__var", True),
        ("__var__", False),
        ("_var", False),
        ("var", False),
        ("__", False),
    ],
)
def test_is_private_name(name: str, expected: bool) -> None:
    assert is_private_name(name) is expected


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("_var", True),
        ("__var", False),
        ("var", False),
        ("_", False),
    ],
)
def test_is_protected_name(name: str, expected: bool) -> None:
    assert is_protected_name(name) is expected


@pytest.mark.parametrize(
    ("name", "expected"),
    [("_var", True), ("__var", True), ("__var__", False), ("var", False)],
)
def test_is_private_or_protected_name(name: str, expected: bool) -> None:
    assert is_private_or_protected_name(name) is expected


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("__init__", True),
        ("__all__", True),
        ("____", False),
        ("__x", False),
        ("x__", False),
    ],
)
def test_is_dunder_name(name: str, expected: bool) -> None:
    assert is_dunder_name(name) is expected


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("CONSTANT", True),
        ("MAX_SIZE_42", True),
        ("__CONSTANT_42", True),
        ("____", False),
        ("Constant", False),
        ("constant", False),
    ],
)
def test_is_constant_name(name: str, expected: bool) -> None:
    assert is_constant_name(name) is expected


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("TypeAlias", True),
        ("Type_alias", True),
        ("_TypeAlias", True),
        ("__TypeAlias", True),
        ("___TypeAlias", False),
        ("typeAlias", False),
        ("T", False),
    ],
)
def test_is_type_alias_name(name: str, expected: bool) -> None:
    assert is_type_alias_name(name) is expected


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("CONSTANT", True),
        ("TypeAlias", True),
        ("_CONSTANT", False),
        ("_TypeAlias", False),
        ("function_name", False),
    ],
)
def test_is_public_constant_or_type_alias(name: str, expected: bool) -> None:
    assert is_public_constant_or_type_alias(name) is expected
