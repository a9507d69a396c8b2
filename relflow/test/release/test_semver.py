from __future__ import annotations

import pytest

from relflow.core.result import Err, Ok
from relflow.release.semver import Version, compare, next_development_version, parse_version


@pytest.mark.parametrize("text", ["0.0.0", "4.7.3", "5.0.0", "10.20.30"])
def test_parse_then_format_is_identity(text: str) -> None:
    parsed = parse_version(text)
    assert isinstance(parsed, Ok)
    assert str(parsed.value) == text


def test_parse_strips_whitespace() -> None:
    assert parse_version(" 4.7.3\n") == Ok(Version(4, 7, 3))


@pytest.mark.parametrize(
    "text", ["", "4.7", "4.7.3.1", "v4.7.3", "4.7.x", "04.7.3", "4.07.3", "4.7.3-beta", "-1.0.0"]
)
def test_parse_rejects(text: str) -> None:
    result = parse_version(text)
    assert isinstance(result, Err)
    assert result.error.kind == "invalid_version"
    assert repr(text) in result.error.message


def test_negative_components_rejected() -> None:
    with pytest.raises(ValueError, match="negative"):
        Version(1, -1, 0)


def test_next_development_version_is_minor_bump() -> None:
    assert next_development_version(Version(4, 7, 3)) == Version(4, 8, 0)
    assert next_development_version(Version(5, 0, 0)) == Version(5, 1, 0)


def test_compare_is_numeric() -> None:
    assert compare(Version(4, 10, 0), Version(4, 9, 9)) == "greater"
    assert compare(Version(4, 7, 3), Version(4, 7, 3)) == "equal"
    assert compare(Version(4, 7, 3), Version(5, 0, 0)) == "less"
    assert sorted([Version(5, 0, 0), Version(4, 10, 1), Version(4, 9, 0)]) == [
        Version(4, 9, 0),
        Version(4, 10, 1),
        Version(5, 0, 0),
    ]
