"""Unit tests for permission code parsing and scope matching."""

import pytest

from tbsa.core.permissions.codes import (
    PermissionCode,
    Scope,
    broadest_scope,
    format_permission,
    has_permission,
    parse_permission,
)


pytestmark = pytest.mark.unit


class TestParsePermission:
    """Tests for parse_permission."""

    def test_parses_three_part_code(self):
        """parse_permission should split resource, action and scope."""
        code = parse_permission("apartments:read:own")

        assert code == PermissionCode("apartments", "read", "own")

    def test_parses_scopeless_code(self):
        """A two-part code has no scope."""
        assert parse_permission("roles:create").scope is None

    @pytest.mark.parametrize("raw", ["roles:create:null", "roles:create:NULL", "roles:create:"])
    def test_legacy_null_scope_is_none(self, raw: str):
        """Stored "null" scopes should be read as no scope."""
        assert parse_permission(raw).scope is None

    @pytest.mark.parametrize("raw", ["", "apartments", ":read:own", "a:b:c:d", "apartments::own"])
    def test_rejects_malformed_codes(self, raw: str):
        """Malformed codes should raise ValueError."""
        with pytest.raises(ValueError, match="Invalid permission code"):
            parse_permission(raw)

    def test_str_round_trips(self):
        """str() of a parsed code should give back the original code."""
        assert str(parse_permission("buildings:update:building")) == "buildings:update:building"

    def test_format_without_scope(self):
        assert format_permission("roles", "read") == "roles:read"


class TestScopeHierarchy:
    """Tests for scope matching: all > building > own."""

    @pytest.mark.parametrize(
        ("held", "wanted", "expected"),
        [
            ("all", "all", True),
            ("all", "building", True),
            ("all", "own", True),
            ("building", "all", False),
            ("building", "building", True),
            ("building", "own", True),
            ("own", "all", False),
            ("own", "building", False),
            ("own", "own", True),
        ],
    )
    def test_broader_scope_satisfies_narrower(self, held: str, wanted: str, expected: bool):
        """A held scope should grant every scope it covers and nothing wider."""
        code = PermissionCode("apartments", "read", held)

        assert code.satisfies("apartments", "read", wanted) is expected

    def test_scoped_code_does_not_match_scopeless_request(self):
        """A scoped code should not grant a request without a scope."""
        assert not PermissionCode("roles", "create", "all").satisfies("roles", "create")

    def test_scopeless_code_matches_only_scopeless_request(self):
        code = PermissionCode("roles", "create")

        assert code.satisfies("roles", "create")
        assert not code.satisfies("roles", "create", "own")

    def test_resource_and_action_must_match(self):
        code = PermissionCode("apartments", "read", "all")

        assert not code.satisfies("buildings", "read", "own")
        assert not code.satisfies("apartments", "delete", "own")


class TestHasPermission:
    """Tests for checking a set of held codes."""

    def test_empty_set_denies(self):
        """No permissions should deny everything."""
        assert has_permission([], "apartments", "read", "own") is False

    def test_any_matching_code_grants(self):
        codes = ["buildings:read:own", "apartments:read:building"]

        assert has_permission(codes, "apartments", "read", "own") is True

    def test_malformed_codes_are_ignored(self):
        """A malformed code in the set should not break the check."""
        codes = ["garbage", "apartments:read:all"]

        assert has_permission(codes, "apartments", "read", "building") is True
        assert has_permission(["garbage"], "garbage", "read") is False


class TestBroadestScope:
    """Tests for broadest_scope."""

    def test_returns_widest_held_scope(self):
        codes = ["apartments:read:own", "apartments:read:building"]

        assert broadest_scope(codes, "apartments", "read") == Scope.BUILDING

    def test_returns_none_when_not_granted(self):
        assert broadest_scope(["apartments:read:own"], "apartments", "delete") is None

    def test_ignores_unknown_scopes(self):
        codes = ["apartments:read:galaxy", "apartments:read:own"]

        assert broadest_scope(codes, "apartments", "read") == Scope.OWN
