"""Functional tests for identity.py - rejection rules and fallback policy."""

from unittest.mock import patch

import pytest

from active_users import identity
from active_users.identity import IdentityFilter, IdentityPolicy, passwd_uid


class TestRejectionRules:
    @pytest.mark.parametrize("username", ["1234", "0", "20240901"])
    def test_numeric(self, lenient_filter, username):
        assert lenient_filter.decide(username).reason == identity.REASON_NUMERIC

    @pytest.mark.parametrize("username", ["dataset_imagenet", "test_foo", "tmp_x", "backup_2024"])
    def test_excluded_prefix(self, lenient_filter, username):
        assert lenient_filter.decide(username).reason == identity.REASON_PREFIX

    @pytest.mark.parametrize("username", ["root", "bin", "daemon", "sync", "halt", "lost+found"])
    def test_excluded_name(self, lenient_filter, username):
        assert lenient_filter.decide(username).reason == identity.REASON_NAME

    def test_system_uid(self, strict_filter):
        assert strict_filter.decide("sysacct").reason == identity.REASON_SYSTEM_UID

    def test_nobody_uid(self, strict_filter):
        assert strict_filter.decide("nobody").reason == identity.REASON_NOBODY

    def test_empty(self, lenient_filter):
        assert not lenient_filter.is_eligible("")

    def test_name_rules_run_before_lookup(self):
        """Excluded names short-circuit before the resolver is consulted."""
        calls = []
        f = IdentityFilter(resolve_uid=lambda name: calls.append(name) or 5000)
        assert not f.is_eligible("test_bot")
        assert calls == []

    def test_explicit_uid_overrides_resolver(self, strict_filter):
        assert not strict_filter.is_eligible("alice", uid=999)
        assert strict_filter.is_eligible("stranger", uid=2000)


class TestAccept:
    def test_regular_account(self, strict_filter):
        decision = strict_filter.decide("alice")
        assert decision.accepted
        assert bool(decision)

    def test_custom_min_uid(self, resolve_uid):
        f = IdentityFilter(IdentityPolicy(min_uid=500), resolve_uid=resolve_uid)
        assert f.is_eligible("sysacct")


class TestUnknownAccountPolicy:
    def test_strict_rejects_unknown(self, strict_filter):
        assert strict_filter.decide("ghost").reason == identity.REASON_UNKNOWN

    def test_lenient_accepts_lowercase_start(self, lenient_filter):
        assert lenient_filter.is_eligible("ghost")

    @pytest.mark.parametrize("username", ["Ghost", "_svc", "-x", "9lives"])
    def test_lenient_rejects_other_shapes(self, lenient_filter, username):
        assert not lenient_filter.is_eligible(username)

    def test_lenient_still_applies_uid_rules(self, lenient_filter):
        assert not lenient_filter.is_eligible("sysacct")


class TestPasswdResolver:
    def test_unknown_returns_none(self):
        with patch("active_users.identity.pwd.getpwnam", side_effect=KeyError("x")):
            assert passwd_uid("nosuchuser") is None

    def test_known_returns_uid(self):
        class Entry:
            pw_uid = 4242

        with patch("active_users.identity.pwd.getpwnam", return_value=Entry()):
            assert passwd_uid("someone") == 4242
