"""
tests/test_policy.py

PolicySet construction, YAML loading, overrides and the policy fingerprint.
"""

import logging

import pytest

from plangate.core.exceptions import PolicyConfigError
from plangate.core.models import MatchSource
from plangate.policy.policy import PolicySet, load_policy

from conftest import EXAMPLES_DIR


class TestPolicySet:

    def test_lookup(self, policy):
        assert policy.lookup("aws_instance") is MatchSource.ALWAYS_UNSAFE
        assert policy.lookup("aws_security_group_rule") is MatchSource.ALWAYS_SAFE
        assert policy.lookup("aws_s3_bucket") is MatchSource.UNHANDLED

    def test_lookup_is_exact_match(self, policy):
        # "aws_instance" must not match types that merely contain it
        assert policy.lookup("aws_instance_profile") is MatchSource.UNHANDLED
        assert policy.lookup("instance") is MatchSource.UNHANDLED

    def test_overlapping_sets_rejected(self):
        with pytest.raises(PolicyConfigError) as exc:
            PolicySet(always_unsafe={"foobar", "aws_instance"}, always_safe={"foobar"})
        assert "foobar" in str(exc.value)

    def test_sets_are_frozen(self, policy):
        assert isinstance(policy.always_unsafe, frozenset)
        with pytest.raises(Exception):
            policy.always_unsafe = frozenset()

    def test_empty(self):
        assert PolicySet().is_empty

    def test_extend_returns_new_policy(self, policy):
        extended = policy.extend(unsafe=["aws_db_instance"], safe=["aws_route"])
        assert "aws_db_instance" in extended.always_unsafe
        assert "aws_route" in extended.always_safe
        assert "aws_db_instance" not in policy.always_unsafe

    def test_extend_cannot_create_overlap(self, policy):
        with pytest.raises(PolicyConfigError):
            policy.extend(safe=["aws_instance"])


class TestPolicyHash:

    def test_independent_of_order_and_duplicates(self):
        a = PolicySet.from_dict({"always_unsafe": ["b", "a", "a"], "always_safe": ["c"]})
        b = PolicySet.from_dict({"always_unsafe": ["a", "b"], "always_safe": ["c"]})
        assert a.policy_hash == b.policy_hash

    def test_changes_with_lists(self, policy):
        assert policy.policy_hash != policy.extend(unsafe=["aws_vpc"]).policy_hash

    def test_swapping_lists_changes_hash(self):
        a = PolicySet(always_unsafe={"x"}, always_safe={"y"})
        b = PolicySet(always_unsafe={"y"}, always_safe={"x"})
        assert a.policy_hash != b.policy_hash

    def test_is_hex_sha256(self, policy):
        h = policy.policy_hash
        assert len(h) == 64
        int(h, 16)


class TestFromDict:

    def test_canonical_keys(self):
        p = PolicySet.from_dict({"always_unsafe": ["aws_instance"], "always_safe": ["aws_route"]})
        assert p.always_unsafe == {"aws_instance"}
        assert p.always_safe == {"aws_route"}

    def test_alias_keys(self):
        p = PolicySet.from_dict({"AlwaysUnsafe": ["aws_instance"], "AlwaysSafe": ["aws_route"]})
        assert p.always_unsafe == {"aws_instance"}
        assert p.always_safe == {"aws_route"}

    def test_none_and_missing_lists_are_empty(self):
        assert PolicySet.from_dict(None).is_empty
        assert PolicySet.from_dict({"always_unsafe": None}).is_empty

    def test_same_list_under_two_keys_rejected(self):
        with pytest.raises(PolicyConfigError):
            PolicySet.from_dict({"always_safe": ["a"], "AlwaysSafe": ["b"]})

    @pytest.mark.parametrize("data", [
        ["aws_instance"],
        {"always_unsafe": "aws_instance"},
        {"always_unsafe": [1]},
        {"always_safe": [""]},
    ])
    def test_bad_shapes_rejected(self, data):
        with pytest.raises(PolicyConfigError):
            PolicySet.from_dict(data)

    @pytest.mark.parametrize("data", [
        {"always_unsfe": ["aws_instance"]},
        {"always_unsafe": ["aws_instance"], "alwayssafe": ["aws_route"]},
        {"always_safe": [], 1: ["aws_route"]},
    ])
    def test_unknown_keys_rejected(self, data):
        with pytest.raises(PolicyConfigError) as exc:
            PolicySet.from_dict(data)
        assert "unknown keys" in str(exc.value)

    def test_entries_are_stripped(self):
        p = PolicySet.from_dict({"always_safe": ["  aws_route  "]})
        assert p.always_safe == {"aws_route"}


class TestFromYaml:

    def test_load(self, policy_file):
        p = PolicySet.from_yaml(policy_file)
        assert p.always_unsafe == {"aws_instance"}
        assert p.always_safe == {"aws_security_group_rule"}
        assert p.source == str(policy_file)

    def test_example_policy_loads(self):
        p = PolicySet.from_yaml(EXAMPLES_DIR / "policy.example.yaml")
        assert "aws_instance" in p.always_unsafe
        assert "aws_security_group_rule" in p.always_safe

    def test_missing_file(self, tmp_path):
        with pytest.raises(PolicyConfigError) as exc:
            PolicySet.from_yaml(tmp_path / "nope.yaml")
        assert "not found" in str(exc.value)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("always_safe: [unclosed\n", encoding="utf-8")
        with pytest.raises(PolicyConfigError):
            PolicySet.from_yaml(path)

    def test_empty_file_is_empty_policy(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert PolicySet.from_yaml(path).is_empty


class TestLoadPolicy:

    def test_file_plus_overrides(self, policy_file):
        p = load_policy(policy_file, unsafe=["aws_db_instance"], safe=["aws_route"])
        assert p.always_unsafe == {"aws_instance", "aws_db_instance"}
        assert p.always_safe == {"aws_security_group_rule", "aws_route"}

    def test_no_policy_warns(self, caplog):
        caplog.set_level(logging.WARNING, logger="plangate.policy")
        p = load_policy(None)
        assert p.is_empty
        assert "No policy configured" in caplog.text

    def test_overrides_only(self):
        p = load_policy(None, unsafe=["aws_instance"])
        assert p.always_unsafe == {"aws_instance"}
