"""Tests for API name normalisation."""

import pytest

from apim_sync.migration.naming import group_key, is_revision, normalize, qualify


class TestGroupKey:
    @pytest.mark.parametrize(
        ("raw_name", "expected"),
        [
            ("orders-v2", "orders"),
            ("orders-v10", "orders"),
            ("orders", "orders"),
            ("orders-v2-beta", "orders-v2-beta"),
            ("orders-version", "orders-version"),
            ("orders-v", "orders-v"),
        ],
    )
    def test_strips_only_trailing_version_suffix(self, raw_name, expected):
        assert group_key(raw_name) == expected


class TestQualify:
    def test_appends_version(self):
        assert qualify("billing", "v1") == "billing-v1"

    def test_already_qualified_name_is_unchanged(self):
        assert qualify("orders-v2", "v2") == "orders-v2"

    def test_empty_version_leaves_name_unchanged(self):
        assert qualify("billing", "") == "billing"

    def test_is_idempotent(self):
        once = qualify("billing", "v1")
        assert qualify(once, "v1") == once

    def test_custom_separator(self):
        assert qualify("Billing", "v1", separator=" ") == "Billing v1"


class TestNormalize:
    def test_versioned_name(self):
        names = normalize("orders-v2", "v2", "Orders")

        assert names.group_key == "orders"
        assert names.qualified_name == "orders-v2"
        assert names.qualified_display_name == "Orders v2"

    def test_unversioned_name(self):
        names = normalize("billing", "v1", "Billing")

        assert names.group_key == "billing"
        assert names.qualified_name == "billing-v1"

    def test_display_name_qualified_once(self):
        names = normalize("billing", "v1", "Billing v1")
        assert names.qualified_display_name == "Billing v1"

    def test_missing_display_name(self):
        assert normalize("billing", "v1").qualified_display_name == ""


def test_is_revision():
    assert is_revision("billing;rev=2")
    assert not is_revision("billing")
