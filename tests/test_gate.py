"""Tests for version/flag gating and version parsing."""

import pytest

from gatsby_injector.catalog import load_catalog
from gatsby_injector.core.types import FeatureFlags, parse_major
from gatsby_injector.engine.gate import evaluate_gate

BUILDER = "@vercel/gatsby-plugin-vercel-builder"
ANALYTICS = "@vercel/gatsby-plugin-vercel-analytics"

BOTH = FeatureFlags(builder_plugin_enabled=True, analytics_id="abc")


@pytest.fixture
def catalog():
    return load_catalog()


def packages(decision):
    return [p.package for p in decision.plugins]


class TestParseMajor:
    @pytest.mark.parametrize(
        "version,expected",
        [
            ("4.24.0", 4),
            ("3.14.6", 3),
            ("^5.0.0", 5),
            ("v4", 4),
            ("4.0.0-next.1", 4),
            ("10.1.0", 10),
        ],
    )
    def test_parses(self, version, expected):
        assert parse_major(version) == expected

    @pytest.mark.parametrize("version", [None, "", "latest"])
    def test_unparseable(self, version):
        assert parse_major(version) is None


class TestEvaluateGate:
    def test_no_flags_not_applicable(self, catalog):
        decision = evaluate_gate("4.0.0", FeatureFlags(), catalog)
        assert not decision
        assert decision.plugins == ()

    def test_both_flags_v4(self, catalog):
        decision = evaluate_gate("4.24.0", BOTH, catalog)
        assert packages(decision) == [BUILDER, ANALYTICS]
        assert decision.inject_hook
        assert [p.package for p in decision.config_plugins] == [ANALYTICS]

    def test_below_threshold_drops_builder(self, catalog):
        decision = evaluate_gate("3.14.0", BOTH, catalog)
        assert packages(decision) == [ANALYTICS]
        assert not decision.inject_hook

    def test_unknown_version_drops_builder(self, catalog):
        decision = evaluate_gate(None, BOTH, catalog)
        assert packages(decision) == [ANALYTICS]

    def test_builder_only_below_threshold_not_applicable(self, catalog):
        flags = FeatureFlags(builder_plugin_enabled=True)
        assert not evaluate_gate("3.0.0", flags, catalog)

    def test_builder_only_v5(self, catalog):
        flags = FeatureFlags(builder_plugin_enabled=True)
        decision = evaluate_gate("5.1.0", flags, catalog)
        assert packages(decision) == [BUILDER]
        assert decision.config_plugins == ()
        assert decision.hook_plugin.hook_export == "onPostBuild"

    def test_analytics_ignores_version(self, catalog):
        flags = FeatureFlags(analytics_id="abc")
        for version in (None, "2.0.0", "5.0.0"):
            assert packages(evaluate_gate(version, flags, catalog)) == [ANALYTICS]

    def test_empty_analytics_id_is_off(self, catalog):
        assert not evaluate_gate("4.0.0", FeatureFlags(analytics_id=""), catalog)
