"""
Tests for tools/registry.py — registration, lookup and discovery of the
challenge tools.
"""

import pytest

from tools.challenges.evaluate_challenge import EvaluateChallenge
from tools.challenges.get_challenge_hints import GetChallengeHints
from tools.registry import ToolRegistry, get_registry


class TestToolRegistry:
    def test_register_and_get(self):
        registry = ToolRegistry()
        tool = GetChallengeHints()

        registry.register(tool)

        assert len(registry) == 1
        assert registry.get("get_challenge_hints") is tool

    def test_register_duplicate_raises(self):
        registry = ToolRegistry()
        registry.register(EvaluateChallenge())

        with pytest.raises(ValueError, match="'evaluate_challenge' is already registered"):
            registry.register(EvaluateChallenge())

    def test_get_unknown_tool(self):
        assert ToolRegistry().get("analyze_track") is None

    def test_list_tools_sorted_by_name(self):
        registry = ToolRegistry()
        registry.register(GetChallengeHints())
        registry.register(EvaluateChallenge())

        names = [t["name"] for t in registry.list_tools()]

        assert names == ["evaluate_challenge", "get_challenge_hints"]

    def test_contains(self):
        registry = ToolRegistry()
        registry.register(GetChallengeHints())

        assert "get_challenge_hints" in registry
        assert "evaluate_challenge" not in registry


class TestToolRegistryDiscovery:
    def test_discover_challenge_tools(self):
        registry = ToolRegistry()

        count = registry.discover()

        assert count == 2
        assert isinstance(registry.get("evaluate_challenge"), EvaluateChallenge)
        assert isinstance(registry.get("get_challenge_hints"), GetChallengeHints)

    def test_discover_twice_raises(self):
        registry = ToolRegistry()
        registry.discover()

        with pytest.raises(ValueError, match="already registered"):
            registry.discover()

    def test_discover_missing_package(self):
        registry = ToolRegistry()

        assert registry.discover("nonexistent_package") == 0
        assert len(registry) == 0

    def test_global_registry_scores_an_attempt(self):
        registry = get_registry()
        assert registry is get_registry()

        result = registry.get("evaluate_challenge")(
            challenge_id="ds1-01-four-on-the-floor",
            drums={
                "tracks": [
                    {
                        "id": "kick",
                        "steps": [{"active": i % 4 == 0} for i in range(16)],
                    }
                ]
            },
        )
        assert result.success
        assert result.data["overall"] == 100
        assert result.metadata["challenge_type"] == "drum-sequencing"
