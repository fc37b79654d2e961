"""
Unit Tests for the Workload Scenario Catalog.
"""

import pytest
from pydantic import ValidationError

from src.core.exceptions import UnknownScenarioError
from src.workload.models import Platform
from src.workload.scenarios import (
    BENCHMARK_CATEGORIES,
    SCENARIOS,
    WorkloadScenario,
    get_scenario,
    list_scenarios,
)


class TestScenarioCatalog:
    """Test cases for the named scenarios."""

    @pytest.mark.parametrize(
        "name,sellers,buyers,per_seller,per_conversation",
        [
            ("custom", 10, 100, 10, 50),
            ("high_write_volume", 100, 1000, 50, 200),
            ("read_heavy_analytics", 50, 500, 30, 500),
            ("mixed_workload", 200, 2000, 25, 150),
        ],
    )
    def test_catalog_entries(
        self,
        name: str,
        sellers: int,
        buyers: int,
        per_seller: int,
        per_conversation: int,
    ) -> None:
        scenario = get_scenario(name)

        assert scenario.name == name
        assert scenario.sellers == sellers
        assert scenario.buyers == buyers
        assert scenario.conversations_per_seller == per_seller
        assert scenario.messages_per_conversation == per_conversation

    def test_list_scenarios(self) -> None:
        names = [s.name for s in list_scenarios()]
        assert names == list(SCENARIOS)
        assert len(names) == 4

    def test_lookup_is_case_insensitive(self) -> None:
        assert get_scenario("Custom") is SCENARIOS["custom"]

    def test_unknown_scenario(self) -> None:
        with pytest.raises(UnknownScenarioError) as exc_info:
            get_scenario("does_not_exist")

        assert exc_info.value.name == "does_not_exist"
        assert "custom" in exc_info.value.available
        assert "does_not_exist" in str(exc_info.value)

    def test_unknown_scenario_is_key_error(self) -> None:
        with pytest.raises(KeyError):
            get_scenario("nope")

    def test_overrides(self) -> None:
        scenario = get_scenario("custom", sellers=3, messages_per_conversation=2)

        assert scenario.sellers == 3
        assert scenario.messages_per_conversation == 2
        assert scenario.buyers == 100
        # Catalog entry is untouched
        assert SCENARIOS["custom"].sellers == 10

    def test_max_conversations(self) -> None:
        assert get_scenario("custom").max_conversations == 100

    @pytest.mark.parametrize(
        "name,categories",
        [
            ("custom", ("reads", "single_writes")),
            ("high_write_volume", ("writes", "single_writes")),
            ("read_heavy_analytics", ("reads",)),
            ("mixed_workload", BENCHMARK_CATEGORIES),
        ],
    )
    def test_catalog_categories(self, name: str, categories: tuple[str, ...]) -> None:
        assert get_scenario(name).categories == categories

    def test_read_heavy_skips_writes(self) -> None:
        scenario = get_scenario("read_heavy_analytics")

        assert "reads" in scenario.categories
        assert "writes" not in scenario.categories
        assert "concurrency" not in scenario.categories


class TestWorkloadScenarioValidation:
    """Test scenario field validation."""

    def test_default_platform_split(self) -> None:
        scenario = WorkloadScenario()
        assert scenario.platform_split == {Platform.WHATSAPP: 0.7, Platform.INSTAGRAM: 0.3}

    def test_split_must_sum_to_one(self) -> None:
        with pytest.raises(ValidationError):
            WorkloadScenario(platform_split={Platform.WHATSAPP: 0.5, Platform.INSTAGRAM: 0.4})

    def test_split_must_be_non_negative(self) -> None:
        with pytest.raises(ValidationError):
            WorkloadScenario(platform_split={Platform.WHATSAPP: 1.5, Platform.INSTAGRAM: -0.5})

    def test_counts_must_be_non_negative(self) -> None:
        with pytest.raises(ValidationError):
            WorkloadScenario(sellers=-1)

    def test_invalid_override_rejected(self) -> None:
        with pytest.raises(ValidationError):
            get_scenario("custom", buyers=-5)

    def test_all_categories_by_default(self) -> None:
        assert WorkloadScenario().categories == BENCHMARK_CATEGORIES

    def test_categories_are_normalized_to_catalog_order(self) -> None:
        scenario = WorkloadScenario(categories=["concurrency", "writes"])
        assert scenario.categories == ("writes", "concurrency")

    def test_unknown_category_rejected(self) -> None:
        with pytest.raises(ValidationError):
            WorkloadScenario(categories=("writes", "complex_queries"))
