# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Unit tests for slot naming strategies.
"""
from datetime import datetime, timezone

import pytest
from ecsctl.MODELS.rollout import SlotPair
from ecsctl.MODELS.update_plan import UpdatePlan
from ecsctl.STRATEGIES.slot_naming import (
    ColourPairStrategy,
    ExplicitPairStrategy,
    get_strategy,
)
from ecsctl.exceptions import ColourResolutionError, NotFoundError


class TestColourPairStrategy:
    """Tests for the blue/green naming policy."""

    def test_blue_active_resolves_to_green(self, cluster):
        """Test blue running with green absent."""
        cluster.add_service("base-blue", running=2)
        pair = ColourPairStrategy().resolve(cluster, UpdatePlan(previous_slot_name="base"))
        assert pair == SlotPair(previous="base-blue", next="base-green")

    def test_green_active_resolves_to_blue(self, cluster):
        """Test green running with an inactive blue."""
        cluster.add_service("base-green", running=1)
        cluster.add_service("base-blue", running=0, status="INACTIVE")
        pair = ColourPairStrategy().resolve(cluster, UpdatePlan(previous_slot_name="base"))
        assert pair.previous == "base-green"
        assert pair.next == "base-blue"

    def test_bare_name_resolves_to_blue(self, cluster):
        """Test a service that predates the colour suffixes."""
        cluster.add_service("base", running=3)
        pair = ColourPairStrategy().resolve(cluster, UpdatePlan(previous_slot_name="base"))
        assert pair == SlotPair(previous="base", next="base-blue")

    def test_both_colours_running_is_ambiguous(self, cluster):
        """Test that two running candidates fail resolution."""
        cluster.add_service("base-blue", running=2)
        cluster.add_service("base-green", running=1)
        with pytest.raises(ColourResolutionError) as exc:
            ColourPairStrategy().resolve(cluster, UpdatePlan(previous_slot_name="base"))
        assert exc.value.running_candidates == ["base-blue", "base-green"]

    def test_nothing_running(self, cluster):
        """Test that no running candidate fails resolution."""
        cluster.add_service("base-blue", running=0)
        with pytest.raises(ColourResolutionError) as exc:
            ColourPairStrategy().resolve(cluster, UpdatePlan(previous_slot_name="base"))
        assert exc.value.running_candidates == []
        assert "no running slot" in str(exc.value)

    def test_nothing_found(self, cluster):
        """Test that a missing service raises NotFoundError."""
        with pytest.raises(NotFoundError) as exc:
            ColourPairStrategy().resolve(cluster, UpdatePlan(previous_slot_name="base"))
        assert exc.value.slot_name == "base"

    def test_inactive_target_keeps_its_name(self):
        """Test that colour slots are recreated under the same name."""
        pair = SlotPair(previous="base-blue", next="base-green")
        assert ColourPairStrategy().name_for_inactive(pair) == "base-green"


class TestExplicitPairStrategy:
    """Tests for the explicit naming policy."""

    @staticmethod
    def fixed_clock():
        return datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

    def test_uses_given_names(self, cluster):
        """Test that names pass through when next is absent."""
        cluster.add_service("app-v1", running=2)
        plan = UpdatePlan(previous_slot_name="app-v1", next_slot_name="app-v2")
        pair = ExplicitPairStrategy().resolve(cluster, plan)
        assert pair == SlotPair(previous="app-v1", next="app-v2")

    def test_inactive_next_gets_timestamped_name(self, cluster):
        """Test that a decommissioned next slot is not reused."""
        cluster.add_service("app-v1", running=2)
        cluster.add_service("app-v2", running=0, status="INACTIVE")
        plan = UpdatePlan(previous_slot_name="app-v1", next_slot_name="app-v2")
        pair = ExplicitPairStrategy(clock=self.fixed_clock).resolve(cluster, plan)
        assert pair.next == "app-v1-20240102030405"

    def test_active_next_is_kept(self, cluster):
        """Test that an existing active next slot keeps its name."""
        cluster.add_service("app-v1", running=2)
        cluster.add_service("app-v2", running=0)
        plan = UpdatePlan(previous_slot_name="app-v1", next_slot_name="app-v2")
        pair = ExplicitPairStrategy().resolve(cluster, plan)
        assert pair.next == "app-v2"

    def test_missing_previous(self, cluster):
        """Test that a missing previous slot raises NotFoundError."""
        plan = UpdatePlan(previous_slot_name="app-v1", next_slot_name="app-v2")
        with pytest.raises(NotFoundError):
            ExplicitPairStrategy().resolve(cluster, plan)

    def test_requires_next_name(self, cluster):
        """Test that the explicit policy needs both names."""
        cluster.add_service("app-v1", running=2)
        with pytest.raises(ValueError):
            ExplicitPairStrategy().resolve(cluster, UpdatePlan(previous_slot_name="app-v1"))


def test_get_strategy():
    """Test strategy lookup by name."""
    assert isinstance(get_strategy("colour"), ColourPairStrategy)
    assert isinstance(get_strategy("explicit"), ExplicitPairStrategy)
    with pytest.raises(ValueError):
        get_strategy("canary")
