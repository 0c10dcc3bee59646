"""Yardbook chainlink fence take-off tests."""

from decimal import Decimal

import pytest


def fence(**overrides):
    from engines.estimation.chainlink import ChainlinkInput

    values = dict(runs=[100, 50], fence_height="6", fence_type="residential", ends=2, corners=1)
    values.update(overrides)
    return ChainlinkInput(**values)


class TestChainlinkInput:
    def test_total_length(self):
        assert fence(runs=[10.5, "20"]).total_length == Decimal("30.5")

    def test_invalid_fence_type(self):
        with pytest.raises(ValueError, match="not valid"):
            fence(fence_type="farm")

    def test_negative_run(self):
        with pytest.raises(ValueError, match="non-negative"):
            fence(runs=[-5])

    def test_height_parsed_from_label(self):
        from engines.estimation.chainlink import height_feet

        assert height_feet("6ft") == 6
        assert height_feet("4' tall") == 4
        with pytest.raises(ValueError):
            fence(fence_height="tall")


class TestChainlinkMaterials:
    def test_two_ends_one_corner(self):
        from engines.estimation.chainlink import calculate_chainlink_materials

        m = calculate_chainlink_materials(fence())
        assert m.fabric_footage == Decimal(150)
        assert m.pipe_weight == "SS20 WT"
        assert m.interior_line_posts == 13
        assert m.loop_caps == 13
        assert m.top_rail_sticks == 8
        assert m.tie_wires == 225
        assert m.post_caps == 3
        assert m.brace_bands == 4
        assert m.tension_bars == 4
        assert m.tension_bands == 18
        assert m.nuts_and_bolts == 22
        assert m.privacy_slats is None
        assert m.rail_ends is None

    @pytest.mark.parametrize(
        "ends,corners,expected",
        [(1, 0, 3), (0, 2, 2), (2, 0, 2)],
    )
    def test_interior_line_posts(self, ends, corners, expected):
        from engines.estimation.chainlink import interior_line_posts

        # 25 ft: 3 sections, 4 post spots
        assert interior_line_posts(4, ends, corners) == expected

    def test_commercial_pipe(self):
        from engines.estimation.chainlink import calculate_chainlink_materials

        assert calculate_chainlink_materials(fence(fence_type="commercial")).pipe_weight == "SS40 WT"

    def test_gates(self):
        from engines.estimation.chainlink import calculate_chainlink_materials

        m = calculate_chainlink_materials(fence(single_gates=1, double_gates=1, pedestrian_gates=1))
        assert m.gate_posts == 6
        assert m.gate_hardware_sets == 3
        assert m.gate_latches == 3
        assert m.gate_hinges == 8

    def test_extras(self):
        from engines.estimation.chainlink import calculate_chainlink_materials

        m = calculate_chainlink_materials(fence(
            include_privacy_slats=True,
            include_barbed_wire=True,
            include_bottom_rail=True,
            include_rail_ends=True,
        ))
        assert m.privacy_slats == 150
        assert m.barbed_wire == 150
        assert m.bottom_rail_sticks == 8
        assert m.rail_ends == 12

    def test_rail_ends_without_bottom_rail(self):
        from engines.estimation.chainlink import calculate_chainlink_materials

        assert calculate_chainlink_materials(fence(include_rail_ends=True)).rail_ends == 6

    def test_empty_fence(self):
        from engines.estimation.chainlink import calculate_chainlink_materials

        m = calculate_chainlink_materials(fence(runs=[], ends=0, corners=0))
        assert m.interior_line_posts == 1
        assert m.top_rail_sticks == 0
        assert m.tension_bands == 0


class TestChainlinkCost:
    def test_priced_take_off(self):
        from engines.estimation.chainlink import (
            ChainlinkPricing,
            calculate_chainlink_cost,
            calculate_chainlink_materials,
        )

        pricing = ChainlinkPricing(
            interior_line_post="20.00",
            fabric_per_foot="1.10",
            top_rail_per_stick="25.00",
            tie_wire="0.10",
            loop_cap="1.50",
            post_cap="3.00",
            brace_band="2.00",
            tension_bar="4.00",
            tension_band="1.25",
            nut_and_bolt="0.35",
        )
        cost = calculate_chainlink_cost(calculate_chainlink_materials(fence()), pricing)
        assert cost == Decimal("730.20")

    def test_zero_pricing(self):
        from engines.estimation.chainlink import (
            ChainlinkPricing,
            calculate_chainlink_cost,
            calculate_chainlink_materials,
        )

        assert calculate_chainlink_cost(calculate_chainlink_materials(fence()), ChainlinkPricing()) == Decimal("0.00")
