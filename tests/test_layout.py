"""
Tests for icon counts, snake grid placement, coordinates and legend layout.
"""

import re
import warnings

import pytest

from personograph_lib import (
    InvalidArgumentError,
    PersonographWarning,
    allocate_counts,
    as_colors,
    coordinates_for,
    estimate_text_width,
    flatten,
    gray_colors,
    layout_personograph,
    legend_layout,
    natural_frequency,
    place,
    resolve_options,
    round_conventional,
    round_with_warning,
    uplift,
)


class TestRounding:
    def test_half_up(self):
        assert round_conventional(0.5) == 1
        assert round_conventional(-0.5) == 0
        assert round_conventional(1.5) == 2
        assert round_conventional(2.5) == 3
        assert round_conventional(0.49) == 0

    def test_truncation_warning_names_category(self):
        with pytest.warns(PersonographWarning, match="truncating rare non-zero value of 0.3 to 0"):
            assert round_with_warning(0.3, name="rare") == 0

    def test_truncation_warning_without_name(self):
        with pytest.warns(PersonographWarning, match="truncating a non-zero"):
            round_with_warning(0.2)


class TestAllocateCounts:
    def test_simple(self):
        assert allocate_counts({"first": 0.9, "second": 0.1}, 100) == {"first": 90, "second": 10}

    def test_keeps_input_order(self):
        counts = allocate_counts({"z": 0.2, "a": 0.5, "m": 0.3}, 10)
        assert list(counts) == ["z", "a", "m"]

    def test_small_fraction_truncated_with_warning(self):
        with pytest.warns(PersonographWarning, match="b"):
            counts = allocate_counts({"a": 0.997, "b": 0.003}, 100)
        assert counts == {"a": 100, "b": 0}

    def test_rounding_drift_is_bounded(self):
        cases = [
            {"a": 1 / 3, "b": 1 / 3, "c": 1 / 3},
            {"a": 0.125, "b": 0.125, "c": 0.75},
            {"a": 0.005, "b": 0.005, "c": 0.99},
        ]
        for fractions in cases:
            for n in (10, 100, 1000):
                with warnings.catch_warnings():
                    warnings.simplefilter("ignore", PersonographWarning)
                    counts = allocate_counts(fractions, n)
                assert abs(sum(counts.values()) - n) <= len(fractions)


class TestNaturalFrequency:
    def test_less_than_one(self):
        assert natural_frequency(0.003, 100) == "< 1/100"

    def test_half(self):
        assert natural_frequency(0.5, 100) == "50/100"

    def test_zero(self):
        assert natural_frequency(0, 100) == "0/100"

    def test_rounds_half_up(self):
        assert natural_frequency(0.005, 100) == "1/100"

    def test_other_denominator(self):
        assert natural_frequency(0.25, 1000) == "250/1000"


class TestPlacement:
    def test_flatten(self):
        assert flatten({"A": 2, "B": 0, "C": 1}) == ["A", "A", "C"]

    def test_two_by_three_blocks(self):
        grid = place(["A", "A", "A", "B", "B", "B"], 2, 3)
        assert grid == [["B", "B", "B"], ["A", "A", "A"]]

    def test_two_by_three_snake_turn(self):
        # Last row runs right to left, then the first row left to right
        grid = place(["A", "A", "A", "A", "B", "B"], 2, 3)
        assert grid == [["A", "B", "B"], ["A", "A", "A"]]

    def test_three_by_three(self):
        grid = place(["A"] * 4 + ["B"] * 5, 3, 3)
        assert grid == [["B", "B", "B"], ["B", "B", "A"], ["A", "A", "A"]]

    def test_same_category_cells_are_contiguous(self):
        grid = place(["A"] * 4 + ["B"] * 5, 3, 3)
        # walk in fill order and check each category appears in one run
        order = []
        for i in range(2, -1, -1):
            row = grid[i] if (i + 1) % 2 == 1 else list(reversed(grid[i]))
            order.extend(row)
        runs = [name for idx, name in enumerate(order) if idx == 0 or order[idx - 1] != name]
        assert runs == ["A", "B"]

    def test_short_sequence_leaves_cells_empty(self):
        grid = place(["A"], 2, 2)
        assert grid == [[None, None], [None, "A"]]

    def test_excess_entries_dropped(self):
        grid = place(["A"] * 5, 2, 2)
        assert grid == [["A", "A"], ["A", "A"]]


class TestCoordinates:
    def test_centers(self):
        grid = [["B", "B", "B"], ["A", "A", "A"]]
        coords = coordinates_for("A", grid, 1 / 3, 1 / 2)
        expected = [(1 / 6, 0.75), (0.5, 0.75), (5 / 6, 0.75)]
        assert len(coords) == 3
        for (x, y), (ex, ey) in zip(coords, expected):
            assert x == pytest.approx(ex)
            assert y == pytest.approx(ey)

    def test_row_major_order(self):
        grid = [["A", None], [None, "A"]]
        assert coordinates_for("A", grid, 1.0, 1.0) == [(0.5, 0.5), (1.5, 1.5)]

    def test_absent_category(self):
        assert coordinates_for("C", [["A"]], 1.0, 1.0) == []


class TestLegend:
    def test_entries_and_total_width(self):
        legend = legend_layout(
            {"first": 0.9, "second": 0.1},
            {"first": "red", "second": "blue"},
            denominator=100,
            swatch_width=24.0,
            measure=lambda text, size: float(len(text)),
        )
        assert [e.label for e in legend.entries] == ["90/100 first", "10/100 second"]
        assert [e.color for e in legend.entries] == ["red", "blue"]
        assert legend.total_width == pytest.approx(24 * 2 + 12 + 13)

    def test_text_width_estimate(self):
        assert estimate_text_width("", 11) == 0
        assert estimate_text_width("good outcome", 11) > estimate_text_width("good", 11)
        assert estimate_text_width("abc", 22) == pytest.approx(2 * estimate_text_width("abc", 11))


class TestColors:
    def test_gray_palette(self):
        palette = gray_colors(3)
        assert len(palette) == 3
        assert all(re.fullmatch(r"#([0-9A-F]{2})\1\1", c) for c in palette)
        assert int(palette[0][1:3], 16) < int(palette[-1][1:3], 16)
        assert gray_colors(0) == []

    def test_as_colors_follows_input_order(self):
        colors = as_colors({"x": 0.5, "y": 0.5})
        assert list(colors) == ["x", "y"]
        assert colors["x"] != colors["y"]


class TestResolveOptions:
    def test_defaults(self):
        opts = resolve_options({"a": 0.5, "b": 0.5})
        assert (opts.rows, opts.cols) == (10, 10)
        assert opts.icon_width == pytest.approx(0.1)
        assert opts.icon_height == pytest.approx(0.1)
        assert set(opts.colors) == {"a", "b"}

    def test_non_square_default(self):
        opts = resolve_options({"a": 1.0}, n_icons=10)
        assert (opts.rows, opts.cols) == (4, 4)

    def test_explicit_dimensions(self):
        opts = resolve_options({"a": 1.0}, n_icons=1000, dimensions=(20, 50))
        assert opts.icon_width == pytest.approx(1 / 50)
        assert opts.icon_height == pytest.approx(1 / 20)

    def test_fractions_over_one_rejected(self):
        with pytest.raises(InvalidArgumentError, match="sum to 1"):
            resolve_options({"a": 0.7, "b": 0.5})

    def test_fractions_under_one_warn(self):
        with pytest.warns(PersonographWarning, match="left empty"):
            opts = resolve_options({"a": 0.5, "b": 0.3})
        assert opts.fractions == {"a": 0.5, "b": 0.3}

    def test_negative_fraction(self):
        with pytest.raises(InvalidArgumentError):
            resolve_options({"a": 1.2, "b": -0.2})

    def test_empty(self):
        with pytest.raises(InvalidArgumentError):
            resolve_options({})

    def test_capacity(self):
        with pytest.raises(InvalidArgumentError, match="do not fit"):
            resolve_options({"a": 1.0}, n_icons=100, dimensions=(5, 5))

    @pytest.mark.parametrize("icon_dim", [(0, 0.1), (0.1, -0.1), (0.1,)])
    def test_icon_dim_must_be_positive_pair(self, icon_dim):
        with pytest.raises(InvalidArgumentError, match="icon_dim"):
            resolve_options({"a": 1.0}, icon_dim=icon_dim)

    def test_explicit_icon_dim(self):
        opts = resolve_options({"a": 1.0}, icon_dim=(0.05, 0.2))
        assert (opts.icon_width, opts.icon_height) == (0.05, 0.2)

    def test_missing_color(self):
        with pytest.raises(InvalidArgumentError, match="b"):
            resolve_options({"a": 0.5, "b": 0.5}, colors={"a": "red"})


class TestLayoutPersonograph:
    def test_uplift_layout(self):
        u = uplift(0.06368133, 0.1115242, higher_is_better=True)
        layout = layout_personograph(u)
        assert layout.counts == {"good outcome": 6, "intervention harm": 5, "bad outcome": 89}
        assert [b.name for b in layout.batches] == list(u)
        assert sum(len(b.coordinates) for b in layout.batches) == 100
        assert [e.label for e in layout.legend.entries] == [
            "6/100 good outcome",
            "5/100 intervention harm",
            "89/100 bad outcome",
        ]

    def test_uplift_effect_against_reported_side(self):
        # intervention helps, but only harm is reported: 20 icons stay empty
        u = uplift(0.4, 0.2, higher_is_better=True)
        with pytest.warns(PersonographWarning, match="left empty"):
            layout = layout_personograph(u)
        assert layout.counts == {"good outcome": 20, "intervention harm": 0, "bad outcome": 60}
        assert [b.name for b in layout.batches] == ["good outcome", "bad outcome"]

    def test_batches_skip_empty_categories(self):
        with pytest.warns(PersonographWarning):
            layout = layout_personograph({"a": 0.997, "b": 0.003})
        assert [b.name for b in layout.batches] == ["a"]
        assert layout.legend.entries[1].label == "< 1/100 b"

    def test_batch_colors(self):
        layout = layout_personograph({"first": 0.9, "second": 0.1}, colors={"first": "red", "second": "blue"})
        assert {b.name: b.color for b in layout.batches} == {"first": "red", "second": "blue"}

    def test_rounding_overflow_warns_and_drops(self):
        with pytest.warns(PersonographWarning, match="dropping 1"):
            layout = layout_personograph({"a": 0.5, "b": 0.5}, n_icons=3, dimensions=(1, 3))
        assert layout.counts == {"a": 2, "b": 2}
        assert sum(len(b.coordinates) for b in layout.batches) == 3

    def test_idempotent(self):
        kwargs = dict(n_icons=50, dimensions=(5, 10), colors={"x": "#111", "y": "#eee"})
        first = layout_personograph({"x": 0.4, "y": 0.6}, **kwargs)
        second = layout_personograph({"x": 0.4, "y": 0.6}, **kwargs)
        assert first == second
