"""Contract tests for the CSV pipeline.

Verifies that:
- Column extraction keeps header order and duplicates
- Rows stream lazily across chunk boundaries
- Group-by counts keep first-seen order
- Plot data is shaped per kind with lenient numeric coercion
- Kind requirements are checked before any file read
"""
from __future__ import annotations

import re

import pytest

from survey_analytics.tabular import (
    ColorPicker,
    PlotRequest,
    PlotRequestError,
    TabularReadError,
    build_layout,
    build_plot_data,
    group_by_columns,
    iter_rows,
    read_columns,
    validate_plot_request,
)
from survey_analytics.tabular.plot_builder import shape_series

RGBA = re.compile(r"^rgba\(\d{1,3}, \d{1,3}, \d{1,3}, 0\.7\)$")

SCORES_CSV = "name,score,age\nalice,10,30\nbob,20,41\ncarol,abc,\n"
STATUS_CSV = "id,status\n1,a\n2,b\n3,a\n4,c\n"


# ============================================================================
# Column Extractor
# ============================================================================

class TestReadColumns:
    def test_header_order(self, write_csv):
        assert read_columns(write_csv(SCORES_CSV)) == ["name", "score", "age"]

    def test_duplicates_preserved(self, write_csv):
        assert read_columns(write_csv("a,b,a\n1,2,3\n")) == ["a", "b", "a"]

    def test_header_only_file(self, write_csv):
        assert read_columns(write_csv("x,y\n")) == ["x", "y"]

    def test_row_count_does_not_matter(self, write_csv):
        body = "".join(f"{i},{i * 2}\n" for i in range(500))
        assert read_columns(write_csv("x,y\n" + body)) == ["x", "y"]

    def test_bom_is_stripped(self, tmp_path):
        path = tmp_path / "bom.csv"
        path.write_bytes(b"\xef\xbb\xbfname,score\nalice,1\n")
        assert read_columns(str(path)) == ["name", "score"]

    def test_empty_file(self, write_csv):
        assert read_columns(write_csv("")) == []

    def test_missing_file_raises_ioerror(self, tmp_path):
        with pytest.raises(OSError):
            read_columns(str(tmp_path / "absent.csv"))

    def test_missing_file_is_tabular_read_error(self, tmp_path):
        with pytest.raises(TabularReadError):
            read_columns(str(tmp_path / "absent.csv"))


# ============================================================================
# Tabular Reader
# ============================================================================

class TestIterRows:
    def test_rows_as_raw_strings(self, write_csv):
        rows = list(iter_rows(write_csv(SCORES_CSV)))
        assert rows[0] == {"name": "alice", "score": "10", "age": "30"}
        assert rows[2]["score"] == "abc"
        assert rows[2]["age"] == ""

    def test_rows_span_chunks(self, write_csv):
        body = "".join(f"r{i},{i}\n" for i in range(7))
        rows = list(iter_rows(write_csv("key,value\n" + body), chunk_rows=3))
        assert [r["key"] for r in rows] == [f"r{i}" for i in range(7)]

    def test_header_row_is_not_data(self, write_csv):
        assert list(iter_rows(write_csv("x,y\n"))) == []

    def test_duplicate_header_last_value_wins(self, write_csv):
        rows = list(iter_rows(write_csv("a,b,a\n1,2,3\n")))
        assert rows == [{"a": "3", "b": "2"}]

    def test_lazy_and_not_restartable(self, write_csv):
        rows = iter_rows(write_csv(STATUS_CSV))
        assert next(rows)["status"] == "a"
        assert len(list(rows)) == 3
        assert list(rows) == []

    def test_long_row_truncated_to_header(self, write_csv):
        rows = list(iter_rows(write_csv("a,b\n1,2\n3,4,5\n")))
        assert rows == [{"a": "1", "b": "2"}, {"a": "3", "b": "4"}]

    def test_blank_lines_skipped(self, write_csv):
        rows = list(iter_rows(write_csv("a,b\n1,2\n\n3,4\n\n")))
        assert [r["a"] for r in rows] == ["1", "3"]

    def test_invalid_utf8_replaced(self, tmp_path):
        path = tmp_path / "latin1.csv"
        path.write_bytes("name,city\nJos\xe9,Malm\xf6\n".encode("latin-1"))
        assert list(iter_rows(str(path))) == [{"name": "Jos\ufffd", "city": "Malm\ufffd"}]

    def test_read_error_hides_path(self, tmp_path):
        missing = tmp_path / "absent.csv"
        with pytest.raises(TabularReadError) as info:
            read_columns(str(missing))
        assert str(tmp_path) not in str(info.value)

    def test_missing_file_raises_on_iteration(self, tmp_path):
        rows = iter_rows(str(tmp_path / "absent.csv"))
        with pytest.raises(OSError):
            next(rows)


# ============================================================================
# Aggregator
# ============================================================================

class TestGroupBy:
    def test_first_seen_order(self, write_csv):
        result = group_by_columns(write_csv(STATUS_CSV), ["status"])
        assert result == {"status": [("a", 2), ("b", 1), ("c", 1)]}

    def test_columns_counted_independently(self, write_csv):
        path = write_csv("city,kind\nParis,x\nRome,x\nParis,y\n")
        result = group_by_columns(path, ["city", "kind"])
        assert result["city"] == [("Paris", 2), ("Rome", 1)]
        assert result["kind"] == [("x", 2), ("y", 1)]

    def test_counts_across_chunks(self, write_csv):
        result = group_by_columns(write_csv(STATUS_CSV), ["status"], chunk_rows=2)
        assert result["status"] == [("a", 2), ("b", 1), ("c", 1)]

    def test_unknown_column_counts_missing(self, write_csv):
        result = group_by_columns(write_csv(STATUS_CSV), ["nope"])
        assert result == {"nope": [(None, 4)]}

    def test_empty_value_is_a_value(self, write_csv):
        result = group_by_columns(write_csv("k,v\n1,\n2,x\n3,\n"), ["v"])
        assert result["v"] == [("", 2), ("x", 1)]

    def test_empty_column_list_rejected(self, write_csv):
        with pytest.raises(PlotRequestError):
            group_by_columns(write_csv(STATUS_CSV), [])

    def test_unreadable_file(self, tmp_path):
        with pytest.raises(TabularReadError):
            group_by_columns(str(tmp_path / "absent.csv"), ["status"])


# ============================================================================
# Plot Request Validation
# ============================================================================

class TestPlotValidation:
    @pytest.mark.parametrize("kind", ["scatter", "bar", "line", "pie", "area", "heatmap"])
    def test_x_axis_required(self, kind):
        with pytest.raises(PlotRequestError):
            validate_plot_request(PlotRequest(plot_type=kind, y_axes=["score"]))

    @pytest.mark.parametrize("kind", ["scatter", "bar", "line", "pie", "area", "heatmap", "histogram", "box"])
    def test_y_axes_required(self, kind):
        with pytest.raises(PlotRequestError):
            validate_plot_request(PlotRequest(plot_type=kind, x_axis="name", y_axes=[]))

    @pytest.mark.parametrize("kind", ["histogram", "box"])
    def test_x_axis_optional(self, kind):
        validate_plot_request(PlotRequest(plot_type=kind, y_axes=["score"]))

    def test_null_y_axes_coerced(self):
        request = PlotRequest.model_validate({"plot_type": "box", "y_axes": None})
        assert request.y_axes == []

    def test_rejected_before_file_read(self, tmp_path):
        missing = str(tmp_path / "never-read.csv")
        with pytest.raises(PlotRequestError):
            build_plot_data(missing, PlotRequest(plot_type="bar", y_axes=["score"]))


# ============================================================================
# Plot Data Builder
# ============================================================================

class TestPlotBuilder:
    def test_bar_end_to_end(self, write_csv):
        path = write_csv("name,score\nalice,10\nbob,20\n")
        result = build_plot_data(path, PlotRequest(plot_type="bar", x_axis="name", y_axes=["score"]))
        assert len(result.data) == 1
        series = result.data[0]
        assert series["type"] == "bar"
        assert series["x"] == ["alice", "bob"]
        assert series["y"] == [10, 20]
        assert RGBA.match(series["marker"]["color"])

    def test_non_numeric_coerced_to_zero(self, write_csv):
        path = write_csv("name,score\na,10\nb,abc\nc,\nd, 7 \ne,2.5\nf,inf\n")
        result = build_plot_data(path, PlotRequest(plot_type="line", x_axis="name", y_axes=["score"]))
        assert result.data[0]["y"] == [10, 0, 0, 7, 2.5, 0]

    def test_huge_integer_parsed_as_float(self, write_csv):
        path = write_csv("name,score\na,99999999999999999999\n")
        result = build_plot_data(path, PlotRequest(plot_type="bar", x_axis="name", y_axes=["score"]))
        assert result.data[0]["y"][0] == pytest.approx(1e20, rel=1e-12)

    def test_header_only_file_gives_empty_series(self, write_csv):
        result = build_plot_data(write_csv("name,score\n"), PlotRequest(plot_type="bar", x_axis="name", y_axes=["score"]))
        assert len(result.data) == 1
        assert result.data[0]["x"] == []
        assert result.data[0]["y"] == []

    def test_short_row_counts_as_zero(self, write_csv):
        path = write_csv("name,score\nalice,10\nbob\n")
        result = build_plot_data(path, PlotRequest(plot_type="scatter", x_axis="name", y_axes=["score"]))
        assert result.data[0]["x"] == ["alice", "bob"]
        assert result.data[0]["y"] == [10, 0]

    def test_scatter_and_line_modes(self, write_csv):
        path = write_csv(SCORES_CSV)
        scatter = build_plot_data(path, PlotRequest(plot_type="scatter", x_axis="name", y_axes=["score", "age"]))
        line = build_plot_data(path, PlotRequest(plot_type="line", x_axis="name", y_axes=["score"]))
        assert [s["name"] for s in scatter.data] == ["score", "age"]
        assert all(s["mode"] == "markers" for s in scatter.data)
        assert line.data[0]["mode"] == "lines+markers"

    def test_pie(self, write_csv):
        path = write_csv(SCORES_CSV)
        result = build_plot_data(path, PlotRequest(plot_type="pie", x_axis="name", y_axes=["age"]))
        (series,) = result.data
        assert series["labels"] == ["alice", "bob", "carol"]
        assert series["values"] == [30, 41, 0]
        assert len(series["marker"]["colors"]) == 3

    def test_pie_without_values_counts_one_each(self):
        data = shape_series("pie", ["a", "b"], {}, [], ColorPicker(seed=1))
        assert data[0]["values"] == [1, 1]

    def test_histogram_uses_y_values(self, write_csv):
        path = write_csv(SCORES_CSV)
        result = build_plot_data(path, PlotRequest(plot_type="histogram", x_axis="name", y_axes=["score"]))
        assert result.data[0]["x"] == [10, 20, 0]
        assert "y" not in result.data[0]

    def test_heatmap_uses_first_y_only(self, write_csv):
        path = write_csv(SCORES_CSV)
        result = build_plot_data(path, PlotRequest(plot_type="heatmap", x_axis="name", y_axes=["score", "age"]))
        assert result.data == [{"type": "heatmap", "z": [[10, 20, 0]], "x": ["alice", "bob", "carol"], "y": ["score"]}]

    def test_box_has_no_x(self, write_csv):
        path = write_csv(SCORES_CSV)
        result = build_plot_data(path, PlotRequest(plot_type="box", y_axes=["score", "age"]))
        assert result.data == [
            {"type": "box", "name": "score", "y": [10, 20, 0]},
            {"type": "box", "name": "age", "y": [30, 41, 0]},
        ]

    def test_area_fills_to_zero(self, write_csv):
        path = write_csv(SCORES_CSV)
        result = build_plot_data(path, PlotRequest(plot_type="area", x_axis="name", y_axes=["score"]))
        assert result.data[0]["type"] == "scatter"
        assert result.data[0]["fill"] == "tozeroy"

    def test_layout(self, write_csv):
        path = write_csv(SCORES_CSV)
        result = build_plot_data(path, PlotRequest(plot_type="scatter", x_axis="name", y_axes=["score", "age"]))
        assert result.layout == {"title": "Scatter Plot", "xaxis": {"title": "name"}, "yaxis": {"title": "score, age"}}

    def test_layout_without_x(self):
        assert build_layout("box", None, ["a"])["xaxis"] == {"title": None}

    def test_same_seed_same_colors(self, write_csv):
        path = write_csv(SCORES_CSV)
        request = PlotRequest(plot_type="bar", x_axis="name", y_axes=["score", "age"])
        first = build_plot_data(path, request, colors=ColorPicker(seed=3))
        second = build_plot_data(path, request, colors=ColorPicker(seed=3))
        assert first.data == second.data

    def test_result_as_dict(self, write_csv):
        path = write_csv(SCORES_CSV)
        payload = build_plot_data(path, PlotRequest(plot_type="box", y_axes=["score"])).as_dict()
        assert set(payload) == {"data", "layout"}


class TestColorPicker:
    def test_format(self):
        colors = ColorPicker(seed=0).colors(5)
        assert len(colors) == 5
        assert all(RGBA.match(c) for c in colors)

    def test_seeded_is_reproducible(self):
        assert ColorPicker(seed=9).colors(4) == ColorPicker(seed=9).colors(4)
