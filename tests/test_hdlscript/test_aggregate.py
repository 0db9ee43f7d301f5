# tests/test_hdlscript/test_aggregate.py
"""
Tests for hdlscript.aggregate.

These tests validate:
- NAME / NAME=VALUE parsing of CLI defines.
- Global defines: TARGET_<UPPER> per active target plus CLI defines, sorted.
- Batch defines are global defines followed by group defines, unmerged.
- all_incdirs / all_files are deduplicated in first-seen order.
- restrict() clears exactly the categories not selected.
"""

from __future__ import annotations

import pytest

from hdlscript.aggregate import Aggregate, aggregate, global_defines, parse_define
from hdlscript.categorize import SourceType
from hdlscript.flatten import flatten
from hdlscript.target import TargetSet


@pytest.mark.parametrize(
    "text, expected",
    [
        ("FOO", ("FOO", None)),
        ("FOO=1", ("FOO", "1")),
        (" W = 8 ", ("W", "8")),
        ("EMPTY=", ("EMPTY", "")),
        ("EXPR=a=b", ("EXPR", "a=b")),
    ],
)
def test_parse_define(text, expected):
    assert parse_define(text) == expected


def test_global_defines_from_targets_and_cli_sorted():
    defines = global_defines(TargetSet(["vsim", "simulation"]), [("ZED", "1"), ("ABC", None)])
    assert defines == [
        ("ABC", None),
        ("TARGET_SIMULATION", None),
        ("TARGET_VSIM", None),
        ("ZED", "1"),
    ]


def test_global_defines_uppercases_target_names():
    assert global_defines(TargetSet(["vivado-sim"])) == [("TARGET_VIVADO-SIM", None)]


def test_batch_defines_are_global_then_group_without_merge(grp):
    groups = flatten(grp("a.sv", defines={"A": "2"}))
    agg = aggregate(groups, TargetSet(), [("A", "1")])
    (batch,) = agg.srcs
    assert batch.defines == (("A", "1"), ("A", "2"))


def test_all_defines_concatenate_global_and_each_group(grp):
    top = grp("a.sv", grp("b.sv", defines={"CHILD": None}), defines={"TOP": "1"})
    agg = aggregate(flatten(top), TargetSet(["flist"]))
    assert agg.global_defines == (("TARGET_FLIST", None),)
    assert agg.all_defines == (
        ("TARGET_FLIST", None),
        ("TOP", "1"),
        ("TOP", "1"),
        ("CHILD", None),
    )


def test_incdirs_and_files_deduplicated(grp, root):
    top = grp(
        "a.sv",
        grp("b.vhd", "a.sv", incdirs=["inc"]),
        incdirs=["inc", "top"],
    )
    agg = aggregate(flatten(top), TargetSet())
    assert agg.all_incdirs == (root / "inc", root / "top")
    assert agg.all_files == (root / "a.sv", root / "b.vhd")
    assert agg.all_verilog == (root / "a.sv",)
    assert agg.all_vhdl == (root / "b.vhd",)


def test_srcs_follow_group_and_category_order(grp):
    top = grp("a.sv", "b.vhd", grp("c.sv"))
    agg = aggregate(flatten(top), TargetSet())
    assert [(b.file_type, [p.name for p in b.files]) for b in agg.srcs] == [
        (SourceType.VERILOG, ["a.sv"]),
        (SourceType.VHDL, ["b.vhd"]),
        (SourceType.VERILOG, ["c.sv"]),
    ]


def test_aggregate_of_nothing():
    agg = aggregate([], TargetSet(["flist"]))
    assert agg.all_files == ()
    assert agg.srcs == ()
    assert agg.all_defines == (("TARGET_FLIST", None),)


# -----------------------------------------
# restrict
# -----------------------------------------

@pytest.fixture
def full(grp):
    top = grp("a.sv", defines={"FOO": None}, incdirs=["inc"])
    return aggregate(flatten(top), TargetSet(["vivado"]))


def test_restrict_without_flags_is_identity(full):
    assert full.restrict() == full


def test_only_defines_clears_incdirs_and_sources(full):
    out = full.restrict(only_defines=True)
    assert out.all_defines == full.all_defines
    assert out.all_incdirs == ()
    assert out.all_files == ()
    assert out.srcs == ()


def test_only_includes_clears_defines_and_sources(full):
    out = full.restrict(only_includes=True)
    assert out.all_incdirs == full.all_incdirs
    assert out.all_defines == ()
    assert out.all_files == ()


def test_only_sources_clears_defines_and_incdirs(full):
    out = full.restrict(only_sources=True)
    assert out.all_files == full.all_files
    assert out.all_defines == ()
    assert out.all_incdirs == ()


def test_combined_only_flags(full):
    out = full.restrict(only_defines=True, only_includes=True)
    assert out.all_defines == ()
    assert out.all_incdirs == ()
    assert out.all_files == ()
    assert isinstance(out, Aggregate)
