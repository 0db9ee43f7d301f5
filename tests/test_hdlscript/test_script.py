# tests/test_hdlscript/test_script.py
"""
Tests for hdlscript.script (pipeline orchestration).

These tests validate:
- Active targets are CLI targets plus the format's defaults.
- Target and package selection reach the generated output.
- Option conflicts are raised before any processing.
- --only-defines isolates the define category.
- The same input always gives byte-identical output.
"""

from __future__ import annotations

import pytest

from hdlscript.errors import OptionConflictError, TemplateLoadError
from hdlscript.formats import ScriptFormat
from hdlscript.resolver import ResolvedSources
from hdlscript.script import ScriptOptions, check_options, generate_script, prepare


@pytest.fixture
def sources(grp, root):
    asic = grp("asic_only.sv", target=["asic"], package="asic_lib")
    dep = grp("dep.sv", package="dep")
    top = grp("a.sv", "b.sv", "c.vhd", asic, dep, package="top", dependencies=frozenset({"dep", "asic_lib"}), defines={"FOO": None})
    return ResolvedSources(root=root, group=top, root_package="top")


def test_targets_are_cli_plus_defaults(sources):
    targets, _ = prepare(sources, ScriptFormat.VSIM, ScriptOptions(targets=("asic", "vsim")))
    assert list(targets) == ["asic", "vsim", "simulation"]


def test_cli_targets_come_first_without_duplicates(sources):
    targets, _ = prepare(sources, ScriptFormat.VSIM, ScriptOptions(targets=("simulation", "rtl")))
    assert list(targets) == ["simulation", "rtl", "vsim"]


def test_no_default_target(sources):
    targets, agg = prepare(sources, ScriptFormat.VSIM, ScriptOptions(no_default_target=True))
    assert list(targets) == []
    assert agg.global_defines == ()


def test_flist_end_to_end(sources):
    text = generate_script(sources, ScriptFormat.FLIST, ScriptOptions())
    assert text.splitlines() == [
        "+define+TARGET_FLIST",
        "+define+FOO",
        "+define+FOO",
        "/work/proj/a.sv",
        "/work/proj/b.sv",
        "/work/proj/c.vhd",
        "/work/proj/dep.sv",
    ]


def test_target_selection_reaches_output(sources):
    text = generate_script(sources, ScriptFormat.FLIST, ScriptOptions(targets=("asic",)))
    assert "/work/proj/asic_only.sv" in text
    assert "+define+TARGET_ASIC" in text


def test_package_exclusion(sources):
    opts = ScriptOptions(targets=("asic",), excludes=("asic_lib",))
    text = generate_script(sources, ScriptFormat.FLIST, opts)
    assert "asic_only.sv" not in text
    assert "dep.sv" in text


def test_no_deps_keeps_root_package_only(sources):
    text = generate_script(sources, ScriptFormat.FLIST, ScriptOptions(no_deps=True))
    assert "dep.sv" not in text
    assert "/work/proj/a.sv" in text


def test_cli_defines_are_global(sources):
    text = generate_script(sources, ScriptFormat.FLIST, ScriptOptions(defines=("WIDTH=8", "ZZ")))
    lines = text.splitlines()
    assert lines[:3] == ["+define+TARGET_FLIST", "+define+WIDTH=8", "+define+ZZ"]


def test_only_defines_isolation(sources):
    opts = ScriptOptions(only_defines=True)
    text = generate_script(sources, ScriptFormat.VIVADO, opts)
    assert "add_files" not in text
    assert "include_dirs" not in text
    assert "set_property verilog_define" in text


def test_conflicting_option_raises_before_processing(sources):
    with pytest.raises(OptionConflictError):
        generate_script(sources, ScriptFormat.FLIST, ScriptOptions(vlog_args=("-x",)))


def test_unknown_compilation_mode():
    with pytest.raises(OptionConflictError, match="compilation mode"):
        check_options(ScriptFormat.VSIM, ScriptOptions(compilation_mode="batch"))


def test_template_format_reads_file(sources, tmp_path):
    tpl = tmp_path / "files.j2"
    tpl.write_text("{% for f in all_files %}{{ f | relpath }}\n{% endfor %}", encoding="utf-8")
    text = generate_script(sources, ScriptFormat.TEMPLATE, ScriptOptions(template=str(tpl)))
    assert text == "a.sv\nb.sv\nc.vhd\ndep.sv\n"


def test_template_format_missing_file(sources, tmp_path):
    opts = ScriptOptions(template=str(tmp_path / "missing.j2"))
    with pytest.raises(TemplateLoadError):
        generate_script(sources, ScriptFormat.TEMPLATE, opts)


@pytest.mark.parametrize("fmt", [f for f in ScriptFormat if f is not ScriptFormat.TEMPLATE])
def test_generation_is_idempotent(sources, fmt):
    opts = ScriptOptions(targets=("asic",))
    assert generate_script(sources, fmt, opts) == generate_script(sources, fmt, opts)


def test_package_nested_under_named_root_is_selectable(sources):
    text = generate_script(sources, ScriptFormat.FLIST, ScriptOptions(packages=("dep",)))
    assert text.splitlines() == ["+define+TARGET_FLIST", "/work/proj/dep.sv"]
