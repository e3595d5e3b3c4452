import os
from pathlib import Path

import pytest

from conftest import FakeRunner, make_ctx
from simtools import builders
from simtools.catalog import BuilderSpec, Project


def _ctx(tmp_path: Path, builder: BuilderSpec, jobs: int = 4):
    return make_ctx(tmp_path, Project(name="sim", remote="sim", builder=builder), jobs=jobs)


def test_expand_args_substitutes_placeholders(tmp_path: Path):
    ctx = _ctx(tmp_path, BuilderSpec())

    assert builders.expand_args(ctx, ["-j{jobs}", "--prefix={source}/install", "{prefix}", "plain"]) == [
        "-j4",
        f"--prefix={tmp_path / 'sim'}/install",
        str(tmp_path),
        "plain",
    ]


def test_expand_args_reports_unknown_placeholder(tmp_path: Path):
    with pytest.raises(RuntimeError, match="bad placeholder"):
        builders.expand_args(_ctx(tmp_path, BuilderSpec()), ["{nope}"])


def test_extras_path_joins_siblings_without_trailing_separator(tmp_path: Path):
    ctx = _ctx(tmp_path, BuilderSpec())

    assert builders.extras_path(ctx, ["A", "B"]) == f"{tmp_path / 'A'}{os.pathsep}{tmp_path / 'B'}"
    assert builders.extras_path(ctx, []) == ""


def test_noop_builder_runs_nothing(tmp_path: Path, fake_runner: FakeRunner):
    builders.build(_ctx(tmp_path, BuilderSpec()))

    assert fake_runner.calls == []


def test_command_builder_runs_in_project_dir(tmp_path: Path, fake_runner: FakeRunner):
    builders.build(_ctx(tmp_path, BuilderSpec(kind="command", argv=("make", "-j{jobs}"))))

    assert fake_runner.calls == [["make", "-j4"]]
    assert fake_runner.cwds == [str(tmp_path / "sim")]


def test_autotools_procedure_sequence(tmp_path: Path, fake_runner: FakeRunner):
    spec = BuilderSpec(kind="procedure", procedure="autotools", options={"configure_args": ["--prefix={source}/install"]})

    builders.build(_ctx(tmp_path, spec, jobs=2))

    assert fake_runner.calls == [
        ["autoreconf", "--install"],
        ["./configure", f"--prefix={tmp_path / 'sim'}/install"],
        ["make", "-j2"],
    ]


def test_autotools_stops_at_first_failure(tmp_path: Path, fake_runner: FakeRunner):
    fake_runner.fail.add(("./configure",))
    spec = BuilderSpec(kind="procedure", procedure="autotools")

    with pytest.raises(RuntimeError):
        builders.build(_ctx(tmp_path, spec))

    assert fake_runner.calls[-1][0] == "./configure"


def test_scons_procedure_with_extras(tmp_path: Path, fake_runner: FakeRunner):
    spec = BuilderSpec(
        kind="procedure",
        procedure="scons",
        options={"target": "build/X86/gem5.opt", "extras": ["DRAMSim2", "NVMain"]},
    )

    builders.build(_ctx(tmp_path, spec, jobs=8))

    assert fake_runner.calls == [
        [
            "scons",
            "-j8",
            "build/X86/gem5.opt",
            f"EXTRAS={tmp_path / 'DRAMSim2'}{os.pathsep}{tmp_path / 'NVMain'}",
        ]
    ]


def test_scons_without_extras_omits_extras_argument(tmp_path: Path, fake_runner: FakeRunner):
    builders.build(_ctx(tmp_path, BuilderSpec(kind="procedure", procedure="scons", options={"target": "all"})))

    assert fake_runner.calls == [["scons", "-j4", "all"]]


def test_scons_requires_target(tmp_path: Path, fake_runner: FakeRunner):
    with pytest.raises(RuntimeError, match="target"):
        builders.build(_ctx(tmp_path, BuilderSpec(kind="procedure", procedure="scons")))


def test_unknown_procedure_is_a_build_failure(tmp_path: Path, fake_runner: FakeRunner):
    with pytest.raises(RuntimeError, match="unknown build procedure"):
        builders.build(_ctx(tmp_path, BuilderSpec(kind="procedure", procedure="bazel")))
