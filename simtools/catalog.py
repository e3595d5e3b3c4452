from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Collection, Dict, Iterable, List, Optional, Sequence, Tuple


def default_catalog_path() -> Path:
    return Path(__file__).resolve().parent / "manifests" / "projects.yaml"


@dataclass(frozen=True)
class BuilderSpec:
    kind: str = "none"
    argv: Tuple[str, ...] = ()
    procedure: Optional[str] = None
    options: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Project:
    name: str
    remote: str
    builder: BuilderSpec = field(default_factory=BuilderSpec)
    path: str = ""
    branch: str = "master"


@dataclass(frozen=True)
class Catalog:
    server: str
    projects: Tuple[Project, ...]

    @property
    def names(self) -> List[str]:
        return [p.name for p in self.projects]

    def get(self, name: str) -> Project:
        for p in self.projects:
            if p.name == name:
                return p
        raise KeyError(name)


def resolve_project_set(
    default: Sequence[str],
    include: Optional[Iterable[str]] = None,
    exclude: Optional[Iterable[str]] = None,
) -> List[str]:
    """Filter the default list without reordering it.

    Unknown names in either list are ignored.
    """

    if include is not None and exclude is not None:
        raise ValueError("include and exclude selectors are mutually exclusive")

    wanted = set(include) if include is not None else None
    unwanted = set(exclude) if exclude is not None else set()

    return [n for n in default if (wanted is None or n in wanted) and n not in unwanted]


LIST_OPTIONS = ("extras", "configure_args", "make_args", "scons_args")
STR_OPTIONS = ("target",)
REQUIRED_OPTIONS = {"scons": ("target",)}


def _check_options(name: str, proc: str, options: Dict[str, Any]) -> None:
    for key in LIST_OPTIONS:
        value = options.get(key)
        if value is None:
            continue
        if not isinstance(value, list) or any(isinstance(v, (dict, list)) for v in value):
            raise ValueError(f"{name}: builder.{key} must be a list of strings, got {value!r}")

    for key in STR_OPTIONS:
        value = options.get(key)
        if value is not None and not isinstance(value, str):
            raise ValueError(f"{name}: builder.{key} must be a string, got {value!r}")

    for key in REQUIRED_OPTIONS.get(proc, ()):
        if not options.get(key):
            raise ValueError(f"{name}: {proc} builder needs a '{key}' option")


def _parse_builder(name: str, raw: Any, procedures: Collection[str]) -> BuilderSpec:
    if raw is None or raw == "none":
        return BuilderSpec()

    if not isinstance(raw, dict):
        raise ValueError(f"{name}: builder must be 'none' or a mapping, got {raw!r}")

    if "command" in raw:
        argv = raw["command"]
        if isinstance(argv, str) or not argv:
            raise ValueError(f"{name}: builder.command must be a non-empty list")
        return BuilderSpec(kind="command", argv=tuple(str(a) for a in argv))

    if "procedure" in raw:
        proc = str(raw["procedure"])
        if procedures and proc not in procedures:
            raise ValueError(f"{name}: unknown build procedure {proc!r} (known: {', '.join(sorted(procedures))})")
        options = {k: v for k, v in raw.items() if k != "procedure"}
        _check_options(name, proc, options)
        return BuilderSpec(kind="procedure", procedure=proc, options=options)

    raise ValueError(f"{name}: builder needs one of 'command' or 'procedure'")


def parse_catalog(raw: Dict[str, Any], *, procedures: Collection[str] = ()) -> Catalog:
    server = str(raw.get("server") or "")
    entries = raw.get("projects") or []
    if not isinstance(entries, list):
        raise ValueError("catalog 'projects' must be a list")

    projects: List[Project] = []
    seen = set()
    for entry in entries:
        if not isinstance(entry, dict) or not entry.get("name"):
            raise ValueError(f"catalog entry must be a mapping with a name: {entry!r}")
        name = str(entry["name"])
        if name in seen:
            raise ValueError(f"duplicate project in catalog: {name}")
        seen.add(name)

        projects.append(
            Project(
                name=name,
                remote=str(entry.get("remote") or name),
                builder=_parse_builder(name, entry.get("builder"), procedures),
                path=str(entry.get("path") or ""),
                branch=str(entry.get("branch") or "master"),
            )
        )

    for p in projects:
        for extra in p.builder.options.get("extras") or []:
            if str(extra) not in seen:
                raise ValueError(f"{p.name}: builder.extras names unknown project {extra!r}")

    return Catalog(server=server, projects=tuple(projects))


def load_catalog(path: str | Path | None = None, *, procedures: Collection[str] = ()) -> Catalog:
    p = Path(path) if path is not None else default_catalog_path()
    if not p.exists():
        raise FileNotFoundError(str(p))

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError("project catalog must be YAML")

    try:
        import yaml  # type: ignore
    except Exception as e:  # pragma: no cover
        raise RuntimeError("PyYAML is required to read the project catalog") from e

    raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"{p.name} must contain a mapping/object")

    return parse_catalog(raw, procedures=procedures)
