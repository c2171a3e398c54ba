"""Version field storage inside an MSBuild project file.

The project file is treated as a value: ``load_descriptor`` reads it,
``write_version`` returns an updated copy, ``save_descriptor`` persists it.
Edits are made on the raw text so that everything except the version
field keeps its exact bytes (comments, attribute order, BOM, line endings).

Only ``<PropertyGroup>`` elements that are direct children of ``<Project>``
are considered. Groups inside ``<Target>`` or ``<Choose>`` are evaluated
conditionally by MSBuild and never hold the package version.

Usage:
    match load_descriptor(path):
        case Ok(descriptor):
            raw = read_version(descriptor)
            updated = write_version(descriptor, "1.2.4-dev.1")
            save_descriptor(updated)
        case Err(error):
            console.error(error.message)
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import Literal
from xml.sax.saxutils import escape, unescape

from relkit.core.result import Err, Ok, Result
from relkit.platform.files import atomic_write_text, read_text_exact

__all__ = [
    "DescriptorError",
    "ProjectDescriptor",
    "VERSION_FIELDS",
    "load_descriptor",
    "read_version",
    "save_descriptor",
    "write_version",
]

# Primary field first; the rest are only consulted by the fallback scan.
VERSION_FIELDS = ("Version", "PackageVersion")

_PRIMARY_FIELD = VERSION_FIELDS[0]
_DEFAULT_INDENT = "  "

# Markup whose content is not element structure.
_OPAQUE_RE = re.compile(r"<!--.*?-->|<\?.*?\?>|<!\[CDATA\[.*?\]\]>", re.DOTALL)
_CDATA_RE = re.compile(r"<!\[CDATA\[(?P<data>.*?)\]\]>", re.DOTALL)
# Attribute values may contain '>' and '/' (MSBuild conditions do).
_TAG_RE = re.compile(
    r"<(?P<close>/)?(?P<name>[A-Za-z_][\w.:-]*)"
    r"(?:\"[^\"]*\"|'[^']*'|[^'\">/])*(?P<empty>/)?>"
)
_VALUE_RE = re.compile(r"\S(?:.*\S)?", re.DOTALL)
_LEADING_INDENT_RE = re.compile(r"(\r?\n)([ \t]*)(?=<)")


@dataclass(frozen=True, slots=True)
class DescriptorError:
    kind: Literal["read", "parse", "write"]
    path: Path
    reason: str

    @property
    def message(self) -> str:
        match self.kind:
            case "read":
                return f"failed to read {self.path.name}: {self.reason}"
            case "parse":
                return f"invalid project file {self.path.name}: {self.reason}"
            case "write":
                return f"failed to write {self.path.name}: {self.reason}"

    @property
    def hint(self) -> str:
        return str(self.path)


@dataclass(frozen=True, slots=True)
class ProjectDescriptor:
    """An MSBuild project file held in memory.

    Attributes:
        path: Where the document was loaded from and is saved to.
        text: Exact file content.
    """

    path: Path
    text: str

    @property
    def newline(self) -> str:
        return "\r\n" if "\r\n" in self.text else "\n"


@dataclass(frozen=True, slots=True)
class _Element:
    name: str
    # 0 for the root element.
    depth: int
    start: int
    content_start: int
    content_end: int
    end: int
    empty: bool


@dataclass(frozen=True, slots=True)
class _Field:
    name: str
    start: int
    end: int
    # Span of the character data to replace; None for a self-closing element.
    text_span: tuple[int, int] | None
    value: str
    cdata: bool = False


def load_descriptor(path: Path) -> Result[ProjectDescriptor, DescriptorError]:
    """Read a project file and check that it is a well-formed ``<Project>``."""
    try:
        text = read_text_exact(path)
    except (OSError, UnicodeDecodeError) as e:
        return Err(DescriptorError(kind="read", path=path, reason=str(e)))

    try:
        root = ET.fromstring(text.lstrip("\ufeff"))
    except ET.ParseError as e:
        return Err(DescriptorError(kind="parse", path=path, reason=str(e)))

    local_name = root.tag.rsplit("}", 1)[-1]
    if local_name != "Project":
        return Err(
            DescriptorError(
                kind="parse",
                path=path,
                reason=f"root element is <{local_name}>, expected <Project>",
            )
        )

    return Ok(ProjectDescriptor(path=path, text=text))


def save_descriptor(descriptor: ProjectDescriptor) -> Result[None, DescriptorError]:
    try:
        atomic_write_text(descriptor.path, descriptor.text)
    except OSError as e:
        return Err(DescriptorError(kind="write", path=descriptor.path, reason=str(e)))
    return Ok(None)


def read_version(descriptor: ProjectDescriptor) -> str | None:
    """Return the version text, or None if the document holds none.

    Looks at ``<Version>`` in the first ``<PropertyGroup>`` first, then scans
    every group for a non-empty ``<Version>`` and finally ``<PackageVersion>``.
    """
    found = _Scan(descriptor.text).locate()
    return found.value if found is not None else None


def write_version(descriptor: ProjectDescriptor, version: str) -> ProjectDescriptor:
    """Return a copy of ``descriptor`` whose version field holds ``version``.

    The field ``read_version`` reports is overwritten in place. Without one,
    an empty ``<Version>`` element is filled, or a new one is inserted at the
    top of the first ``<PropertyGroup>`` (creating the group if needed).
    """
    text = descriptor.text
    scan = _Scan(text)

    target = scan.locate() or scan.first_empty_version()
    if target is not None:
        return ProjectDescriptor(path=descriptor.path, text=_replace_field(text, target, version))

    groups = scan.property_groups()
    if groups:
        updated = _insert_into_group(text, groups[0], escape(version), descriptor.newline)
    else:
        updated = _insert_group(text, scan, escape(version), descriptor.newline)
    return ProjectDescriptor(path=descriptor.path, text=updated)


# -----------------------------------------------------------------------------
# Scanning
# -----------------------------------------------------------------------------


def _blank(text: str, *, keep_cdata: bool = False) -> str:
    """Blank out opaque markup, keeping offsets, so it is never matched."""

    def repl(m: re.Match[str]) -> str:
        chunk = m.group(0)
        if keep_cdata and chunk.startswith("<![CDATA["):
            return chunk
        return " " * len(chunk)

    return _OPAQUE_RE.sub(repl, text)


def _elements(masked: str) -> list[_Element]:
    found: list[_Element] = []
    open_tags: list[tuple[str, int, int]] = []
    for m in _TAG_RE.finditer(masked):
        name = m.group("name").rsplit(":", 1)[-1]
        depth = len(open_tags)
        if m.group("close"):
            if not open_tags:
                continue
            name, start, content_start = open_tags.pop()
            found.append(
                _Element(name, depth - 1, start, content_start, m.start(), m.end(), empty=False)
            )
        elif m.group("empty"):
            found.append(_Element(name, depth, m.start(), m.end(), m.end(), m.end(), empty=True))
        else:
            open_tags.append((name, m.start(), m.end()))
    found.sort(key=lambda e: e.start)
    return found


class _Scan:
    """Element structure of one document, computed once per operation."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.masked = _blank(text)
        self.with_cdata = _blank(text, keep_cdata=True)
        self.elements = _elements(self.masked)

    def root(self) -> _Element | None:
        for element in self.elements:
            if element.depth == 0:
                return element
        return None

    def property_groups(self) -> list[_Element]:
        return [
            e
            for e in self.elements
            if e.depth == 1 and e.name == "PropertyGroup" and not e.empty
        ]

    def fields(self, group: _Element, name: str) -> list[_Field]:
        return [
            self._field(e)
            for e in self.elements
            if e.depth == 2
            and e.name == name
            and group.content_start <= e.start < group.content_end
        ]

    def locate(self) -> _Field | None:
        groups = self.property_groups()
        if not groups:
            return None

        primary = self.fields(groups[0], _PRIMARY_FIELD)
        if primary and primary[0].value:
            return primary[0]

        for name in VERSION_FIELDS:
            for group in groups:
                for candidate in self.fields(group, name):
                    if candidate.value:
                        return candidate
        return None

    def first_empty_version(self) -> _Field | None:
        for group in self.property_groups():
            found = self.fields(group, _PRIMARY_FIELD)
            if found:
                return found[0]
        return None

    def _field(self, element: _Element) -> _Field:
        if element.empty:
            return _Field(element.name, element.start, element.end, text_span=None, value="")

        lo, hi = element.content_start, element.content_end
        cdata = _CDATA_RE.search(self.with_cdata, lo, hi)
        if cdata is not None:
            data = cdata.span("data")
            return _Field(
                element.name,
                element.start,
                element.end,
                text_span=data,
                value=self.text[data[0] : data[1]].strip(),
                cdata=True,
            )

        run = _VALUE_RE.search(self.masked, lo, hi)
        if run is None:
            # Nothing but whitespace and comments: keep the comments.
            span = (lo, hi) if "<" not in self.text[lo:hi] else (lo, lo)
            return _Field(element.name, element.start, element.end, text_span=span, value="")
        return _Field(
            element.name,
            element.start,
            element.end,
            text_span=run.span(),
            value=unescape(self.masked[run.start() : run.end()]).strip(),
        )


# -----------------------------------------------------------------------------
# Editing
# -----------------------------------------------------------------------------


def _replace_field(text: str, target: _Field, version: str) -> str:
    if target.text_span is not None:
        start, end = target.text_span
        value = version if target.cdata else escape(version)
        return text[:start] + value + text[end:]
    head = text[target.start : target.end - 2].rstrip()
    return text[: target.start] + f"{head}>{escape(version)}</{target.name}>" + text[target.end :]


def _line_indent(text: str, pos: int) -> str:
    line_start = text.rfind("\n", 0, pos) + 1
    prefix = text[line_start:pos]
    return prefix if prefix.strip() == "" else ""


def _insert_into_group(text: str, group: _Element, value: str, newline: str) -> str:
    element = f"<{_PRIMARY_FIELD}>{value}</{_PRIMARY_FIELD}>"
    content = text[group.content_start : group.content_end]

    m = _LEADING_INDENT_RE.match(content)
    if m is not None:
        insertion = f"{m.group(1)}{m.group(2)}{element}"
    else:
        outer = _line_indent(text, group.start)
        insertion = f"{newline}{outer}{_DEFAULT_INDENT}{element}"
        if not content.strip():
            # Empty or single-line group: put the closing tag on its own line.
            insertion += f"{newline}{outer}"
            return text[: group.content_start] + insertion + text[group.content_end :]

    return text[: group.content_start] + insertion + text[group.content_start :]


def _insert_group(text: str, scan: _Scan, value: str, newline: str) -> str:
    root = scan.root()
    if root is None:
        # load_descriptor guarantees a <Project> root.
        raise AssertionError("project element not found")

    open_end = root.end if root.empty else root.content_start
    m = _LEADING_INDENT_RE.match(scan.masked, open_end)
    unit = m.group(2) if m is not None and m.group(2) else _DEFAULT_INDENT
    block = (
        f"{newline}{unit}<PropertyGroup>"
        f"{newline}{unit}{unit}<{_PRIMARY_FIELD}>{value}</{_PRIMARY_FIELD}>"
        f"{newline}{unit}</PropertyGroup>"
    )

    if root.empty:
        open_tag = text[root.start : root.end - 2].rstrip() + ">"
        return text[: root.start] + open_tag + block + f"{newline}</Project>" + text[root.end :]
    if m is None:
        block += newline
    return text[:open_end] + block + text[open_end:]
