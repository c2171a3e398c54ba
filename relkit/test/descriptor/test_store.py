"""Tests for relkit.descriptor.store."""

from __future__ import annotations

from pathlib import Path

from relkit.core.result import Err, Ok
from relkit.descriptor.store import (
    ProjectDescriptor,
    load_descriptor,
    read_version,
    save_descriptor,
    write_version,
)

SDK_PROJECT = """<Project Sdk="Microsoft.NET.Sdk">

  <PropertyGroup>
    <TargetFramework>net8.0</TargetFramework>
    <!-- <Version>9.9.9</Version> -->
    <Version>1.2.3</Version>
    <Authors>Team</Authors>
  </PropertyGroup>

  <ItemGroup>
    <PackageReference Include="Newtonsoft.Json" Version="13.0.3" />
  </ItemGroup>

</Project>
"""

NO_VERSION = """<Project Sdk="Microsoft.NET.Sdk">
  <PropertyGroup>
    <TargetFramework>net8.0</TargetFramework>
  </PropertyGroup>
</Project>
"""

NO_GROUP = """<Project Sdk="Microsoft.NET.Sdk">
  <ItemGroup>
    <Compile Include="a.cs" />
  </ItemGroup>
</Project>
"""


TARGET_FIRST = """<Project Sdk="Microsoft.NET.Sdk">
  <Target Name="Stamp" BeforeTargets="Build">
    <PropertyGroup>
      <Version>9.9.9</Version>
    </PropertyGroup>
  </Target>
  <PropertyGroup>
    <Version>1.2.3</Version>
  </PropertyGroup>
</Project>
"""

CDATA_VERSION = """<Project>
  <PropertyGroup>
    <Version><![CDATA[1.2.3]]></Version>
  </PropertyGroup>
</Project>
"""

COMMENTED_VALUE = """<Project>
  <PropertyGroup>
    <Version>1.2.3<!-- bump --></Version>
  </PropertyGroup>
</Project>
"""


def _doc(text: str) -> ProjectDescriptor:
    return ProjectDescriptor(path=Path("Lib.csproj"), text=text)


# =============================================================================
# read_version
# =============================================================================


class TestReadVersion:
    def test_primary_field(self) -> None:
        assert read_version(_doc(SDK_PROJECT)) == "1.2.3"

    def test_ignores_commented_out_field(self) -> None:
        text = NO_VERSION.replace(
            "<TargetFramework>", "<!-- <Version>9.9.9</Version> --><TargetFramework>"
        )
        assert read_version(_doc(text)) is None

    def test_absent(self) -> None:
        assert read_version(_doc(NO_VERSION)) is None
        assert read_version(_doc(NO_GROUP)) is None

    def test_falls_back_to_later_group(self) -> None:
        text = """<Project>
  <PropertyGroup>
    <TargetFramework>net8.0</TargetFramework>
  </PropertyGroup>
  <PropertyGroup Condition="'$(Configuration)' == 'Release'">
    <Version>2.0.0</Version>
  </PropertyGroup>
</Project>
"""
        assert read_version(_doc(text)) == "2.0.0"

    def test_empty_primary_falls_back(self) -> None:
        text = """<Project>
  <PropertyGroup>
    <Version></Version>
  </PropertyGroup>
  <PropertyGroup>
    <Version>3.0.0</Version>
  </PropertyGroup>
</Project>
"""
        assert read_version(_doc(text)) == "3.0.0"

    def test_package_version_is_last_resort(self) -> None:
        text = """<Project>
  <PropertyGroup>
    <PackageVersion>4.0.0-dev.2</PackageVersion>
  </PropertyGroup>
</Project>
"""
        assert read_version(_doc(text)) == "4.0.0-dev.2"

    def test_version_prefix_is_not_a_version_field(self) -> None:
        text = NO_VERSION.replace(
            "<TargetFramework>", "<VersionPrefix>5.0.0</VersionPrefix><TargetFramework>"
        )
        assert read_version(_doc(text)) is None

    def test_strips_whitespace_and_unescapes(self) -> None:
        text = NO_VERSION.replace(
            "<TargetFramework>net8.0</TargetFramework>",
            "<Version>\n      1.0.0-a&amp;b\n    </Version>",
        )
        assert read_version(_doc(text)) == "1.0.0-a&b"

    def test_ignores_groups_nested_in_targets(self) -> None:
        assert read_version(_doc(TARGET_FIRST)) == "1.2.3"

    def test_ignores_groups_nested_in_choose(self) -> None:
        text = """<Project>
  <Choose>
    <When Condition="'$(CI)' == 'true'">
      <PropertyGroup>
        <Version>8.8.8</Version>
      </PropertyGroup>
    </When>
  </Choose>
</Project>
"""
        assert read_version(_doc(text)) is None

    def test_condition_with_angle_brackets(self) -> None:
        text = """<Project>
  <PropertyGroup Condition="'$(Major)' > '1' and '$(Path)' != 'a/b'">
    <Version>6.0.0</Version>
  </PropertyGroup>
</Project>
"""
        assert read_version(_doc(text)) == "6.0.0"

    def test_cdata_value(self) -> None:
        assert read_version(_doc(CDATA_VERSION)) == "1.2.3"

    def test_comment_inside_value(self) -> None:
        assert read_version(_doc(COMMENTED_VALUE)) == "1.2.3"


# =============================================================================
# write_version
# =============================================================================


class TestWriteVersion:
    def test_overwrites_existing_field_only(self) -> None:
        updated = write_version(_doc(SDK_PROJECT), "1.2.4-dev.1")

        expected = SDK_PROJECT.replace(
            "    <Version>1.2.3</Version>", "    <Version>1.2.4-dev.1</Version>"
        )
        assert updated.text == expected
        assert "<!-- <Version>9.9.9</Version> -->" in updated.text
        assert 'Version="13.0.3"' in updated.text

    def test_returns_new_value_and_keeps_input(self) -> None:
        original = _doc(SDK_PROJECT)
        updated = write_version(original, "2.0.0")

        assert original.text == SDK_PROJECT
        assert updated.path == original.path
        assert read_version(updated) == "2.0.0"

    def test_inserts_into_first_group(self) -> None:
        updated = write_version(_doc(NO_VERSION), "1.0.0")

        assert updated.text == (
            '<Project Sdk="Microsoft.NET.Sdk">\n'
            "  <PropertyGroup>\n"
            "    <Version>1.0.0</Version>\n"
            "    <TargetFramework>net8.0</TargetFramework>\n"
            "  </PropertyGroup>\n"
            "</Project>\n"
        )
        assert updated.text.count("<Version>") == 1

    def test_creates_group_when_missing(self) -> None:
        updated = write_version(_doc(NO_GROUP), "1.0.0")

        assert updated.text == (
            '<Project Sdk="Microsoft.NET.Sdk">\n'
            "  <PropertyGroup>\n"
            "    <Version>1.0.0</Version>\n"
            "  </PropertyGroup>\n"
            "  <ItemGroup>\n"
            '    <Compile Include="a.cs" />\n'
            "  </ItemGroup>\n"
            "</Project>\n"
        )

    def test_creates_group_in_self_closing_project(self) -> None:
        updated = write_version(_doc('<Project Sdk="Microsoft.NET.Sdk" />\n'), "1.0.0")

        assert updated.text == (
            '<Project Sdk="Microsoft.NET.Sdk">\n'
            "  <PropertyGroup>\n"
            "    <Version>1.0.0</Version>\n"
            "  </PropertyGroup>\n"
            "</Project>\n"
        )

    def test_fills_empty_group(self) -> None:
        text = "<Project>\n  <PropertyGroup></PropertyGroup>\n</Project>\n"
        updated = write_version(_doc(text), "1.0.0")

        assert updated.text == (
            "<Project>\n"
            "  <PropertyGroup>\n"
            "    <Version>1.0.0</Version>\n"
            "  </PropertyGroup>\n"
            "</Project>\n"
        )

    def test_fills_self_closing_version_element(self) -> None:
        text = NO_VERSION.replace(
            "<TargetFramework>net8.0</TargetFramework>", "<Version />"
        )
        updated = write_version(_doc(text), "1.0.0")

        assert updated.text == NO_VERSION.replace(
            "<TargetFramework>net8.0</TargetFramework>", "<Version>1.0.0</Version>"
        )

    def test_overwrites_fallback_field(self) -> None:
        text = """<Project>
  <PropertyGroup>
    <Version></Version>
  </PropertyGroup>
  <PropertyGroup>
    <Version>3.0.0</Version>
  </PropertyGroup>
</Project>
"""
        updated = write_version(_doc(text), "3.0.1-dev.1")

        assert updated.text == text.replace("3.0.0", "3.0.1-dev.1")

    def test_overwrites_package_version(self) -> None:
        text = "<Project><PropertyGroup><PackageVersion>4.0.0</PackageVersion></PropertyGroup></Project>"
        updated = write_version(_doc(text), "4.0.1")

        assert updated.text == text.replace("4.0.0", "4.0.1")

    def test_keeps_crlf_line_endings(self) -> None:
        text = NO_VERSION.replace("\n", "\r\n")
        updated = write_version(_doc(text), "1.0.0")

        assert "\r\n    <Version>1.0.0</Version>\r\n" in updated.text
        assert "\n" not in updated.text.replace("\r\n", "")

    def test_escapes_markup(self) -> None:
        updated = write_version(_doc(NO_VERSION), "1.0.0-a&b")

        assert "<Version>1.0.0-a&amp;b</Version>" in updated.text
        assert read_version(updated) == "1.0.0-a&b"

    def test_target_group_is_left_alone(self) -> None:
        updated = write_version(_doc(TARGET_FIRST), "1.2.4")

        assert updated.text == TARGET_FIRST.replace("1.2.3", "1.2.4")
        assert "<Version>9.9.9</Version>" in updated.text

    def test_inserts_into_top_level_group_not_target(self) -> None:
        text = TARGET_FIRST.replace("    <Version>1.2.3</Version>\n", "")

        updated = write_version(_doc(text), "1.0.0")

        assert updated.text.count("<Version>") == 2
        assert "<Version>9.9.9</Version>" in updated.text
        assert read_version(updated) == "1.0.0"

    def test_overwrites_cdata_in_place(self) -> None:
        updated = write_version(_doc(CDATA_VERSION), "1.2.4")

        assert updated.text == CDATA_VERSION.replace("1.2.3", "1.2.4")
        assert updated.text.count("<Version>") == 1

    def test_keeps_comment_inside_value(self) -> None:
        updated = write_version(_doc(COMMENTED_VALUE), "1.2.4")

        assert updated.text == COMMENTED_VALUE.replace("1.2.3", "1.2.4")
        assert "<!-- bump -->" in updated.text

    def test_keeps_whitespace_around_value(self) -> None:
        text = NO_VERSION.replace(
            "<TargetFramework>net8.0</TargetFramework>", "<Version>\n      1.0.0\n    </Version>"
        )

        updated = write_version(_doc(text), "1.0.1")

        assert updated.text == text.replace("1.0.0", "1.0.1")

    def test_writing_twice_is_same_as_once(self) -> None:
        for text in (SDK_PROJECT, NO_VERSION, NO_GROUP, CDATA_VERSION, COMMENTED_VALUE):
            once = write_version(_doc(text), "7.7.7")
            twice = write_version(once, "7.7.7")
            assert twice == once


# =============================================================================
# load / save
# =============================================================================


class TestLoadSave:
    def test_round_trip_preserves_bytes(self, tmp_path: Path) -> None:
        path = tmp_path / "Lib.csproj"
        raw = b"\xef\xbb\xbf" + SDK_PROJECT.replace("\n", "\r\n").encode("utf-8")
        path.write_bytes(raw)

        loaded = load_descriptor(path)
        assert isinstance(loaded, Ok)
        assert read_version(loaded.value) == "1.2.3"

        assert save_descriptor(write_version(loaded.value, "1.2.4")) == Ok(None)

        assert path.read_bytes() == raw.replace(b">1.2.3<", b">1.2.4<")

    def test_load_namespaced_project(self, tmp_path: Path) -> None:
        path = tmp_path / "Legacy.csproj"
        path.write_text(
            '<?xml version="1.0" encoding="utf-8"?>\n'
            '<Project ToolsVersion="15.0" '
            'xmlns="http://schemas.microsoft.com/developer/msbuild/2003">\n'
            "  <PropertyGroup>\n"
            "    <Version>0.1.0</Version>\n"
            "  </PropertyGroup>\n"
            "</Project>\n",
            encoding="utf-8",
        )

        loaded = load_descriptor(path)

        assert isinstance(loaded, Ok)
        assert read_version(loaded.value) == "0.1.0"

    def test_load_missing_file(self, tmp_path: Path) -> None:
        result = load_descriptor(tmp_path / "missing.csproj")

        assert isinstance(result, Err)
        assert result.error.kind == "read"
        assert "missing.csproj" in result.error.message

    def test_load_malformed_xml(self, tmp_path: Path) -> None:
        path = tmp_path / "Broken.csproj"
        path.write_text("<Project><PropertyGroup></Project>", encoding="utf-8")

        result = load_descriptor(path)

        assert isinstance(result, Err)
        assert result.error.kind == "parse"

    def test_load_rejects_non_project_root(self, tmp_path: Path) -> None:
        path = tmp_path / "package.csproj"
        path.write_text("<Package><Version>1.0.0</Version></Package>", encoding="utf-8")

        result = load_descriptor(path)

        assert isinstance(result, Err)
        assert result.error.kind == "parse"
        assert "<Package>" in result.error.reason

    def test_save_failure_is_an_error(self, tmp_path: Path) -> None:
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("", encoding="utf-8")
        descriptor = ProjectDescriptor(path=blocker / "Lib.csproj", text=NO_VERSION)

        result = save_descriptor(descriptor)

        assert isinstance(result, Err)
        assert result.error.kind == "write"
