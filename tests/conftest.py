"""
Shared fixtures: small MSBuild repositories written into ``tmp_path``.
"""

import os

import pytest


def sdk_project(*references: str, body: str = "") -> str:
    """XML for an SDK-style C# project referencing ``references``."""
    items = "\n".join(f'    <ProjectReference Include="{ref}" />' for ref in references)
    return f"""<Project Sdk="Microsoft.NET.Sdk">
  <PropertyGroup>
    <TargetFramework>net8.0</TargetFramework>
  </PropertyGroup>
  <ItemGroup>
{items}
  </ItemGroup>
{body}
</Project>
"""


def traversal_project(*item_groups: str) -> str:
    """XML for a traversal project made of the given ItemGroup snippets."""
    groups = "\n".join(item_groups)
    return f"""<Project Sdk="Microsoft.Build.Traversal/4.1.0">
{groups}
</Project>
"""


@pytest.fixture
def make_file(tmp_path):
    """Write a file below ``tmp_path`` and return its absolute path."""

    def _make_file(relative: str, content: str = "") -> str:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return str(path)

    return _make_file


@pytest.fixture
def repo(tmp_path, make_file):
    """
    A repository with an application referencing a library.

    repo/
      Directory.Build.props
      Directory.Packages.props
      app/app.csproj -> lib/lib.csproj
      app/Program.cs
      lib/lib.csproj
      lib/Foo.cs
      lib/obj/Generated.cs
      tool/tool.csproj
      tool/Tool.cs
    """
    make_file("repo/Directory.Build.props", "<Project><PropertyGroup><LangVersion>latest</LangVersion></PropertyGroup></Project>")
    make_file("repo/Directory.Packages.props", "<Project><PropertyGroup><ManagePackageVersionsCentrally>true</ManagePackageVersionsCentrally></PropertyGroup></Project>")
    make_file("repo/app/app.csproj", sdk_project("../lib/lib.csproj"))
    make_file("repo/app/Program.cs", "class Program {}")
    make_file("repo/lib/lib.csproj", sdk_project())
    make_file("repo/lib/Foo.cs", "class Foo {}")
    make_file("repo/lib/obj/Generated.cs", "class Generated {}")
    make_file("repo/tool/tool.csproj", sdk_project())
    make_file("repo/tool/Tool.cs", "class Tool {}")
    return str(tmp_path / "repo")


def repo_path(repo: str, relative: str) -> str:
    return os.path.join(repo, *relative.split("/"))
