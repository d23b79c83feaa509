"""
Reading MSBuild project files.

This module provides the project model provider: it opens a project file as
raw item groups (for literal inspection of Include/Remove/Condition strings)
and evaluates it into a ProjectModel with properties, items and imports.
Evaluation is intentionally small: simple ``$(Property)`` substitution, the
narrow platform condition rule, wildcard item expansion and the implicit
Directory.* imports. Property functions and general conditions are not
evaluated.
"""

import glob
import os
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from ..core.models import AggregatorDescriptor, ItemGroup, ProjectItem, ProjectModel
from ..core.paths import IS_WINDOWS, canonicalize, normalize_separators
from ..utils.logger import logger
from .conditions import is_group_applicable

PROPERTY_PATTERN = re.compile(r"\$\(([A-Za-z_][A-Za-z0-9_.\-]*)\)")

ITEM_ATTRIBUTES = {"Include", "Remove", "Exclude", "Update", "Condition",
                   "KeepMetadata", "RemoveMetadata", "KeepDuplicates", "MatchOnMetadata"}

# Files MSBuild imports implicitly for SDK-style projects, in import order
IMPLICIT_IMPORTS = ["Directory.Build.props", "Directory.Packages.props", "Directory.Build.targets"]

# Only the .NET SDKs define default Compile items
DEFAULT_ITEMS_SDK_PREFIX = "microsoft.net.sdk"
DEFAULT_COMPILE_GLOB = "**/*.cs"
DEFAULT_ITEM_EXCLUDED_DIRS = {"bin", "obj"}


@dataclass
class EvaluationState:
    """Properties, imports and pending item groups gathered while walking a project."""
    properties: Dict[str, str]
    seen: Set[str]
    imports: List[str] = field(default_factory=list)
    # (ItemGroup element, directory of the file declaring it)
    item_groups: List[Tuple[ET.Element, str]] = field(default_factory=list)


def local_name(tag) -> str:
    """Element name without its XML namespace."""
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def has_wildcard(text: str) -> bool:
    return "*" in text or "?" in text


def uses_default_items(sdk: str) -> bool:
    return sdk.strip().lower().startswith(DEFAULT_ITEMS_SDK_PREFIX)


def find_file_above(start_dir: str, file_name: str) -> Optional[str]:
    """Return the nearest ``file_name`` in ``start_dir`` or one of its parents."""
    current = canonicalize(start_dir)
    while True:
        candidate = os.path.join(current, file_name)
        if os.path.isfile(candidate):
            return candidate
        parent = os.path.dirname(current)
        if parent == current:
            return None
        current = parent


class ProjectModelProvider:
    """Opens and evaluates MSBuild project files."""

    def __init__(self, is_windows: bool = IS_WINDOWS):
        self.is_windows = is_windows

    def _load_root(self, path: str) -> ET.Element:
        full_path = canonicalize(path)
        if not os.path.isfile(full_path):
            raise FileNotFoundError(f"Project file not found: {full_path}")
        return ET.parse(full_path).getroot()

    # ------------------------------------------------------------
    # Raw structure
    # ------------------------------------------------------------

    def open_raw(self, path: str) -> AggregatorDescriptor:
        """Read the item groups of a project without evaluating them."""
        full_path = canonicalize(path)
        root = self._load_root(full_path)

        item_groups = []
        for element in root:
            if local_name(element.tag) != "ItemGroup":
                continue
            items = [self._read_item(child) for child in element if local_name(child.tag)]
            item_groups.append(ItemGroup(condition=element.get("Condition", ""), items=items))

        logger.debug(f"Opened {full_path}: {len(item_groups)} item groups")
        return AggregatorDescriptor(full_path=full_path, item_groups=item_groups)

    def _read_item(self, element: ET.Element) -> ProjectItem:
        metadata = {key: value for key, value in element.attrib.items() if key not in ITEM_ATTRIBUTES}
        for child in element:
            name = local_name(child.tag)
            if name:
                metadata[name] = (child.text or "").strip()

        return ProjectItem(
            item_type=local_name(element.tag),
            include=element.get("Include", ""),
            remove=element.get("Remove", ""),
            exclude=element.get("Exclude", ""),
            condition=element.get("Condition", ""),
            metadata=metadata,
        )

    # ------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------

    def evaluate(self, path: str, global_properties: Optional[Dict[str, str]] = None) -> ProjectModel:
        """
        Evaluate a project file.

        Properties and imports are read top to bottom with every import
        processed in place, so an import path may use properties defined
        earlier in the project or in a previously imported file. Items are
        evaluated afterwards, in the same order, against the final properties.

        Args:
            path: Path to the project file
            global_properties: Properties set before evaluation starts

        Returns:
            The evaluated ProjectModel

        Raises:
            FileNotFoundError: If the project file does not exist
            xml.etree.ElementTree.ParseError: If the project file is malformed
        """
        full_path = canonicalize(path)
        root = self._load_root(full_path)
        directory = os.path.dirname(full_path)

        properties: Dict[str, str] = dict(global_properties or {})
        properties.update(self._reserved_properties(full_path))
        state = EvaluationState(properties=properties, seen={full_path})

        sdk = self._read_sdk(root)
        implicit_props, implicit_targets = self._implicit_imports(directory, sdk)
        for import_path in implicit_props:
            self._import_file(import_path, state)
        self._evaluate_file(root, full_path, state)
        for import_path in implicit_targets:
            self._import_file(import_path, state)

        items: List[ProjectItem] = []
        if uses_default_items(sdk) and self._default_compile_items_enabled(properties):
            items.extend(self._default_compile_items(directory))
        for group, this_directory in state.item_groups:
            self._read_item_group(group, directory, self._scoped(properties, this_directory), items)

        logger.debug(f"Evaluated {full_path}: {len(items)} items, {len(state.imports)} imports")
        return ProjectModel(
            full_path=full_path,
            properties=properties,
            items=items,
            imports=state.imports,
            sdk=sdk,
        )

    def _reserved_properties(self, full_path: str) -> Dict[str, str]:
        directory = os.path.dirname(full_path)
        file_name = os.path.basename(full_path)
        return {
            "MSBuildProjectFullPath": full_path,
            "MSBuildProjectDirectory": directory,
            "MSBuildProjectFile": file_name,
            "MSBuildProjectName": os.path.splitext(file_name)[0],
            "MSBuildProjectExtension": os.path.splitext(file_name)[1],
            "MSBuildThisFileDirectory": directory + os.sep,
        }

    def substitute(self, value: str, properties: Dict[str, str]) -> str:
        """Replace ``$(Name)`` references; undefined properties expand to an empty string."""
        lowered = {key.lower(): val for key, val in properties.items()}
        return PROPERTY_PATTERN.sub(lambda match: lowered.get(match.group(1).lower(), ""), value)

    @staticmethod
    def _scoped(properties: Dict[str, str], this_directory: str) -> Dict[str, str]:
        """Properties as seen from a file in ``this_directory``."""
        return dict(properties, MSBuildThisFileDirectory=this_directory)

    def _read_sdk(self, root: ET.Element) -> str:
        sdk = root.get("Sdk", "")
        if sdk:
            return sdk
        for element in root:
            name = local_name(element.tag)
            if name == "Sdk" and element.get("Name"):
                return element.get("Name")
            if name == "Import" and element.get("Sdk"):
                return element.get("Sdk")
        return ""

    def _implicit_imports(self, directory: str, sdk: str) -> Tuple[List[str], List[str]]:
        """Directory.* files imported before and after the project body of an SDK project."""
        if not sdk:
            return [], []
        props, packages, targets = (find_file_above(directory, name) for name in IMPLICIT_IMPORTS)
        return [path for path in (props, packages) if path], [targets] if targets else []

    def _evaluate_file(self, root: ET.Element, file_path: str, state: EvaluationState) -> None:
        this_directory = os.path.dirname(file_path) + os.sep
        for element in root:
            name = local_name(element.tag)
            if name == "PropertyGroup":
                self._read_property_group(element, this_directory, state.properties)
            elif name == "ItemGroup":
                state.item_groups.append((element, this_directory))
            elif name == "Import":
                self._import(element, this_directory, state)
            elif name == "ImportGroup" and is_group_applicable(element.get("Condition", ""), self.is_windows):
                for child in element:
                    if local_name(child.tag) == "Import":
                        self._import(child, this_directory, state)

    def _read_property_group(self, group: ET.Element, this_directory: str, properties: Dict[str, str]) -> None:
        if not is_group_applicable(group.get("Condition", ""), self.is_windows):
            return
        for element in group:
            name = local_name(element.tag)
            if not name or not is_group_applicable(element.get("Condition", ""), self.is_windows):
                continue
            value = (element.text or "").strip()
            properties[name] = self.substitute(value, self._scoped(properties, this_directory))

    def _import(self, element: ET.Element, this_directory: str, state: EvaluationState) -> None:
        project = element.get("Project", "")
        if not project or element.get("Sdk"):
            return
        if not is_group_applicable(element.get("Condition", ""), self.is_windows):
            return

        value = normalize_separators(self.substitute(project, self._scoped(state.properties, this_directory)))
        if has_wildcard(value):
            logger.debug(f"Skipping wildcard import {project}")
            return
        import_path = canonicalize(value, this_directory)
        if not os.path.isfile(import_path):
            logger.debug(f"Import not found on disk, skipping: {import_path}")
            return
        self._import_file(import_path, state)

    def _import_file(self, import_path: str, state: EvaluationState) -> None:
        if import_path in state.seen:
            return
        state.seen.add(import_path)
        state.imports.append(import_path)
        self._evaluate_file(self._load_root(import_path), import_path, state)

    def _default_compile_items_enabled(self, properties: Dict[str, str]) -> bool:
        lowered = {key.lower(): val.strip().lower() for key, val in properties.items()}
        return (lowered.get("enabledefaultitems", "true") != "false"
                and lowered.get("enabledefaultcompileitems", "true") != "false")

    def _default_compile_items(self, directory: str) -> List[ProjectItem]:
        items = []
        for relative in self._expand_wildcard(DEFAULT_COMPILE_GLOB, directory):
            first_segment = relative.split(os.sep, 1)[0]
            if first_segment.lower() in DEFAULT_ITEM_EXCLUDED_DIRS:
                continue
            items.append(ProjectItem(item_type="Compile", include=relative))
        return items

    def _read_item_group(
        self,
        group: ET.Element,
        directory: str,
        properties: Dict[str, str],
        items: List[ProjectItem]
    ) -> None:
        if not is_group_applicable(group.get("Condition", ""), self.is_windows):
            return

        for element in group:
            if not local_name(element.tag):
                continue
            raw = self._read_item(element)
            if not is_group_applicable(raw.condition, self.is_windows):
                continue

            if raw.remove:
                self._remove_items(items, raw.item_type, self.substitute(raw.remove, properties), directory)
            elif raw.include:
                items.extend(self._include_items(raw, directory, properties))

    def _include_items(self, raw: ProjectItem, directory: str, properties: Dict[str, str]) -> List[ProjectItem]:
        excluded = self._match_set(self.substitute(raw.exclude, properties), directory)
        metadata = {key: self.substitute(value, properties) for key, value in raw.metadata.items()}

        result = []
        for part in self._split(self.substitute(raw.include, properties)):
            values = self._expand_wildcard(part, directory) if has_wildcard(part) else [normalize_separators(part)]
            for value in values:
                if canonicalize(value, directory) in excluded:
                    continue
                result.append(ProjectItem(item_type=raw.item_type, include=value, metadata=metadata))
        return result

    def _remove_items(self, items: List[ProjectItem], item_type: str, remove: str, directory: str) -> None:
        removed = self._match_set(remove, directory)
        items[:] = [
            item for item in items
            if not (item.is_item_type(item_type) and canonicalize(item.include, directory) in removed)
        ]

    def _match_set(self, value: str, directory: str) -> Set[str]:
        """Canonical paths named or matched by a ``;`` separated include-style value."""
        matched = set()
        for part in self._split(value):
            if has_wildcard(part):
                matched.update(canonicalize(path, directory) for path in self._expand_wildcard(part, directory))
            else:
                matched.add(canonicalize(normalize_separators(part), directory))
        return matched

    @staticmethod
    def _split(value: str) -> List[str]:
        return [part.strip() for part in value.split(";") if part.strip()]

    @staticmethod
    def _expand_wildcard(pattern: str, directory: str) -> List[str]:
        """Expand a wildcard item include into file paths relative to ``directory``."""
        pattern = normalize_separators(pattern, "/")
        if os.path.isabs(pattern):
            matches = glob.glob(pattern, recursive=True)
        else:
            matches = glob.glob(pattern, root_dir=directory, recursive=True)

        result = []
        for match in sorted(matches):
            if os.path.isfile(canonicalize(match, directory)):
                result.append(normalize_separators(match))
        return result
