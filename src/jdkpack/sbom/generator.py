"""
SBOM document generators.

The generator is driven through a small, fixed set of calls, each of which
updates the document at a path, the same contract the external CycloneDX
command-line tooling offers. CycloneDXJsonGenerator implements it directly
on a CycloneDX 1.4 JSON document.
"""

import json
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

from ..errors import JdkPackError

SPEC_VERSION = "1.4"


class SBOMError(JdkPackError):
    """Raised when an SBOM document cannot be created or updated."""

    pass


class SBOMDocumentGenerator(ABC):
    """Calls made, in order, while assembling a build SBOM."""

    @abstractmethod
    def create(self, path: Path) -> None:
        ...

    @abstractmethod
    def add_default_metadata(self, path: Path) -> None:
        ...

    @abstractmethod
    def add_metadata_component(
        self, path: Path, name: str, component_type: str, version: str, description: str
    ) -> None:
        ...

    @abstractmethod
    def add_metadata_property(self, path: Path, name: str, value: str) -> None:
        ...

    @abstractmethod
    def add_component(self, path: Path, name: str, version: str, description: str) -> None:
        ...

    @abstractmethod
    def add_component_property(self, path: Path, component: str, name: str, value: str) -> None:
        ...

    @abstractmethod
    def add_metadata_tool(self, path: Path, name: str, version: str) -> None:
        ...


class CycloneDXJsonGenerator(SBOMDocumentGenerator):
    """Writes CycloneDX JSON documents."""

    def _load(self, path: Path) -> Dict[str, Any]:
        try:
            return json.loads(Path(path).read_text(encoding="utf-8"))
        except FileNotFoundError:
            raise SBOMError(f"SBOM document {path} has not been created") from None
        except json.JSONDecodeError as e:
            raise SBOMError(f"SBOM document {path} is not valid JSON: {e}") from e

    def _save(self, path: Path, document: Dict[str, Any]) -> None:
        Path(path).write_text(json.dumps(document, indent=2) + "\n", encoding="utf-8")

    def _component(self, document: Dict[str, Any], name: str) -> Dict[str, Any]:
        for component in document.get("components", []):
            if component.get("name") == name:
                return component
        raise SBOMError(f"SBOM has no component named '{name}'")

    @staticmethod
    def _append_property(target: Dict[str, Any], name: str, value: str) -> None:
        properties: List[Dict[str, str]] = target.setdefault("properties", [])
        properties.append({"name": name, "value": value})

    def create(self, path: Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self._save(
            path,
            {
                "bomFormat": "CycloneDX",
                "specVersion": SPEC_VERSION,
                "serialNumber": f"urn:uuid:{uuid.uuid4()}",
                "version": 1,
                "components": [],
            },
        )

    def add_default_metadata(self, path: Path) -> None:
        document = self._load(path)
        metadata = document.setdefault("metadata", {})
        metadata["timestamp"] = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        metadata.setdefault("tools", [])
        self._save(path, document)

    def add_metadata_component(
        self, path: Path, name: str, component_type: str, version: str, description: str
    ) -> None:
        document = self._load(path)
        document.setdefault("metadata", {})["component"] = {
            "type": component_type,
            "name": name,
            "version": version,
            "description": description,
        }
        self._save(path, document)

    def add_metadata_property(self, path: Path, name: str, value: str) -> None:
        document = self._load(path)
        self._append_property(document.setdefault("metadata", {}), name, value)
        self._save(path, document)

    def add_component(self, path: Path, name: str, version: str, description: str) -> None:
        document = self._load(path)
        document.setdefault("components", []).append(
            {
                "type": "framework",
                "name": name,
                "version": version,
                "description": description,
            }
        )
        self._save(path, document)

    def add_component_property(self, path: Path, component: str, name: str, value: str) -> None:
        document = self._load(path)
        self._append_property(self._component(document, component), name, value)
        self._save(path, document)

    def add_metadata_tool(self, path: Path, name: str, version: str) -> None:
        document = self._load(path)
        tools = document.setdefault("metadata", {}).setdefault("tools", [])
        tools.append({"name": name, "version": version})
        self._save(path, document)
