"""Staging area on the local filesystem.

Layout::

    <base>/export/<platform>/<service>.json
    <base>/export/<platform>/<group>/<name>.json
    <base>/export/<platform>/<group>/<name>-oas-definition.json
    <base>/export/<platform>/<group>/<name>-oas.<ext>
    <base>/canonical/<group>/<canonical-name>.json
    <base>/canonical/<group>/<canonical-name>-oas.json

The staging area is not locked; concurrent runs against the same base
directory may overwrite each other's files.
"""

import json
import re
import shutil
from pathlib import Path
from typing import Any

from apim_sync.client.exceptions import StagingError
from apim_sync.config import PathConfig
from apim_sync.utils.logging import get_logger

logger = get_logger(__name__)

SCHEMA_DEFINITION_SUFFIX = "-oas-definition.json"
SCHEMA_BODY_INFIX = "-oas."

_SCHEMA_BODY = re.compile(r"-oas\.[A-Za-z0-9]+$")


def is_schema_file(filename: str) -> bool:
    """True for schema descriptor and schema body files."""
    return filename.endswith(SCHEMA_DEFINITION_SUFFIX) or bool(_SCHEMA_BODY.search(filename))


class Stager:
    """Reads and writes pipeline artifacts in the staging area."""

    def __init__(self, paths: PathConfig | None = None):
        paths = paths or PathConfig()
        self.base_dir = Path(paths.base_dir)
        self.export_dir = self.base_dir / paths.export_dir
        self.canonical_dir = self.base_dir / paths.canonical_dir

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def platform_dir(self, platform: str) -> Path:
        return self.export_dir / platform

    def group_dir(self, platform: str, group: str) -> Path:
        return self.platform_dir(platform) / group

    def api_path(self, platform: str, group: str, name: str) -> Path:
        return self.group_dir(platform, group) / f"{name}.json"

    def schema_definition_path(self, platform: str, group: str, name: str) -> Path:
        return self.group_dir(platform, group) / f"{name}{SCHEMA_DEFINITION_SUFFIX}"

    def schema_body_path(self, platform: str, group: str, name: str, extension: str) -> Path:
        return self.group_dir(platform, group) / f"{name}{SCHEMA_BODY_INFIX}{extension}"

    def service_path(self, platform: str, service_name: str) -> Path:
        return self.platform_dir(platform) / f"{service_name}.json"

    def canonical_group_dir(self, group: str) -> Path:
        return self.canonical_dir / group

    def canonical_path(self, group: str, name: str) -> Path:
        return self.canonical_group_dir(group) / f"{name}.json"

    def canonical_schema_path(self, group: str, name: str) -> Path:
        return self.canonical_group_dir(group) / f"{name}{SCHEMA_BODY_INFIX}json"

    # ------------------------------------------------------------------
    # Low-level I/O
    # ------------------------------------------------------------------

    def write_json(self, path: Path, data: Any) -> Path:
        """Write ``data`` as pretty-printed JSON, creating parent directories."""
        return self.write_bytes(path, json.dumps(data, indent=2).encode("utf-8"))

    def write_bytes(self, path: Path, content: bytes) -> Path:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        except OSError as e:
            raise StagingError(f"Cannot write staging file ({e.strerror})", str(path)) from e

        logger.debug("staging_file_written", path=str(path), size=len(content))
        return path

    def read_json(self, path: Path) -> Any:
        """Read a JSON staging file.

        Raises:
            StagingError: If the file cannot be read or is not valid JSON
        """
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except OSError as e:
            raise StagingError(f"Cannot read staging file ({e.strerror})", str(path)) from e
        except ValueError as e:
            raise StagingError(f"Invalid JSON in staging file ({e})", str(path)) from e

    def copy_file(self, source: Path, destination: Path) -> Path:
        """Copy a file byte for byte."""
        try:
            content = source.read_bytes()
        except OSError as e:
            raise StagingError(f"Cannot read staging file ({e.strerror})", str(source)) from e
        return self.write_bytes(destination, content)

    # ------------------------------------------------------------------
    # Platform artifacts
    # ------------------------------------------------------------------

    def api_exists(self, platform: str, group: str, name: str) -> bool:
        return self.api_path(platform, group, name).is_file()

    def write_platform_api(self, platform: str, group: str, name: str, data: Any) -> Path:
        return self.write_json(self.api_path(platform, group, name), data)

    def write_schema(
        self,
        platform: str,
        group: str,
        name: str,
        descriptor: dict[str, Any],
        extension: str,
        document: str,
    ) -> tuple[Path, Path]:
        """Write a schema descriptor and its document body."""
        definition = self.write_json(self.schema_definition_path(platform, group, name), descriptor)
        body = self.write_bytes(
            self.schema_body_path(platform, group, name, extension), document.encode("utf-8")
        )
        return definition, body

    def write_service(self, platform: str, service_name: str, data: Any) -> Path:
        return self.write_json(self.service_path(platform, service_name), data)

    def read_service(self, platform: str, service_name: str) -> dict[str, Any] | None:
        """Read service metadata, or None when it was never exported."""
        path = self.service_path(platform, service_name)
        if not service_name or not path.is_file():
            return None
        return self.read_json(path)

    def list_groups(self, platform: str) -> list[str]:
        """Group directories of a platform, sorted by name."""
        return self._list_dirs(self.platform_dir(platform))

    def list_api_files(self, platform: str, group: str) -> list[Path]:
        """API files of a group, schema files excluded."""
        return self._list_api_files(self.group_dir(platform, group))

    def find_schema_body(self, platform: str, group: str, name: str) -> Path | None:
        """The JSON schema body staged next to an API, if any."""
        path = self.schema_body_path(platform, group, name, "json")
        return path if path.is_file() else None

    def clean(self, platform: str) -> bool:
        """Remove all staged artifacts of a platform.

        Returns:
            True if anything was removed
        """
        path = self.platform_dir(platform)
        if not path.exists():
            return False
        try:
            shutil.rmtree(path)
        except OSError as e:
            raise StagingError(f"Cannot remove staging directory ({e.strerror})", str(path)) from e
        logger.info("staging_cleaned", platform=platform, path=str(path))
        return True

    # ------------------------------------------------------------------
    # Canonical artifacts
    # ------------------------------------------------------------------

    def write_canonical(self, group: str, name: str, data: Any) -> Path:
        return self.write_json(self.canonical_path(group, name), data)

    def list_canonical_groups(self) -> list[str]:
        return self._list_dirs(self.canonical_dir)

    def list_canonical_files(self, group: str) -> list[Path]:
        return self._list_api_files(self.canonical_group_dir(group))

    def find_canonical_schema(self, group: str, name: str) -> Path | None:
        path = self.canonical_schema_path(group, name)
        return path if path.is_file() else None

    # ------------------------------------------------------------------

    @staticmethod
    def _list_dirs(path: Path) -> list[str]:
        if not path.is_dir():
            return []
        try:
            return sorted(entry.name for entry in path.iterdir() if entry.is_dir())
        except OSError as e:
            raise StagingError(f"Cannot list staging directory ({e.strerror})", str(path)) from e

    @staticmethod
    def _list_api_files(path: Path) -> list[Path]:
        if not path.is_dir():
            return []
        try:
            return sorted(
                entry
                for entry in path.iterdir()
                if entry.is_file() and entry.suffix == ".json" and not is_schema_file(entry.name)
            )
        except OSError as e:
            raise StagingError(f"Cannot list staging directory ({e.strerror})", str(path)) from e
