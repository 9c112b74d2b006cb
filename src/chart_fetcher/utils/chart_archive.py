"""Read chart metadata out of packaged (.tgz) chart archives."""

from __future__ import annotations

import tarfile
from pathlib import Path

import yaml

# Prefer the C-accelerated YAML loader when available.
_YamlLoader = getattr(yaml, "CSafeLoader", yaml.SafeLoader)


def read_chart_yaml(archive: Path) -> dict:
    """Return the parsed top-level ``<chart>/Chart.yaml`` of a chart archive.

    Raises ValueError if the archive holds no top-level Chart.yaml, and
    tarfile.TarError / yaml.YAMLError if the archive or document is corrupt.
    """
    with tarfile.open(archive, mode="r:gz") as tar:
        for member in tar.getmembers():
            parts = member.name.split("/")
            if len(parts) == 2 and parts[1] == "Chart.yaml" and member.isfile():
                handle = tar.extractfile(member)
                if handle is None:
                    break
                data = yaml.load(handle.read().decode("utf-8"), Loader=_YamlLoader)
                if not isinstance(data, dict):
                    raise ValueError(f"Chart.yaml in {archive} is not a mapping")
                return data
    raise ValueError(f"no Chart.yaml found in {archive}")
