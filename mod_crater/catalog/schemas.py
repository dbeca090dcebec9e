"""Mod portal JSON schemas (``/api/mods`` and ``/api/mods/<name>/full``)."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mod_crater.dependency_parser import parse_dependencies, parse_dependency
from mod_crater.models import DependencyDescriptor


class ShortInfoJson(BaseModel):
    model_config = ConfigDict(extra="ignore")

    factorio_version: str = ""


class ReleaseSummary(BaseModel):
    model_config = ConfigDict(extra="ignore")

    version: str
    info_json: ShortInfoJson = Field(default_factory=ShortInfoJson)


class ModSummary(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    latest_release: ReleaseSummary | None = None


class ModListResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    results: list[ModSummary]


class FullInfoJson(BaseModel):
    model_config = ConfigDict(extra="ignore")

    factorio_version: str = ""
    dependencies: list[DependencyDescriptor] = Field(default_factory=list)

    @field_validator("dependencies", mode="before")
    @classmethod
    def _parse_dependency_strings(cls, value: Any) -> list[DependencyDescriptor]:
        # A single string or a list of strings.
        if value is None or isinstance(value, str):
            return parse_dependencies(value)
        if isinstance(value, list):
            if not all(isinstance(item, (str, DependencyDescriptor)) for item in value):
                raise ValueError("dependencies must be a string or a list of strings")
            return [
                item if isinstance(item, DependencyDescriptor) else parse_dependency(item)
                for item in value
            ]
        raise ValueError("dependencies must be a string or a list of strings")


class Release(BaseModel):
    model_config = ConfigDict(extra="ignore")

    version: str
    download_url: str = ""
    file_name: str = ""
    released_at: str = ""
    sha1: str = ""
    info_json: FullInfoJson = Field(default_factory=FullInfoJson)


class ModFull(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    title: str = ""
    owner: str = ""
    summary: str = ""
    category: str = ""
    deprecated: bool = False
    downloads_count: int = 0
    score: float = 0.0
    releases: list[Release] = Field(default_factory=list)
