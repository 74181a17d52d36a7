"""Product catalog loading and validation for YAML-based product families."""

from __future__ import annotations

import functools
import json
import logging
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from ibsparse.core.errors import CatalogLoadError, CatalogValidationError
from ibsparse.core.model import (
    EventBit,
    EventName,
    FieldName,
    LiteralModel,
    ModelName,
    ProductDefinition,
    ProductFamily,
    SubtypeTable,
    VendorModel,
)

_HEX_CODE_RE = re.compile(r"^0[xX][0-9a-fA-F]{1,4}$")
LOGGER = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


UniqueKeyLoader.yaml_implicit_resolvers = {
    key: list(value) for key, value in yaml.SafeLoader.yaml_implicit_resolvers.items()
}

# "on"/"off"/"yes" stay strings in product files
for first_char, mappings in list(UniqueKeyLoader.yaml_implicit_resolvers.items()):
    UniqueKeyLoader.yaml_implicit_resolvers[first_char] = [
        (tag, regexp)
        for tag, regexp in mappings
        if tag != "tag:yaml.org,2002:bool"
    ]


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[Any, Any]:
    mapping: dict[Any, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise CatalogValidationError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


@dataclass(frozen=True)
class ProductCatalog:
    families: Mapping[str, ProductFamily]
    warnings: tuple[str, ...] = ()

    def list_families(self) -> list[ProductFamily]:
        return sorted(self.families.values(), key=lambda f: (f.product, f.id))


@functools.lru_cache(maxsize=1)
def _load_schema_validator() -> Any:
    schema_text = resources.files("ibsparse.schemas").joinpath("products.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _product_dirs() -> tuple[Path, Path]:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    xdg_data = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local/share"))
    return xdg_config / "ibsparse/products", xdg_data / "ibsparse/products"


def _read_yaml(path: Path | Traversable) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CatalogLoadError(f"Could not read product file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise CatalogValidationError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise CatalogValidationError(f"Product file {path} must contain a mapping at root")
    return loaded


def _normalize_code(value: int | str, *, context: str, limit: int = 0xFFFF) -> int:
    if isinstance(value, str):
        normalized = value.strip()
        if not _HEX_CODE_RE.match(normalized):
            raise CatalogValidationError(f"{context} must be an integer or 0x-prefixed hex string")
        code = int(normalized, 16)
    else:
        code = value
    if not 0 <= code <= limit:
        raise CatalogValidationError(f"{context} must be within 0..0x{limit:X}")
    return code


def _build_model(raw: str | dict[str, Any], *, context: str) -> ModelName:
    if isinstance(raw, str):
        return LiteralModel(raw)
    names = {
        _normalize_code(entry["vendor"], context=f"{context}.by_vendor"): entry["name"]
        for entry in raw["by_vendor"]
    }
    return VendorModel(names=MappingProxyType(names), default=raw["default"])


def _build_events(raw: list[Any]) -> tuple[EventBit, ...]:
    events: list[EventBit] = []
    for entry in raw:
        if isinstance(entry, str):
            event = EventName.from_key(entry)
            bit = event.default_bit
        else:
            event, bit = EventName.from_key(entry["name"]), entry["bit"]
        events.append(EventBit(event=event, mask=1 << bit))
    return tuple(events)


def _build_definition(raw: dict[str, Any], *, context: str) -> ProductDefinition:
    fields = tuple(FieldName(name) for name in raw["fields"])
    events = _build_events(raw.get("events", []))
    if events and FieldName.EVENTS not in fields:
        raise CatalogValidationError(f"{context} lists events but has no 'events' field")
    return ProductDefinition(
        model=_build_model(raw["model"], context=context),
        fields=fields,
        events=events,
        accel_scale=raw.get("accel_scale"),
    )


def _build_family(doc: dict[str, Any], source: Path | Traversable) -> ProductFamily:
    validator = _load_schema_validator()
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise CatalogValidationError(f"Schema validation failed for {source}{where}: {exc.message}") from exc

    family_id = doc["id"]
    product = _normalize_code(doc["match"]["product"], context=f"{family_id}.match.product")
    vendors = tuple(
        _normalize_code(v, context=f"{family_id}.match.vendors") for v in doc["match"].get("vendors", [])
    )

    layout: ProductDefinition | SubtypeTable
    if "definition" in doc:
        layout = _build_definition(doc["definition"], context=f"{family_id}.definition")
    else:
        rows: dict[int, ProductDefinition] = {}
        for entry in doc["subtypes"]:
            subtype = _normalize_code(entry["subtype"], context=f"{family_id}.subtype", limit=0xFF)
            if subtype in rows:
                raise CatalogValidationError(f"{family_id} defines subtype 0x{subtype:02X} twice")
            rows[subtype] = _build_definition(entry, context=f"{family_id}.subtype[0x{subtype:02X}]")
        legacy = frozenset(
            _normalize_code(v, context=f"{family_id}.legacy_subtypes", limit=0xFF)
            for v in doc.get("legacy_subtypes", [])
        )
        overlap = legacy & rows.keys()
        if overlap:
            raise CatalogValidationError(
                f"{family_id}: legacy subtypes {sorted(overlap)} also have definitions"
            )
        layout = SubtypeTable(index=doc["subtype_index"], rows=MappingProxyType(rows), legacy_subtypes=legacy)

    return ProductFamily(
        id=family_id,
        name=doc["name"],
        vendors=vendors,
        product=product,
        layout=layout,
    )


def _iter_packaged_product_paths() -> list[Traversable]:
    product_root = resources.files("ibsparse.products")
    return [item for item in product_root.iterdir() if item.name.endswith((".yml", ".yaml"))]


def _iter_user_product_paths() -> list[Path]:
    paths: list[Path] = []
    for directory in _product_dirs():
        if not directory.exists() or not directory.is_dir():
            continue
        paths.extend(sorted(p for p in directory.iterdir() if p.suffix in {".yml", ".yaml"}))
    return paths


def _codes(family: ProductFamily) -> set[tuple[int | None, int]]:
    if family.any_vendor:
        return {(None, family.product)}
    return {(vendor, family.product) for vendor in family.vendors}


def _check_conflicts(families: Mapping[str, ProductFamily]) -> None:
    owners: dict[tuple[int | None, int], str] = {}
    for family in families.values():
        for code in _codes(family):
            other = owners.get(code)
            if other is not None:
                vendor = "any vendor" if code[0] is None else f"vendor 0x{code[0]:04X}"
                raise CatalogValidationError(
                    f"Families '{other}' and '{family.id}' both claim product 0x{code[1]:04X} for {vendor}"
                )
            owners[code] = family.id


def load_catalog() -> ProductCatalog:
    families: dict[str, ProductFamily] = {}
    warnings: list[str] = []

    for path in sorted(_iter_packaged_product_paths(), key=lambda p: p.name):
        doc = _read_yaml(path)
        family = _build_family(doc, path)
        families[family.id] = family

    for path in _iter_user_product_paths():
        doc = _read_yaml(path)
        family = _build_family(doc, path)
        if family.id in families:
            warning = f"User product family '{family.id}' overrides packaged definition"
            LOGGER.warning(warning)
            warnings.append(warning)
        families[family.id] = family

    _check_conflicts(families)
    LOGGER.debug("Loaded %d product families", len(families))
    return ProductCatalog(families=MappingProxyType(families), warnings=tuple(warnings))


@functools.lru_cache(maxsize=1)
def default_catalog() -> ProductCatalog:
    """Process-wide catalog, loaded on first use and shared read-only."""
    return load_catalog()
