"""
Table Template Catalog

Per-table settings that cannot be read from a record type:

    primary_keys     - the table's key fields (compound keys allowed)
    excluded_fields  - members that are never stored
    type_overrides   - provider -> field -> SQL type replacing the catalog type

Templates are loaded from YAML:

    templates:
      Invoice:
        primary_keys: [CompanyId, INVOICE_NUMBER]
        excluded_fields: [memorisedName]
      TestTable:
        primary_keys: [Primary1, Primary2]
        type_overrides:
          sqlserver:
            Primary2: nvarchar(20)

A table without a template gets empty defaults, which means an auto-increment
``id`` key is synthesized for it.
"""

import logging
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError

from anybase.connection.descriptor import DatabaseProvider
from anybase.shared.exceptions import TemplateCatalogError

logger = logging.getLogger(__name__)

BUNDLED_TEMPLATES_PATH = Path(__file__).resolve().parent.parent / "templates.yaml"


class TableTemplate(BaseModel):
    """Settings for one table."""
    primary_keys: List[str] = Field(default_factory=list)
    excluded_fields: List[str] = Field(default_factory=list)
    type_overrides: Dict[DatabaseProvider, Dict[str, str]] = Field(default_factory=dict)

    model_config = {"frozen": True}

    def declares_primary_key(self, default_key_name: str = "id") -> bool:
        """False when no key is declared, or only the default auto-increment key."""
        return bool(self.primary_keys) and self.primary_keys != [default_key_name]

    def override_for(self, provider: DatabaseProvider, field_name: str) -> Optional[str]:
        return self.type_overrides.get(provider, {}).get(field_name)


EMPTY_TEMPLATE = TableTemplate()


class TemplateCatalog:
    """
    Lookup of table templates by table name.

    Usage:
        catalog = TemplateCatalog.from_yaml("templates.yaml")
        template = catalog.lookup("Invoice")
    """

    def __init__(self, templates: Optional[Mapping[str, TableTemplate]] = None):
        self._templates: Dict[str, TableTemplate] = dict(templates or {})

    def lookup(self, table_name: str) -> TableTemplate:
        """Template for a table, or empty defaults when none is registered."""
        return self._templates.get(table_name, EMPTY_TEMPLATE)

    def table_names(self) -> List[str]:
        return list(self._templates.keys())

    def __contains__(self, table_name: str) -> bool:
        return table_name in self._templates

    def __len__(self) -> int:
        return len(self._templates)

    @classmethod
    def from_dict(cls, data: Optional[Mapping]) -> "TemplateCatalog":
        """
        Build a catalog from parsed YAML.

        Raises:
            TemplateCatalogError: If the document has the wrong shape
        """
        if not data:
            return cls()
        if not isinstance(data, Mapping):
            raise TemplateCatalogError("Template catalog must be a mapping")

        entries = data.get("templates", {}) or {}
        if not isinstance(entries, Mapping):
            raise TemplateCatalogError("'templates' must map table names to templates")

        templates = {}
        for table_name, raw in entries.items():
            try:
                templates[str(table_name)] = TableTemplate.model_validate(raw or {})
            except ValidationError as e:
                raise TemplateCatalogError(f"Invalid template for table '{table_name}': {e}") from e
        return cls(templates)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "TemplateCatalog":
        """Load a catalog from a YAML file."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise TemplateCatalogError(f"Cannot read template catalog {path}: {e}") from e
        except yaml.YAMLError as e:
            raise TemplateCatalogError(f"Template catalog {path} is not valid YAML: {e}") from e

        catalog = cls.from_dict(data)
        logger.info(f"Loaded {len(catalog)} table templates from {path}")
        return catalog


def load_template_catalog(path: Optional[Union[str, Path]] = None) -> TemplateCatalog:
    """Load the catalog at ``path``, or the bundled templates.yaml."""
    return TemplateCatalog.from_yaml(path or BUNDLED_TEMPLATES_PATH)
