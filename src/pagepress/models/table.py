"""Tabular IR models: a column schema plus display-string rows."""

from typing import Any

from pydantic import Field, field_validator

from .base import BaseIRModel, PropertyKind


class ColumnSpec(BaseIRModel):
    """Declared column: identifier and kind."""

    id: str = ""
    kind: PropertyKind = Field(default=PropertyKind.UNKNOWN, alias="type")

    @field_validator("kind", mode="before")
    @classmethod
    def _known_or_unknown(cls, value: Any) -> PropertyKind:
        return PropertyKind.parse(value)


class TabularSchema(BaseIRModel):
    """
    Ordered mapping of column name to its declaration.

    Column order is meaningful: visible columns are listed in schema order.
    """

    columns: dict[str, ColumnSpec] = Field(default_factory=dict)

    @field_validator("columns", mode="before")
    @classmethod
    def _accept_plain_mapping(cls, value: Any) -> Any:
        if value is None:
            return {}
        return value

    @property
    def names(self) -> list[str]:
        return list(self.columns)

    def kind_of(self, name: str) -> PropertyKind:
        spec = self.columns.get(name)
        return spec.kind if spec else PropertyKind.UNKNOWN

    def visible_columns(self, hidden: frozenset[str] = frozenset()) -> list[str]:
        """Schema columns minus hidden ones, in schema order."""
        return [name for name in self.columns if name not in hidden]


class TabularRow(BaseIRModel):
    """One database row: identifier plus column name to display string."""

    id: str = ""
    properties: dict[str, str] = Field(default_factory=dict)

    @field_validator("properties", mode="before")
    @classmethod
    def _display_strings(cls, value: Any) -> dict[str, str]:
        if not value:
            return {}
        return {str(k): "" if v is None else str(v) for k, v in value.items()}

    def value(self, column: str) -> str:
        return self.properties.get(column, "")
