"""Pydantic schemas for the introspected database schema snapshot."""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class DatabaseColumn(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type: str
    udt_name: str = ""
    nullable: bool = True
    default_value: Optional[str] = None
    max_length: Optional[int] = None
    numeric_precision: Optional[int] = None
    numeric_scale: Optional[int] = None
    is_primary_key: bool = False
    is_foreign_key: bool = False
    foreign_table: Optional[str] = None
    foreign_column: Optional[str] = None


class DatabaseTable(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    columns: list[DatabaseColumn] = Field(default_factory=list)
    row_count: Optional[int] = None


class DatabaseEnum(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    values: list[str] = Field(default_factory=list)


class DatabaseSchema(BaseModel):
    model_config = ConfigDict(frozen=True)

    tables: list[DatabaseTable] = Field(default_factory=list)
    enums: list[DatabaseEnum] = Field(default_factory=list)
    last_updated: float = 0.0   # epoch seconds
