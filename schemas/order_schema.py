# ============================================================================
# ORDER SCHEMA
# ============================================================================

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator


class Complement(BaseModel):
    name: str = Field(strict=True)

    @model_validator(mode="before")
    @classmethod
    def accept_plain_name(cls, values: Any) -> Any:
        if isinstance(values, str):
            return {"name": values}
        return values

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("complement name must be a non-empty string")
        return value


class LineItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(
        strict=True,
        validation_alias=AliasChoices("title", "name"),
    )
    unit_price: float = Field(
        strict=True,
        gt=0,
        allow_inf_nan=False,
        validation_alias=AliasChoices("unitPrice", "unit_price", "price"),
        serialization_alias="unitPrice",
    )
    quantity: int = Field(strict=True, gt=0)
    complements: list[Complement] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title must be a non-empty string")
        return value

    @field_validator("complements", mode="before")
    @classmethod
    def complements_default(cls, value: Any) -> Any:
        return [] if value is None else value


class OrderRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    customer_name: str = Field(
        strict=True,
        validation_alias=AliasChoices("customerName", "customer_name"),
        serialization_alias="customerName",
    )
    customer_email: str = Field(
        strict=True,
        validation_alias=AliasChoices("customerEmail", "customer_email"),
        serialization_alias="customerEmail",
    )
    items: list[LineItem] = Field(min_length=1)
    total: float = Field(strict=True, gt=0, allow_inf_nan=False)

    @field_validator("customer_name")
    @classmethod
    def customer_name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("customerName must be a non-empty string")
        return value

    @field_validator("customer_email")
    @classmethod
    def customer_email_has_at(cls, value: str) -> str:
        value = value.strip()
        if "@" not in value:
            raise ValueError("customerEmail must be a valid email address")
        return value
