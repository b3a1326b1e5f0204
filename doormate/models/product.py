"""Product metadata returned by the catalog collaborator."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Brand(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str


class Specification(BaseModel):
    model_config = ConfigDict(extra="ignore")

    key: str
    value: str
    unit: Optional[str] = None

    def __str__(self) -> str:
        if self.unit:
            return f"{self.key}: {self.value} {self.unit}"
        return f"{self.key}: {self.value}"


class ManualInfo(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str
    url: Optional[str] = None


class ProductRecord(BaseModel):
    """Subset of catalog fields the assistant summarises."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str
    model: str
    brand: Brand
    category: str
    specifications: List[Specification] = Field(default_factory=list)
    features: List[str] = Field(default_factory=list)
    applications: List[str] = Field(default_factory=list)
    safety_features: List[str] = Field(default_factory=list, alias="safetyFeatures")
    manuals: List[ManualInfo] = Field(default_factory=list)
