"""Product catalog and manual path collaborators used by the composer."""

from __future__ import annotations

import json
import logging
from pathlib import Path, PurePosixPath
from typing import Dict, Mapping, Optional, Protocol
from urllib.parse import unquote, urlparse

from doormate.models.chat import ProductType
from doormate.models.product import ProductRecord

logger = logging.getLogger(__name__)


class ProductCatalog(Protocol):
    async def get_product(
        self, product_id: str, product_type: ProductType
    ) -> Optional[ProductRecord]:
        """Return the product, or None when it does not exist."""


class DocumentResolver(Protocol):
    def resolve(self, url: str) -> Optional[Path]:
        """Map a manual URL to a readable local file, or None."""


class JsonProductCatalog:
    """Read-only catalog backed by a JSON file keyed by product type then id."""

    def __init__(self, records: Mapping[str, Mapping[str, dict]]) -> None:
        self._records: Dict[str, Mapping[str, dict]] = dict(records)

    @classmethod
    def from_path(cls, path: Path) -> "JsonProductCatalog":
        with path.open("r", encoding="utf-8") as handle:
            records = json.load(handle)
        logger.info(
            "Loaded product catalog from %s (%s product types)", path, len(records)
        )
        return cls(records)

    @classmethod
    def empty(cls) -> "JsonProductCatalog":
        return cls({})

    async def get_product(
        self, product_id: str, product_type: ProductType
    ) -> Optional[ProductRecord]:
        raw = self._records.get(product_type.value, {}).get(product_id)
        if raw is None:
            return None
        return ProductRecord.model_validate(raw)


class ManualPathResolver:
    """Resolve manual URLs to files directly under a root directory."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root).resolve()

    def resolve(self, url: str) -> Optional[Path]:
        filename = PurePosixPath(unquote(urlparse(url).path)).name
        if not filename:
            return None
        candidate = (self.root / filename).resolve()
        if candidate.parent != self.root:
            logger.warning("Rejected manual URL outside %s: %s", self.root, url)
            return None
        if not candidate.is_file():
            logger.info("Manual not found for %s", url)
            return None
        return candidate
