from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Product:
    """Snapshot of a purchasable product as returned by the backend."""

    id: str
    name: str
    category: str
    cost: float
    rating: int
    image_url: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Product":
        # Backend documents use `_id` and `image`
        return cls(
            id=str(data.get("_id", data.get("id", ""))),
            name=data.get("name") or "",
            category=data.get("category") or "",
            cost=data.get("cost") or 0,
            rating=int(data.get("rating") or 0),
            image_url=data.get("image", data.get("image_url")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CartReference:
    """A cart line before enrichment. qty == 0 means the line should go."""

    product_id: str
    qty: int

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "CartReference":
        return cls(product_id=str(data.get("productId", "")), qty=int(data.get("qty") or 0))

    def to_api(self) -> Dict[str, Any]:
        return {"productId": self.product_id, "qty": self.qty}


@dataclass(frozen=True)
class CartItem:
    id: str
    name: str
    category: str
    cost: float
    rating: int
    image_url: Optional[str]
    qty: int
    product_id: str

    @classmethod
    def from_product(cls, product: Product, ref: CartReference) -> "CartItem":
        return cls(
            id=product.id,
            name=product.name,
            category=product.category,
            cost=product.cost,
            rating=product.rating,
            image_url=product.image_url,
            qty=ref.qty,
            product_id=ref.product_id,
        )

    @property
    def line_total(self) -> float:
        return self.cost * self.qty

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Address:
    id: str
    address: str

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Address":
        return cls(id=str(data.get("_id", "")), address=data.get("address") or "")
