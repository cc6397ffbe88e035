from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Literal

Gender = Literal["male", "female", "unisex"]
SortKey = Literal["price", "name", "rating", "created_at"]
SortOrder = Literal["asc", "desc"]


@dataclass(slots=True)
class SizeStock:
    size: str
    stock: int = 0


@dataclass(slots=True)
class Review:
    user_id: str
    rating: int
    user_name: str = ""
    comment: str = ""
    date: datetime | None = None


@dataclass(slots=True)
class ProductInfo:
    name: str
    brand: str
    description: str
    price: float
    gender: Gender
    category: str
    sizes: List[SizeStock] = field(default_factory=list)
    images: List[str] = field(default_factory=list)
    discount_price: float | None = None
    featured: bool = False
    is_new: bool = False
    rating: float = 0.0
    tags: List[str] = field(default_factory=list)
    ingredients: List[str] = field(default_factory=list)
    reviews: List[Review] = field(default_factory=list)

    @property
    def effective_price(self) -> float:
        if self.discount_price is not None and self.discount_price < self.price:
            return self.discount_price
        return self.price


@dataclass(slots=True)
class ProductEntity:
    id: int
    info: ProductInfo
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(slots=True)
class PatchProductInfo:
    name: str | None = None
    brand: str | None = None
    description: str | None = None
    price: float | None = None
    discount_price: float | None = None
    gender: Gender | None = None
    category: str | None = None
    sizes: List[SizeStock] | None = None
    images: List[str] | None = None
    featured: bool | None = None
    is_new: bool | None = None
    rating: float | None = None
    tags: List[str] | None = None
    ingredients: List[str] | None = None
    reviews: List[Review] | None = None


@dataclass(slots=True)
class ProductFilter:
    gender: Gender | None = None
    category: str | None = None
    brand: str | None = None
    min_price: float | None = None
    max_price: float | None = None
    search: str | None = None
    featured: bool = False
    is_new: bool = False


@dataclass(slots=True)
class ProductSort:
    key: SortKey = "created_at"
    order: SortOrder = "desc"


@dataclass(slots=True)
class ProductPage:
    items: List[ProductEntity]
    total_count: int
