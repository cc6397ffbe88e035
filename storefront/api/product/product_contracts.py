from __future__ import annotations

from datetime import datetime
from typing import List

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeFloat,
    NonNegativeInt,
    field_validator,
)

from storefront.store.product_models import (
    Gender,
    PatchProductInfo,
    ProductEntity,
    ProductInfo,
    Review,
    SizeStock,
)


class SizeStockModel(BaseModel):
    size: str = Field(min_length=1)
    stock: NonNegativeInt = 0

    def as_size_stock(self) -> SizeStock:
        return SizeStock(size=self.size, stock=self.stock)


class ReviewModel(BaseModel):
    user_id: str = Field(min_length=1)
    user_name: str = ""
    rating: int = Field(ge=1, le=5)
    comment: str = ""
    date: datetime | None = None

    @staticmethod
    def from_review(review: Review) -> ReviewModel:
        return ReviewModel(
            user_id=review.user_id,
            user_name=review.user_name,
            rating=review.rating,
            comment=review.comment,
            date=review.date,
        )

    def as_review(self) -> Review:
        return Review(
            user_id=self.user_id,
            user_name=self.user_name,
            rating=self.rating,
            comment=self.comment,
            date=self.date,
        )


def _unique_sizes(sizes: List[SizeStockModel] | None) -> List[SizeStockModel] | None:
    if sizes is not None and len({s.size for s in sizes}) != len(sizes):
        raise ValueError("sizes must be unique")
    return sizes


class ProductResponse(BaseModel):
    id: int
    name: str
    brand: str
    description: str
    price: float
    discount_price: float | None
    gender: Gender
    category: str
    sizes: List[SizeStockModel]
    images: List[str]
    featured: bool
    is_new: bool
    rating: float
    tags: List[str]
    ingredients: List[str]
    reviews: List[ReviewModel] = []
    num_reviews: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @staticmethod
    def from_entity(entity: ProductEntity) -> ProductResponse:
        info = entity.info
        return ProductResponse(
            id=entity.id,
            name=info.name,
            brand=info.brand,
            description=info.description,
            price=info.price,
            discount_price=info.discount_price,
            gender=info.gender,
            category=info.category,
            sizes=[SizeStockModel(size=s.size, stock=s.stock) for s in info.sizes],
            images=info.images,
            featured=info.featured,
            is_new=info.is_new,
            rating=info.rating,
            tags=info.tags,
            ingredients=info.ingredients,
            reviews=[ReviewModel.from_review(r) for r in info.reviews],
            num_reviews=len(info.reviews),
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )


class PaginationResponse(BaseModel):
    current_page: int
    total_pages: int
    total_products: int


class FiltersResponse(BaseModel):
    brands: List[str]
    categories: List[str]


class ProductListResponse(BaseModel):
    products: List[ProductResponse]
    pagination: PaginationResponse
    filters: FiltersResponse


class ProductRequest(BaseModel):
    name: str = Field(min_length=1)
    brand: str = Field(min_length=1)
    description: str = Field(min_length=1)
    price: NonNegativeFloat
    discount_price: NonNegativeFloat | None = None
    gender: Gender
    category: str = Field(min_length=1)
    sizes: List[SizeStockModel] = Field(min_length=1)
    images: List[str] = []
    featured: bool = False
    is_new: bool = False
    rating: float = Field(default=0.0, ge=0, le=5)
    tags: List[str] = []
    ingredients: List[str] = []
    reviews: List[ReviewModel] = []

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    @field_validator("sizes")
    @classmethod
    def check_unique_sizes(cls, sizes):
        return _unique_sizes(sizes)

    def as_product_info(self) -> ProductInfo:
        return ProductInfo(
            name=self.name,
            brand=self.brand,
            description=self.description,
            price=self.price,
            discount_price=self.discount_price,
            gender=self.gender,
            category=self.category,
            sizes=[s.as_size_stock() for s in self.sizes],
            images=list(self.images),
            featured=self.featured,
            is_new=self.is_new,
            rating=self.rating,
            tags=list(self.tags),
            ingredients=list(self.ingredients),
            reviews=[r.as_review() for r in self.reviews],
        )


class PatchProductRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    brand: str | None = Field(default=None, min_length=1)
    description: str | None = Field(default=None, min_length=1)
    price: NonNegativeFloat | None = None
    discount_price: NonNegativeFloat | None = None
    gender: Gender | None = None
    category: str | None = Field(default=None, min_length=1)
    sizes: List[SizeStockModel] | None = Field(default=None, min_length=1)
    images: List[str] | None = None
    featured: bool | None = None
    is_new: bool | None = None
    rating: float | None = Field(default=None, ge=0, le=5)
    tags: List[str] | None = None
    ingredients: List[str] | None = None
    reviews: List[ReviewModel] | None = None

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    @field_validator("sizes")
    @classmethod
    def check_unique_sizes(cls, sizes):
        return _unique_sizes(sizes)

    def as_patch_product_info(self) -> PatchProductInfo:
        return PatchProductInfo(
            name=self.name,
            brand=self.brand,
            description=self.description,
            price=self.price,
            discount_price=self.discount_price,
            gender=self.gender,
            category=self.category,
            sizes=[s.as_size_stock() for s in self.sizes] if self.sizes is not None else None,
            images=self.images,
            featured=self.featured,
            is_new=self.is_new,
            rating=self.rating,
            tags=self.tags,
            ingredients=self.ingredients,
            reviews=[r.as_review() for r in self.reviews] if self.reviews is not None else None,
        )
