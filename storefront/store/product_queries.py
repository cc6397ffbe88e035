from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, selectinload

from storefront.store.db import SessionLocal
from storefront.store.orm import ProductOrm, ProductSizeOrm
from storefront.store.product_models import (
    PatchProductInfo,
    ProductEntity,
    ProductFilter,
    ProductInfo,
    ProductPage,
    ProductSort,
    Review,
    SizeStock,
)

_SORT_COLUMNS = {
    "price": ProductOrm.price,
    "name": ProductOrm.name,
    "rating": ProductOrm.rating,
    "created_at": ProductOrm.created_at,
}


def _money(value: float) -> Decimal:
    return Decimal(str(value))


def _reviews_to_json(reviews: Iterable[Review]) -> list[dict]:
    return [
        {
            "user_id": r.user_id,
            "user_name": r.user_name,
            "rating": r.rating,
            "comment": r.comment,
            "date": (r.date or datetime.now(timezone.utc)).isoformat(),
        }
        for r in reviews
    ]


def _reviews_from_json(rows: list[dict] | None) -> list[Review]:
    return [
        Review(
            user_id=row["user_id"],
            user_name=row.get("user_name", ""),
            rating=row["rating"],
            comment=row.get("comment", ""),
            date=datetime.fromisoformat(row["date"]) if row.get("date") else None,
        )
        for row in rows or []
    ]


def _to_product_entity(orm: ProductOrm) -> ProductEntity:
    return ProductEntity(
        id=orm.id,
        info=ProductInfo(
            name=orm.name,
            brand=orm.brand,
            description=orm.description,
            price=float(orm.price),
            discount_price=float(orm.discount_price) if orm.discount_price is not None else None,
            gender=orm.gender,
            category=orm.category,
            sizes=[SizeStock(size=s.size, stock=s.stock) for s in orm.sizes],
            images=list(orm.images or []),
            featured=bool(orm.featured),
            is_new=bool(orm.is_new),
            rating=float(orm.rating),
            tags=list(orm.tags or []),
            ingredients=list(orm.ingredients or []),
            reviews=_reviews_from_json(orm.reviews),
        ),
        created_at=orm.created_at,
        updated_at=orm.updated_at,
    )


def _set_sizes(orm: ProductOrm, sizes: Iterable[SizeStock]) -> None:
    orm.sizes = [
        ProductSizeOrm(size=s.size, stock=s.stock, position=pos)
        for pos, s in enumerate(sizes)
    ]


def _replace_sizes(session: Session, orm: ProductOrm, sizes: Iterable[SizeStock]) -> None:
    # flush removals first so re-added sizes don't collide on the primary key
    orm.sizes.clear()
    session.flush()
    _set_sizes(orm, sizes)


def _apply_info(orm: ProductOrm, info: ProductInfo) -> None:
    orm.name = info.name
    orm.brand = info.brand
    orm.description = info.description
    orm.price = _money(info.price)
    orm.discount_price = _money(info.discount_price) if info.discount_price is not None else None
    orm.gender = info.gender
    orm.category = info.category
    orm.images = list(info.images)
    orm.featured = info.featured
    orm.is_new = info.is_new
    orm.rating = info.rating
    orm.tags = list(info.tags)
    orm.ingredients = list(info.ingredients)
    orm.reviews = _reviews_to_json(info.reviews)


def _like_pattern(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _filter_clauses(product_filter: ProductFilter) -> list:
    clauses = []
    if product_filter.gender is not None:
        clauses.append(ProductOrm.gender == product_filter.gender)
    if product_filter.category is not None:
        clauses.append(ProductOrm.category == product_filter.category)
    if product_filter.brand is not None:
        clauses.append(ProductOrm.brand == product_filter.brand)
    if product_filter.featured:
        clauses.append(ProductOrm.featured.is_(True))
    if product_filter.is_new:
        clauses.append(ProductOrm.is_new.is_(True))
    if product_filter.min_price is not None:
        clauses.append(ProductOrm.price >= _money(product_filter.min_price))
    if product_filter.max_price is not None:
        clauses.append(ProductOrm.price <= _money(product_filter.max_price))
    if product_filter.search:
        pattern = _like_pattern(product_filter.search.strip())
        clauses.append(
            or_(
                ProductOrm.name.ilike(pattern, escape="\\"),
                ProductOrm.brand.ilike(pattern, escape="\\"),
                ProductOrm.description.ilike(pattern, escape="\\"),
            )
        )
    return clauses


def add(info: ProductInfo) -> ProductEntity:
    with SessionLocal.begin() as session:
        orm = ProductOrm()
        _apply_info(orm, info)
        _set_sizes(orm, info.sizes)
        session.add(orm)
        session.flush()
        session.refresh(orm)
        return _to_product_entity(orm)


def delete(id: int) -> bool:
    with SessionLocal.begin() as session:
        orm = session.get(ProductOrm, id)
        if orm is None:
            return False
        session.delete(orm)
        return True


def get_one(id: int) -> ProductEntity | None:
    with SessionLocal() as session:
        orm = session.get(ProductOrm, id, options=[selectinload(ProductOrm.sizes)])
        if orm is None:
            return None
        return _to_product_entity(orm)


def get_many(
    product_filter: ProductFilter | None = None,
    sort: ProductSort | None = None,
    page: int = 1,
    limit: int = 12,
) -> ProductPage:
    product_filter = product_filter or ProductFilter()
    sort = sort or ProductSort()
    clauses = _filter_clauses(product_filter)

    column = _SORT_COLUMNS.get(sort.key, ProductOrm.created_at)
    if sort.order == "asc":
        ordering = (column.asc(), ProductOrm.id.asc())
    else:
        ordering = (column.desc(), ProductOrm.id.desc())

    with SessionLocal() as session:
        total = session.execute(
            select(func.count()).select_from(ProductOrm).where(*clauses)
        ).scalar_one()
        stmt = (
            select(ProductOrm)
            .options(selectinload(ProductOrm.sizes))
            .where(*clauses)
            # id as tie breaker keeps pages stable for equal sort values
            .order_by(*ordering)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        items = [_to_product_entity(orm) for orm in session.execute(stmt).scalars().all()]
        return ProductPage(items=items, total_count=total)


def _distinct(session: Session, column) -> list[str]:
    return list(session.execute(select(column).distinct().order_by(column)).scalars().all())


def distinct_brands() -> list[str]:
    with SessionLocal() as session:
        return _distinct(session, ProductOrm.brand)


def distinct_categories() -> list[str]:
    with SessionLocal() as session:
        return _distinct(session, ProductOrm.category)


def update(id: int, info: ProductInfo) -> ProductEntity | None:
    with SessionLocal.begin() as session:
        orm = session.get(ProductOrm, id)
        if orm is None:
            return None
        _apply_info(orm, info)
        _replace_sizes(session, orm, info.sizes)
        session.flush()
        session.refresh(orm)
        return _to_product_entity(orm)


def patch(id: int, patch_info: PatchProductInfo) -> ProductEntity | None:
    with SessionLocal.begin() as session:
        orm = session.get(ProductOrm, id)
        if orm is None:
            return None

        for name in ("name", "brand", "description", "gender", "category", "featured", "is_new", "rating"):
            value = getattr(patch_info, name)
            if value is not None:
                setattr(orm, name, value)

        if patch_info.price is not None:
            orm.price = _money(patch_info.price)
        if patch_info.discount_price is not None:
            orm.discount_price = _money(patch_info.discount_price)
        for name in ("images", "tags", "ingredients"):
            value = getattr(patch_info, name)
            if value is not None:
                setattr(orm, name, list(value))
        if patch_info.reviews is not None:
            orm.reviews = _reviews_to_json(patch_info.reviews)
        if patch_info.sizes is not None:
            _replace_sizes(session, orm, patch_info.sizes)

        session.flush()
        session.refresh(orm)
        return _to_product_entity(orm)


def reserve_stock(session: Session, product_id: int, size: str, quantity: int) -> bool:
    """Decrement stock for one size inside the caller's transaction.

    Returns False when the size is unknown or has fewer than ``quantity`` units.
    """
    row = session.execute(
        select(ProductSizeOrm).where(
            ProductSizeOrm.product_id == product_id,
            ProductSizeOrm.size == size,
        ).with_for_update()
    ).scalar_one_or_none()
    if row is None or row.stock < quantity:
        return False
    row.stock -= quantity
    return True


def load_for_order(session: Session, product_id: int) -> ProductEntity | None:
    orm = session.get(ProductOrm, product_id, options=[selectinload(ProductOrm.sizes)])
    if orm is None:
        return None
    return _to_product_entity(orm)
