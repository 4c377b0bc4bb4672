"""FastAPI routes for orders, shops and products."""

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from marketplace.api.dependencies import current_actor
from marketplace.api.schemas import (
    AddVariantRequest,
    CreateProductRequest,
    OrderListResponse,
    OrderResponse,
    PlaceOrderRequest,
    ProductIdResponse,
    RegisterShopRequest,
    RejectShopRequest,
    RestockRequest,
    SellerStatsResponse,
    SetCommissionRateRequest,
    ShopIdResponse,
    StatusResponse,
    StockResponse,
    UpdateOrderStatusRequest,
    VariantIdResponse,
)
from marketplace.catalogue.management import (
    ActivateProduct,
    AddVariant,
    CreateProduct,
    DeactivateProduct,
    RestockProduct,
)
from marketplace.catalogue.product import Product
from marketplace.errors import AccessDenied
from marketplace.order import queries, service
from marketplace.order.access import Actor
from marketplace.order.repository import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from marketplace.shop.management import ApproveShop, RegisterShop, RejectShop, SetCommissionRate, SuspendShop
from marketplace.shop.shop import Shop

order_router = APIRouter(prefix="/orders", tags=["orders"])
shop_router = APIRouter(prefix="/shops", tags=["shops"])
product_router = APIRouter(prefix="/products", tags=["products"])


def _require_admin(actor: Actor) -> None:
    if not actor.is_admin:
        raise AccessDenied("Only admins may moderate shops")


def _require_shop_owner(shop_id: str, actor: Actor) -> None:
    if actor.is_admin:
        return
    shop = current_domain.repository_for(Shop).get(shop_id)
    if str(shop.owner_id) != actor.user_id:
        raise AccessDenied("You do not own this shop", shop_id=str(shop_id))


def _require_product_owner(product_id: str, actor: Actor) -> None:
    if actor.is_admin:
        return
    product = current_domain.repository_for(Product).get(product_id)
    _require_shop_owner(str(product.shop_id), actor)


def _listing(result) -> OrderListResponse:
    orders, pagination = result
    return OrderListResponse(orders=[OrderResponse.from_order(order) for order in orders], pagination=pagination)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
@order_router.post("", status_code=201, response_model=OrderResponse)
async def place_order(body: PlaceOrderRequest, actor: Actor = Depends(current_actor)) -> OrderResponse:
    order = service.place_order(
        actor.user_id,
        [line.model_dump(exclude_none=True) for line in body.items],
        body.shipping_address.model_dump(exclude_none=True),
        notes=body.notes,
    )
    return OrderResponse.from_order(order)


@order_router.get("/my", response_model=OrderListResponse)
async def my_orders(
    status: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    actor: Actor = Depends(current_actor),
) -> OrderListResponse:
    return _listing(queries.orders_for_purchaser(actor.user_id, status=status, page=page, limit=limit))


@order_router.get("/seller", response_model=OrderListResponse)
async def seller_orders(
    status: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    actor: Actor = Depends(current_actor),
) -> OrderListResponse:
    if not (actor.is_seller or actor.is_admin):
        raise AccessDenied("Only sellers may list shop orders")
    return _listing(queries.orders_for_seller(actor.user_id, status=status, page=page, limit=limit))


@order_router.get("/seller/stats", response_model=SellerStatsResponse)
async def seller_statistics(actor: Actor = Depends(current_actor)) -> SellerStatsResponse:
    if not (actor.is_seller or actor.is_admin):
        raise AccessDenied("Only sellers have shop statistics")
    return SellerStatsResponse(**queries.seller_stats(actor.user_id))


@order_router.get("", response_model=OrderListResponse)
async def list_orders(
    status: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    actor: Actor = Depends(current_actor),
) -> OrderListResponse:
    if not actor.is_admin:
        raise AccessDenied("Only admins may list all orders")
    return _listing(queries.all_orders(status=status, page=page, limit=limit))


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, actor: Actor = Depends(current_actor)) -> OrderResponse:
    return OrderResponse.from_order(queries.get_order(order_id, actor))


@order_router.put("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: str, body: UpdateOrderStatusRequest, actor: Actor = Depends(current_actor)
) -> OrderResponse:
    order = service.transition_order_status(order_id, actor, body.status)
    return OrderResponse.from_order(order)


@order_router.put("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(order_id: str, actor: Actor = Depends(current_actor)) -> OrderResponse:
    return OrderResponse.from_order(service.cancel_order(order_id, actor))


# ---------------------------------------------------------------------------
# Shops
# ---------------------------------------------------------------------------
@shop_router.post("", status_code=201, response_model=ShopIdResponse)
async def register_shop(body: RegisterShopRequest, actor: Actor = Depends(current_actor)) -> ShopIdResponse:
    command = RegisterShop(owner_id=actor.user_id, name=body.name, commission_rate=body.commission_rate)
    shop_id = current_domain.process(command, asynchronous=False)
    return ShopIdResponse(shop_id=shop_id)


@shop_router.put("/{shop_id}/approve", response_model=StatusResponse)
async def approve_shop(shop_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    _require_admin(actor)
    current_domain.process(ApproveShop(shop_id=shop_id), asynchronous=False)
    return StatusResponse()


@shop_router.put("/{shop_id}/reject", response_model=StatusResponse)
async def reject_shop(
    shop_id: str, body: RejectShopRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    _require_admin(actor)
    current_domain.process(RejectShop(shop_id=shop_id, reason=body.reason), asynchronous=False)
    return StatusResponse()


@shop_router.put("/{shop_id}/suspend", response_model=StatusResponse)
async def suspend_shop(shop_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    _require_admin(actor)
    current_domain.process(SuspendShop(shop_id=shop_id), asynchronous=False)
    return StatusResponse()


@shop_router.put("/{shop_id}/commission", response_model=StatusResponse)
async def set_commission_rate(
    shop_id: str, body: SetCommissionRateRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    _require_admin(actor)
    command = SetCommissionRate(shop_id=shop_id, commission_rate=body.commission_rate)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------
@product_router.post("", status_code=201, response_model=ProductIdResponse)
async def create_product(body: CreateProductRequest, actor: Actor = Depends(current_actor)) -> ProductIdResponse:
    _require_shop_owner(body.shop_id, actor)
    command = CreateProduct(**body.model_dump())
    product_id = current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=product_id)


@product_router.post("/{product_id}/variants", status_code=201, response_model=VariantIdResponse)
async def add_variant(
    product_id: str, body: AddVariantRequest, actor: Actor = Depends(current_actor)
) -> VariantIdResponse:
    _require_product_owner(product_id, actor)
    command = AddVariant(product_id=product_id, **body.model_dump(exclude_none=True))
    variant_id = current_domain.process(command, asynchronous=False)
    return VariantIdResponse(variant_id=variant_id)


@product_router.put("/{product_id}/activate", response_model=StatusResponse)
async def activate_product(product_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    _require_product_owner(product_id, actor)
    current_domain.process(ActivateProduct(product_id=product_id), asynchronous=False)
    return StatusResponse()


@product_router.put("/{product_id}/deactivate", response_model=StatusResponse)
async def deactivate_product(product_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    _require_product_owner(product_id, actor)
    current_domain.process(DeactivateProduct(product_id=product_id), asynchronous=False)
    return StatusResponse()


@product_router.put("/{product_id}/restock", response_model=StockResponse)
async def restock_product(
    product_id: str, body: RestockRequest, actor: Actor = Depends(current_actor)
) -> StockResponse:
    _require_product_owner(product_id, actor)
    command = RestockProduct(product_id=product_id, quantity=body.quantity, variant_id=body.variant_id)
    on_hand = current_domain.process(command, asynchronous=False)
    return StockResponse(product_id=product_id, inventory_quantity=on_hand)
