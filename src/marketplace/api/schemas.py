"""Pydantic request/response schemas for the marketplace API.

These are external contracts, kept separate from the protean commands
they are translated into.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class CartLineSchema(BaseModel):
    product_id: str
    variant_id: str | None = None
    # Left loose so that parse_cart rejects bad quantities as invalid_cart
    quantity: int | float | str


class ShippingAddressSchema(BaseModel):
    recipient_name: str | None = None
    phone: str | None = None
    country: str | None = None
    city: str | None = None
    street_address: str | None = None
    postal_code: str | None = None
    state: str | None = None


class PaginationSchema(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


# ---------------------------------------------------------------------------
# Order schemas
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    # Quantities and address fields are validated by the domain so that
    # every rejection carries the marketplace error codes.
    items: list[CartLineSchema]
    shipping_address: ShippingAddressSchema
    notes: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "items": [
                        {"product_id": "prod-001", "quantity": 2},
                        {"product_id": "prod-002", "variant_id": "var-001", "quantity": 1},
                    ],
                    "shipping_address": {
                        "recipient_name": "Jane Doe",
                        "phone": "+7 900 000-00-00",
                        "country": "RU",
                        "city": "Moscow",
                        "street_address": "Tverskaya 1",
                        "postal_code": "125009",
                    },
                    "notes": "Leave at the door",
                }
            ]
        }
    }


class UpdateOrderStatusRequest(BaseModel):
    status: str

    model_config = {"json_schema_extra": {"examples": [{"status": "processing"}]}}


class OrderItemResponse(BaseModel):
    product_id: str
    variant_id: str | None = None
    shop_id: str
    title: str
    sku: str
    unit_price: float
    quantity: int
    line_total: float


class ShopCommissionResponse(BaseModel):
    shop_id: str
    subtotal: float
    commission_rate: float
    commission_amount: float
    seller_amount: float


class OrderResponse(BaseModel):
    order_id: str
    order_number: str
    purchaser_id: str
    status: str
    currency: str
    subtotal: float
    tax_amount: float
    shipping_amount: float
    total_amount: float
    commission_amount: float
    shipping_address: dict | None = None
    notes: str | None = None
    items: list[OrderItemResponse]
    commissions: list[ShopCommissionResponse]
    created_at: datetime | None = None
    updated_at: datetime | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None

    @classmethod
    def from_order(cls, order) -> "OrderResponse":
        address = order.shipping_address
        return cls(
            order_id=str(order.id),
            order_number=order.order_number,
            purchaser_id=str(order.purchaser_id),
            status=order.status,
            currency=order.currency,
            subtotal=order.subtotal,
            tax_amount=order.tax_amount,
            shipping_amount=order.shipping_amount,
            total_amount=order.total_amount,
            commission_amount=order.commission_amount,
            shipping_address=address.to_dict() if address else None,
            notes=order.notes,
            items=[
                OrderItemResponse(
                    product_id=str(item.product_id),
                    variant_id=str(item.variant_id) if item.variant_id else None,
                    shop_id=str(item.shop_id),
                    title=item.title,
                    sku=item.sku,
                    unit_price=item.unit_price,
                    quantity=item.quantity,
                    line_total=item.line_total,
                )
                for item in order.lines
            ],
            commissions=[
                ShopCommissionResponse(
                    shop_id=str(share.shop_id),
                    subtotal=share.subtotal,
                    commission_rate=share.commission_rate,
                    commission_amount=share.commission_amount,
                    seller_amount=share.seller_amount,
                )
                for share in order.commissions
            ],
            created_at=order.created_at,
            updated_at=order.updated_at,
            shipped_at=order.shipped_at,
            delivered_at=order.delivered_at,
            cancelled_at=order.cancelled_at,
        )


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]
    pagination: PaginationSchema


class SellerStatsResponse(BaseModel):
    total_orders: int
    pending: int
    processing: int
    shipped: int
    delivered: int
    cancelled: int
    refunded: int
    gross_sales: float
    commission: float
    earnings: float


# ---------------------------------------------------------------------------
# Shop schemas
# ---------------------------------------------------------------------------
class RegisterShopRequest(BaseModel):
    name: str
    commission_rate: float | None = Field(default=None, ge=0, le=100)

    model_config = {"json_schema_extra": {"examples": [{"name": "Handmade Ceramics", "commission_rate": 12.5}]}}


class RejectShopRequest(BaseModel):
    reason: str | None = None


class SetCommissionRateRequest(BaseModel):
    commission_rate: float = Field(ge=0, le=100)


class ShopIdResponse(BaseModel):
    shop_id: str


# ---------------------------------------------------------------------------
# Product schemas
# ---------------------------------------------------------------------------
class CreateProductRequest(BaseModel):
    shop_id: str
    title: str
    sku: str
    price: float = Field(gt=0)
    inventory_quantity: int = Field(default=0, ge=0)
    track_inventory: bool = True

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "shop_id": "shop-001",
                    "title": "Stoneware mug",
                    "sku": "MUG-001",
                    "price": 950.0,
                    "inventory_quantity": 25,
                }
            ]
        }
    }


class AddVariantRequest(BaseModel):
    sku: str
    title: str | None = None
    price: float | None = Field(default=None, gt=0)
    inventory_quantity: int | None = Field(default=None, ge=0)


class RestockRequest(BaseModel):
    quantity: int = Field(ge=1)
    variant_id: str | None = None


class ProductIdResponse(BaseModel):
    product_id: str


class VariantIdResponse(BaseModel):
    variant_id: str


class StockResponse(BaseModel):
    product_id: str
    inventory_quantity: int | None = None


class StatusResponse(BaseModel):
    status: str = "ok"
