"""
Database Schemas for Noréal Beauty

Each Pydantic model represents a MongoDB collection. The collection name is the lowercase of the class name.

- User -> "user"
- Product -> "product"
- Review -> "review"
- Cart -> "cart"
- Wishlist -> "wishlist"
- Order -> "order"
- BlogPost -> "blogpost"
- ActivityLog -> "activitylog"
- Address -> "address"
- Notification -> "notification"

Money is held as Decimal and stored as a string.
"""
import logging
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, EmailStr, Field, field_validator

logger = logging.getLogger(__name__)


class Category(str, Enum):
    moisturizers = "moisturizers"
    serums = "serums"
    cleansers = "cleansers"
    masks = "masks"
    toners = "toners"
    suncare = "suncare"
    eye_care = "eye-care"
    treatments = "treatments"


class SkinType(str, Enum):
    all = "all"
    dry = "dry"
    oily = "oily"
    combination = "combination"
    sensitive = "sensitive"


class OrderStatus(str, Enum):
    pending = "pending"
    processing = "processing"
    shipped = "shipped"
    delivered = "delivered"
    cancelled = "cancelled"


ORDER_STATUSES = tuple(s.value for s in OrderStatus)


class AdminRole(str, Enum):
    super_admin = "super-admin"
    admin = "admin"
    moderator = "moderator"


class SortStrategy(str, Enum):
    featured = "featured"
    price_low = "price-low"
    price_high = "price-high"
    rating = "rating"
    newest = "newest"


# Catalog

class Product(BaseModel):
    id: Optional[str] = None
    name: str = Field(..., min_length=1, description="Product name")
    description: str = Field("", description="Long description")
    short_description: str = Field("", description="Card description")
    price: Decimal = Field(..., ge=0, description="Unit price")
    category: Category
    skin_type: SkinType = Field(SkinType.all, description="'all' suits every skin type")
    ingredients: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list, description="Image URLs or data URIs")
    rating: Decimal = Field(Decimal("0"), ge=0, le=5, description="Mean review rating, one decimal")
    review_count: int = Field(0, ge=0)
    in_stock: bool = True
    is_best_seller: bool = False
    is_new: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = ""
    short_description: str = ""
    price: Decimal = Field(..., gt=0)
    category: Category
    skin_type: SkinType = SkinType.all
    ingredients: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)
    in_stock: bool = True
    is_best_seller: bool = False
    is_new: bool = False


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    short_description: Optional[str] = None
    price: Optional[Decimal] = Field(None, gt=0)
    category: Optional[Category] = None
    skin_type: Optional[SkinType] = None
    ingredients: Optional[List[str]] = None
    images: Optional[List[str]] = None
    in_stock: Optional[bool] = None
    is_best_seller: Optional[bool] = None
    is_new: Optional[bool] = None


class Review(BaseModel):
    id: Optional[str] = None
    product_id: str
    user_name: str = Field(..., min_length=1)
    rating: int = Field(..., ge=1, le=5)
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=10)
    helpful: int = Field(0, ge=0)
    created_at: Optional[datetime] = None


class ReviewCreate(BaseModel):
    user_name: str = Field(..., min_length=1)
    rating: int = Field(..., ge=1, le=5)
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=10)


class FilterCriteria(BaseModel):
    """Shopper-side catalog filters. Defaults constrain nothing."""
    search_query: str = ""
    category: str = "all"
    skin_type: str = "all"
    # (low, high); either bound may be None for an open-ended range
    price_range: Optional[Tuple[Optional[Decimal], Optional[Decimal]]] = None
    in_stock_only: bool = False
    min_rating: Decimal = Decimal("0")


# Users

class User(BaseModel):
    id: Optional[str] = None
    email: EmailStr = Field(..., description="Email address")
    password_hash: Optional[str] = Field(None, description="Hashed password, local accounts only")
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    auth_provider: str = Field("local", description="local or google")
    role: str = Field("customer", description="customer, admin or owner")
    admin_role: Optional[AdminRole] = None
    email_verified: bool = False
    is_active: bool = Field(True, description="Whether user is active")
    login_count: int = 0
    last_login_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email_verified: Optional[bool] = None
    is_active: Optional[bool] = None
    admin_role: Optional[AdminRole] = None


class AdminCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    admin_role: AdminRole = AdminRole.admin


# Cart, wishlist, orders

class CartItem(BaseModel):
    product_id: str
    quantity: int = Field(1, ge=1)
    is_subscription: bool = False
    subscription_frequency: Optional[str] = None


class Cart(BaseModel):
    user_id: str
    items: List[CartItem] = []


class Wishlist(BaseModel):
    user_id: str
    product_ids: List[str] = []


class AddToCart(BaseModel):
    product_id: str
    quantity: int = 1
    is_subscription: bool = False
    subscription_frequency: Optional[str] = None


class UpdateCartItem(BaseModel):
    product_id: str
    quantity: int


class ProductRef(BaseModel):
    product_id: str


class CustomerInfo(BaseModel):
    full_name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    email: Optional[str] = None
    notes: Optional[str] = None


class CheckoutRequest(BaseModel):
    customer: CustomerInfo


class OrderItem(BaseModel):
    product_id: str
    product_name: str
    quantity: int = Field(..., ge=1)
    price: Decimal = Field(..., ge=0)
    is_subscription: bool = False
    subscription_frequency: Optional[str] = None


class Order(BaseModel):
    id: Optional[str] = None
    user_id: str
    status: str = Field(OrderStatus.pending.value, description="See OrderStatus")
    items: List[OrderItem] = []
    subtotal: Decimal
    shipping: Decimal = Decimal("0")
    tax: Decimal = Decimal("0")
    total: Decimal
    customer: Optional[CustomerInfo] = None
    tracking_number: Optional[str] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    @field_validator("status")
    @classmethod
    def flag_unknown_status(cls, v: str) -> str:
        # kept as-is so analytics can report it
        if v not in ORDER_STATUSES:
            logger.warning("Order has unrecognized status %r", v)
        return v


class OrderUpdate(BaseModel):
    status: Optional[OrderStatus] = None
    tracking_number: Optional[str] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None


# Blog and activity log

class BlogPost(BaseModel):
    id: Optional[str] = None
    title: str = Field(..., min_length=1, max_length=255)
    slug: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    excerpt: Optional[str] = None
    cover_image: Optional[str] = None
    author_id: str
    author_name: str
    published: bool = False
    published_at: Optional[datetime] = None
    tags: List[str] = []
    view_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BlogPostCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    slug: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    excerpt: Optional[str] = None
    cover_image: Optional[str] = None
    published: bool = False
    tags: List[str] = []


class BlogPostUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    slug: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, min_length=1)
    excerpt: Optional[str] = None
    cover_image: Optional[str] = None
    published: Optional[bool] = None
    tags: Optional[List[str]] = None


class ActivityLog(BaseModel):
    admin_id: str
    admin_email: str
    action: str = Field(..., description="login, product_create, order_update, ...")
    target_type: Optional[str] = None
    target_id: Optional[str] = None
    details: Optional[dict] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: Optional[datetime] = None


# Address book and notifications

class Address(BaseModel):
    id: Optional[str] = None
    user_id: str
    label: str = Field(..., min_length=1, description="Home, Work, ...")
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    street: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: Optional[str] = None
    postal_code: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)
    phone: Optional[str] = None
    is_default: bool = False
    created_at: Optional[datetime] = None


class AddressCreate(BaseModel):
    label: str = Field(..., min_length=1)
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    street: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: Optional[str] = None
    postal_code: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)
    phone: Optional[str] = None
    is_default: bool = False


class AddressUpdate(BaseModel):
    label: Optional[str] = Field(None, min_length=1)
    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = Field(None, min_length=1)
    street: Optional[str] = Field(None, min_length=1)
    city: Optional[str] = Field(None, min_length=1)
    state: Optional[str] = None
    postal_code: Optional[str] = Field(None, min_length=1)
    country: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = None
    is_default: Optional[bool] = None


class Notification(BaseModel):
    id: Optional[str] = None
    user_id: str
    type: str = Field("order", description="order, system, ...")
    title: str
    message: str
    link: Optional[str] = None
    read: bool = False
    created_at: Optional[datetime] = None


# Analytics (derived, never stored)

class MonthlyPoint(BaseModel):
    month: str
    revenue: Decimal
    order_count: int


class DailyPoint(BaseModel):
    date: date
    order_count: int


class CumulativePoint(BaseModel):
    index: int
    date: datetime
    running_total: Decimal


class StockStatus(BaseModel):
    in_stock: int = 0
    out_of_stock: int = 0


class PricedProduct(BaseModel):
    id: Optional[str] = None
    name: str
    price: Decimal


class AggregateSnapshot(BaseModel):
    total_revenue: Decimal
    order_count: int
    average_order_value: Decimal
    orders_by_status: Dict[str, int]
    revenue_by_status: Dict[str, Decimal]
    unrecognized_statuses: List[str]
    monthly: List[MonthlyPoint]
    daily: List[DailyPoint]
    cumulative: List[CumulativePoint]
    product_count: int
    category_distribution: Dict[str, int]
    stock: StockStatus
    best_seller_count: int
    average_price: Decimal
    top_products: List[PricedProduct]
    generated_at: datetime


class UserStats(BaseModel):
    total: int
    verified: int
    admins: int
    by_provider: Dict[str, int]
    recent_signups: int
