import logging
import os
from datetime import datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel

import analytics
from catalog import browse, rating_summary
from database import db, create_document, from_document, get_documents, to_document, to_object_id
from schemas import (
    ActivityLog,
    AddToCart,
    Address,
    AddressCreate,
    AddressUpdate,
    AdminCreate,
    BlogPost,
    BlogPostCreate,
    BlogPostUpdate,
    Cart,
    CheckoutRequest,
    FilterCriteria,
    Notification,
    Order,
    OrderItem,
    OrderUpdate,
    Product,
    ProductCreate,
    ProductRef,
    ProductUpdate,
    Review,
    ReviewCreate,
    SortStrategy,
    UpdateCartItem,
    User,
    UserCreate,
    UserLogin,
    UserUpdate,
    Wishlist,
)
from whatsapp import build_order_message, whatsapp_url

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

SECRET_KEY = os.getenv("JWT_SECRET", "change-this-secret")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24))
WHATSAPP_PHONE = os.getenv("WHATSAPP_PHONE", "+201278835919")
STORE_NAME = os.getenv("STORE_NAME", "Noréal Beauty")
SHIPPING_FLAT = Decimal("5.00")
SUBSCRIPTION_DISCOUNT = Decimal("0.85")

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/auth/login")

app = FastAPI(title="Noréal Beauty API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Helpers
class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: dict


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def collection(name: str):
    if db is None:
        raise HTTPException(status_code=503, detail="Database not configured")
    return db[name]


def find_by_id(collection_name: str, doc_id: str, detail: str = "Not found"):
    oid = to_object_id(doc_id)
    doc = collection(collection_name).find_one({"_id": oid}) if oid else None
    if not doc:
        raise HTTPException(status_code=404, detail=detail)
    return doc


def load_products() -> List[Product]:
    return [Product(**d) for d in get_documents("product")]


def load_orders(filter_dict: Optional[dict] = None) -> List[Order]:
    return [Order(**d) for d in get_documents("order", filter_dict)]


def public_user(user: User) -> dict:
    return user.model_dump(mode="json", exclude={"password_hash"})


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def get_current_user(token: str = Depends(oauth2_scheme)) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        user_id: Optional[str] = payload.get("sub")
        if user_id is None:
            raise credentials_exception
    except JWTError:
        raise credentials_exception
    oid = to_object_id(user_id)
    doc = collection("user").find_one({"_id": oid}) if oid else None
    if not doc or not doc.get("is_active", True):
        raise credentials_exception
    return User(**from_document(doc))


def require_role(*roles):
    def _guard(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise HTTPException(status_code=403, detail="Forbidden")
        return user
    return _guard


require_admin = require_role("admin", "owner")
require_owner = require_role("owner")


def log_activity(admin: User, action: str, request: Request, target_type: Optional[str] = None,
                 target_id: Optional[str] = None, details: Optional[dict] = None):
    entry = ActivityLog(
        admin_id=admin.id,
        admin_email=admin.email,
        action=action,
        target_type=target_type,
        target_id=target_id,
        details=details,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
        created_at=utcnow(),
    )
    create_document("activitylog", entry)
    logger.info("Admin %s: %s %s %s", admin.email, action, target_type or "", target_id or "")


ORDER_STATUS_MESSAGES = {
    "pending": ("Order Pending", "Your order #{ref} is waiting to be processed."),
    "processing": ("Order Processing", "Your order #{ref} is being prepared."),
    "shipped": ("Order Shipped! 📦", "Your order #{ref} has been shipped{tracking}."),
    "delivered": ("Order Delivered! ✅", "Your order #{ref} has been delivered. Enjoy your products!"),
    "cancelled": ("Order Cancelled", "Your order #{ref} has been cancelled."),
}


def notify(user_id: str, title: str, message: str, link: Optional[str] = "/account", type: str = "order"):
    note = Notification(user_id=user_id, type=type, title=title, message=message, link=link, created_at=utcnow())
    return create_document("notification", note)


def find_owned(collection_name: str, doc_id: str, user: User, detail: str):
    doc = find_by_id(collection_name, doc_id, detail)
    if doc.get("user_id") != user.id:
        raise HTTPException(status_code=404, detail=detail)
    return doc


# Health
@app.get("/")
def read_root():
    return {"message": "Noréal Beauty Backend running"}


@app.get("/test")
def test_database():
    try:
        collections = db.list_collection_names() if db is not None else []
        return {"backend": "ok", "db": "ok" if db is not None else "not_configured", "collections": collections}
    except Exception as e:
        logger.exception("Database check failed")
        return {"backend": "ok", "db": f"error: {str(e)[:80]}"}


# Auth
@app.post("/api/auth/register", status_code=201)
def register(payload: UserCreate):
    if collection("user").find_one({"email": payload.email}):
        raise HTTPException(status_code=400, detail="Email already registered")
    user = User(
        email=payload.email,
        password_hash=pwd_context.hash(payload.password),
        first_name=payload.first_name,
        last_name=payload.last_name,
        created_at=utcnow(),
    )
    user.id = create_document("user", user)
    logger.info("Registered user %s", user.email)
    return public_user(user)


@app.post("/api/auth/login", response_model=TokenResponse)
def login(creds: UserLogin, request: Request):
    doc = collection("user").find_one({"email": creds.email})
    if not doc or not doc.get("password_hash"):
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if not pwd_context.verify(creds.password, doc["password_hash"]):
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if not doc.get("is_active", True):
        raise HTTPException(status_code=403, detail="Account disabled")
    collection("user").update_one(
        {"_id": doc["_id"]},
        {"$set": {"last_login_at": utcnow(), "login_count": doc.get("login_count", 0) + 1}},
    )
    user = User(**from_document(doc))
    if user.role in ("admin", "owner"):
        log_activity(user, "login", request, "user", user.id)
    token = create_access_token({"sub": user.id, "role": user.role})
    return TokenResponse(access_token=token, user=public_user(user))


@app.get("/api/auth/user")
def me(user: User = Depends(get_current_user)):
    return public_user(user)


# Products
@app.get("/api/products")
def list_products(
    q: str = "",
    category: str = "all",
    skin_type: str = "all",
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    in_stock: bool = False,
    min_rating: Decimal = Query(Decimal("0"), ge=0, le=5),
    sort: SortStrategy = SortStrategy.featured,
):
    price_range = None
    if min_price is not None or max_price is not None:
        price_range = (min_price, max_price)
    criteria = FilterCriteria(
        search_query=q,
        category=category,
        skin_type=skin_type,
        price_range=price_range,
        in_stock_only=in_stock,
        min_rating=min_rating,
    )
    return [p.model_dump(mode="json") for p in browse(load_products(), criteria, sort)]


@app.get("/api/products/{product_id}")
def get_product(product_id: str):
    doc = find_by_id("product", product_id, "Product not found")
    return Product(**from_document(doc)).model_dump(mode="json")


@app.post("/api/products", status_code=201)
def create_product(payload: ProductCreate, request: Request, admin: User = Depends(require_admin)):
    product = Product(**payload.model_dump(), created_at=utcnow())
    product.id = create_document("product", product)
    log_activity(admin, "product_create", request, "product", product.id, {"name": product.name})
    return product.model_dump(mode="json")


@app.patch("/api/products/{product_id}")
def update_product(product_id: str, payload: ProductUpdate, request: Request, admin: User = Depends(require_admin)):
    doc = find_by_id("product", product_id, "Product not found")
    changes = payload.model_dump(mode="json", exclude_unset=True, exclude_none=True)
    if changes:
        changes["updated_at"] = utcnow()
        collection("product").update_one({"_id": doc["_id"]}, {"$set": changes})
        doc.update(changes)
    log_activity(admin, "product_update", request, "product", product_id, {"fields": sorted(changes)})
    return Product(**from_document(doc)).model_dump(mode="json")


@app.delete("/api/products/{product_id}", status_code=204)
def delete_product(product_id: str, request: Request, admin: User = Depends(require_admin)):
    doc = find_by_id("product", product_id, "Product not found")
    collection("product").delete_one({"_id": doc["_id"]})
    collection("review").delete_many({"product_id": product_id})
    log_activity(admin, "product_delete", request, "product", product_id, {"name": doc.get("name")})


# Reviews
@app.get("/api/products/{product_id}/reviews")
def list_reviews(product_id: str):
    reviews = [Review(**d) for d in get_documents("review", {"product_id": product_id})]
    reviews.sort(key=lambda r: r.created_at or datetime.min, reverse=True)
    return [r.model_dump(mode="json") for r in reviews]


@app.post("/api/products/{product_id}/reviews", status_code=201)
def create_review(product_id: str, payload: ReviewCreate):
    product = find_by_id("product", product_id, "Product not found")
    review = Review(product_id=product_id, created_at=utcnow(), **payload.model_dump())
    review.id = create_document("review", review)

    ratings = [d["rating"] for d in collection("review").find({"product_id": product_id})]
    rating, count = rating_summary(ratings)
    collection("product").update_one(
        {"_id": product["_id"]},
        {"$set": {"rating": str(rating), "review_count": count, "updated_at": utcnow()}},
    )
    return review.model_dump(mode="json")


@app.post("/api/reviews/{review_id}/helpful")
def mark_review_helpful(review_id: str):
    doc = find_by_id("review", review_id, "Review not found")
    doc["helpful"] = doc.get("helpful", 0) + 1
    collection("review").update_one({"_id": doc["_id"]}, {"$set": {"helpful": doc["helpful"]}})
    return Review(**from_document(doc)).model_dump(mode="json")


# Cart
def _cart_items(user_id: str) -> List[dict]:
    cart = collection("cart").find_one({"user_id": user_id})
    return list(cart.get("items", [])) if cart else []


def _save_cart(user_id: str, items: List[dict]):
    cart = Cart(user_id=user_id, items=items)
    if collection("cart").find_one({"user_id": user_id}):
        collection("cart").update_one({"user_id": user_id}, {"$set": {"items": to_document(cart)["items"]}})
    else:
        create_document("cart", cart)


def _unit_price(product: Product, is_subscription: bool) -> Decimal:
    price = product.price * SUBSCRIPTION_DISCOUNT if is_subscription else product.price
    return price.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


@app.post("/api/cart/add")
def add_to_cart(payload: AddToCart, user: User = Depends(get_current_user)):
    find_by_id("product", payload.product_id, "Product not found")
    qty = max(1, payload.quantity)
    items = _cart_items(user.id)
    for it in items:
        if (it["product_id"] == payload.product_id
                and it.get("is_subscription", False) == payload.is_subscription
                and it.get("subscription_frequency") == payload.subscription_frequency):
            it["quantity"] += qty
            break
    else:
        items.append({
            "product_id": payload.product_id,
            "quantity": qty,
            "is_subscription": payload.is_subscription,
            "subscription_frequency": payload.subscription_frequency,
        })
    _save_cart(user.id, items)
    return {"status": "ok"}


@app.post("/api/cart/update")
def update_cart_item(payload: UpdateCartItem, user: User = Depends(get_current_user)):
    items = _cart_items(user.id)
    for it in items:
        if it["product_id"] == payload.product_id:
            it["quantity"] = max(1, payload.quantity)
    _save_cart(user.id, items)
    return {"status": "ok"}


@app.post("/api/cart/remove")
def remove_from_cart(payload: ProductRef, user: User = Depends(get_current_user)):
    items = [it for it in _cart_items(user.id) if it["product_id"] != payload.product_id]
    _save_cart(user.id, items)
    return {"status": "ok"}


@app.get("/api/cart")
def get_cart(user: User = Depends(get_current_user)):
    items = []
    total = Decimal("0")
    for it in _cart_items(user.id):
        oid = to_object_id(it["product_id"])
        doc = collection("product").find_one({"_id": oid}) if oid else None
        if not doc:
            continue
        product = Product(**from_document(doc))
        price = _unit_price(product, it.get("is_subscription", False))
        subtotal = price * it["quantity"]
        total += subtotal
        items.append({
            "product_id": product.id,
            "name": product.name,
            "image": product.images[0] if product.images else None,
            "price": str(price),
            "quantity": it["quantity"],
            "is_subscription": it.get("is_subscription", False),
            "subtotal": str(subtotal),
        })
    return {"items": items, "total": str(total)}


# Wishlist
@app.get("/api/wishlist")
def get_wishlist(user: User = Depends(get_current_user)):
    doc = collection("wishlist").find_one({"user_id": user.id})
    return {"product_ids": doc.get("product_ids", []) if doc else []}


@app.post("/api/wishlist/add")
def add_to_wishlist(payload: ProductRef, user: User = Depends(get_current_user)):
    find_by_id("product", payload.product_id, "Product not found")
    doc = collection("wishlist").find_one({"user_id": user.id})
    if not doc:
        create_document("wishlist", Wishlist(user_id=user.id, product_ids=[payload.product_id]))
        return {"product_ids": [payload.product_id]}
    product_ids = doc.get("product_ids", [])
    if payload.product_id not in product_ids:
        product_ids.append(payload.product_id)
        collection("wishlist").update_one({"user_id": user.id}, {"$set": {"product_ids": product_ids}})
    return {"product_ids": product_ids}


@app.post("/api/wishlist/remove")
def remove_from_wishlist(payload: ProductRef, user: User = Depends(get_current_user)):
    doc = collection("wishlist").find_one({"user_id": user.id})
    product_ids = [p for p in (doc.get("product_ids", []) if doc else []) if p != payload.product_id]
    if doc:
        collection("wishlist").update_one({"user_id": user.id}, {"$set": {"product_ids": product_ids}})
    return {"product_ids": product_ids}


# Addresses
def _clear_default_address(user_id: str):
    collection("address").update_many({"user_id": user_id, "is_default": True}, {"$set": {"is_default": False}})


@app.get("/api/addresses")
def list_addresses(user: User = Depends(get_current_user)):
    addresses = [Address(**d) for d in get_documents("address", {"user_id": user.id})]
    addresses.sort(key=lambda a: not a.is_default)
    return [a.model_dump(mode="json") for a in addresses]


@app.post("/api/addresses", status_code=201)
def create_address(payload: AddressCreate, user: User = Depends(get_current_user)):
    if payload.is_default:
        _clear_default_address(user.id)
    address = Address(user_id=user.id, created_at=utcnow(), **payload.model_dump())
    address.id = create_document("address", address)
    return address.model_dump(mode="json")


@app.patch("/api/addresses/{address_id}")
def update_address(address_id: str, payload: AddressUpdate, user: User = Depends(get_current_user)):
    doc = find_owned("address", address_id, user, "Address not found")
    changes = payload.model_dump(mode="json", exclude_unset=True, exclude_none=True)
    if changes.get("is_default"):
        _clear_default_address(user.id)
    if changes:
        collection("address").update_one({"_id": doc["_id"]}, {"$set": changes})
        doc.update(changes)
    return Address(**from_document(doc)).model_dump(mode="json")


@app.delete("/api/addresses/{address_id}", status_code=204)
def delete_address(address_id: str, user: User = Depends(get_current_user)):
    doc = find_owned("address", address_id, user, "Address not found")
    collection("address").delete_one({"_id": doc["_id"]})


# Checkout -> create order, clear cart, hand off to WhatsApp
@app.post("/api/checkout", status_code=201)
def checkout(req: CheckoutRequest, user: User = Depends(get_current_user)):
    order_items: List[OrderItem] = []
    subtotal = Decimal("0")
    for it in _cart_items(user.id):
        oid = to_object_id(it["product_id"])
        doc = collection("product").find_one({"_id": oid}) if oid else None
        if not doc:
            continue
        product = Product(**from_document(doc))
        price = _unit_price(product, it.get("is_subscription", False))
        subtotal += price * it["quantity"]
        order_items.append(OrderItem(
            product_id=product.id,
            product_name=product.name,
            quantity=it["quantity"],
            price=price,
            is_subscription=it.get("is_subscription", False),
            subscription_frequency=it.get("subscription_frequency"),
        ))
    if not order_items:
        raise HTTPException(status_code=400, detail="Cart is empty")

    customer = req.customer
    if not customer.email:
        customer = customer.model_copy(update={"email": user.email})
    tax = Decimal("0")
    order = Order(
        user_id=user.id,
        items=order_items,
        subtotal=subtotal,
        shipping=SHIPPING_FLAT,
        tax=tax,
        total=subtotal + SHIPPING_FLAT + tax,
        customer=customer,
        created_at=utcnow(),
    )
    order.id = create_document("order", order)
    collection("cart").update_one({"user_id": user.id}, {"$set": {"items": []}})
    logger.info("Order %s created for user %s, total %s", order.id, user.id, order.total)
    notify(
        user.id,
        "Order Confirmed! 🎉",
        f"Your order #{order.id[:8]} has been confirmed. Total: ${order.total:.2f}",
    )

    message = build_order_message(order, customer, STORE_NAME)
    return {"order": order.model_dump(mode="json"), "whatsapp_url": whatsapp_url(message, WHATSAPP_PHONE)}


# Orders
@app.get("/api/orders")
def list_my_orders(user: User = Depends(get_current_user)):
    orders = sorted(load_orders({"user_id": user.id}), key=lambda o: o.created_at, reverse=True)
    return [o.model_dump(mode="json") for o in orders]


@app.get("/api/orders/{order_id}")
def get_order(order_id: str, user: User = Depends(get_current_user)):
    order = Order(**from_document(find_by_id("order", order_id, "Order not found")))
    if order.user_id != user.id and user.role not in ("admin", "owner"):
        raise HTTPException(status_code=404, detail="Order not found")
    return order.model_dump(mode="json")


# Notifications
@app.get("/api/notifications")
def list_notifications(user: User = Depends(get_current_user)):
    notes = [Notification(**d) for d in get_documents("notification", {"user_id": user.id})]
    notes.sort(key=lambda n: n.created_at or datetime.min, reverse=True)
    return [n.model_dump(mode="json") for n in notes]


@app.patch("/api/notifications/mark-all-read")
def mark_all_notifications_read(user: User = Depends(get_current_user)):
    result = collection("notification").update_many({"user_id": user.id, "read": False}, {"$set": {"read": True}})
    return {"updated": result.modified_count}


@app.patch("/api/notifications/{notification_id}/read")
def mark_notification_read(notification_id: str, user: User = Depends(get_current_user)):
    doc = find_owned("notification", notification_id, user, "Notification not found")
    collection("notification").update_one({"_id": doc["_id"]}, {"$set": {"read": True}})
    doc["read"] = True
    return Notification(**from_document(doc)).model_dump(mode="json")


@app.delete("/api/notifications/{notification_id}", status_code=204)
def delete_notification(notification_id: str, user: User = Depends(get_current_user)):
    doc = find_owned("notification", notification_id, user, "Notification not found")
    collection("notification").delete_one({"_id": doc["_id"]})


# Admin: orders
@app.get("/api/admin/orders")
def admin_list_orders(_: User = Depends(require_admin)):
    emails = {u["id"]: u.get("email") for u in get_documents("user")}
    result = []
    for o in sorted(load_orders(), key=lambda o: o.created_at, reverse=True):
        row = o.model_dump(mode="json")
        row["user_email"] = emails.get(o.user_id)
        result.append(row)
    return result


@app.patch("/api/admin/orders/{order_id}")
def admin_update_order(order_id: str, payload: OrderUpdate, request: Request, admin: User = Depends(require_admin)):
    doc = find_by_id("order", order_id, "Order not found")
    changes = {}
    if payload.status is not None:
        changes["status"] = payload.status.value
    if payload.tracking_number:
        changes["tracking_number"] = payload.tracking_number
    if payload.shipped_at:
        changes["shipped_at"] = payload.shipped_at
    if payload.delivered_at:
        changes["delivered_at"] = payload.delivered_at
    if changes:
        changes["updated_at"] = utcnow()
        collection("order").update_one({"_id": doc["_id"]}, {"$set": changes})
        doc.update(changes)
    if payload.status is not None:
        title, template = ORDER_STATUS_MESSAGES[payload.status.value]
        tracking = f" (Tracking: {doc['tracking_number']})" if doc.get("tracking_number") else ""
        notify(doc["user_id"], title, template.format(ref=order_id[:8], tracking=tracking))
    log_activity(admin, "order_update", request, "order", order_id, {"status": changes.get("status")})
    return Order(**from_document(doc)).model_dump(mode="json")


# Admin: analytics
@app.get("/api/admin/analytics/products")
def admin_product_analytics(
    year: Optional[int] = Query(None, ge=1970, le=9999),
    window_days: int = Query(30, ge=1, le=366),
    _: User = Depends(require_admin),
):
    snapshot = analytics.dashboard_snapshot(load_orders(), load_products(), year=year, window_days=window_days)
    return snapshot.model_dump(mode="json")


@app.get("/api/admin/analytics/users")
def admin_user_analytics(_: User = Depends(require_admin)):
    users = [User(**d) for d in get_documents("user")]
    return analytics.user_stats(users).model_dump(mode="json")


# Admin: users
@app.get("/api/admin/users")
def admin_list_users(_: User = Depends(require_admin)):
    return [public_user(User(**d)) for d in get_documents("user")]


@app.patch("/api/admin/users/{user_id}")
def admin_update_user(user_id: str, payload: UserUpdate, request: Request, admin: User = Depends(require_admin)):
    doc = find_by_id("user", user_id, "User not found")
    if doc.get("role") == "owner" and admin.role != "owner":
        raise HTTPException(status_code=403, detail="Cannot modify the owner")
    changes = payload.model_dump(mode="json", exclude_unset=True, exclude_none=True)
    if changes:
        collection("user").update_one({"_id": doc["_id"]}, {"$set": changes})
        doc.update(changes)
    log_activity(admin, "user_update", request, "user", user_id, changes)
    return public_user(User(**from_document(doc)))


@app.delete("/api/admin/users/{user_id}", status_code=204)
def admin_delete_user(user_id: str, request: Request, admin: User = Depends(require_admin)):
    if user_id == admin.id:
        raise HTTPException(status_code=400, detail="Cannot delete your own account")
    doc = find_by_id("user", user_id, "User not found")
    if doc.get("role") in ("admin", "owner") and admin.role != "owner":
        raise HTTPException(status_code=403, detail="Only the owner can delete administrators")
    collection("user").delete_one({"_id": doc["_id"]})
    log_activity(admin, "user_delete", request, "user", user_id, {"email": doc.get("email")})


@app.get("/api/admin/activity-logs")
def admin_activity_logs(limit: int = Query(100, ge=1, le=1000), _: User = Depends(require_admin)):
    logs = sorted(get_documents("activitylog"), key=lambda d: d.get("created_at") or datetime.min, reverse=True)
    return [ActivityLog(**d).model_dump(mode="json") for d in logs[:limit]]


# Blog
@app.get("/api/blogs")
def list_blogs():
    posts = [BlogPost(**d) for d in get_documents("blogpost", {"published": True})]
    posts.sort(key=lambda p: p.published_at or datetime.min, reverse=True)
    return [p.model_dump(mode="json") for p in posts]


@app.get("/api/admin/blogs")
def admin_list_blogs(_: User = Depends(require_admin)):
    posts = [BlogPost(**d) for d in get_documents("blogpost")]
    posts.sort(key=lambda p: p.created_at or datetime.min, reverse=True)
    return [p.model_dump(mode="json") for p in posts]


@app.post("/api/admin/blogs", status_code=201)
def admin_create_blog(payload: BlogPostCreate, request: Request, admin: User = Depends(require_admin)):
    if collection("blogpost").find_one({"slug": payload.slug}):
        raise HTTPException(status_code=400, detail="Slug already in use")
    now = utcnow()
    post = BlogPost(
        **payload.model_dump(),
        author_id=admin.id,
        author_name=" ".join(filter(None, [admin.first_name, admin.last_name])) or admin.email,
        published_at=now if payload.published else None,
        created_at=now,
    )
    post.id = create_document("blogpost", post)
    log_activity(admin, "blog_create", request, "blog", post.id, {"title": post.title})
    return post.model_dump(mode="json")


@app.patch("/api/admin/blogs/{post_id}")
def admin_update_blog(post_id: str, payload: BlogPostUpdate, request: Request, admin: User = Depends(require_admin)):
    doc = find_by_id("blogpost", post_id, "Blog post not found")
    changes = payload.model_dump(mode="json", exclude_unset=True, exclude_none=True)
    if "slug" in changes and changes["slug"] != doc.get("slug"):
        if collection("blogpost").find_one({"slug": changes["slug"]}):
            raise HTTPException(status_code=400, detail="Slug already in use")
    if changes.get("published") and not doc.get("published"):
        changes["published_at"] = utcnow()
    if changes:
        changes["updated_at"] = utcnow()
        collection("blogpost").update_one({"_id": doc["_id"]}, {"$set": changes})
        doc.update(changes)
    log_activity(admin, "blog_update", request, "blog", post_id, {"fields": sorted(changes)})
    return BlogPost(**from_document(doc)).model_dump(mode="json")


@app.delete("/api/admin/blogs/{post_id}", status_code=204)
def admin_delete_blog(post_id: str, request: Request, admin: User = Depends(require_admin)):
    doc = find_by_id("blogpost", post_id, "Blog post not found")
    collection("blogpost").delete_one({"_id": doc["_id"]})
    log_activity(admin, "blog_delete", request, "blog", post_id, {"title": doc.get("title")})


# Owner: administrator management
@app.get("/api/owner/admins")
def owner_list_admins(_: User = Depends(require_owner)):
    return [public_user(User(**d)) for d in get_documents("user", {"role": "admin"})]


@app.post("/api/owner/create-admin", status_code=201)
def owner_create_admin(payload: AdminCreate, request: Request, owner: User = Depends(require_owner)):
    if collection("user").find_one({"email": payload.email}):
        raise HTTPException(status_code=400, detail="Email already registered")
    admin = User(
        email=payload.email,
        password_hash=pwd_context.hash(payload.password),
        first_name=payload.first_name,
        last_name=payload.last_name,
        role="admin",
        admin_role=payload.admin_role,
        email_verified=True,
        created_at=utcnow(),
    )
    admin.id = create_document("user", admin)
    log_activity(owner, "admin_create", request, "user", admin.id, {"email": admin.email, "admin_role": admin.admin_role})
    return public_user(admin)


@app.delete("/api/owner/admins/{user_id}", status_code=204)
def owner_delete_admin(user_id: str, request: Request, owner: User = Depends(require_owner)):
    doc = find_by_id("user", user_id, "Admin not found")
    if doc.get("role") != "admin":
        raise HTTPException(status_code=400, detail="User is not an administrator")
    collection("user").delete_one({"_id": doc["_id"]})
    log_activity(owner, "admin_delete", request, "user", user_id, {"email": doc.get("email")})


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
