"""
Checkout handoff: the order summary sent to the store over WhatsApp.
"""
from decimal import Decimal
from typing import Optional
from urllib.parse import quote

from schemas import CustomerInfo, Order

RULE = "━━━━━━━━━━━━━━━━━━━━━━━━━"


def _money(amount: Decimal) -> str:
    return f"${amount:.2f}"


def build_order_message(order: Order, customer: CustomerInfo, store_name: str = "Noréal Beauty") -> str:
    lines = [
        f"✨ *NEW ORDER FROM {store_name.upper()}* ✨",
        RULE,
        "",
        f"📋 *ORDER ID:* #{(order.id or '')[:8].upper()}",
        "",
        "👤 *CUSTOMER INFORMATION*",
        RULE,
        f"👋 Name: {customer.full_name}",
        f"📞 Phone: {customer.phone}",
        f"📍 Address: {customer.address}",
        f"🏙️ City: {customer.city}",
    ]
    if customer.email:
        lines.append(f"📧 Email: {customer.email}")
    if customer.notes:
        lines.append(f"💬 Notes: {customer.notes}")

    lines += ["", "🛍️ *ORDER DETAILS*", RULE]
    for n, item in enumerate(order.items, start=1):
        unit = _money(item.price)
        if item.is_subscription:
            unit += " (15% OFF 🎉)"
        lines += [
            "",
            f"✨ *{n}. {item.product_name}*",
            f"   📦 Quantity: {item.quantity}",
            f"   💵 Unit Price: {unit}",
            f"   💰 Subtotal: {_money(item.price * item.quantity)}",
        ]
        if item.is_subscription:
            lines.append(f"   🔄 Subscription: {item.subscription_frequency or 'Monthly'}")

    lines += [
        "",
        RULE,
        "💳 *PAYMENT SUMMARY*",
        RULE,
        f"🛒 Subtotal: {_money(order.subtotal)}",
        f"🚚 Shipping: {_money(order.shipping)}",
    ]
    if order.tax:
        lines.append(f"🧾 Tax: {_money(order.tax)}")
    lines += [
        RULE,
        f"💎 *TOTAL AMOUNT: {_money(order.total)}*",
        RULE,
        "",
        f"✅ Thank you for shopping with {store_name}! 💖",
    ]
    return "\n".join(lines)


def whatsapp_url(message: str, phone: Optional[str]) -> str:
    digits = "".join(ch for ch in (phone or "") if ch.isdigit())
    return f"https://wa.me/{digits}?text={quote(message, safe='')}"
