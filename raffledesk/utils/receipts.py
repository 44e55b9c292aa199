"""Plain-text receipts for ticket purchases."""

from __future__ import annotations

from decimal import Decimal

from raffledesk.models.entity import Entity
from raffledesk.models.purchase import TicketPurchase

DIVIDER = "~~~~~~~~~~~~~~~~~~~~~"

_SMALL_CAPS = {
    "a": "ᴀ", "b": "ʙ", "c": "ᴄ", "d": "ᴅ", "e": "ᴇ", "f": "ꜰ",
    "g": "ɢ", "h": "ʜ", "i": "ɪ", "j": "ᴊ", "k": "ᴋ", "l": "ʟ",
    "m": "ᴍ", "n": "ɴ", "o": "ᴏ", "p": "ᴘ", "q": "ǫ", "r": "ʀ",
    "s": "s", "t": "ᴛ", "u": "ᴜ", "v": "ᴠ", "w": "ᴡ", "x": "x",
    "y": "ʏ", "z": "ᴢ",
}


def small_caps(text: str) -> str:
    """Render lowercase ASCII letters as Unicode small capitals.

    Uppercase letters and everything else pass through unchanged.
    """

    return "".join(_SMALL_CAPS.get(ch, ch) for ch in text)


def format_money(value: Decimal | int | float) -> str:
    """``10`` for whole amounts, ``2.50`` otherwise."""

    amount = Decimal(str(value))
    if amount == amount.to_integral_value():
        return str(int(amount))
    return f"{amount:.2f}"


def generate_receipt(entity: Entity, purchase: TicketPurchase) -> str:
    lines = [
        f"{entity.emoji} {entity.display_name} {small_caps('raffle')} {entity.emoji}",
        entity.tagline,
        DIVIDER,
    ]
    if purchase.is_gift and purchase.gifter_name:
        lines.append(f"🎁 GIFT from: {purchase.gifter_name}")
    lines.extend(
        [
            f"Buyer: {purchase.buyer_name}",
            f"Tickets purchased: {purchase.ticket_count}",
            f"Price per ticket: ${format_money(purchase.price_per_ticket)}",
            f"Total Price: ${format_money(purchase.total_price)}",
            f"Ticket Numbers: {purchase.ticket_range}",
            f"Raffler Name: {purchase.raffler_name}",
            DIVIDER,
        ]
    )
    return "\n".join(lines)
