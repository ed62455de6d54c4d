# Overview: POS cart engine; line-item editing, totals and checkout against the store.

"""
Cart Engine

A Cart is an explicit session object: callers create one (or rebuild it
from the dict kept in the HTTP session), mutate it, and hand it to
checkout(). Nothing here is process-wide state.

Checkout writes the sale first, then decrements stock line by line in
cart order. With CHECKOUT_ATOMIC (default) those writes share one
transaction and a failure leaves nothing behind. With CHECKOUT_ATOMIC off,
the sale and each stock update are committed separately, so a failure
part-way keeps the sale and leaves the remaining lines unapplied; the
error carries the sale id and the product ids still pending. There is no
retry in either mode.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import Product, Sale, SaleLine
from ..validation import (
    MAX_INTEGER,
    ValidationError,
    lenient_amount_cents,
    parse_amount_cents,
    parse_int,
)
from .catalog import ProductCatalog
from commcentre.time_utils import utcnow

PAYMENT_METHODS = ("cash", "card")
DEFAULT_PAYMENT_METHOD = "cash"


class CartError(ValidationError):
    """Raised for invalid cart operations (bad index, empty checkout)."""


class CheckoutError(Exception):
    """Raised when the store fails while committing a sale."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


@dataclass
class CartLine:
    product_id: int
    name: str
    unit_price_cents: int
    quantity: int = 1

    @property
    def line_total_cents(self) -> int:
        return self.unit_price_cents * self.quantity

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "unit_price_cents": self.unit_price_cents,
            "quantity": self.quantity,
            "line_total_cents": self.line_total_cents,
        }


@dataclass(frozen=True)
class CartTotals:
    subtotal_cents: int
    discount_cents: int
    total_cents: int

    @property
    def display_total_cents(self) -> int:
        return max(self.total_cents, 0)

    def to_dict(self) -> dict:
        return {
            "subtotal_cents": self.subtotal_cents,
            "discount_cents": self.discount_cents,
            "total_cents": self.total_cents,
            "display_total_cents": self.display_total_cents,
        }


def compute_totals(lines: Iterable[CartLine], discount: Any = None) -> CartTotals:
    """
    Pure totals over a line sequence.

    discount is the raw user input; anything unparseable or negative
    counts as 0. total is not clamped.
    """
    subtotal = sum(line.line_total_cents for line in lines)
    discount_cents = lenient_amount_cents(discount)
    return CartTotals(
        subtotal_cents=subtotal,
        discount_cents=discount_cents,
        total_cents=subtotal - discount_cents,
    )


@dataclass
class Cart:
    lines: list[CartLine] = field(default_factory=list)
    discount_input: Any = None

    def is_empty(self) -> bool:
        return not self.lines

    def _require_index(self, index: int) -> int:
        index = parse_int(index, default=-1, field_name="index")
        if index < 0 or index >= len(self.lines):
            raise CartError(
                "Cart line not found",
                details={"index": index, "line_count": len(self.lines)},
            )
        return index

    def add_line(self, product_id: Any, catalog: ProductCatalog) -> bool:
        """
        Add one unit of a product.

        Unknown products are ignored (returns False). The price is taken
        from the catalog when the line is first created.
        """
        product = catalog.get(parse_int(product_id, field_name="product_id"))
        if product is None:
            return False

        for line in self.lines:
            if line.product_id == product["id"]:
                if line.quantity >= MAX_INTEGER:
                    raise CartError(
                        f"Line quantity cannot exceed {MAX_INTEGER:,}",
                        details={"product_id": line.product_id},
                    )
                line.quantity += 1
                return True

        self.lines.append(
            CartLine(
                product_id=product["id"],
                name=product["name"],
                unit_price_cents=product["selling_price_cents"] or 0,
            )
        )
        return True

    def remove_line(self, index: int) -> CartLine:
        index = self._require_index(index)
        return self.lines.pop(index)

    def adjust_quantity(self, index: int, delta: Any) -> CartLine | None:
        """
        Add delta to a line's quantity. A result <= 0 removes the line;
        returns the surviving line or None when it was removed.
        """
        index = self._require_index(index)
        line = self.lines[index]
        quantity = line.quantity + parse_int(delta, field_name="delta")
        if quantity > MAX_INTEGER:
            raise CartError(
                f"Line quantity cannot exceed {MAX_INTEGER:,}",
                details={"index": index, "quantity": line.quantity},
            )
        if quantity <= 0:
            self.lines.pop(index)
            return None
        line.quantity = quantity
        return line

    def set_discount(self, raw: Any) -> None:
        # Negative discounts are refused; garbage is kept and counts as 0
        parse_amount_cents(raw, field_name="discount")
        self.discount_input = raw

    def totals(self) -> CartTotals:
        return compute_totals(self.lines, self.discount_input)

    def clear(self) -> None:
        self.lines = []
        self.discount_input = None

    def to_dict(self) -> dict:
        return {
            "lines": [line.to_dict() for line in self.lines],
            "discount_input": self.discount_input,
        }

    @classmethod
    def from_dict(cls, data: dict | None) -> "Cart":
        if not data:
            return cls()
        lines = [
            CartLine(
                product_id=int(raw["product_id"]),
                name=raw["name"],
                unit_price_cents=int(raw["unit_price_cents"]),
                quantity=int(raw["quantity"]),
            )
            for raw in data.get("lines", [])
            if int(raw.get("quantity", 0)) >= 1
        ]
        return cls(lines=lines, discount_input=data.get("discount_input"))


def cart_summary(cart: Cart) -> dict:
    """Plain data for rendering the cart panel."""
    return {
        "lines": [line.to_dict() for line in cart.lines],
        "line_count": len(cart.lines),
        "totals": cart.totals().to_dict(),
    }


def normalize_payment_method(value: Any) -> str:
    if value is None or str(value).strip() == "":
        return DEFAULT_PAYMENT_METHOD
    method = str(value).strip().lower()
    if method not in PAYMENT_METHODS:
        raise ValidationError(
            f"payment_method must be one of: {', '.join(PAYMENT_METHODS)}"
        )
    return method


def _build_sale(cart: Cart, totals: CartTotals, payment_method: str) -> Sale:
    sale = Sale(
        date=utcnow(),
        sub_total_cents=totals.subtotal_cents,
        discount_cents=totals.discount_cents,
        total_amount_cents=totals.total_cents,
        payment_method=payment_method,
    )
    for position, line in enumerate(cart.lines):
        sale.lines.append(
            SaleLine(
                position=position,
                product_id=line.product_id,
                name=line.name,
                quantity=line.quantity,
                unit_price_cents=line.unit_price_cents,
                line_total_cents=line.line_total_cents,
            )
        )
    return sale


def apply_stock_decrement(product_id: int, quantity: int) -> Product | None:
    """
    Read the product and write back stock - quantity.

    Returns None (and writes nothing) when the product no longer exists.
    """
    product = db.session.get(Product, product_id)
    if product is None:
        current_app.logger.warning(
            "Checkout: product id=%s no longer exists, stock update skipped", product_id
        )
        return None
    product.stock_quantity = (product.stock_quantity or 0) - quantity
    db.session.flush()
    return product


def checkout(
    cart: Cart,
    catalog: ProductCatalog,
    *,
    payment_method: Any = None,
    atomic: bool | None = None,
) -> Sale:
    """
    Commit the cart as a Sale and decrement stock for each line.

    Raises:
        CartError: cart is empty (no writes issued)
        ValidationError: unknown payment method (no writes issued)
        CheckoutError: the store failed; the cart is left as it was
    """
    if cart.is_empty():
        raise CartError("Cart is empty")

    method = normalize_payment_method(payment_method)
    if atomic is None:
        atomic = current_app.config.get("CHECKOUT_ATOMIC", True)

    totals = cart.totals()
    sale = _build_sale(cart, totals, method)

    try:
        db.session.add(sale)
        if atomic:
            db.session.flush()
        else:
            db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Checkout failed while saving sale")
        raise CheckoutError("Checkout failed") from exc

    sale_id = sale.id
    pending = [line.product_id for line in cart.lines]

    for line in cart.lines:
        try:
            apply_stock_decrement(line.product_id, line.quantity)
            if not atomic:
                db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            current_app.logger.exception(
                "Checkout failed while updating stock for product id=%s", line.product_id
            )
            if atomic:
                raise CheckoutError("Checkout failed") from exc
            raise CheckoutError(
                "Checkout failed",
                details={"sale_id": sale_id, "unapplied_product_ids": pending},
            ) from exc
        pending = pending[1:]

    if atomic:
        try:
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            current_app.logger.exception("Checkout failed while committing sale")
            raise CheckoutError("Checkout failed") from exc

    current_app.logger.info(
        "Sale id=%s committed: %s line(s), total_cents=%s",
        sale_id, len(cart.lines), totals.total_cents,
    )

    cart.clear()
    catalog.invalidate()
    return sale
