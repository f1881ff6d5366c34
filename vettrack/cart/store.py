"""Cart store: in-memory cart lines with write-through persistence."""
import os
from decimal import Decimal
from typing import Callable, List, Optional, Union

from vettrack.errors import CartNotReadyError, ERROR_INVALID_QUANTITY
from vettrack.logging import get_logger, sanitize_id_for_logging
from vettrack.notifications import LoggingSink, Toast, ToastSink, ToastVariant, build_toast
from vettrack.services.money import to_float

from .models import CartLine, CartState, ProductSnapshot
from .storage import CART_STORAGE_KEY, CartStorage, dump_lines, get_storage, load_lines

logger = get_logger(__name__)

# Toast language
CART_LANGUAGE = os.environ.get("CART_LANGUAGE", "tr")

CartListener = Callable[[List[CartLine]], None]


class CartStore:
    """
    Authoritative cart for one session.

    Features:
    - One line per product; re-adding merges quantities
    - Stock limits enforced on every mutation (rejections become toasts)
    - Whole cart written to storage after every accepted mutation
    - Listeners notified after every accepted mutation

    Call `hydrate()` once before mutating.
    """

    def __init__(
        self,
        storage: CartStorage,
        notify: Optional[ToastSink] = None,
        storage_key: str = CART_STORAGE_KEY,
        lang: str = CART_LANGUAGE,
    ):
        self.storage = storage
        self.storage_key = storage_key
        self.lang = lang
        self._notify_sink = notify if notify is not None else LoggingSink()
        self._lines: List[CartLine] = []
        self._listeners: List[CartListener] = []
        self.state = CartState.HYDRATING

    # ==================== LIFECYCLE ====================

    @property
    def is_ready(self) -> bool:
        return self.state == CartState.READY

    def hydrate(self) -> "CartStore":
        """
        Replace the empty default with the persisted cart, once.

        Missing, unreadable or corrupt data leaves the cart empty.
        """
        if self.is_ready:
            return self

        try:
            raw = self.storage.get(self.storage_key)
        except Exception as e:
            logger.error(f"Failed to load cart from storage: {e}")
            raw = None

        if raw:
            try:
                self._lines = load_lines(raw)
            except ValueError as e:
                logger.warning(f"Corrupted cart data under {self.storage_key}: {e}")
                self._lines = []

        self.state = CartState.READY
        logger.debug(f"Cart hydrated with {len(self._lines)} line(s)")
        self._emit_change()
        return self

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """Register a change listener. Returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ==================== MUTATIONS ====================

    def add_to_cart(self, product: Union[ProductSnapshot, dict], quantity: int = 1) -> bool:
        """
        Add `quantity` units of a product, merging into an existing line.

        Returns True if the cart changed. Stock violations return False
        and emit a destructive toast.
        """
        self._ensure_ready()
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValueError(ERROR_INVALID_QUANTITY)
        if not isinstance(product, ProductSnapshot):
            product = ProductSnapshot.model_validate(product)

        limit = product.stock_qty
        if limit is not None and quantity > limit:
            self.notify(build_toast(
                "cart.stock_insufficient", self.lang, ToastVariant.DESTRUCTIVE,
                description_key="only_available", limit=limit,
            ))
            return False

        existing = self._find(product.id)
        if existing is not None:
            new_quantity = existing.quantity + quantity
            if limit is not None and new_quantity > limit:
                self.notify(build_toast(
                    "cart.stock_insufficient", self.lang, ToastVariant.DESTRUCTIVE,
                    description_key="max_addable",
                    limit=limit, remaining=max(limit - existing.quantity, 0),
                ))
                return False
            # Display data stays as first added; only the stock snapshot moves
            existing.quantity = new_quantity
            existing.stock_limit = limit
        else:
            self._lines.append(CartLine.from_product(product, quantity))

        logger.info(f"Added {quantity} x {sanitize_id_for_logging(product.id)} to cart")
        self.notify(build_toast("cart.added", self.lang, name=product.name))
        self._changed()
        return True

    def remove_from_cart(self, product_id: str) -> bool:
        """Remove the line for `product_id`. Returns False if there was none."""
        self._ensure_ready()
        remaining = [line for line in self._lines if line.product_id != product_id]
        if len(remaining) == len(self._lines):
            return False

        self._lines = remaining
        self.notify(build_toast("cart.removed", self.lang))
        self._changed()
        return True

    def update_quantity(self, product_id: str, quantity: int) -> bool:
        """
        Set a line's quantity. Zero or less removes the line.

        Returns True if the cart changed.
        """
        self._ensure_ready()
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise ValueError(ERROR_INVALID_QUANTITY)
        if quantity <= 0:
            return self.remove_from_cart(product_id)

        line = self._find(product_id)
        if line is None:
            return False

        if line.exceeds_stock(quantity):
            self.notify(build_toast(
                "cart.stock_insufficient", self.lang, ToastVariant.DESTRUCTIVE,
                description_key="max_quantity", limit=line.stock_limit,
            ))
            return False

        line.quantity = quantity
        self._changed()
        return True

    def clear_cart(self) -> None:
        """Empty the cart. Always persists and always notifies."""
        self._ensure_ready()
        self._lines = []
        self.notify(build_toast("cart.cleared", self.lang))
        self._changed()

    # ==================== QUERIES ====================

    @property
    def items(self) -> List[CartLine]:
        """Copy of the cart lines in display order."""
        return [line.copy() for line in self._lines]

    def get_total_items(self) -> int:
        return sum(line.quantity for line in self._lines)

    def get_total_price(self) -> Decimal:
        """Exact sum of quantity x unit price. Rounding is left to display."""
        return sum((line.total_price for line in self._lines), Decimal("0"))

    def is_in_cart(self, product_id: str) -> bool:
        return self._find(product_id) is not None

    def get_item_quantity(self, product_id: str) -> int:
        line = self._find(product_id)
        return line.quantity if line else 0

    def get_summary(self) -> dict:
        """Cart summary for the cart dialog and API responses."""
        return {
            "is_empty": not self._lines,
            "total_items": self.get_total_items(),
            "items": [
                {
                    "line_id": line.line_id,
                    "product_id": line.product_id,
                    "name": line.name,
                    "brand": line.brand,
                    "image_url": line.image_url,
                    "quantity": line.quantity,
                    "stock_limit": line.stock_limit,
                    "unit_price": to_float(line.price),
                    "total": to_float(line.total_price),
                }
                for line in self._lines
            ],
            "total_price": to_float(self.get_total_price()),
        }

    def notify(self, toast: Toast) -> None:
        """Send a toast to the session's sink."""
        self._notify_sink(toast)

    # ==================== INTERNALS ====================

    def _find(self, product_id: str) -> Optional[CartLine]:
        return next((line for line in self._lines if line.product_id == product_id), None)

    def _ensure_ready(self) -> None:
        if not self.is_ready:
            raise CartNotReadyError()

    def _changed(self) -> None:
        self._persist()
        self._emit_change()

    def _persist(self) -> None:
        """Write the whole cart. Failures are logged; memory stays authoritative."""
        try:
            self.storage.set(self.storage_key, dump_lines(self._lines))
        except Exception as e:
            logger.error(f"Failed to save cart to storage: {e}")

    def _emit_change(self) -> None:
        snapshot = self.items
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Cart listener failed")


# Singleton instance
_cart_store: Optional[CartStore] = None


def get_cart_store() -> CartStore:
    """Get the hydrated CartStore singleton for this process."""
    global _cart_store
    if _cart_store is None:
        _cart_store = CartStore(storage=get_storage()).hydrate()
    return _cart_store
