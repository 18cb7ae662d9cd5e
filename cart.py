# cart.py
from pricing import cart_subtotal

def line_key(product_id, size=None, color=None):
    return f"{product_id}:{size or ''}:{color or ''}"

class Cart:
    """Shopping cart kept in a session-like mapping.

    The caller owns the mapping (normally ``flask.session``) and hands it
    in; lines are plain dicts so they serialize into the session cookie.
    Each line is one product variant (product, size, color).
    """

    def __init__(self, store, key="cart"):
        self.store = store
        self.key = key

    @property
    def lines(self):
        return list(self.store.get(self.key, []))

    def _save(self, lines):
        # reassign so the session notices the change
        self.store[self.key] = lines

    def __iter__(self):
        return iter(self.lines)

    def __len__(self):
        return len(self.lines)

    def get(self, key):
        for line in self.lines:
            if line["key"] == key:
                return line
        return None

    def quantity_of(self, product_id):
        return sum(l["quantity"] for l in self.lines if l["product_id"] == product_id)

    def add(self, product, quantity=1, size=None, color=None):
        key = line_key(product.id, size, color)
        lines = self.lines
        for line in lines:
            if line["key"] == key:
                line["quantity"] += int(quantity)
                break
        else:
            lines.append({
                "key": key,
                "product_id": product.id,
                "name": product.name,
                "price": product.price,
                "quantity": int(quantity),
                "image": product.main_image,
                "size": size,
                "color": color,
            })
        self._save(lines)
        return key

    def update(self, key, quantity):
        quantity = int(quantity)
        if quantity <= 0:
            self.remove(key)
            return
        lines = self.lines
        for line in lines:
            if line["key"] == key:
                line["quantity"] = quantity
        self._save(lines)

    def remove(self, key):
        self._save([l for l in self.lines if l["key"] != key])

    def clear(self):
        self._save([])

    def subtotal(self):
        return cart_subtotal(self.lines)

    def count(self):
        return sum(l["quantity"] for l in self.lines)
