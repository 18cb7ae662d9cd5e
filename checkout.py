# checkout.py
"""The three-step checkout wizard: form -> payment -> confirmation.

Wizard state lives in the session mapping handed to the constructor, so
one browser session drives one checkout at a time. There is no way back
out of ``confirmation``; ``reset`` starts a new checkout.
"""
from decimal import Decimal

from pydantic import EmailStr, TypeAdapter, ValidationError

from core import STATES
from pricing import quote, normalize_delivery, generate_order_number

FORM, PAYMENT, CONFIRMATION = "form", "payment", "confirmation"
STEPS = [FORM, PAYMENT, CONFIRMATION]

_EMAIL = TypeAdapter(EmailStr)
FORM_FIELDS = ["first_name", "last_name", "email", "phone", "address", "city", "note"]


class CheckoutError(Exception):
    def __init__(self, messages):
        if isinstance(messages, str):
            messages = [messages]
        self.messages = list(messages)
        super().__init__("; ".join(self.messages))


def blank_state():
    return {
        "step": FORM,
        "form": {f: "" for f in FORM_FIELDS},
        "selected_state": STATES[0],
        "delivery_option": "pickup",
        "order_number": None,
        "total": None,
        "receipt_url": None,
        "error": None,
    }


class CheckoutWizard:

    def __init__(self, store, key="checkout"):
        self.store = store
        self.key = key

    @property
    def state(self):
        data = self.store.get(self.key)
        if data is None:
            data = blank_state()
        return dict(data)

    def _save(self, data):
        self.store[self.key] = data

    @property
    def step(self):
        return self.state["step"]

    @property
    def form(self):
        return dict(self.state["form"])

    @property
    def order_number(self):
        return self.state["order_number"]

    @property
    def total(self):
        total = self.state["total"]
        return Decimal(total) if total is not None else None

    @property
    def receipt_url(self):
        return self.state["receipt_url"]

    @property
    def selected_state(self):
        return self.state["selected_state"]

    @property
    def delivery_option(self):
        return self.state["delivery_option"]

    def _require(self, step, action):
        if self.step != step:
            raise CheckoutError(f"Cannot {action} during the {self.step} step")

    def validate(self, form, selected_state, delivery_option):
        errors = []
        for name, label in (("first_name", "First name"), ("last_name", "Last name"),
                            ("email", "Email"), ("phone", "Phone number")):
            if not form.get(name, "").strip():
                errors.append(f"{label} is required")
        email = form.get("email", "").strip()
        if email:
            # same check the order service applies to customer_email
            try:
                _EMAIL.validate_python(email)
            except ValidationError:
                errors.append("Please enter a valid email address")
        if selected_state not in STATES:
            errors.append("Please select your state")
        if delivery_option == "delivery":
            if not form.get("address", "").strip():
                errors.append("Please enter your delivery address")
            if not form.get("city", "").strip():
                errors.append("Please enter your city or town")
        return errors

    def choose_delivery(self, selected_state, delivery_option, form=None):
        """Change state or delivery method on the form step; returns the option kept."""
        self._require(FORM, "change delivery")
        data = self.state
        if selected_state not in STATES:
            raise CheckoutError("Please select your state")
        data["selected_state"] = selected_state
        data["delivery_option"] = normalize_delivery(selected_state, delivery_option)
        if form is not None:
            data["form"] = {f: (form.get(f) or "").strip() for f in FORM_FIELDS}
        self._save(data)
        return data["delivery_option"]

    def submit_details(self, form, selected_state, delivery_option, cart, now_ms=None):
        """form -> payment: validate, then fix the order number and total."""
        self._require(FORM, "submit details")
        data = self.state
        clean = {f: (form.get(f) or "").strip() for f in FORM_FIELDS}
        option = normalize_delivery(selected_state, delivery_option)
        # keep what was typed even when it fails validation
        data.update(form=clean, selected_state=selected_state, delivery_option=option)
        self._save(data)

        errors = self.validate(clean, selected_state, option)
        if not len(cart):
            errors.append("Your cart is empty")
        if errors:
            raise CheckoutError(errors)

        q = quote(cart.lines, option, selected_state)
        data.update(
            step=PAYMENT,
            order_number=generate_order_number(now_ms),
            total=str(q.total),
            error=None,
        )
        self._save(data)
        return q

    def back(self):
        """payment -> form, keeping the entered details."""
        self._require(PAYMENT, "go back")
        data = self.state
        data["step"] = FORM
        self._save(data)

    def attach_receipt(self, url):
        self._require(PAYMENT, "attach a receipt")
        data = self.state
        data["receipt_url"] = url
        self._save(data)

    def payload(self, cart):
        """Order payload for orders.submit_order, from the frozen total and the cart."""
        if not len(cart):
            raise CheckoutError("Your cart is empty")
        data = self.state
        form = data["form"]
        delivery = data["delivery_option"] == "delivery"
        return {
            "order_number": data["order_number"],
            "customer_name": f"{form['first_name']} {form['last_name']}".strip(),
            "customer_email": form["email"],
            "customer_phone": form["phone"],
            "total_amount": data["total"],
            "delivery_option": data["delivery_option"],
            "selected_state": data["selected_state"],
            "delivery_address": form["address"] if delivery else None,
            "city": form["city"] if delivery else None,
            "note": form["note"] or None,
            "receipt_url": data["receipt_url"],
            "items": [
                {
                    "product_id": line["product_id"],
                    "product_name": line["name"],
                    "price": line["price"],
                    "quantity": line["quantity"],
                    "size": line.get("size"),
                    "color": line.get("color"),
                }
                for line in cart.lines
            ],
        }

    def complete(self, result, cart, advance_on_failure=True):
        """payment -> confirmation once the submission has settled.

        With ``advance_on_failure`` a failed submission still reaches the
        confirmation page and still clears the cart; the error is kept on
        the wizard for the caller to flash. Without it the wizard stays on
        the payment step and the cart is untouched.
        """
        self._require(PAYMENT, "complete the order")
        if not self.receipt_url:
            raise CheckoutError("Please upload your payment receipt first.")
        data = self.state
        data["error"] = None if result.success else result.error
        if result.success or advance_on_failure:
            cart.clear()
            data["step"] = CONFIRMATION
        self._save(data)
        return data["step"]

    @property
    def error(self):
        return self.state["error"]

    def reset(self):
        self.store.pop(self.key, None)
