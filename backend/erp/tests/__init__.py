from decimal import Decimal

from django.contrib.auth.models import User

from ..models import Account, Customer, Item, Supplier, Warehouse


def create_user(username: str = "clerk", password: str = "pw"):
    return User.objects.create_user(username=username, password=password)


def create_ledgers(prefix: str = ""):
    """Return an account, a customer and a supplier starting at zero."""

    account = Account.objects.create(name=f"{prefix}Cash", category=Account.CATEGORY_CASH)
    customer = Customer.objects.create(name=f"{prefix}Alice")
    supplier = Supplier.objects.create(name=f"{prefix}Acme Supplies")
    return account, customer, supplier


def create_item(code: str = "W-1", name: str = "Widget"):
    return Item.objects.create(code=code, name=name)


def default_warehouse():
    return Warehouse.get_default()


def balance_of(instance) -> Decimal:
    """Fresh balance for an account, supplier or customer."""

    if isinstance(instance, Customer):
        return instance.current_balance
    instance.refresh_from_db(fields=["current_balance"])
    return instance.current_balance
