# tests/test_app_setup.py
import logging

import pytest

from app.core.logging import setup_logging
from app.models.orders.order_models import Order, Translation
from app.models.partners.api_key_models import ApiKey
from app.models.partners.api_quote_request_models import ApiQuoteRequest
from app.models.users.user_models import User


@pytest.mark.parametrize("name", ["httpx", "stripe", "aiosqlite"])
def test_chatty_library_loggers_are_quiet(name):
    setup_logging()

    assert logging.getLogger(name).level == logging.WARNING


@pytest.mark.parametrize(
    "attribute",
    [Order.user, Translation.order, User.orders, User.api_keys, ApiKey.user, ApiQuoteRequest.api_key],
)
def test_unloaded_relationships_raise_instead_of_lazy_loading(attribute):
    assert attribute.property.lazy == "raise"


def test_payment_intent_backs_one_order():
    assert Order.__table__.c.payment_intent_id.unique is True
