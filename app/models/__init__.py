# Users
from app.models.users.user_models import User
from app.models.support.activity_models import UserActivity

# Orders
from app.models.orders.order_models import Order, Document, Translation

# Quotes
from app.models.quotes.quote_models import Quote

# Partners
from app.models.partners.api_key_models import ApiKey
from app.models.partners.api_quote_request_models import ApiQuoteRequest
