SALES_CHANNELS_FLAG = "sales_channels"

# flag key -> default when not set in the environment
FEATURE_FLAGS = {
    SALES_CHANNELS_FLAG: False,
}

TOTAL_FIELDS = (
    "subtotal",
    "tax_total",
    "shipping_total",
    "discount_total",
    "gift_card_total",
    "total",
)

CART_RELATIONS = (
    "region",
    "region.countries",
    "items",
    "shipping_address",
    "sales_channel",
)

DEFAULT_STORE_CART_FIELDS = TOTAL_FIELDS
DEFAULT_STORE_CART_RELATIONS = (
    "region",
    "region.countries",
    "items",
    "shipping_address",
)

SHIPPING_PROFILE_TYPES = {
    "default": "Default",
    "gift_card": "Gift card",
    "custom": "Custom",
}

BATCH_JOB_CREATED = "created"
