from pydantic import BaseModel, Field, ConfigDict


class ShippingLineDTO(BaseModel):
    """Minimal line shape accepted by the shipping calculator."""
    name: str | None = None
    quantity: int | None = None
    shipping_category: str | None = None


class ShippingAddressDTO(BaseModel):
    """Checkout address as submitted by the storefront (camelCase keys)."""
    model_config = ConfigDict(populate_by_name=True)

    full_name: str | None = Field(default=None, alias="fullName")
    email: str | None = None
    address_line1: str | None = Field(default=None, alias="addressLine1")
    address_line2: str | None = Field(default=None, alias="addressLine2")
    city: str | None = None
    state: str | None = None
    postal_code: str | None = Field(default=None, alias="postalCode")
    country: str | None = None
    phone: str | None = None


class ZoneRatesDTO(BaseModel):
    zone: str
    pledges: dict[str, float]
    addons: dict[str, float]
