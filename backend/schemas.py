from __future__ import annotations
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional

# Request bodies. Order payloads keep the camelCase keys the storefront sends.

class Brand(BaseModel):
    brand_name: str = Field(min_length=1, max_length=255)

class BrandCreated(BaseModel):
    brandId: int

class ChangedRows(BaseModel):
    changedRows: int

class AffectedRows(BaseModel):
    affectedRows: int

class OrderVariant(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    size: int = Field(gt=0)
    price: float = Field(ge=0)
    original_price: Optional[float] = Field(None, ge=0)
    discount_amount: Optional[float] = Field(None, ge=0)
    discount_percentage: Optional[float] = Field(None, ge=0)

class OrderLine(BaseModel):
    id: int
    quantity: int = Field(ge=1, default=1)
    variant: OrderVariant

class OrderTotals(BaseModel):
    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)

    total: float = Field(ge=0, default=0)
    subtotal: float = Field(ge=0, default=0)
    shipping_cost: float = Field(ge=0, default=0, alias="shippingCost")
    items: list[OrderLine] = Field(min_length=1)

class Address(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    salutation: str = ""
    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    street: str
    house_number: str = Field(alias="houseNumber")
    additional_address: str = Field("", alias="additionalAddress")
    postcode: str
    city: str
    phone_number: str = Field("", alias="phoneNumber")

    def as_row(self) -> dict:
        return {
            "salutation": self.salutation,
            "name": f"{self.first_name} {self.last_name}".strip(),
            "address": f"{self.street} {self.house_number}".strip(),
            "additional_address": self.additional_address,
            "postcode": self.postcode,
            "city": self.city,
            "phone_number": self.phone_number,
        }

class Order(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr
    payment_method: int = Field(alias="paymentMethod")
    order: OrderTotals
    invoice_address: Address = Field(alias="invoiceAddress")
    shipping_address: Address = Field(alias="shippingAddress")

class OrderCreated(BaseModel):
    order_id: int

# Demonstration users; any extra attributes are stored as sent.

class User(BaseModel):
    model_config = ConfigDict(extra="allow")

    firstName: Optional[str] = None
    lastName: Optional[str] = None
