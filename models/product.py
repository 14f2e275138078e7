"""
Product record schema.

One ProductRecord per input row. Known storefront columns are typed fields
(aliased to their column header); any other column is kept as an extra so
the output row carries it through unchanged.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Columns whose input value must survive processing unchanged
IMMUTABLE_FIELDS = ("Handle", "Image Src", "Variant Image", "ID", "Variant ID")

GOOGLE_CATEGORY_FIELD = "Google Shopping / Google Product Category"
CONDITION_FIELD = "Google Shopping / Condition"


class ProductRecord(BaseModel):
    """
    One storefront export row.

    Values are always strings. Cells read as numbers or booleans are
    coerced the way a spreadsheet displays them ("12.0" → "12",
    True → "TRUE"); empty cells become "".
    """
    model_config = ConfigDict(
        populate_by_name=True,
        extra="allow",
        validate_assignment=True
    )

    handle: str = Field("", alias="Handle")
    title: str = Field("", alias="Title")
    body_html: str = Field("", alias="Body (HTML)")
    vendor: str = Field("", alias="Vendor")
    product_type: str = Field("", alias="Type")
    tags: str = Field("", alias="Tags")
    collections: str = Field("", alias="Collections")
    product_category: str = Field("", alias="Product Category")
    seo_title: str = Field("", alias="SEO Title")
    seo_description: str = Field("", alias="SEO Description")
    google_product_category: str = Field("", alias=GOOGLE_CATEGORY_FIELD)
    condition: str = Field("", alias=CONDITION_FIELD)

    image_src: str = Field("", alias="Image Src")
    variant_image: str = Field("", alias="Variant Image")
    product_id: str = Field("", alias="ID")
    variant_id: str = Field("", alias="Variant ID")

    variant_sku: str = Field("", alias="Variant SKU")
    variant_grams: str = Field("", alias="Variant Grams")
    variant_requires_shipping: str = Field("", alias="Variant Requires Shipping")
    variant_taxable: str = Field("", alias="Variant Taxable")
    variant_barcode: str = Field("", alias="Variant Barcode")
    variant_price: str = Field("", alias="Variant Price")
    variant_price_currency: str = Field("", alias="Variant Price Currency")

    @field_validator("*", mode="before")
    @classmethod
    def coerce_cell(cls, v: Any) -> str:
        """Normalize a raw cell value to its display string."""
        return cell_to_str(v)

    @classmethod
    def from_row(cls, row: dict) -> "ProductRecord":
        """Build a record from a header → value mapping."""
        return cls.model_validate({str(k): v for k, v in row.items()})

    def get_column(self, column: str) -> str:
        """Read a value by column header."""
        name = COLUMN_TO_FIELD.get(column)
        if name:
            return getattr(self, name)
        return cell_to_str((self.model_extra or {}).get(column))

    def set_column(self, column: str, value: Any) -> None:
        """Write a value by column header."""
        name = COLUMN_TO_FIELD.get(column)
        if name:
            setattr(self, name, value)
        elif self.model_extra is not None:
            self.model_extra[column] = cell_to_str(value)

    def restore_immutables(self, snapshot: "ProductRecord") -> None:
        """Force immutable columns back to the snapshot's values."""
        for column in IMMUTABLE_FIELDS:
            self.set_column(column, snapshot.get_column(column))

    def to_row(self, headers: list[str]) -> dict[str, str]:
        """Serialize to an output row; columns the record lacks become ""."""
        return {header: self.get_column(header) for header in headers}

    @property
    def tag_list(self) -> list[str]:
        return [t.strip() for t in self.tags.split(",") if t.strip()]


def cell_to_str(v: Optional[Any]) -> str:
    if v is None:
        return ""
    if isinstance(v, bool):
        return "TRUE" if v else "FALSE"
    if isinstance(v, float):
        if v != v:  # NaN
            return ""
        if v.is_integer():
            return str(int(v))
    return str(v)


COLUMN_TO_FIELD: dict[str, str] = {
    info.alias: name for name, info in ProductRecord.model_fields.items()
}
