from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra='ignore')


class ItemStatus(str, Enum):
    passed = 'Pass'
    failed = 'Fail'
    not_applicable = 'N/A'

    @classmethod
    def coerce(cls, value: Any) -> 'ItemStatus':
        if isinstance(value, cls):
            return value
        token = str(value or '').strip()
        for member in cls:
            if member.value.lower() == token.lower():
                return member
        return cls.not_applicable


class InvoiceStatus(str, Enum):
    paid = 'Paid'
    unpaid = 'Unpaid'
    partial = 'Partial'
    draft = 'Draft'


class Photo(_Record):
    base64: str = ''
    name: str = ''


class InspectionItem(_Record):
    id: str = ''
    category: str = ''
    point: str = ''
    status: ItemStatus = ItemStatus.not_applicable
    comments: str = ''
    location: str = ''
    photos: tuple[Photo, ...] = ()

    @field_validator('status', mode='before')
    @classmethod
    def _coerce_status(cls, value: Any) -> ItemStatus:
        return ItemStatus.coerce(value)

    @field_validator('category', 'point', 'comments', 'location', mode='before')
    @classmethod
    def _none_to_empty(cls, value: Any) -> str:
        return '' if value is None else str(value)


class InspectionArea(_Record):
    id: str = ''
    name: str = ''
    items: tuple[InspectionItem, ...] = ()


class InspectionRecord(_Record):
    id: str = ''
    client_name: str = Field(default='', validation_alias=AliasChoices('client_name', 'clientName'))
    property_location: str = Field(
        default='',
        validation_alias=AliasChoices('property_location', 'propertyLocation'),
    )
    property_type: str = Field(default='', validation_alias=AliasChoices('property_type', 'propertyType'))
    inspector_name: str = Field(default='', validation_alias=AliasChoices('inspector_name', 'inspectorName'))
    inspection_date: str = Field(
        default='',
        validation_alias=AliasChoices('inspection_date', 'inspectionDate'),
    )
    areas: tuple[InspectionArea, ...] = ()
    ai_summary: str | None = Field(default=None, validation_alias=AliasChoices('ai_summary', 'aiSummary'))

    @field_validator('client_name', 'property_location', 'property_type', 'inspector_name', mode='before')
    @classmethod
    def _none_to_empty(cls, value: Any) -> str:
        return '' if value is None else str(value)

    @field_validator('inspection_date', mode='before')
    @classmethod
    def _date_to_text(cls, value: Any) -> str:
        if value is None:
            return ''
        if isinstance(value, date):
            return value.isoformat()
        return str(value)


class InvoiceConfig(_Record):
    currency: str = 'OMR'
    vat_rate_percent: float = Field(default=5.0, validation_alias=AliasChoices('vat_rate_percent', 'vatRate'))
    residential_rate_per_sqm: float = Field(
        default=1.5,
        validation_alias=AliasChoices('residential_rate_per_sqm', 'residentialRate'),
    )
    commercial_rate_per_sqm: float = Field(
        default=2.0,
        validation_alias=AliasChoices('commercial_rate_per_sqm', 'commercialRate'),
    )


class ServiceItem(_Record):
    id: str = ''
    description: str = ''
    quantity: float = 0
    unit_price: float = Field(default=0, validation_alias=AliasChoices('unit_price', 'unitPrice'))
    total: float = 0


class InvoiceRecord(_Record):
    id: str = ''
    invoice_number: str = Field(default='', validation_alias=AliasChoices('invoice_number', 'invoiceNumber'))
    invoice_date: str = Field(default='', validation_alias=AliasChoices('invoice_date', 'invoiceDate'))
    due_date: str = Field(default='', validation_alias=AliasChoices('due_date', 'dueDate'))
    client_name: str = Field(default='', validation_alias=AliasChoices('client_name', 'clientName'))
    client_email: str = Field(default='', validation_alias=AliasChoices('client_email', 'clientEmail'))
    client_address: str = Field(default='', validation_alias=AliasChoices('client_address', 'clientAddress'))
    property_location: str = Field(
        default='',
        validation_alias=AliasChoices('property_location', 'propertyLocation'),
    )
    property_type: str | None = Field(default=None, validation_alias=AliasChoices('property_type', 'propertyType'))
    property_area: float | None = Field(default=None, validation_alias=AliasChoices('property_area', 'propertyArea'))
    services: tuple[ServiceItem, ...] = ()
    subtotal: float = 0
    tax: float = 0
    total_amount: float = Field(default=0, validation_alias=AliasChoices('total_amount', 'totalAmount'))
    amount_paid: float = Field(default=0, validation_alias=AliasChoices('amount_paid', 'amountPaid'))
    status: InvoiceStatus = InvoiceStatus.draft
    notes: str | None = None
    config: InvoiceConfig | None = None

    @field_validator('status', mode='before')
    @classmethod
    def _coerce_status(cls, value: Any) -> InvoiceStatus:
        token = str(value or '').strip().lower()
        for member in InvoiceStatus:
            if member.value.lower() == token:
                return member
        return InvoiceStatus.draft

    @field_validator('invoice_date', 'due_date', mode='before')
    @classmethod
    def _date_to_text(cls, value: Any) -> str:
        if value is None:
            return ''
        if isinstance(value, date):
            return value.isoformat()
        return str(value)


class ClientProperty(_Record):
    id: str = ''
    location: str = ''
    type: str = ''
    size: float = 0


class Client(_Record):
    id: str = ''
    name: str = ''
    email: str = ''
    phone: str = ''
    address: str = ''
    properties: tuple[ClientProperty, ...] = ()


class ExportResult(BaseModel):
    kind: str
    filename: str
    path: str
    report_id: str
    page_count: int
    photo_failures: int = 0
    metadata: dict[str, Any] = Field(default_factory=dict)
