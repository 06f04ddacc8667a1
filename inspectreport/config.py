from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .types import InvoiceConfig


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    app_name: str = 'Inspection Report Engine'
    log_level: str = 'INFO'

    output_dir: Path = Field(
        default=Path('./exports'),
        validation_alias=AliasChoices('OUTPUT_DIR', 'EXPORT_DIR', 'REPORT_OUTPUT_DIR'),
    )

    # Branding
    company_name_en: str = 'Wasla Real Estate Solutions'
    company_name_ar: str = 'وصلة للحلول العقارية'
    company_email: str = 'info@waslaoman.com'
    company_phone: str = '+968 90699799'
    company_cr_number: str = '1068375'
    report_file_prefix: str = 'WASLA_Report'
    invoice_file_prefix: str = 'WASLA_Invoice'
    report_id_prefix: str = 'WASLA'

    # Remote branding assets are resolved before layout starts
    logo_url: str | None = None
    logo_path: Path | None = None
    watermark_opacity: float = 0.08
    asset_fetch_timeout_seconds: float = 10.0

    # PDF layout
    pdf_font_name: str = 'Helvetica'
    pdf_bold_font_name: str = 'Helvetica-Bold'
    pdf_arabic_font_path: Path | None = None
    pdf_margin_top_mm: float = 25.0
    pdf_margin_right_mm: float = 15.0
    pdf_margin_bottom_mm: float = 25.0
    pdf_margin_left_mm: float = 15.0
    pdf_gutter_mm: float = 10.0
    pdf_max_inline_photos: int = 6

    # Invoice defaults
    invoice_currency: str = 'OMR'
    invoice_vat_rate_percent: float = Field(
        default=5.0,
        validation_alias=AliasChoices('INVOICE_VAT_RATE_PERCENT', 'VAT_RATE_PERCENT', 'VAT_RATE'),
    )
    residential_rate_per_sqm: float = 1.5
    commercial_rate_per_sqm: float = 2.0

    def invoice_config(self) -> InvoiceConfig:
        return InvoiceConfig(
            currency=self.invoice_currency,
            vat_rate_percent=self.invoice_vat_rate_percent,
            residential_rate_per_sqm=self.residential_rate_per_sqm,
            commercial_rate_per_sqm=self.commercial_rate_per_sqm,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    settings = Settings()
    settings.output_dir.mkdir(parents=True, exist_ok=True)
    return settings
