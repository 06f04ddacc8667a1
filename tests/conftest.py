from __future__ import annotations

import base64
import io

import pytest
from PIL import Image
from pypdf import PdfReader

from inspectreport.config import Settings
from inspectreport.report.layout import RenderContext, build_context


def png_bytes(size: tuple[int, int] = (40, 30), color: str = 'navy') -> bytes:
    buffer = io.BytesIO()
    Image.new('RGB', size, color).save(buffer, format='PNG')
    return buffer.getvalue()


def jpeg_bytes(size: tuple[int, int] = (40, 30), color: str = 'orange') -> bytes:
    buffer = io.BytesIO()
    Image.new('RGB', size, color).save(buffer, format='JPEG')
    return buffer.getvalue()


def data_uri(payload: bytes, mime: str = 'image/png') -> str:
    return f'data:{mime};base64,{base64.b64encode(payload).decode("ascii")}'


def page_texts(pdf_bytes: bytes) -> list[str]:
    reader = PdfReader(io.BytesIO(pdf_bytes))
    return [page.extract_text() or '' for page in reader.pages]


@pytest.fixture
def settings(tmp_path) -> Settings:
    cfg = Settings(_env_file=None)
    return cfg.model_copy(update={'output_dir': tmp_path})


@pytest.fixture
def ctx(settings) -> RenderContext:
    return build_context(settings, header_title='Test Document', footer_left='Tester | Somewhere')


@pytest.fixture
def good_photo() -> str:
    return data_uri(png_bytes())


@pytest.fixture
def inspection_payload(good_photo) -> dict:
    return {
        'id': 'insp-1',
        'clientName': "Jane O'Brien",
        'propertyLocation': 'Al Khuwair, Muscat',
        'propertyType': 'Residential',
        'inspectorName': 'Khalid',
        'inspectionDate': '2026-10-18',
        'aiSummary': 'Overall the property is in good condition with minor plumbing issues.',
        'areas': [
            {
                'id': 'a1',
                'name': 'Kitchen',
                'items': [
                    {'id': 'i1', 'category': 'Plumbing', 'point': 'Sink drain', 'status': 'Fail',
                     'comments': 'Slow drainage', 'photos': [{'base64': good_photo, 'name': 'sink.png'}]},
                    {'id': 'i2', 'category': 'Electrical', 'point': 'Sockets', 'status': 'Pass'},
                ],
            },
            {
                'id': 'a2',
                'name': 'Garden',
                'items': [
                    {'id': 'i3', 'category': 'Irrigation', 'point': 'Sprinklers', 'status': 'N/A'},
                    {'id': 'i4', 'category': 'Walls', 'point': 'Boundary wall', 'status': 'pass'},
                ],
            },
        ],
    }


@pytest.fixture
def invoice_payload() -> dict:
    return {
        'id': 'inv-1',
        'invoiceNumber': 'INV-2026-0042',
        'invoiceDate': '2026-10-18',
        'dueDate': '2026-11-17',
        'clientName': 'Salim Al Harthy',
        'clientEmail': 'salim@example.com',
        'clientAddress': 'Way 3021\nMuscat',
        'propertyLocation': 'Qurum',
        'services': [
            {'id': 's1', 'description': 'Pre-purchase inspection', 'quantity': 1, 'unitPrice': 100, 'total': 100},
            {'id': 's2', 'description': 'Thermal imaging', 'quantity': 2, 'unitPrice': 25, 'total': 50},
        ],
        'subtotal': 150,
        'tax': 7.5,
        'totalAmount': 157.5,
        'amountPaid': 50,
        'status': 'Partial',
        'notes': 'Payment by bank transfer.',
    }
