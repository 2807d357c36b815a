"""
Booking receipt (comprovante) PDFs.

Receipts are written to AGENDA_RECEIPTS_DIR when a booking is made and are
deleted the first time they are downloaded. Receipts nobody downloads are
removed by the retention sweeper after AGENDA_RECEIPTS_TTL_SECONDS.
"""

from __future__ import annotations

import logging
import re
import secrets
import time
from pathlib import Path

from django.conf import settings
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import cm
from reportlab.pdfgen import canvas

from .models import Booking
from .validators import format_cpf


logger = logging.getLogger(__name__)

RECEIPT_NAME_RE = re.compile(r"^comprovante_\d+_[0-9a-f]{16}\.pdf$")


def receipts_dir() -> Path:
    path = Path(settings.AGENDA_RECEIPTS_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


def render_receipt(booking: Booking) -> str:
    """Render the receipt PDF for a booking and return its file name."""
    filename = f"comprovante_{booking.id}_{secrets.token_hex(8)}.pdf"
    path = receipts_dir() / filename

    width, height = A4
    pdf = canvas.Canvas(str(path), pagesize=A4)
    pdf.setTitle("Comprovante de Agendamento")

    y = height - 3 * cm
    pdf.setFont("Helvetica-Bold", 18)
    pdf.drawCentredString(width / 2, y, "Comprovante de Agendamento")
    y -= 1 * cm
    pdf.setFont("Helvetica", 12)
    pdf.drawCentredString(width / 2, y, settings.AGENDA_OFFICE_NAME)

    y -= 2 * cm
    rows = [
        ("Nome", booking.name),
        ("CPF", format_cpf(booking.cpf)),
        ("Data", booking.date.strftime("%d/%m/%Y")),
        ("Horário", booking.time.strftime("%H:%M")),
        ("Protocolo", str(booking.id)),
    ]
    for label, value in rows:
        pdf.setFont("Helvetica-Bold", 12)
        pdf.drawString(3 * cm, y, f"{label}:")
        pdf.setFont("Helvetica", 12)
        pdf.drawString(6 * cm, y, value)
        y -= 0.9 * cm

    y -= 1 * cm
    pdf.setFont("Helvetica-Oblique", 10)
    pdf.drawString(3 * cm, y, "Compareça com 15 minutos de antecedência, portando documento com foto.")

    pdf.showPage()
    pdf.save()

    logger.info("Receipt %s written for booking %s", filename, booking.id)
    return filename


def pop_receipt(filename: str) -> bytes:
    """
    Read a receipt and delete it from disk.
    Raises FileNotFoundError for unknown or malformed names.
    """
    if not RECEIPT_NAME_RE.match(filename or ""):
        raise FileNotFoundError(filename)

    path = receipts_dir() / filename
    content = path.read_bytes()
    path.unlink(missing_ok=True)
    return content


def purge_stale_receipts(*, max_age_seconds: float | None = None, now: float | None = None) -> int:
    """Delete receipts that were never downloaded within max_age_seconds."""
    if max_age_seconds is None:
        max_age_seconds = settings.AGENDA_RECEIPTS_TTL_SECONDS
    if now is None:
        now = time.time()

    removed = 0
    for path in receipts_dir().glob("comprovante_*.pdf"):
        if not RECEIPT_NAME_RE.match(path.name):
            continue
        if now - path.stat().st_mtime > max_age_seconds:
            path.unlink(missing_ok=True)
            removed += 1
    return removed
