"""
Design (render.py)
- Purpose: Turn tickets into printable images: the QR symbol, a ticket card, and a multi-page
           PDF print sheet.
- Inputs: Ticket(s), Settings (organization name on the card), output path.
- Outputs: PIL images; PDF file on disk.
- Side effects: save_print_sheet writes a file.
- Thread-safety: Stateless.
"""

from pathlib import Path
from typing import Iterable

import qrcode
from PIL import Image, ImageDraw, ImageFont

from .codec import encode_qr_payload
from .config import APP_TITLE
from .errors import ValidationError
from .models import Settings, Ticket
from .utils import format_local

CARD_WIDTH = 420
CARD_MARGIN = 20
QR_BOX_SIZE = 6


def make_qr_image(ticket: Ticket, box_size: int = QR_BOX_SIZE) -> Image.Image:
    """QR symbol carrying {"id", "number"}; high error correction so printed cards survive wear."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_H,
        box_size=box_size,
        border=4,
    )
    qr.add_data(encode_qr_payload(ticket))
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    return img.get_image().convert("RGB") if hasattr(img, "get_image") else img.convert("RGB")


def render_ticket_card(ticket: Ticket, settings: Settings) -> Image.Image:
    """
    Purpose: Draw one ticket card: organization, number, QR, generated time, optional
             info / scan time, and a short id footer.
    """
    font = ImageFont.load_default()
    qr_img = make_qr_image(ticket)

    lines = [f"Generated: {format_local(ticket.generated_at)}"]
    if ticket.extra:
        lines.append(f"Info: {ticket.extra}")
    if ticket.scanned_at:
        lines.append(f"Scanned: {format_local(ticket.scanned_at)}")
    lines.append(f"ID: {ticket.id[:8]}...")

    line_height = 18
    width = max(CARD_WIDTH, qr_img.width + 2 * CARD_MARGIN)
    header = 2 * line_height + CARD_MARGIN
    height = header + qr_img.height + len(lines) * line_height + 2 * CARD_MARGIN

    card = Image.new("RGB", (width, height), "white")
    draw = ImageDraw.Draw(card)
    draw.rectangle([0, 0, width - 1, height - 1], outline="black", width=2)

    y = CARD_MARGIN
    draw.text((CARD_MARGIN, y), settings.organization_name or APP_TITLE, fill="black", font=font)
    y += line_height
    draw.text((CARD_MARGIN, y), ticket.number, fill="black", font=font)
    y += line_height + CARD_MARGIN // 2

    card.paste(qr_img, ((width - qr_img.width) // 2, y))
    y += qr_img.height + CARD_MARGIN // 2

    for line in lines:
        draw.text((CARD_MARGIN, y), line, fill="black", font=font)
        y += line_height
    return card


def save_print_sheet(tickets: Iterable[Ticket], settings: Settings, path: Path) -> Path:
    """
    Purpose: Write one card per page into a PDF ready for printing.
    Raises: ValidationError when there is nothing to print.
    """
    cards = [render_ticket_card(t, settings) for t in tickets]
    if not cards:
        raise ValidationError("No tickets to print")
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    first, rest = cards[0], cards[1:]
    first.save(path, "PDF", save_all=True, append_images=rest, resolution=150.0)
    return path
