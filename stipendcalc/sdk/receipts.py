"""Receipt text parsing.

Pulls merchant, total, date and line items out of noisy receipt text, as
produced by an OCR engine or the text layer of a PDF receipt. Images are
not handled here; text recognition happens upstream.

Heuristics:
- merchant: first plausible business-name line among the first five
- amount: labelled total (total / grand total / amount due / balance due),
  otherwise the largest dollar amount
- date: slash, dash, ISO and written-month forms, years 2020..next year
- items: lines ending in a price, excluding total and tax lines
"""

import datetime
import logging
import re
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import List, Optional

import PyPDF2
from PyPDF2.errors import PyPdfError

from .errors import ReceiptTextError
from .schemas import ParsedReceipt

logger = logging.getLogger(__name__)

MERCHANT_SCAN_LINES = 5
MERCHANT_EXCLUDE = ("receipt", "transaction", "invoice", "order", "welcome")
BUSINESS_INDICATORS = (
    "inc", "llc", "corp", "store", "shop", "market", "restaurant",
    "cafe", "hotel", "pharmacy", "gas", "station",
)

_AMOUNT = r"\$?\s*([0-9][0-9,]*\.?[0-9]*)"
# \b keeps "subtotal" from matching "total"
TOTAL_PATTERNS = [
    re.compile(r"\btotal\s*[:$]?\s*" + _AMOUNT),
    re.compile(r"grand\s*total\s*[:$]?\s*" + _AMOUNT),
    re.compile(r"amount\s*due\s*[:$]?\s*" + _AMOUNT),
    re.compile(r"balance\s*due\s*[:$]?\s*" + _AMOUNT),
]
DOLLAR_AMOUNT = re.compile(r"\$?([0-9][0-9,]*\.[0-9]{2})")
LINE_ITEM_PRICE = re.compile(r"\$?\d+\.\d{2}$")
NUMERIC_ONLY = re.compile(r"^[0-9.,$#-]+$")

# (pattern, strptime formats to try on each match)
DATE_PATTERNS = [
    (re.compile(r"\b\d{1,2}/\d{1,2}/\d{2,4}\b"), ("%m/%d/%Y", "%m/%d/%y")),
    (re.compile(r"\b\d{1,2}-\d{1,2}-\d{2,4}\b"), ("%m-%d-%Y", "%m-%d-%y")),
    (re.compile(r"\b\d{4}-\d{2}-\d{2}\b"), ("%Y-%m-%d",)),
    (re.compile(r"\b[A-Za-z]{3,9}\.?\s+\d{1,2},?\s*\d{4}\b"), ("%b %d %Y", "%B %d %Y")),
]
EARLIEST_RECEIPT_YEAR = 2020

IMAGE_SUFFIXES = {".jpg", ".jpeg", ".png", ".heic", ".gif", ".tif", ".tiff", ".bmp"}


def _parse_amount(text: str) -> Optional[Decimal]:
    try:
        return Decimal(text.replace(",", ""))
    except InvalidOperation:
        return None


def _is_likely_business_name(line: str) -> bool:
    lowered = line.lower()
    if any(indicator in lowered for indicator in BUSINESS_INDICATORS):
        return True
    # Any capitalized word of two or more characters
    return any(word[:1].isupper() and len(word) > 1 for word in line.split())


def extract_merchant_name(lines: List[str]) -> Optional[str]:
    """Pick the merchant line from the top of the receipt."""
    for line in lines[:MERCHANT_SCAN_LINES]:
        if len(line) < 3:
            continue
        if NUMERIC_ONLY.match(line.replace(" ", "")):
            continue
        lowered = line.lower()
        if any(pattern in lowered for pattern in MERCHANT_EXCLUDE):
            continue
        if _is_likely_business_name(line):
            return line
    return lines[0] if lines else None


def extract_total_amount(text: str) -> Optional[Decimal]:
    """Labelled total if present, else the largest dollar amount."""
    lowered = text.lower()
    for pattern in TOTAL_PATTERNS:
        match = pattern.search(lowered)
        if match:
            amount = _parse_amount(match.group(1))
            if amount is not None and amount > 0:
                return amount

    largest = Decimal("0")
    for match in DOLLAR_AMOUNT.finditer(text):
        amount = _parse_amount(match.group(1))
        if amount is not None and amount > largest:
            largest = amount
    return largest if largest > 0 else None


def extract_date(text: str, today: Optional[datetime.date] = None) -> Optional[datetime.date]:
    """First parseable date within the accepted year window."""
    today = today or datetime.date.today()
    latest_year = today.year + 1

    for pattern, formats in DATE_PATTERNS:
        for match in pattern.finditer(text):
            candidate = " ".join(re.sub(r"[,.]", " ", match.group(0)).split())
            for fmt in formats:
                try:
                    parsed = datetime.datetime.strptime(candidate, fmt).date()
                except ValueError:
                    continue
                if EARLIEST_RECEIPT_YEAR <= parsed.year <= latest_year:
                    return parsed
    return None


def extract_line_items(lines: List[str]) -> List[str]:
    """Lines ending in a price, skipping subtotal/total/tax lines."""
    items = []
    for line in lines:
        if not LINE_ITEM_PRICE.search(line):
            continue
        lowered = line.lower()
        if "total" in lowered or "tax" in lowered:
            continue
        items.append(line)
    return items


def parse_receipt_text(text: str, today: Optional[datetime.date] = None) -> ParsedReceipt:
    """Parse raw receipt text into structured fields.

    Args:
        text: Recognized receipt text, one receipt line per text line
        today: Reference date for the accepted year window (default: today)

    Returns:
        ParsedReceipt. Missing fields are None/empty; confidence is the sum
        of 0.3 (merchant) + 0.4 (amount) + 0.2 (date) + 0.1 (items).
    """
    lines = [line.strip() for line in (text or "").splitlines() if line.strip()]

    merchant = extract_merchant_name(lines)
    amount = extract_total_amount(text or "")
    receipt_date = extract_date(text or "", today=today)
    items = extract_line_items(lines)

    confidence = 0.0
    if merchant is not None:
        confidence += 0.3
    if amount is not None:
        confidence += 0.4
    if receipt_date is not None:
        confidence += 0.2
    if items:
        confidence += 0.1

    return ParsedReceipt(
        merchant_name=merchant,
        amount=amount,
        date=receipt_date,
        items=tuple(items),
        confidence=round(confidence, 2),
    )


def extract_text_from_pdf(pdf_path: Path) -> str:
    """Extract the embedded text layer from a PDF receipt."""
    text = ""
    with open(pdf_path, "rb") as f:
        reader = PyPDF2.PdfReader(f)
        for page in reader.pages:
            text += page.extract_text() or ""
    return text


def read_receipt_text(path: Path) -> str:
    """Read receipt text from a .pdf (text layer) or a plain text file.

    Raises:
        ReceiptTextError: For image files (OCR happens upstream) or
            documents with no readable text.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix in IMAGE_SUFFIXES:
        raise ReceiptTextError(
            f"{path.name} is an image. Run it through OCR first and pass the recognized text."
        )

    if suffix == ".pdf":
        try:
            text = extract_text_from_pdf(path)
        except (PyPdfError, ValueError, KeyError, TypeError, IndexError) as e:
            # PyPDF2 raises plain built-in errors on some malformed streams
            raise ReceiptTextError(f"Could not read PDF {path.name}: {e}") from e
    else:
        text = path.read_text(errors="replace")

    if not text.strip():
        raise ReceiptTextError(f"No text found in {path.name}")

    logger.debug(f"Read {len(text)} characters of receipt text from {path}")
    return text
