"""
StrategyPilot Offence Classifier

Maps charge records and extracted text to a canonical offence definition.

Matching order:
1. Each charge's section, then its offence text, in charge order
2. The concatenated extracted text
3. The catalogue's default ("unknown") offence

Never raises: a charge list of garbage still yields the default offence.
"""
from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import Iterable, Optional

from ..models import Catalogue, ChargeRecord, OffenceDefinition

logger = logging.getLogger(__name__)


@lru_cache(maxsize=256)
def _compiled(pattern: str) -> re.Pattern:
    return re.compile(pattern, re.IGNORECASE)


def matches_offence(text: str, offence: OffenceDefinition) -> bool:
    """True if any of the offence's patterns matches the text."""
    if not text:
        return False
    return any(_compiled(pattern).search(text) for pattern in offence.patterns)


def _section_variants(section: str) -> list[str]:
    section = section.strip()
    if not section:
        return []
    if section.isdigit():
        # A bare "18" on a charge sheet means section 18
        return [section, f"section {section}"]
    return [section]


def _match_text(text: str, offences: Iterable[OffenceDefinition]) -> Optional[OffenceDefinition]:
    for offence in offences:
        if matches_offence(text, offence):
            return offence
    return None


def classify_offence(
    charges: Optional[list[ChargeRecord]],
    extracted_text: Optional[str],
    catalogue: Catalogue,
) -> OffenceDefinition:
    """
    Classify the offence charged.

    Args:
        charges: Charge records in indictment order (may be empty or None)
        extracted_text: Free text extracted from case documents
        catalogue: Catalogue supplying the offence lexicon

    Returns:
        The first matching offence, or the catalogue's default offence
    """
    for charge in charges or []:
        for text in _section_variants(charge.section or ""):
            offence = _match_text(text, catalogue.offences)
            if offence is not None:
                logger.debug("Offence %s matched on charge section %r", offence.code, text)
                return offence
        offence = _match_text(charge.offence or "", catalogue.offences)
        if offence is not None:
            logger.debug("Offence %s matched on charge text", offence.code)
            return offence

    offence = _match_text(extracted_text or "", catalogue.offences)
    if offence is not None:
        logger.debug("Offence %s matched on extracted text", offence.code)
        return offence

    return catalogue.default_offence
