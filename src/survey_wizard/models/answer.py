"""Typed values produced by the normalization library.

  - HeightReading: canonical height string plus total inches (feet/inches only)
  - EnumSelection: one selected label of a multi-select answer, with the
    free-text note attached to the "Other" option
"""

from typing import Optional

from pydantic import BaseModel


class HeightReading(BaseModel):
    """Result of :func:`survey_wizard.normalize.normalize_height`.

    ``height`` is ``F'I"`` for feet/inches input, ``"<n> cm"`` for centimetres,
    or the trimmed input when neither pattern matched.  ``inches_total`` is only
    set for feet/inches input.
    """

    height: Optional[str] = None
    inches_total: Optional[int] = None


class EnumSelection(BaseModel):
    """A selected option of a multi-select answer."""

    label: str
    other_note: Optional[str] = None
