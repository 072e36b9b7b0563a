"""
Presentation Mapper

Fixed lookup tables from model labels to the strings shown to the user.
"""

from dataclasses import dataclass
from typing import Dict

import numpy as np

from .result_interpreter import ClassificationResult

SKIN_CONDITION_DISPLAY: Dict[str, str] = {
    "dikupas": "peeled",
    "tidak_dikupas": "not peeled",
}

BEAN_COLOR_DISPLAY: Dict[str, str] = {
    "cokelat": "brown",
    "cokelat_muda": "light brown",
    "hitam": "black",
}

ROAST_STATUS: Dict[str, str] = {
    "cokelat": "mature",
    "cokelat_muda": "not mature",
    "hitam": "over-roasted",
}

UNKNOWN_ROAST_STATUS = "unknown"


def skin_condition_display(label: str) -> str:
    return SKIN_CONDITION_DISPLAY.get(label, label)


def bean_color_display(label: str) -> str:
    return BEAN_COLOR_DISPLAY.get(label, label)


def roast_status(color_label: str) -> str:
    return ROAST_STATUS.get(color_label, UNKNOWN_ROAST_STATUS)


def confidence_percent(confidence: float) -> int:
    """Confidence in [0, 1] as a whole percentage, truncated in float32."""
    return int(np.float32(confidence) * np.float32(100))


@dataclass(frozen=True)
class ClassificationReport:
    """Both model results plus the strings displayed for them."""
    skin: ClassificationResult
    color: ClassificationResult
    skin_condition: str
    bean_color: str
    roast_status: str

    @property
    def skin_confidence_pct(self) -> int:
        return confidence_percent(self.skin.confidence)

    @property
    def color_confidence_pct(self) -> int:
        return confidence_percent(self.color.confidence)

    @property
    def skin_condition_text(self) -> str:
        """E.g. "peeled (90%)"."""
        return f"{self.skin_condition} ({self.skin_confidence_pct}%)"

    @property
    def bean_color_text(self) -> str:
        return f"{self.bean_color} ({self.color_confidence_pct}%)"

    def as_dict(self) -> dict:
        return {
            "skin_condition": self.skin_condition,
            "skin_confidence_pct": self.skin_confidence_pct,
            "bean_color": self.bean_color,
            "color_confidence_pct": self.color_confidence_pct,
            "roast_status": self.roast_status,
        }


def build_report(skin: ClassificationResult, color: ClassificationResult) -> ClassificationReport:
    return ClassificationReport(
        skin=skin,
        color=color,
        skin_condition=skin_condition_display(skin.label),
        bean_color=bean_color_display(color.label),
        roast_status=roast_status(color.label),
    )
