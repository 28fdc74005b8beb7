"""What each page of the quiz looks like and how to recognise unknown ones.

The table below replaces per-page handler functions: a page id maps to a
:class:`PageRule` describing its answer space, and :func:`shape_for` turns
the rule plus what is currently in the DOM into a ``ShapeDescriptor``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

from quiz_explorer.candidates import FieldKind, ShapeDescriptor, ShapeKind

# --- selectors -------------------------------------------------------------
OPTION_SELECTOR = ".option-list .option"
SELECTED_OPTION_SELECTOR = ".option-list .option.selected"
YES_NO_SELECTOR = ".yes-no-boxes .option"
NAVIGATION_BUTTON_SELECTOR = (
    '.button-text:has-text("Begin"), .button-text:has-text("Next"), .button-text:has-text("Continue")'
)
SUBMIT_BUTTON_SELECTOR = '.button-text:has-text("Next"), .button-text:has-text("Continue")'
SELECTED_CHIP_CLOSE_SELECTOR = ".pred-selected-container .close-icon"
VISIBLE_INPUT_SELECTOR = "input:visible, textarea:visible, select:visible"
COOKIE_BUTTON_LABEL = "Accept all cookies"
CONSENT_CHECKBOX_NAME = "checkbox-empty"

MEDICATIONS: Tuple[str, ...] = ("ATORVASTATIN", "WARFARIN", "ACCURETIC")


@dataclass(frozen=True)
class PageRule:
    kind: ShapeKind
    max_selections: int | None = None
    exclusive_last: bool = False
    field_kind: FieldKind | None = None
    input_selector: str | None = None
    values: Tuple[str, ...] = ()
    accept_cookies: bool = False
    submits: bool = False  # applying an answer posts the quiz


def _scalar(field_kind: FieldKind, name: str, submits: bool = False) -> PageRule:
    return PageRule(
        ShapeKind.SCALAR,
        field_kind=field_kind,
        input_selector=f'input[type="text"][name="{name}"]',
        submits=submits,
    )


_NONE_OF_THE_ABOVE = PageRule(ShapeKind.EXCLUSIVE_MULTI, exclusive_last=True)

PAGE_RULES: Dict[str, PageRule] = {
    "section-intro": PageRule(ShapeKind.PASSTHROUGH, accept_cookies=True),
    "loading": PageRule(ShapeKind.SINK),
    "concerns": PageRule(ShapeKind.BOUNDED_MULTI, max_selections=3),
    "skin-issues": _NONE_OF_THE_ABOVE,
    "injuries": _NONE_OF_THE_ABOVE,
    "medical-condition": _NONE_OF_THE_ABOVE,
    "allergic": _NONE_OF_THE_ABOVE,
    "libido-simptoms": _NONE_OF_THE_ABOVE,
    "which-best-describes": PageRule(ShapeKind.PAIRWISE),
    "what-meds": PageRule(ShapeKind.TEXT_MULTI, max_selections=3, values=MEDICATIONS),
    "pregnancy-weeks": _scalar(FieldKind.PREGNANCY_WEEKS, "question09"),
    "date-of-birth": _scalar(FieldKind.DATE_OF_BIRTH, "birthdate"),
    "height": _scalar(FieldKind.HEIGHT, "question03"),
    "weight": _scalar(FieldKind.WEIGHT, "question04"),
    "e-mail": _scalar(FieldKind.EMAIL, "question73", submits=True),
}


TEXT_INPUT_TYPES = ("", "text")


def is_text_field(tag_name: str, input_type: str | None) -> bool:
    """True for a textarea or an ``<input>`` whose type is missing or ``text``."""
    tag = tag_name.lower()
    if tag == "textarea":
        return True
    return tag == "input" and (input_type or "").strip().lower() in TEXT_INPUT_TYPES


def rule_for(page_id: str) -> PageRule | None:
    return PAGE_RULES.get(page_id)


def shape_for(page_id: str, option_count: int, text_input_count: int) -> ShapeDescriptor:
    """Shape of ``page_id`` given how many options and text inputs are on screen."""
    rule = rule_for(page_id)
    if rule is None:
        if option_count > 0:
            return ShapeDescriptor(ShapeKind.SINGLE_CHOICE, option_count=option_count)
        if text_input_count > 0:
            return ShapeDescriptor(ShapeKind.SCALAR, field_kind=FieldKind.FREE_TEXT)
        return ShapeDescriptor(ShapeKind.PASSTHROUGH)

    if rule.kind in (ShapeKind.BOUNDED_MULTI, ShapeKind.PAIRWISE, ShapeKind.SINGLE_CHOICE):
        return ShapeDescriptor(rule.kind, option_count=option_count, max_selections=rule.max_selections)
    if rule.kind == ShapeKind.EXCLUSIVE_MULTI:
        exclusive = option_count - 1 if rule.exclusive_last and option_count > 0 else None
        return ShapeDescriptor(
            rule.kind, option_count=option_count, exclusive_index=exclusive, max_selections=rule.max_selections
        )
    if rule.kind == ShapeKind.SCALAR:
        return ShapeDescriptor(rule.kind, field_kind=rule.field_kind)
    if rule.kind == ShapeKind.TEXT_MULTI:
        return ShapeDescriptor(rule.kind, values=rule.values, max_selections=rule.max_selections)
    return ShapeDescriptor(rule.kind)
