"""Classification of leave types into annual, one-time and repeatable-event leave.

The policy table is consulted once, when a leave type is configured. The
resolved values are stored on the ``LeaveType`` row and read from there by
every other component.
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from typing import TYPE_CHECKING

from leave_ledger.models.enums import AccrualBasis, LeaveClassification

if TYPE_CHECKING:
    from leave_ledger.models.leave_type import LeaveType


@dataclass(frozen=True)
class ClassificationPolicy:
    """How a leave type accrues and how many days it grants.

    ``annual_entitled_days`` is the yearly allowance of a fixed annual type,
    used when the operator configures no ``max_days_per_year``.
    """

    classification: LeaveClassification
    accrual_basis: AccrualBasis = AccrualBasis.FIXED
    event_entitled_days: int | None = None
    annual_entitled_days: int | None = None


_DEFAULT_POLICY = ClassificationPolicy(LeaveClassification.ANNUAL)

# Keyed by normalized name (see ``normalize_name``).
_POLICY_TABLE: dict[str, ClassificationPolicy] = {
    "vacaciones ordinarias": ClassificationPolicy(LeaveClassification.ANNUAL, AccrualBasis.SENIORITY),
    "matrimonio": ClassificationPolicy(LeaveClassification.ONE_TIME, event_entitled_days=5),
    # 12 weeks, LFT Art. 170
    "maternidad": ClassificationPolicy(LeaveClassification.EVENT_REPEATABLE, event_entitled_days=84),
    # LFT Art. 132 XXVII Bis
    "paternidad": ClassificationPolicy(LeaveClassification.EVENT_REPEATABLE, event_entitled_days=5),
    # LFT Art. 42, 43
    "incapacidad": ClassificationPolicy(LeaveClassification.ANNUAL, annual_entitled_days=364),
    "fallecimiento familiar": ClassificationPolicy(LeaveClassification.ANNUAL, annual_entitled_days=5),
    "permiso sin goce": ClassificationPolicy(LeaveClassification.ANNUAL, annual_entitled_days=5),
}


def normalize_name(name: str) -> str:
    """Lowercase, strip accents and collapse whitespace."""
    decomposed = unicodedata.normalize("NFKD", name)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return " ".join(stripped.casefold().split())


def resolve_policy(name: str) -> ClassificationPolicy:
    """Look up the policy for a leave type name, defaulting to plain annual leave."""
    return _POLICY_TABLE.get(normalize_name(name), _DEFAULT_POLICY)


def classification_of(leave_type: LeaveType) -> LeaveClassification:
    return LeaveClassification(leave_type.classification)


def is_event_based(classification: LeaveClassification) -> bool:
    return classification in (LeaveClassification.ONE_TIME, LeaveClassification.EVENT_REPEATABLE)
