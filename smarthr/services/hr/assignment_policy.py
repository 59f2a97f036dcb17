from typing import Dict, Iterable, Optional, Set
from smarthr.core.config import settings
from smarthr.models.shared.enums import AssignmentType

ORG_FIELDS = ("company", "sub_company", "department", "position")


class AssignmentTypePolicy:
    """Maps the set of changed organization fields to an assignment type code.

    A change touching ``comprehensive_threshold`` or more fields is always
    COMPREHENSIVE. Otherwise ``rules`` is scanned in order and the first rule
    whose fields all changed wins; anything left over is OTHER.
    """

    def __init__(
        self,
        rules: Optional[Dict[str, str]] = None,
        comprehensive_threshold: Optional[int] = None
    ):
        raw_rules = settings.ASSIGNMENT_TYPE_RULES if rules is None else rules
        self.rules = [
            (frozenset(f.strip() for f in key.split(",") if f.strip()), code)
            for key, code in raw_rules.items()
        ]
        for fields, _ in self.rules:
            unknown = fields - set(ORG_FIELDS)
            if unknown:
                raise ValueError(f"Unknown organization fields in assignment rule: {sorted(unknown)}")
        self.comprehensive_threshold = (
            settings.ASSIGNMENT_COMPREHENSIVE_THRESHOLD
            if comprehensive_threshold is None else comprehensive_threshold
        )

    def classify(self, changed: Iterable[str]) -> str:
        changed_set: Set[str] = set(changed)
        if len(changed_set) >= self.comprehensive_threshold:
            return AssignmentType.COMPREHENSIVE.value
        for fields, code in self.rules:
            if fields and fields <= changed_set:
                return code
        return AssignmentType.OTHER.value
