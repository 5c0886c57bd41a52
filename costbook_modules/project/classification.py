"""
Project classification rule table.

A project is OVERHEAD when its business number is one of the overhead
numbers or its name carries an overhead marker; otherwise SUBSCRIPTION
when its business number starts with a subscription prefix or its name
carries a subscription marker; otherwise PERCENTAGE_OF_COMPLETION.

Overhead is tested first: a project matching both rules is overhead.
"""

from dataclasses import dataclass

from costbook_modules.project.models import ProjectKind


@dataclass(frozen=True)
class ClassificationRules:
    """Markers that move a project out of percentage-of-completion."""

    subscription_number_prefixes: tuple[str, ...] = ("C",)
    subscription_name_markers: tuple[str, ...] = ("CADDON",)
    overhead_business_numbers: tuple[str, ...] = ("IP",)
    overhead_name_markers: tuple[str, ...] = ("一般管理費", "その他経費")

    @classmethod
    def from_dict(cls, data: dict) -> "ClassificationRules":
        return cls(**{key: tuple(value) for key, value in data.items()})


DEFAULT_RULES = ClassificationRules()


def classify_project(
    business_number: str | None,
    name: str | None,
    rules: ClassificationRules = DEFAULT_RULES,
) -> ProjectKind:
    number = (business_number or "").strip()
    title = name or ""

    if number in rules.overhead_business_numbers or any(
        marker in title for marker in rules.overhead_name_markers
    ):
        return ProjectKind.OVERHEAD

    if any(number.startswith(p) for p in rules.subscription_number_prefixes if p) or any(
        marker in title for marker in rules.subscription_name_markers
    ):
        return ProjectKind.SUBSCRIPTION

    return ProjectKind.PERCENTAGE_OF_COMPLETION
