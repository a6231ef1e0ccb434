"""
Post input validation.

Runs identically for create and update: title, desc and body must each be
non-empty after trimming. Optional length limits come from the rules file.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from postlab.domain.slug import slug_stem


@dataclass(frozen=True)
class PostLimits:
    title_max: int | None = None
    desc_max: int | None = None
    body_max: int | None = None


@dataclass(frozen=True)
class PostInputValidation:
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors


_LABELS = {"title": "Title", "desc": "Description", "body": "Body"}


def validate_post_input(
    title: str | None,
    desc: str | None,
    body: str | None,
    limits: PostLimits | None = None,
) -> PostInputValidation:
    limits = limits or PostLimits()
    errors: dict[str, str] = {}

    values = {"title": title, "desc": desc, "body": body}
    maxima = {"title": limits.title_max, "desc": limits.desc_max, "body": limits.body_max}

    for name, value in values.items():
        label = _LABELS[name]
        if value is None or not value.strip():
            errors[name] = f"{label} must not be empty"
            continue
        maximum = maxima[name]
        if maximum is not None and len(value) > maximum:
            errors[name] = f"{label} must be at most {maximum} characters"

    # A title without letters or digits would only ever slug to the fallback
    if "title" not in errors and title is not None and not slug_stem(title):
        errors["title"] = "Title must contain at least one letter or digit"

    return PostInputValidation(errors=errors)
