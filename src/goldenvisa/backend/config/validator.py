"""Utilities for validating fee configuration data and surfacing issues."""

from __future__ import annotations

import argparse
from decimal import Decimal
from typing import Sequence

from .fee_config import (
    AdditionalFeeConfig,
    FeeProfile,
    PermitFeeConfig,
    PropertyFeeConfig,
    TierCatalogue,
    available_profiles,
    load_fee_profile,
    load_tiers,
)

_ONE = Decimal("1")


def _format_scope(scope: str, message: str) -> str:
    return f"{scope}: {message}"


def _validate_rate(scope: str, value: Decimal) -> list[str]:
    if value < 0 or value > _ONE:
        return [_format_scope(scope, f"rate {value} must be between 0 and 1")]
    return []


def _validate_vat(profile: FeeProfile) -> list[str]:
    return _validate_rate("vat_rate", profile.vat_rate)


def _validate_acquisition(acquisition: PropertyFeeConfig) -> list[str]:
    errors: list[str] = []

    errors.extend(_validate_rate("acquisition.transfer_tax", acquisition.transfer_tax))
    errors.extend(
        _validate_rate(
            "acquisition.government_registration",
            acquisition.government_registration,
        )
    )
    for label, fee in {
        "consultancy": acquisition.consultancy,
        "notary": acquisition.notary,
        "lawyer": acquisition.lawyer,
    }.items():
        errors.extend(_validate_rate(f"acquisition.{label}", fee.rate))

    combined = (
        acquisition.transfer_tax
        + acquisition.government_registration
        + acquisition.consultancy.rate
        + acquisition.notary.rate
        + acquisition.lawyer.rate
    )
    if combined >= _ONE:
        errors.append(
            _format_scope(
                "acquisition",
                f"combined acquisition rates {combined} exceed the purchase price",
            )
        )

    return errors


def _validate_permit(permit: PermitFeeConfig) -> list[str]:
    errors: list[str] = []

    health = permit.health_insurance
    if health.premium < health.standard:
        errors.append(
            _format_scope(
                "permit.health_insurance",
                "premium rate cannot be lower than the standard rate",
            )
        )

    cards = permit.dependent_cards
    if cards.mode == "age_banded":
        if (
            cards.child_15_plus is not None
            and cards.child_under_15 is not None
            and cards.child_under_15 > cards.child_15_plus
        ):
            errors.append(
                _format_scope(
                    "permit.dependent_cards",
                    "under-15 card fee should not exceed the 15+ card fee",
                )
            )
        if cards.per_dependent is not None:
            errors.append(
                _format_scope(
                    "permit.dependent_cards",
                    "'per_dependent' is ignored by age-banded pricing",
                )
            )
    elif cards.child_15_plus is not None or cards.child_under_15 is not None:
        errors.append(
            _format_scope(
                "permit.dependent_cards",
                "age band fees are ignored by flat pricing",
            )
        )

    if permit.main_card <= 0:
        errors.append(_format_scope("permit.main_card", "main card fee must be positive"))

    return errors


def _validate_additional(additional: AdditionalFeeConfig) -> list[str]:
    if additional.power_of_attorney <= 0:
        return [
            _format_scope(
                "additional.power_of_attorney",
                "power of attorney fee must be positive when the service is offered",
            )
        ]
    return []


def validate_tiers(catalogue: TierCatalogue) -> list[str]:
    """Return a list of validation issues for the tier reference data."""

    errors: list[str] = []
    minimums = [tier.min_investment for tier in catalogue.tiers]
    if minimums != sorted(minimums):
        errors.append(
            _format_scope("tiers", "tiers should be ordered by ascending minimum investment")
        )
    for tier in catalogue.tiers:
        if not tier.label.strip():
            errors.append(_format_scope(f"tiers.{tier.id}", "label must not be empty"))
    return errors


def validate_fee_profile(profile: FeeProfile) -> list[str]:
    """Return a list of validation issues for the provided fee profile."""

    errors: list[str] = []

    errors.extend(_validate_vat(profile))
    errors.extend(_validate_acquisition(profile.acquisition))
    errors.extend(_validate_permit(profile.permit))
    errors.extend(_validate_additional(profile.additional))

    return errors


def validate_all_profiles(profiles: Sequence[str] | None = None) -> dict[str, list[str]]:
    """Validate all configured profiles and return issues keyed by profile id."""

    targets = profiles or available_profiles()
    results: dict[str, list[str]] = {}

    for profile_id in targets:
        profile = load_fee_profile(profile_id)
        results[profile_id] = validate_fee_profile(profile)

    return results


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=(
            "Validate configured fee profiles and report issues helpful to contributors."
        )
    )
    parser.add_argument(
        "profiles",
        nargs="*",
        help="Specific profiles to validate (defaults to all configured profiles)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for running validations from the command line."""

    parser = _build_argument_parser()
    args = parser.parse_args(argv)
    profiles = args.profiles or available_profiles()

    if not profiles:
        parser.print_help()
        return 1

    exit_code = 0

    tier_issues = validate_tiers(load_tiers())
    if tier_issues:
        exit_code = 1
        print(f"[tiers] {len(tier_issues)} issue(s) detected:")
        for issue in tier_issues:
            print(f"  - {issue}")
    else:
        print("[tiers] OK")

    for profile_id in profiles:
        try:
            profile = load_fee_profile(profile_id)
        except FileNotFoundError as error:
            print(f"[{profile_id}] failed to load configuration: {error}")
            exit_code = 1
            continue

        issues = validate_fee_profile(profile)
        if issues:
            exit_code = 1
            print(f"[{profile_id}] {len(issues)} issue(s) detected:")
            for issue in issues:
                print(f"  - {issue}")
        else:
            print(f"[{profile_id}] OK")

    return exit_code


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    raise SystemExit(main())
