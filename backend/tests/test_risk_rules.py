import pytest

from bite_intake.agents.intake.extraction import PartialIntakeRecord
from bite_intake.agents.intake.incident import IncidentFindings
from bite_intake.agents.intake.risk_rules import classify
from bite_intake.core.types import RISK_CATEGORY_PAIRS


def _classify(**findings):
    return classify(PartialIntakeRecord(incident=IncidentFindings(**findings)))


def test_bat_bite_on_neck_is_high_risk():
    result = _classify(exposures=("Bite",), locations=("Neck",), animal="Bat")

    assert result.risk_level == "High Risk"
    assert result.triage_category == "Category III"
    assert result.risk_flags == ("Neck bite detected", "Bat exposure")


def test_minor_scratch_without_bleeding_is_moderate():
    result = _classify(
        exposures=("Scratch",),
        animal="Dog",
        minor=True,
        explicitly_non_bleeding=True,
    )

    assert result.risk_level == "Moderate Risk"
    assert result.triage_category == "Category II"
    assert result.risk_flags == ("Minor abrasion without bleeding",)


def test_scratch_without_explicit_bleeding_statement_is_low():
    result = _classify(exposures=("Scratch",), minor=True)

    assert result.risk_level == "Low Risk"
    assert result.risk_flags == ()


def test_nibble_on_uncovered_skin_is_moderate():
    uncovered = _classify(exposures=("Nibble",), locations=("Leg",))
    covered = _classify(exposures=("Nibble",), locations=("Leg",), covered_by_clothing=True)

    assert uncovered.risk_flags == ("Nibbling on uncovered skin",)
    assert covered.risk_level == "Low Risk"


def test_lick_on_broken_skin_is_high_and_intact_skin_is_low():
    broken = _classify(exposures=("Lick on open wound",), locations=("Hand",))
    intact = _classify(exposures=("Lick on intact skin",), locations=("Hand",), intact_skin=True)

    assert broken.risk_level == "High Risk"
    assert broken.risk_flags == ("Lick on broken skin",)
    assert intact.risk_level == "Low Risk"


def test_lick_on_mucous_membrane():
    result = _classify(exposures=("Lick on intact skin",), locations=("Eye",), mucous_membrane=True)

    assert result.risk_level == "High Risk"
    assert result.risk_flags == ("Lick on mucous membrane",)


def test_lick_on_intact_facial_skin_is_low():
    result = _classify(exposures=("Lick on intact skin",), locations=("Face",), intact_skin=True)

    assert result.risk_level == "Low Risk"
    assert result.triage_category == "Category I"
    assert result.risk_flags == ()


def test_location_flag_uses_first_exposure_that_breaks_skin():
    result = _classify(exposures=("Lick on intact skin", "Bite"), locations=("Face",))

    assert result.risk_flags == ("Face bite detected",)


def test_all_high_risk_flags_are_collected_in_order():
    result = _classify(
        exposures=("Bite",),
        locations=("Face",),
        bleeding=True,
        deep_puncture=True,
        unprovoked=True,
    )

    assert result.risk_flags == (
        "Face bite detected",
        "Bleeding wound",
        "Deep puncture wound",
        "Unprovoked behavior",
    )


def test_high_tier_suppresses_moderate_flags():
    result = _classify(
        exposures=("Scratch",),
        locations=("Finger",),
        minor=True,
        explicitly_non_bleeding=True,
    )

    assert result.risk_level == "High Risk"
    assert result.risk_flags == ("Finger scratch detected",)


def test_location_without_exposure_is_low():
    result = _classify(locations=("Face",), animal="Dog")

    assert result.risk_level == "Low Risk"
    assert result.triage_category == "Category I"
    assert result.risk_flags == ()


@pytest.mark.parametrize(
    "findings",
    [
        {},
        {"exposures": ("Bite",), "locations": ("Head",)},
        {"exposures": ("Nibble",)},
        {"exposures": ("Bite",), "locations": ("Arm",)},
        {"animal": "Bat"},
    ],
)
def test_risk_level_always_pairs_with_category(findings):
    result = _classify(**findings)

    assert RISK_CATEGORY_PAIRS[result.risk_level] == result.triage_category
    assert bool(result.risk_flags) == (result.risk_level != "Low Risk")
