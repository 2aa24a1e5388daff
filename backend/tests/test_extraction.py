import pytest

from bite_intake.agents.intake.extraction import (
    RuleBasedExtractor,
    enforce_date_safety,
    extract,
    normalize_mobile,
    parse_date,
    parse_person_name,
    stated_dates,
)
from bite_intake.config import IntakeSettings

FULL_TRANSCRIPT = (
    "Nurse: What is your name? "
    "Patient: My name is Juan Dela Cruz Jr. I was born on March 5, 1990. I am male. "
    "I live at 123 Rizal Street, Barangay San Antonio, Quezon City, 1100. "
    "My cellphone number is 0917 123 4567. "
    "My email is juan dot delacruz at gmail dot com. "
    "Emergency contact is my mother, Ana Dela Cruz, 0918 765 4321. "
    "I have no allergies. "
    "The dog bit my hand on March 3, 2024."
)


@pytest.mark.parametrize(
    ("segment", "expected"),
    [
        ("born on March 5, 1990", "1990-03-05"),
        ("5 March 1990", "1990-03-05"),
        ("03/05/1990", "1990-03-05"),
        ("25/12/2023", "2023-12-25"),
        ("on the 5th, 2024", ""),
        ("February 30, 2024", ""),
    ],
)
def test_parse_date(segment: str, expected: str):
    assert parse_date(segment) == expected


def test_date_safety_keeps_only_the_stated_date():
    assert enforce_date_safety("2024-03-05", "") == ""
    assert enforce_date_safety("2024-03-05", "2024-03-05") == "2024-03-05"
    assert enforce_date_safety(" 2024-03-05 ", "2024-03-05") == "2024-03-05"
    assert enforce_date_safety("2024-03-05", "2024-05-03") == ""
    assert enforce_date_safety("March 5", "2024-03-05") == ""


def test_stated_dates_read_each_field_from_its_own_sentence():
    dates = stated_dates(
        "I was born on the 15th, 2001. The dog bit me on March 3 2024. "
        "Yes, I had anti-rabies vaccine last January 10, 2020."
    )

    assert dates == {"dateOfBirth": "", "lastVaccineDate": "2020-01-10"}


def test_parse_person_name_with_particle_and_extension():
    parsed = parse_person_name(["Juan", "Dela", "Cruz", "Jr."])

    assert parsed == {"first": "Juan", "middle": "", "last": "Dela Cruz", "extension": "Jr."}


def test_parse_person_name_middle_name_and_honorific():
    assert parse_person_name(["Maria", "Santos", "Reyes"]) == {
        "first": "Maria",
        "middle": "Santos",
        "last": "Reyes",
        "extension": "",
    }
    assert parse_person_name(["Mrs", "Ana", "Lopez"])["first"] == "Ana"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("0917 123 4567", "09171234567"),
        ("+63 917 123 4567", "09171234567"),
        ("917-123-4567", "09171234567"),
        ("12345", ""),
        ("0817 123 4567", ""),
    ],
)
def test_normalize_mobile(raw: str, expected: str):
    assert normalize_mobile(raw) == expected


def test_extract_full_transcript():
    partial = extract(FULL_TRANSCRIPT, IntakeSettings())
    fields = partial.fields

    assert fields["firstName"] == "Juan"
    assert fields["lastName"] == "Dela Cruz"
    assert fields["extensionName"] == "Jr."
    assert "middleName" not in fields
    assert fields["dateOfBirth"] == "1990-03-05"
    assert fields["sex"] == "Male"
    assert fields["addressHouse"] == "123 Rizal Street"
    assert fields["addressBarangay"] == "San Antonio"
    assert fields["addressCity"] == "Quezon City"
    assert fields["addressProvince"] == "Metro Manila"
    assert fields["addressZip"] == "1100"
    assert fields["mobileNumber"] == "09171234567"
    assert fields["email"] == "juan.delacruz@gmail.com"
    assert fields["emergencyRelationship"] == "Mother"
    assert fields["emergencyFirstName"] == "Ana"
    assert fields["emergencyLastName"] == "Dela Cruz"
    assert fields["emergencyMobile"] == "09187654321"
    assert fields["hasAllergies"] == "No"
    assert fields["dateOfIncident"] == "2024-03-03"
    assert fields["typeOfExposure"] == "Bite"
    assert fields["bodyLocation"] == "Hand"
    assert fields["animalType"] == "Dog"
    assert fields["vaccinationStatus"] == "unknown"


def test_extract_marked_address_components():
    partial = extract(
        "I live at 45 Mabini St., Barangay Poblacion, City of San Fernando, Province of Pampanga.",
        IntakeSettings(),
    )

    assert partial.fields["addressHouse"] == "45 Mabini St"
    assert partial.fields["addressBarangay"] == "Poblacion"
    assert partial.fields["addressCity"] == "City of San Fernando"
    assert partial.fields["addressProvince"] == "Pampanga"


def test_province_default_follows_settings():
    partial = extract("I live at 7 Luna Street, Barangay Lahug.", IntakeSettings(default_province="Cebu"))

    assert partial.fields["addressProvince"] == "Cebu"


def test_labelled_name_statements():
    partial = extract("First name: Maria. Last name: Dela Cruz.", IntakeSettings())

    assert partial.fields["firstName"] == "Maria"
    assert partial.fields["lastName"] == "Dela Cruz"


def test_patient_description_is_not_read_as_a_name():
    partial = extract(
        "Nurse: The patient is a child who was bitten by a dog on the leg.", IntakeSettings()
    )

    assert "firstName" not in partial.fields
    assert "lastName" not in partial.fields


def test_patient_is_followed_by_a_capitalized_name():
    partial = extract("The patient is Maria Santos, seven years old.", IntakeSettings())

    assert partial.fields["firstName"] == "Maria"
    assert partial.fields["lastName"] == "Santos"


def test_house_number_stays_in_the_address():
    partial = extract(
        "I live at house number 12 Rizal St, Barangay Malanday, Marikina City.",
        IntakeSettings(),
    )

    assert partial.fields["addressHouse"] == "house number 12 Rizal St"
    assert partial.fields["addressBarangay"] == "Malanday"
    assert partial.fields["addressCity"] == "Marikina City"


def test_spoken_email_and_emergency_spouse():
    partial = extract(
        "In case of emergency, contact my wife Maria Reyes at 0917 555 1234.",
        IntakeSettings(),
    )

    assert partial.fields["emergencyRelationship"] == "Spouse"
    assert partial.fields["emergencyFirstName"] == "Maria"
    assert partial.fields["emergencyLastName"] == "Reyes"
    assert partial.fields["emergencyMobile"] == "09175551234"
    assert "mobileNumber" not in partial.fields


def test_allergy_details():
    partial = extract("I am allergic to penicillin.", IntakeSettings())

    assert partial.fields["hasAllergies"] == "Yes"
    assert partial.fields["allergyDetails"] == "penicillin"


def test_allergy_question_and_reply():
    partial = extract("Nurse: Do you have any allergies? Patient: None.", IntakeSettings())

    assert partial.fields["hasAllergies"] == "No"


def test_rabies_vaccine_history_from_reply():
    partial = extract(
        "Have you had anti-rabies vaccine before? Yes, last January 10, 2023.",
        IntakeSettings(),
    )

    assert partial.fields["historyOfRabiesVaccine"] == "Yes"
    assert partial.fields["lastVaccineDate"] == "2023-01-10"


def test_rabies_vaccine_history_negated():
    partial = extract("I have never had anti-rabies shots.", IntakeSettings())

    assert partial.fields["historyOfRabiesVaccine"] == "No"
    assert "lastVaccineDate" not in partial.fields


def test_incident_date_without_month_is_empty():
    partial = extract("The dog bit me on the 5th.", IntakeSettings())

    assert partial.fields["dateOfIncident"] == ""


def test_missing_data_never_raises():
    partial = RuleBasedExtractor().extract("Hello po.", IntakeSettings())

    assert partial.fields["typeOfExposure"] == ""
    assert partial.fields["animalType"] == ""
    assert partial.fields["vaccinationStatus"] == "unknown"
    assert partial.incident.exposures == ()
