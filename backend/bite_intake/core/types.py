"""Common type definitions for the intake pipeline."""
from typing import Dict, List

# Type aliases for clarity
RawTranscript = str
IntakeFields = Dict[str, str]  # {"firstName": "Juan", ...}
RiskFlags = List[str]

RISK_LEVEL_LOW = "Low Risk"
RISK_LEVEL_MODERATE = "Moderate Risk"
RISK_LEVEL_HIGH = "High Risk"

CATEGORY_I = "Category I"
CATEGORY_II = "Category II"
CATEGORY_III = "Category III"

# WHO exposure category paired with each risk level.
RISK_CATEGORY_PAIRS: Dict[str, str] = {
    RISK_LEVEL_LOW: CATEGORY_I,
    RISK_LEVEL_MODERATE: CATEGORY_II,
    RISK_LEVEL_HIGH: CATEGORY_III,
}

EMPTY_VALUE = ""

RECORD_FIELDS: tuple[str, ...] = (
    "firstName",
    "lastName",
    "middleName",
    "extensionName",
    "dateOfBirth",
    "sex",
    "addressHouse",
    "addressBarangay",
    "addressCity",
    "addressProvince",
    "addressZip",
    "mobileNumber",
    "email",
    "emergencyFirstName",
    "emergencyLastName",
    "emergencyMiddleName",
    "emergencyExtensionName",
    "emergencyRelationship",
    "emergencyMobile",
    "hasAllergies",
    "allergyDetails",
    "historyOfRabiesVaccine",
    "lastVaccineDate",
    "dateOfIncident",
    "typeOfExposure",
    "bodyLocation",
    "animalType",
    "vaccinationStatus",
)

RISK_FIELDS: tuple[str, ...] = ("riskLevel", "triageCategory", "riskFlags")

# Fields derived from the incident description; these always come from the
# deterministic scanner, whatever extraction backend is configured.
INCIDENT_FIELDS: tuple[str, ...] = (
    "dateOfIncident",
    "typeOfExposure",
    "bodyLocation",
    "animalType",
    "vaccinationStatus",
)
