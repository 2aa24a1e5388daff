"""Output schemas for the bite intake pipeline."""
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .types import RISK_CATEGORY_PAIRS, RISK_LEVEL_LOW, RiskFlags


# ============= Record Schemas =============

class IntakeResult(BaseModel):
    """Canonical intake record plus rabies exposure risk assessment.

    Every key is always present. Fields the transcript does not resolve
    carry the empty string; riskFlags is an ordered list of justification
    strings.
    """

    model_config = ConfigDict(extra="forbid", strict=True, frozen=True)

    firstName: str
    lastName: str
    middleName: str
    extensionName: str
    dateOfBirth: str
    sex: str
    addressHouse: str
    addressBarangay: str
    addressCity: str
    addressProvince: str
    addressZip: str
    mobileNumber: str
    email: str
    emergencyFirstName: str
    emergencyLastName: str
    emergencyMiddleName: str
    emergencyExtensionName: str
    emergencyRelationship: str
    emergencyMobile: str
    hasAllergies: str
    allergyDetails: str
    historyOfRabiesVaccine: str
    lastVaccineDate: str
    dateOfIncident: str
    typeOfExposure: str
    bodyLocation: str
    animalType: str
    vaccinationStatus: str
    riskLevel: str
    triageCategory: str
    riskFlags: RiskFlags

    @model_validator(mode="after")
    def _check_risk_pairing(self) -> "IntakeResult":
        expected_category = RISK_CATEGORY_PAIRS.get(self.riskLevel)
        if expected_category is None:
            raise ValueError(f"unknown riskLevel '{self.riskLevel}'")
        if self.triageCategory != expected_category:
            raise ValueError(
                f"riskLevel '{self.riskLevel}' must pair with '{expected_category}', "
                f"got '{self.triageCategory}'"
            )
        if self.riskLevel != RISK_LEVEL_LOW and not self.riskFlags:
            raise ValueError("riskFlags must be non-empty above Low Risk")
        return self


# ============= Response Schemas =============

class IntakeResponse(BaseModel):
    """Envelope handed to the downstream presentation component."""

    success: bool = Field(..., description="Whether intake extraction succeeded")
    data: Dict[str, Any] = Field(
        default_factory=dict,
        description="Structured intake record and risk assessment",
    )
    error: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Error metadata when success is false",
    )
    model_config = ConfigDict(extra="forbid")
