from typing import Any, Optional, List, Dict
from pydantic import BaseModel, ConfigDict, Field, field_validator


class Account(BaseModel):
    email: str
    password_hash: str
    id: str
    is_first_time_user: bool = True

    def to_record(self) -> Dict[str, Any]:
        """Registry entry stored under the account's email in `users`."""
        return {"password": self.password_hash, "id": self.id, "isFirstTimeUser": self.is_first_time_user}

    @classmethod
    def from_record(cls, email: str, record: Dict[str, Any]) -> "Account":
        return cls(
            email=email,
            password_hash=record["password"],
            id=record["id"],
            is_first_time_user=record.get("isFirstTimeUser", True),
        )


class Session(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_authenticated: bool = Field(default=False, alias="isAuthenticated")
    user_id: Optional[str] = Field(default=None, alias="userId")
    user_email: Optional[str] = Field(default=None, alias="userEmail")
    is_first_time_user: bool = Field(default=True, alias="isFirstTimeUser")

    @classmethod
    def anonymous(cls) -> "Session":
        return cls()

    @classmethod
    def for_account(cls, account: Account) -> "Session":
        return cls(
            is_authenticated=True,
            user_id=account.id,
            user_email=account.email,
            is_first_time_user=account.is_first_time_user,
        )


class OnboardingFields(BaseModel):
    company_name: str
    product_description: str
    target_audience: str
    key_features: str
    unique_selling_points: str

    def to_brief(self) -> str:
        """Render the onboarding answers as the product brief text."""
        return "\n".join([
            f"Company Name: {self.company_name.strip()}",
            f"Product Description: {self.product_description.strip()}",
            f"Target Audience: {self.target_audience.strip()}",
            f"Key Features: {self.key_features.strip()}",
            f"Unique Selling Points: {self.unique_selling_points.strip()}",
        ])


class ProblemSolutionOutcome(BaseModel):
    problem: str
    solution: str
    outcome: str


class ValuePropFramework(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    core_messaging_hierarchy: List[str] = Field(alias="coreMessagingHierarchy")
    problem_solution_outcome_narrative: ProblemSolutionOutcome = Field(alias="problemSolutionOutcomeNarrative")
    competitive_differentiation_points: List[str] = Field(default_factory=list, alias="competitiveDifferentiationPoints")

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class Campaign(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    campaign_name: str = Field(alias="campaignName")
    timestamp: int  # epoch milliseconds
    assets_generated: List[str] = Field(alias="assetsGenerated")
    details: Dict[str, Any]

    @field_validator("assets_generated")
    @classmethod
    def _unique_assets(cls, value: List[str]) -> List[str]:
        # set semantics, first-seen order kept for display
        return list(dict.fromkeys(value))

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)
