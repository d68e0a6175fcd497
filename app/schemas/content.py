from pydantic import BaseModel
from typing import List, Optional


class PricingPlan(BaseModel):
    name: str
    price: str
    period: Optional[str] = None
    description: str
    features: List[str]
    cta: str
    popular: bool = False


class ComparisonRow(BaseModel):
    feature: str
    free: str
    pro: str
    enterprise: str


class FaqEntry(BaseModel):
    q: str
    a: str


class PricingResponse(BaseModel):
    plans: List[PricingPlan]
    comparison: List[ComparisonRow]
    faq: List[FaqEntry]


class HowItWorksStep(BaseModel):
    number: int
    title: str
    description: str


class HowItWorksResponse(BaseModel):
    steps: List[HowItWorksStep]


class PrivacySection(BaseModel):
    title: str
    body: str


class PrivacyResponse(BaseModel):
    sections: List[PrivacySection]
