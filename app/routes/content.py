from fastapi import APIRouter

from app.schemas.content import HowItWorksResponse, PricingResponse, PrivacyResponse
from app.utils.site_content import (
    how_it_works_steps,
    plan_comparison,
    pricing_faq,
    pricing_plans,
    privacy_sections,
)

router = APIRouter(prefix="/api/content", tags=["content"])


@router.get("/pricing", response_model=PricingResponse)
async def get_pricing():
    return {"plans": pricing_plans, "comparison": plan_comparison, "faq": pricing_faq}


@router.get("/how-it-works", response_model=HowItWorksResponse)
async def get_how_it_works():
    return {"steps": how_it_works_steps}


@router.get("/privacy", response_model=PrivacyResponse)
async def get_privacy():
    return {"sections": privacy_sections}
