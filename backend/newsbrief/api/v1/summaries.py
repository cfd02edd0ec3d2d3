"""On-demand summary endpoint."""

from fastapi import APIRouter, Depends

from newsbrief.api.deps import get_current_account, get_digest_service
from newsbrief.models import Account
from newsbrief.schemas.article import SummaryRequest, SummaryResponse
from newsbrief.services.digest_service import DigestService

router = APIRouter()


@router.post("", response_model=SummaryResponse)
async def summarize_text(
    body: SummaryRequest,
    digest_service: DigestService = Depends(get_digest_service),
    account: Account = Depends(get_current_account),
) -> SummaryResponse:
    """Summarize a single text. Nothing is stored."""
    summary = await digest_service.summarize_text(body.text, language=body.language)
    return SummaryResponse(summary=summary)
