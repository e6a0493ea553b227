"""Credits API Routes."""

from fastapi import APIRouter

from hairstyle_tasks.api.schemas import CreditsResponse
from hairstyle_tasks.core.dependencies import CurrentUserDep, LedgerDep
from hairstyle_tasks.shared.errors import UnauthorizedError

router = APIRouter(prefix="/credits", tags=["credits"])


@router.get("", summary="Баланс кредитов", responses={401: UnauthorizedError.openapi_response()})
async def get_credits(ledger: LedgerDep, user_id: CurrentUserDep) -> CreditsResponse:
    """Текущий баланс пользователя."""
    return CreditsResponse(user_id=user_id, balance=await ledger.balance(user_id))
