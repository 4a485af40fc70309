"""Payment status API route polled by the payment result page."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.routes.helpers import error_response
from app.services.payment_service import PaymentNotFoundError, get_payment_status
from app.utils.db_async import get_session

router = APIRouter(prefix="/api/payment", tags=["payments"])


@router.get("/status/{prn}")
async def payment_status(
    prn: str,
    db: AsyncSession = Depends(get_session),
) -> JSONResponse:
    """Current status of a payment; the receipt is included once it succeeds."""
    try:
        result = await get_payment_status(db, prn)
    except PaymentNotFoundError:
        return error_response("Payment not found", status_code=404)

    body = {"success": True, "status": result.status}
    if result.payment is not None:
        body["payment"] = result.payment.model_dump(mode="json")
    return JSONResponse(content=body)
