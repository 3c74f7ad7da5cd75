# backend/mashboard/telegram/router.py

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from mashboard.dependencies import get_channel_verifier

from .schemas import VerifyChannelRequest, VerifyChannelResponse
from .service import ChannelVerificationError, ChannelVerifier

router = APIRouter(prefix="/api", tags=["telegram"])


@router.post(
    "/verify-channel",
    response_model=VerifyChannelResponse,
    response_model_exclude_none=True,
    summary="Telegram チャンネルの所有者を検証",
)
async def verify_channel(
    body: VerifyChannelRequest,
    verifier: ChannelVerifier = Depends(get_channel_verifier),
):
    """
    channelId のチャンネルで userId が creator かどうかを確認する。

    - パラメータ不足 → 400
    - チャンネルが見つからない → 400 {success: false, message}
    - creator でない → 403 {success: false, message}
    - 想定外の内部エラー → 500
    """
    if not body.channel_id or body.user_id in (None, ""):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing parameters")

    try:
        return await verifier.verify(body.channel_id, str(body.user_id))
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except ChannelVerificationError as exc:
        failure = VerifyChannelResponse(success=False, message=exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=failure.model_dump(by_alias=True, exclude_none=True),
        )
    except Exception as exc:  # noqa: BLE001
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal Server Error",
        ) from exc
