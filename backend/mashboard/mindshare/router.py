# backend/mashboard/mindshare/router.py

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse

from mashboard.dependencies import get_mindshare_client

from .client import MindshareClient, MindshareClientError, MindshareHTTPError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["mindshare"])


@router.get(
    "/mindshare",
    summary="マインドシェア API へのプロキシ",
    description="受け取ったクエリパラメータ（intervalDays, limit など）をそのまま上流に転送する。",
)
async def proxy_mindshare(
    request: Request,
    client: MindshareClient = Depends(get_mindshare_client),
) -> JSONResponse:
    """
    - 正常系: 上流の JSON を加工せずに返す
    - 上流のエラーステータス: 同じステータスコードで返す
    - 接続エラーなど: 500
    """
    try:
        data = await client.fetch(request.query_params.multi_items())
    except MindshareHTTPError as exc:
        raise HTTPException(
            status_code=exc.status_code,
            detail="Failed to fetch from external API",
        ) from exc
    except MindshareClientError as exc:
        logger.error("Mindshare proxy error: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal Server Error",
        ) from exc

    return JSONResponse(content=data)
