"""
Webhook ingestion endpoint.

The body is read raw with `await request.body()`; no body parsing happens
before signature verification.
"""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from store_sync.api.middleware.error_handler import error_response
from store_sync.services.ingestion import WebhookIngestor
from store_sync.utils.exceptions import StoreSyncError

router = APIRouter()

SIGNATURE_HEADER = "X-Shopify-Hmac-Sha256"
SHOP_DOMAIN_HEADER = "X-Shopify-Shop-Domain"
TOPIC_HEADER = "X-Shopify-Topic"


def get_ingestor(request: Request) -> WebhookIngestor:
    """Dependency returning the ingestor built at startup."""
    return request.app.state.ingestor


@router.post("/webhooks", status_code=status.HTTP_200_OK)
async def receive_webhook(
    request: Request,
    ingestor: WebhookIngestor = Depends(get_ingestor),
) -> JSONResponse:
    """
    Receive one webhook from the store platform.

    Returns 200 for processed and for ignored topics; error statuses follow
    the retry contract in `store_sync.api.middleware.error_handler`.
    """
    body = await request.body()

    try:
        result = await run_in_threadpool(
            ingestor.ingest,
            body,
            request.headers.get(SIGNATURE_HEADER),
            request.headers.get(SHOP_DOMAIN_HEADER),
            request.headers.get(TOPIC_HEADER),
        )
    except StoreSyncError as e:
        return error_response(e)

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={"status": result.outcome.value},
    )
