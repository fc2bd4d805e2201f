"""存活与就绪探针。"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from fittrack_api.core.errors import service_unavailable
from fittrack_api.db.session import get_db
from fittrack_api.schemas.auth import HealthStatusData
from fittrack_api.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get(
    "/live",
    summary="存活探针",
    description="进程能响应即视为存活，不访问数据库。",
    status_code=status.HTTP_200_OK,
    response_model=HealthStatusData,
)
def live():
    return {"status": "ok"}


@router.get(
    "/ready",
    summary="就绪探针",
    description="数据库可连通时返回 ready，否则返回 503。",
    status_code=status.HTTP_200_OK,
    response_model=HealthStatusData,
    responses={503: {"model": ErrorResponse}},
)
def ready(db: Session = Depends(get_db)):
    try:
        db.execute(text("select 1"))
    except SQLAlchemyError as exc:
        logger.warning("readiness check failed: %s", exc.__class__.__name__)
        raise service_unavailable() from exc
    return {"status": "ready"}
