"""
Metric definition router.

GET   /config                 — owner's metric definitions, display order
POST  /metrics                — create a metric
PATCH /metrics/{metric_id}    — partial update
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from daylog.db.base import get_db
from daylog.models.metric_config import MetricConfig
from daylog.routers.deps import get_owner_id
from daylog.schemas.common import ErrorResponse
from daylog.schemas.config import MetricConfigResponse, MetricCreateRequest, MetricUpdateRequest
from daylog.services import row_store
from daylog.services.moving_average import parse_ma_periods

router = APIRouter(tags=["config"])


def _config_to_response(cfg: MetricConfig) -> MetricConfigResponse:
    return MetricConfigResponse(
        metric_id=cfg.metric_id,
        metric_name=cfg.metric_name,
        type=cfg.type,
        active=cfg.active,
        private=cfg.private,
        required=cfg.required,
        required_since=str(cfg.required_since) if cfg.required_since else None,
        start_date=str(cfg.start_date) if cfg.start_date else None,
        default_value=cfg.default_value,
        min_value=cfg.min_value,
        max_value=cfg.max_value,
        disallowed_values=cfg.disallowed_values,
        preset_values_csv=cfg.preset_values_csv,
        show_ma=cfg.show_ma,
        ma_periods_csv=cfg.ma_periods_csv,
        ma_periods=parse_ma_periods(cfg.ma_periods_csv),
        group=cfg.group,
        group_order=cfg.group_order,
        metric_order=cfg.metric_order,
        is_calculated=cfg.is_calculated,
        calc_expr=cfg.calc_expr,
    )


@router.get(
    "/config",
    response_model=list[MetricConfigResponse],
    summary="Owner's metric definitions",
)
def list_config(
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    """
    All metric definitions for the owner, sorted by
    `(group_order, group, metric_order, metric_id)`. Inactive and private
    metrics are included; callers filter.
    """
    return [_config_to_response(c) for c in row_store.list_configs(db, owner_id)]


@router.post(
    "/metrics",
    response_model=MetricConfigResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a metric",
    responses={409: {"model": ErrorResponse, "description": "metric_id already exists for this owner."}},
)
def create_metric(
    payload: MetricCreateRequest,
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    fields = payload.model_dump(exclude={"metric_id"})
    cfg = row_store.create_metric(db, owner_id, payload.metric_id, fields)
    return _config_to_response(cfg)


@router.patch(
    "/metrics/{metric_id}",
    response_model=MetricConfigResponse,
    summary="Update a metric",
    responses={404: {"model": ErrorResponse, "description": "No such metric for this owner."}},
)
def update_metric(
    metric_id: str,
    payload: MetricUpdateRequest,
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    """Only the fields present in the body are written; metric_id never changes."""
    cfg = row_store.update_metric(db, owner_id, metric_id, payload.model_dump(exclude_unset=True))
    return _config_to_response(cfg)
