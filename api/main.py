"""FastAPI アプリケーション - カートチェーン実行 API"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4

from fastapi import Body, FastAPI, HTTPException, Query
from pydantic import BaseModel, Field

from application.exceptions import ChainBusyError
from application.services.chain_error_builder import ChainErrorBuilder
from application.steps.gift_chain import GIFT_CHAIN_NAME, build_gift_chain
from domain.cart import Cart
from domain.exceptions import ValidationError
from domain.run import ChainRunStatus
from domain.run_record import ChainRunRecord
from infrastructure.cart.mock_cart_service import InMemoryCartService, create_mock_cart
from infrastructure.config.env_settings import (
    load_cart_latency_sec,
    load_gift_chain_settings,
    load_log_level,
)
from infrastructure.logging.composite_logger import CompositeLogger
from infrastructure.logging.console_logger import ConsoleLogger
from infrastructure.logging.run_log_logger import RunLogLogger
from infrastructure.run.in_memory_run_log_store import InMemoryRunLogStore
from infrastructure.run.in_memory_run_repository import InMemoryRunRepository


# リクエストモデル
class RunChainRequest(BaseModel):
    """
    チェーン実行リクエスト

    cart と total_price はどちらか一方のみ指定する（両方指定は 400）。
    どちらもなければ既定の total_price でモックカートを生成する。
    """
    total_price: Optional[int] = Field(default=None, ge=0, description="Cart total in minor units")
    cart: Optional[Dict[str, Any]] = Field(default=None, description="Explicit initial cart")


class ErrorDetailResponse(BaseModel):
    """Structured error detail"""
    code: str = Field(description="Error code")
    message: str = Field(description="Error message")
    error_type: str = Field(description="Exception class name")
    step_name: Optional[str] = Field(default=None, description="Failed step name")


class RunChainResponse(BaseModel):
    """チェーン実行レスポンス"""
    run_id: str = Field(description="Run identifier")
    success: bool = Field(description="False only when a step failed")
    status: str = Field(description="committed | stopped | failed")
    committed: bool = Field(description="Whether this run replaced the chain result")
    steps_completed: int = Field(description="Steps that continued before the run ended")
    stopped_step: Optional[str] = Field(default=None)
    stop_reason: Optional[str] = Field(default=None)
    cart: Optional[Dict[str, Any]] = Field(default=None, description="Committed chain result after the run")
    error: Optional[str] = Field(default=None)
    error_detail: Optional[ErrorDetailResponse] = Field(default=None)


class ChainResultResponse(BaseModel):
    chain: str
    cart: Dict[str, Any]


class RunStatusResponse(BaseModel):
    """Run record"""
    run_id: str
    chain: str
    status: Optional[str] = Field(description="None while the run is in flight")
    steps_completed: int
    cart: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    error_detail: Optional[ErrorDetailResponse] = None
    created_at: datetime
    updated_at: datetime


class RunLogEntryResponse(BaseModel):
    """Run log entry"""
    timestamp: datetime = Field(description="Log timestamp")
    event: str = Field(description="Log event name")
    level: str = Field(description="Log level")
    fields: Dict[str, Any] = Field(description="Log payload")


# FastAPIアプリケーション
app = FastAPI(
    title="CartChain",
    description="カートに対する逐次イベントチェーンの実行エンジン",
    version="1.0.0",
)

# 設定
DEFAULT_TOTAL_PRICE = 12000
LOG_LEVEL = load_log_level()
GIFT_SETTINGS = load_gift_chain_settings()
CART_SERVICE = InMemoryCartService(latency_sec=load_cart_latency_sec())
RUN_REPOSITORY = InMemoryRunRepository()
RUN_LOG_STORE = InMemoryRunLogStore()
GIFT_CHAIN = build_gift_chain(CART_SERVICE, GIFT_SETTINGS, ConsoleLogger(level=LOG_LEVEL))


@app.get("/")
def read_root():
    """ヘルスチェック"""
    return {"status": "ok", "service": "cartchain"}


def _build_logger(run_id: str) -> CompositeLogger:
    return CompositeLogger(
        [
            ConsoleLogger(level=LOG_LEVEL),
            RunLogLogger(run_id=run_id, log_store=RUN_LOG_STORE),
        ]
    )


def _initial_cart(request: RunChainRequest) -> Cart:
    if request.cart is not None and request.total_price is not None:
        raise ValidationError("Specify either cart or total_price, not both")
    if request.cart is not None:
        return Cart.from_dict(request.cart)
    total = request.total_price if request.total_price is not None else DEFAULT_TOTAL_PRICE
    return create_mock_cart(total)


def _create_run_record(run_id: str) -> ChainRunRecord:
    now = datetime.now(timezone.utc)
    return ChainRunRecord(
        run_id=run_id,
        chain_name=GIFT_CHAIN_NAME,
        status=None,
        created_at=now,
        updated_at=now,
    )


def _committed_cart() -> Optional[Dict[str, Any]]:
    result = GIFT_CHAIN.get_result()
    return result.to_dict() if result is not None else None


def _failed_step(run_id: str) -> Tuple[Optional[str], int]:
    """Failed step name and the number of steps that continued before it."""
    failures = RUN_LOG_STORE.list(run_id, event="step.failed")
    if not failures:
        return None, 0
    fields = failures[-1].fields
    return fields.get("step_name"), fields.get("step_index", 0)


@app.post("/chains/gift/runs", response_model=RunChainResponse)
async def run_gift_chain(request: RunChainRequest = Body(...)) -> RunChainResponse:
    """
    ギフトチェーンを実行する

    実行中のチェーンがあれば 409 を返す。ステップが停止した場合は
    チェーン結果を更新せずに正常終了する。
    """
    if GIFT_CHAIN.is_running:
        raise HTTPException(status_code=409, detail=f"Chain is already running: {GIFT_CHAIN_NAME}")

    try:
        cart = _initial_cart(request)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    run_id = uuid4().hex
    logger = _build_logger(run_id)
    RUN_REPOSITORY.create(_create_run_record(run_id))

    # No await between the busy check and run(): the executor flag is set
    # before the first suspension point.
    CART_SERVICE.put_cart(cart)
    try:
        result = await GIFT_CHAIN.run(cart.clone(), run_id=run_id, logger=logger)
    except ChainBusyError as e:
        detail = ChainErrorBuilder().build_from_exception(e)
        RUN_REPOSITORY.finish(run_id, ChainRunStatus.FAILED, error=str(e), error_detail=detail.to_dict())
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        step_name, steps_completed = _failed_step(run_id)
        detail = ChainErrorBuilder().build_from_exception(e, step_name=step_name)
        logger.error("chain_execution_failed", run_id=run_id, error=str(e))
        RUN_REPOSITORY.finish(
            run_id,
            ChainRunStatus.FAILED,
            steps_completed=steps_completed,
            error=detail.message,
            error_detail=detail.to_dict(),
        )
        return RunChainResponse(
            run_id=run_id,
            success=False,
            status=ChainRunStatus.FAILED.value,
            committed=False,
            steps_completed=steps_completed,
            cart=_committed_cart(),
            error=detail.message,
            error_detail=ErrorDetailResponse(**detail.to_dict()),
        )

    committed_cart = _committed_cart()
    RUN_REPOSITORY.finish(
        run_id,
        result.status,
        steps_completed=result.steps_completed,
        cart=committed_cart if result.committed else None,
    )
    return RunChainResponse(
        run_id=run_id,
        success=True,
        status=result.status.value,
        committed=result.committed,
        steps_completed=result.steps_completed,
        stopped_step=result.stopped_step,
        stop_reason=result.stop_reason,
        cart=committed_cart,
    )


@app.get("/chains/gift/result", response_model=ChainResultResponse)
def get_gift_chain_result() -> ChainResultResponse:
    cart = _committed_cart()
    if cart is None:
        raise HTTPException(status_code=404, detail="No committed result yet")
    return ChainResultResponse(chain=GIFT_CHAIN_NAME, cart=cart)


@app.get("/chains/gift/runs", response_model=List[RunStatusResponse])
def list_gift_chain_runs() -> List[RunStatusResponse]:
    return [_to_status_response(record) for record in RUN_REPOSITORY.list_by_chain(GIFT_CHAIN_NAME)]


def _to_status_response(record: ChainRunRecord) -> RunStatusResponse:
    return RunStatusResponse(
        run_id=record.run_id,
        chain=record.chain_name,
        status=record.status.value if record.status else None,
        steps_completed=record.steps_completed,
        cart=record.cart,
        error=record.error,
        error_detail=ErrorDetailResponse(**record.error_detail) if record.error_detail else None,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


@app.get("/runs/{run_id}", response_model=RunStatusResponse)
def get_run_status(run_id: str) -> RunStatusResponse:
    record = RUN_REPOSITORY.get(run_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Run not found: {run_id}")
    return _to_status_response(record)


@app.get("/runs/{run_id}/logs", response_model=List[RunLogEntryResponse])
def get_run_logs(run_id: str, event: Optional[str] = Query(default=None)) -> List[RunLogEntryResponse]:
    record = RUN_REPOSITORY.get(run_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Run not found: {run_id}")
    return [
        RunLogEntryResponse(
            timestamp=entry.timestamp,
            event=entry.event,
            level=entry.level,
            fields=entry.fields,
        )
        for entry in RUN_LOG_STORE.list(run_id, event=event)
    ]
