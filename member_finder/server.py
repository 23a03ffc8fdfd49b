"""表示側向けHTTPサーバー（FastAPI）"""
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .features.locator.domain.enums import SearchStatus
from .features.locator.domain.models import SEARCH_NOT_FOUND_MESSAGE
from .features.locator.orchestrator import LocatorOrchestrator
from .features.locator.session import MemberLocatorSession
from .infrastructure.config.settings import Settings
from .shared.logging.config import get_logger, setup_logging

# 設定を読み込み
settings = Settings()

# ロギングを設定
setup_logging(level=settings.log_level)
logger = get_logger(__name__)

# FastAPIアプリケーションを作成
app = FastAPI(
    title="Member Finder",
    description="現在地または検索地点から近いメンバーを返すサービス",
    version="1.0.0",
)


class SearchRequest(BaseModel):
    """検索リクエスト"""

    query: str


@app.on_event("startup")
async def startup_event() -> None:
    """起動時の処理（メンバー取得と現在地解決）"""
    logger.info("Application starting up")
    logger.info(f"Environment: {settings.environment}")

    orchestrator = LocatorOrchestrator(settings)
    session = orchestrator.create_session()

    app.state.orchestrator = orchestrator
    app.state.session = session

    await session.load_members(orchestrator.create_member_source())
    await session.start()


@app.on_event("shutdown")
async def shutdown_event() -> None:
    """シャットダウン時の処理"""
    logger.info("Application shutting down")

    session = getattr(app.state, "session", None)
    if session is not None:
        session.close()

    orchestrator = getattr(app.state, "orchestrator", None)
    if orchestrator is not None:
        orchestrator.close()


def get_session(request: Request) -> MemberLocatorSession:
    session = getattr(request.app.state, "session", None)
    if session is None or session.closed:
        raise HTTPException(status_code=503, detail="Session is not available")
    return session


@app.get("/")
async def root() -> dict[str, Any]:
    """ルートエンドポイント"""
    return {
        "service": "member-finder",
        "version": "1.0.0",
        "status": "running",
        "environment": settings.environment,
    }


@app.get("/health")
async def health() -> dict[str, str]:
    """ヘルスチェックエンドポイント"""
    return {"status": "healthy"}


@app.get("/location")
async def location(request: Request) -> dict[str, Any]:
    """表示中の地点"""
    state = get_session(request).state
    return {"location": state.location.to_dict() if state.location else None}


@app.get("/members/nearest")
async def nearest_members(request: Request) -> dict[str, Any]:
    """表示中の地点から近いメンバー"""
    return get_session(request).state.to_dict()


@app.post("/search")
async def search(body: SearchRequest, request: Request) -> dict[str, Any]:
    """
    検索語の地点を基準にランキングを更新

    Returns:
        dict[str, Any]: 更新後の表示状態
    """
    session = get_session(request)

    status = await session.search(body.query)

    if status is SearchStatus.EMPTY_QUERY:
        raise HTTPException(status_code=400, detail="Search query is empty")
    if status is SearchStatus.BUSY:
        raise HTTPException(status_code=409, detail="Another search is in progress")
    if status is SearchStatus.NOT_FOUND:
        raise HTTPException(status_code=404, detail=SEARCH_NOT_FOUND_MESSAGE)
    if status is SearchStatus.CLOSED:
        raise HTTPException(status_code=503, detail="Session is not available")

    return session.state.to_dict()


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """グローバル例外ハンドラー"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"message": "Internal server error", "detail": str(exc)},
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host="0.0.0.0",
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
