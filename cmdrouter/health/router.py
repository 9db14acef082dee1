from fastapi import APIRouter, Request

from cmdrouter.models import EngineCheck, HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    engine = request.app.state.engine
    host = request.app.state.host
    accepting = not engine.dispatcher.closed
    return HealthResponse(
        status="ok" if accepting else "shutting_down",
        checks=EngineCheck(
            commands=len(engine.registry),
            roots=len(engine.registry.roots()),
            bound_roots=len(host.bound_roots()),
            in_flight=engine.dispatcher.in_flight,
            accepting=accepting,
        ),
    )
