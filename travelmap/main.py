from fastapi import FastAPI, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from slowapi.errors import RateLimitExceeded
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response, RedirectResponse
from timing_asgi import TimingMiddleware, TimingClient  # type: ignore
from timing_asgi.integrations import StarletteScopeToName  # type: ignore

from travelmap.core import config
from travelmap.features.likes.routes import router as like_router
from travelmap.features.limiter import limiter
from travelmap.features.map.routes import router as map_router
from travelmap.features.me import router as me_router
from travelmap.features.pins.routes import router as pin_router
from travelmap.features.users.routes import follow_router, router as user_router
from travelmap.utils import get_logger


log = get_logger(__name__)
log.info("Initializing server")
app = FastAPI(openapi_url="/openapi.json" if config.ENABLE_DOCS else None)
app.state.limiter = limiter
app.title = "TravelMap"


class PrintTimings(TimingClient):
    def timing(self, metric_name, timing, tags):
        log.debug(dict(route=metric_name.removeprefix("main.travelmap.features."), timing=timing, tags=tags))


app.add_middleware(TimingMiddleware, client=PrintTimings(), metric_namer=StarletteScopeToName("main", app))

if config.ENABLE_DOCS:
    log.warning("Docs enabled")
if config.ALLOW_ORIGIN:
    log.warning("Setting allow origin to %s", config.ALLOW_ORIGIN)
    origins = [config.ALLOW_ORIGIN]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_request: Request, exc: RequestValidationError):
    errors = dict()
    for error in exc.errors():
        if "loc" not in error or "msg" not in error:
            continue
        key = error["loc"][-1] if error["loc"] else "root"
        errors[key] = error["msg"]
    log.info("Request validation error %s", errors)
    return JSONResponse(status_code=400, content=jsonable_encoder(errors))


@app.exception_handler(RateLimitExceeded)
def rate_limit_exceeded_handler(_request: Request, _exc: RateLimitExceeded) -> Response:
    return JSONResponse({"error": "You are going too fast"}, status_code=429)


@app.get("/")
async def index():
    if not config.ENABLE_DOCS:
        raise HTTPException(404)
    return RedirectResponse("/docs")


app.include_router(me_router, prefix="/me")
app.include_router(map_router, prefix="/map")
app.include_router(pin_router, prefix="/pins")
app.include_router(like_router, prefix="/likes")
app.include_router(follow_router, prefix="/follow")
app.include_router(user_router, prefix="/users")
