# Run from project root: uvicorn app.main:app --reload

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.routes import router
from app.mcp.sdk import build_sdk_server
from app.mcp.server import get_dispatcher, mcp_router, sessions

logging.basicConfig(level=logging.INFO)

# /sse and /mcp for clients that speak the standard MCP transports
sdk = build_sdk_server(lambda: get_dispatcher().registry)
sdk_routes = sdk.sse_app().routes + sdk.streamable_http_app().routes


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with sdk.session_manager.run():
        yield
    sessions.close_all()


app = FastAPI(title="Search MCP Server", lifespan=lifespan)
app.include_router(router)
app.include_router(mcp_router, prefix="/mcp")
app.router.routes.extend(sdk_routes)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=8000)
