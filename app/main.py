from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.concurrency import run_in_threadpool

from panel_relay import __version__
from panel_relay.utils.config import get_settings
from panel_relay.utils.logger import logger
from panel_relay.workflow.relay import Relay

app = FastAPI(title="Panel Relay",
             description="Local development server for the Gemini script and panel relay",
             version=__version__)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

def get_relay() -> Relay:
    return Relay(get_settings())

@app.api_route("/api/generate", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
async def generate(request: Request) -> Response:
    """
    Relay the raw request exactly as the serverless handler would see it.

    Returns:
        Response: The relay's status, headers and body
    """
    event = {
        "httpMethod": request.method,
        "body": await request.body(),
    }
    result = await run_in_threadpool(get_relay().handle, event)
    return Response(content=result.body, status_code=result.status_code, headers=result.headers)

@app.get("/api/health")
async def health_check():
    return {"status": "ok"}

if __name__ == "__main__":
    import uvicorn
    logger.info("Starting Panel Relay development server...")
    uvicorn.run(app, host="0.0.0.0", port=8000)
