import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import state
from api.routers import auth, automation, ops

# Logging configuration
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(title="PM Workbench automation API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[state.settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(ops.router)
app.include_router(auth.router)
app.include_router(automation.router)


@app.on_event("startup")
async def startup() -> None:
    settings = state.settings
    logger.info(
        f"Workbench API starting (ollama={settings.ollama_base_url}, "
        f"groq={'set' if settings.groq_api_key else 'unset'}, "
        f"gemini={'set' if settings.gemini_api_key else 'unset'}, "
        f"oauth={'configured' if settings.oauth_configured else 'not configured'})"
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=state.settings.api_port)
