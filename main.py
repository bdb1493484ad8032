import logging

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logging.getLogger("botocore").setLevel(logging.WARNING)
logging.getLogger("boto3").setLevel(logging.WARNING)
logging.getLogger("urllib3").setLevel(logging.WARNING)

from app.routes import generation, web
from app.routes.web import STATIC_DIR

app = FastAPI(title="Image to Video Generator API")

# Mount static frontend
app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

# Attach routers
app.include_router(web.router)
app.include_router(generation.router)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
