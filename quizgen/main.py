import logging

# SSM must run before anything reads Settings.
from quizgen.core.ssm import load_ssm_parameters
load_ssm_parameters()

from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI

from quizgen.api.routes.materials import router as materials_router
from quizgen.api.routes.quiz import router as quiz_router
from quizgen.db.session import init_db

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

app = FastAPI(title="Quiz Generation API")


@app.get("/health", tags=["health"])
def health_check():
    return {"status": "ok"}


app.include_router(quiz_router)
app.include_router(materials_router)


@app.on_event("startup")
def _create_tables():
    init_db()
