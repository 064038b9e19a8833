import logging
import random
from functools import partial
from typing import Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from reelmix.catalog import discover_catalog, probe_duration
from reelmix.config import Configuration, load_config
from reelmix.errors import (
    CatalogError,
    ConfigurationError,
    InsufficientInputError,
    ReelmixError,
)
from reelmix.generator import CombinationGenerator
from reelmix.settings import settings
from reelmix.toolkit import resolve_toolkit
from reelmix.transcode import FFmpegEngine

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Reelmix API",
    description="Generate randomized highlight reels from a folder of videos",
    version="0.1.0",
)


# --- Pydantic Models ---


class HealthResponse(BaseModel):
    ok: bool


class VideoResult(BaseModel):
    path: str
    duration: float


class CatalogResponse(BaseModel):
    videos: list[VideoResult]


class GenerateRequest(BaseModel):
    # Overrides for config.ini values; None keeps the file's value
    num_combinations: Optional[int] = Field(default=None, ge=0)
    target_duration: Optional[float] = Field(default=None, gt=0, allow_inf_nan=False)
    min_duration: Optional[float] = Field(default=None, gt=0, allow_inf_nan=False)
    max_videos: Optional[int] = Field(default=None, ge=0)
    seed: Optional[int] = None


class CombinationResultModel(BaseModel):
    index: int
    status: str
    output: Optional[str] = None
    planned_duration: float
    clips_planned: int
    clips_rendered: int
    reason: Optional[str] = None


class GenerateResponse(BaseModel):
    results: list[CombinationResultModel]
    created: int


# --- Helpers ---


def effective_config(request: Optional[GenerateRequest] = None) -> Configuration:
    """Configuration from config.ini with request overrides applied."""
    config = load_config(settings.CONFIG_PATH)
    if request is None:
        return config

    overrides = request.model_dump(exclude_none=True, exclude={"seed"})
    return config.model_copy(update=overrides)


# --- Endpoints ---


@app.get("/health", response_model=HealthResponse)
async def health():
    """Health check endpoint."""
    return {"ok": True}


@app.get("/catalog", response_model=CatalogResponse)
def catalog_endpoint():
    """List eligible source videos with their durations."""
    try:
        config = effective_config()
        with resolve_toolkit() as toolkit:
            probe = partial(probe_duration, ffprobe=toolkit.ffprobe)
            videos = discover_catalog(settings.SOURCE_DIR, config, probe=probe)

        return {"videos": [{"path": v.path, "duration": v.duration} for v in videos]}

    except (ConfigurationError, CatalogError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ReelmixError as e:
        logger.exception("Catalog discovery failed")
        raise HTTPException(status_code=500, detail=str(e))
    except Exception:
        logger.exception("Catalog discovery failed")
        raise HTTPException(
            status_code=500,
            detail="Catalog discovery failed. Check server logs for details.",
        )


@app.post("/generate", response_model=GenerateResponse)
def generate_endpoint(request: GenerateRequest):
    """
    Generate combined videos into the results directory.

    Runs synchronously: each combination is trimmed and concatenated before
    the next one starts, and the response lists every attempt's outcome.
    """
    try:
        config = effective_config(request)
        rng = random.Random(request.seed)

        logger.info(
            f"Received generate request: num_combinations={config.num_combinations}, "
            f"target_duration={config.target_duration}, seed={request.seed}"
        )

        with resolve_toolkit() as toolkit:
            probe = partial(probe_duration, ffprobe=toolkit.ffprobe)
            videos = discover_catalog(settings.SOURCE_DIR, config, probe=probe, rng=rng)

            generator = CombinationGenerator(
                engine=FFmpegEngine(toolkit.ffmpeg),
                config=config,
                output_dir=settings.RESULTS_DIR,
                rng=rng,
            )
            results = generator.run(videos)

        return {
            "results": [vars(r) for r in results],
            "created": sum(1 for r in results if r.status == "created"),
        }

    except (ConfigurationError, CatalogError, InsufficientInputError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ReelmixError as e:
        logger.exception("Generation failed")
        raise HTTPException(status_code=500, detail=str(e))
    except Exception:
        logger.exception("Generation failed")
        raise HTTPException(
            status_code=500,
            detail="Generation failed. Check server logs for details.",
        )
