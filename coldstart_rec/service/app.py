"""FastAPI service entrypoint for cold-start elicitation and user-user CF recommendations."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, HTTPException

from ..bootstrap.build import BootstrapConfig, build_and_save_bootstrap_tree, load_bootstrap_tree
from ..bootstrap.serialize import level_order
from ..bootstrap.tree import Split, TreeNode, descend
from ..data import load_raw_data
from ..paths import ProjectPaths, get_repo_root
from ..user_cf.recommender import RecommenderConfig, UserUserCFRecommender
from ..utils import config_section, load_config, setup_logging
from .schemas import (
    BootstrapLevelsResponse,
    NewUserRecommendRequest,
    NextQuestionRequest,
    NextQuestionResponse,
    SimilarUsersRequest,
    SimilarUsersResponse,
    UserCFRecommendRequest,
    UserCFRecommendResponse,
)

logger = logging.getLogger(__name__)


def _get_env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or str(raw).strip() == "":
        return default
    p = Path(str(raw))
    return p if p.is_absolute() else (get_repo_root() / p).resolve()


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(os.getenv("LOG_LEVEL", "INFO"))

    repo_root = get_repo_root()
    config_path = _get_env_path("CONFIG_PATH", repo_root / "config.yaml")
    config = load_config(config_path)

    dataset_cfg = config_section(config, "dataset")
    paths = ProjectPaths.from_repo_root(repo_root, raw_dir=str(dataset_cfg.get("raw_dir", "data/raw")))
    bootstrap_dir = _get_env_path("BOOTSTRAP_DIR", paths.bootstrap_dir)

    data = load_raw_data(paths.raw_dir)

    # Build the question tree at startup if it has not been built offline.
    if not (bootstrap_dir / "tree.json").exists():
        logger.info("tree.json not found at %s; building bootstrap tree", bootstrap_dir)
        build_and_save_bootstrap_tree(
            data.ratings,
            out_dir=bootstrap_dir,
            cfg=BootstrapConfig.from_mapping(config_section(config, "bootstrap")),
            movies=data.movies,
        )
    else:
        logger.info("Found tree.json at %s; skipping build", bootstrap_dir)

    app.state.tree = load_bootstrap_tree(bootstrap_dir)
    app.state.user_cf = UserUserCFRecommender(
        data.ratings,
        data.movies,
        config=RecommenderConfig.from_mapping(config_section(config, "user_cf")),
    )
    logger.info("Starting service with config=%s bootstrap_dir=%s", config_path, bootstrap_dir)
    yield


app = FastAPI(title="MovieLens Cold-Start Recommendation Service", lifespan=lifespan)


def _tree(app_: FastAPI) -> TreeNode:
    tree = getattr(app_.state, "tree", None)
    if tree is None:
        raise HTTPException(status_code=503, detail="Bootstrap tree not initialized")
    return tree


def _user_cf(app_: FastAPI) -> UserUserCFRecommender:
    rec = getattr(app_.state, "user_cf", None)
    if rec is None:
        raise HTTPException(status_code=503, detail="UserCF recommender not initialized")
    return rec


@app.get("/bootstrap/levels", response_model=BootstrapLevelsResponse)
def bootstrap_levels() -> dict:
    """Return the question tree flattened level by level."""
    return {"levels": level_order(_tree(app))}


@app.post("/bootstrap/next", response_model=NextQuestionResponse)
def bootstrap_next(req: NextQuestionRequest) -> dict:
    """Return the next movie to ask about, given the answers so far."""
    node = descend(_tree(app), req.answers)
    movie = None
    if isinstance(node, Split):
        rec = getattr(app.state, "user_cf", None)
        movie = rec.movie_info(node.movieId) if rec is not None else {"movieId": int(node.movieId)}
    return {
        "answers": list(req.answers),
        "depth": len(req.answers),
        "done": movie is None,
        "movie": movie,
    }


@app.post("/user_cf/similar_users", response_model=SimilarUsersResponse)
def user_cf_similar_users(req: SimilarUsersRequest) -> dict:
    """Return the most similar users over commonly-rated movies."""
    rec = _user_cf(app)
    try:
        sims = rec.similar_users(int(req.userId), top_n=int(req.top_n))
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    return {
        "userId": int(req.userId),
        "top_n": int(req.top_n),
        "results": [s.__dict__ for s in sims],
    }


@app.post("/user_cf/recommend", response_model=UserCFRecommendResponse)
def user_cf_recommend(req: UserCFRecommendRequest) -> dict:
    """Recommend unseen movies to a known user, ranked by predicted rating."""
    rec = _user_cf(app)
    try:
        recs = rec.recommend_movies(int(req.userId), k=int(req.k), n=int(req.n))
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    return {
        "userId": int(req.userId),
        "k": int(req.k),
        "n": int(req.n),
        "results": [r.__dict__ for r in recs],
    }


@app.post("/user_cf/recommend_new", response_model=UserCFRecommendResponse)
def user_cf_recommend_new(req: NewUserRecommendRequest) -> dict:
    """Recommend to a new user from the ratings given during elicitation."""
    rec = _user_cf(app)
    ratings = {int(r.movieId): float(r.rating) for r in req.ratings}
    recs = rec.recommend_for_ratings(ratings, k=int(req.k), n=int(req.n))
    return {
        "userId": None,
        "k": int(req.k),
        "n": int(req.n),
        "results": [r.__dict__ for r in recs],
    }
