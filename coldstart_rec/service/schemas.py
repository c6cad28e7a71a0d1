"""Pydantic schemas for the online elicitation and recommendation API."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field


AttitudeLiteral = Literal["lover", "unknown", "hater"]


class MovieItem(BaseModel):
    movieId: int
    title: Optional[str] = None
    genres: Optional[str] = None


class BootstrapLevelsResponse(BaseModel):
    """Level-order flattening of the question tree; null marks an absent node."""

    levels: list[list[Optional[int]]]


class NextQuestionRequest(BaseModel):
    """Answers given so far, root first."""

    answers: list[AttitudeLiteral] = Field(default_factory=list, description="lover / unknown / hater per question")


class NextQuestionResponse(BaseModel):
    answers: list[AttitudeLiteral]
    depth: int
    done: bool
    movie: Optional[MovieItem] = None


class SimilarUsersRequest(BaseModel):
    """Request for similar-users endpoint using ratings-based CF."""

    userId: int = Field(..., ge=1, description="MovieLens userId from ratings.csv")
    top_n: int = Field(10, ge=1, le=100, description="Number of similar users to return")


class SimilarUserItem(BaseModel):
    userId: int
    similarity: float
    common_rated: int


class SimilarUsersResponse(BaseModel):
    userId: int
    top_n: int
    results: list[SimilarUserItem]


class UserCFRecommendRequest(BaseModel):
    """Request for user-user CF recommendations for a known user."""

    userId: int = Field(..., ge=1, description="MovieLens userId from ratings.csv")
    k: int = Field(10, ge=1, le=200, description="Neighborhood size")
    n: int = Field(10, ge=1, le=50, description="Number of movie recommendations to return")


class ElicitedRating(BaseModel):
    movieId: int
    rating: float = Field(..., ge=0.5, le=5.0)


class NewUserRecommendRequest(BaseModel):
    """Request for recommendations from ratings collected during elicitation."""

    ratings: list[ElicitedRating] = Field(..., min_length=1)
    k: int = Field(10, ge=1, le=200, description="Neighborhood size")
    n: int = Field(10, ge=1, le=50, description="Number of movie recommendations to return")


class UserCFRecommendationItem(BaseModel):
    movieId: int
    title: str | None = None
    genres: str | None = None
    predicted_rating: float


class UserCFRecommendResponse(BaseModel):
    userId: Optional[int] = None
    k: int
    n: int
    results: list[UserCFRecommendationItem]
