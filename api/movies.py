"""
Movie catalog routes (read-only, all behind the bearer guard).
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from auth.dependencies import get_current_user, movie_store
from database.stores import MovieStore
from utils.schemas import Director, Genre, Movie

router = APIRouter(
    prefix="/movies",
    tags=["movies"],
    dependencies=[Depends(get_current_user)],
)


@router.get("", response_model=List[Movie])
async def list_movies(movies: MovieStore = Depends(movie_store)) -> List[Movie]:
    return await movies.list()


@router.get("/genre/{genre_name}", response_model=Genre)
async def get_genre(genre_name: str, movies: MovieStore = Depends(movie_store)) -> Genre:
    """Describe a genre by name, taken from the first movie filed under it."""
    genre = await movies.find_genre(genre_name)
    if genre is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Genre not found")
    return genre


@router.get("/director/{director_name}", response_model=Director)
async def get_director(
    director_name: str,
    movies: MovieStore = Depends(movie_store),
) -> Director:
    director = await movies.find_director(director_name)
    if director is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Director not found")
    return director


@router.get("/{title}", response_model=Movie)
async def get_movie(title: str, movies: MovieStore = Depends(movie_store)) -> Movie:
    movie = await movies.get_by_title(title)
    if movie is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Movie not found")
    return movie
