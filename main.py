import logging
import re
from typing import Optional, List, Any, Dict

import uvicorn
from bson import ObjectId
from fastapi import FastAPI, Depends
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from pymongo.database import Database

from database import get_db, create_document, get_documents
from errors import ApiError, ValidationError, ConflictError, NotFoundError, AuthError, InternalError, render_api_error, render_request_validation_error
from schemas import CastMember, Category, Genre, Review, Movie, User
from security import hash_password, verify_password, create_access_token, verify_token
from settings import LOG_LEVEL, PORT

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# -----------------------------
# App Config
# -----------------------------
app = FastAPI(title="Cinema Catalog API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_exception_handler(ApiError, render_api_error)
app.add_exception_handler(RequestValidationError, render_request_validation_error)

MOVIE_SUMMARY_PROJECTION = {"title": 1, "genre": 1, "duration": 1, "rating": 1}
MOVIE_SEARCH_PROJECTION = {
    "title": 1,
    "genre": 1,
    "duration": 1,
    "releaseYear": 1,
    "rating": 1,
    "director": 1,
    "cast.name": 1,
    "categories.name": 1,
}
USER_PUBLIC_PROJECTION = {"email": 1, "role": 1}

# -----------------------------
# Helpers
# -----------------------------
_INT_PREFIX = re.compile(r"\s*[+-]?\d+")
_FLOAT_PREFIX = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_int(value: str) -> float:
    """Leading integer of ``value``; NaN when there is none (so the filter matches nothing)."""
    match = _INT_PREFIX.match(value)
    return int(match.group()) if match else float("nan")


def parse_float(value: str) -> float:
    match = _FLOAT_PREFIX.match(value)
    return float(match.group()) if match else float("nan")


def split_names(value: str) -> List[str]:
    return value.split(",")


def serialize_doc(doc: Any) -> Any:
    return jsonable_encoder(doc, custom_encoder={ObjectId: str})


def build_search_filter(
    title: Optional[str] = None,
    genre: Optional[str] = None,
    releaseYear: Optional[str] = None,
    rating: Optional[str] = None,
    cast: Optional[str] = None,
    categories: Optional[str] = None,
) -> Dict[str, Any]:
    """AND together the supplied filters; absent ones add no constraint."""
    query: Dict[str, Any] = {}
    if title:
        query["title"] = {"$regex": re.escape(title), "$options": "i"}
    if genre:
        query["genre.name"] = re.compile(re.escape(genre), re.IGNORECASE)
    if releaseYear:
        query["releaseYear"] = parse_int(releaseYear)
    if rating:
        query["rating"] = {"$gte": parse_float(rating)}
    if cast:
        query["cast.name"] = {"$in": split_names(cast)}
    if categories:
        query["categories.name"] = {"$in": split_names(categories)}
    return query


def to_object_id(id_str: str) -> ObjectId:
    # InvalidId propagates; callers turn it into a 500
    return ObjectId(id_str)


def without_id(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in doc.items() if k != "_id"}


# -----------------------------
# Request bodies
# -----------------------------
class MovieRequest(BaseModel):
    title: Optional[str] = None
    genre: Optional[str] = None
    duration: Optional[Any] = None
    releaseYear: Optional[Any] = None
    rating: Optional[float] = None
    cast: Optional[List[CastMember]] = None
    reviews: Optional[List[Review]] = None
    categories: Optional[List[str]] = None


class RegisterRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


def compose_movie(db: Database, payload: MovieRequest) -> Movie:
    """
    Validate a movie body and resolve its genre and categories.

    The genre must exist by exact name. Categories are matched with ``$in``,
    so names that do not exist are simply left out.
    """
    if not payload.title or not payload.genre or payload.cast is None or payload.reviews is None or payload.categories is None:
        raise ValidationError("Missing fields required")

    genre_doc = db["genres"].find_one({"name": payload.genre})
    if not genre_doc:
        raise ValidationError("Invalid genre")

    category_docs = get_documents(db, "categories", {"name": {"$in": payload.categories}})

    # stored documents are embedded whole; these only check their shape
    Genre.model_validate(without_id(genre_doc))
    for category_doc in category_docs:
        Category.model_validate(without_id(category_doc))

    return Movie(
        title=payload.title,
        genre=genre_doc,
        duration=payload.duration,
        releaseYear=payload.releaseYear,
        rating=payload.rating,
        cast=[member.model_dump(exclude_none=True) for member in payload.cast],
        reviews=[review.model_dump(exclude_none=True) for review in payload.reviews],
        categories=category_docs,
    )


# -----------------------------
# Basic routes
# -----------------------------
@app.get("/")
def root():
    return {"message": "Hello World!"}


# -----------------------------
# Movies
# -----------------------------
@app.get("/movies")
def list_movies(db: Database = Depends(get_db)):
    try:
        movies = get_documents(db, "movies", {}, MOVIE_SUMMARY_PROJECTION)
    except Exception:
        logger.exception("Error fetching movies")
        raise InternalError()
    return {"movies": serialize_doc(movies)}


@app.get("/movies/search")
def search_movies(
    title: Optional[str] = None,
    genre: Optional[str] = None,
    releaseYear: Optional[str] = None,
    rating: Optional[str] = None,
    cast: Optional[str] = None,
    categories: Optional[str] = None,
    db: Database = Depends(get_db),
):
    query = build_search_filter(title, genre, releaseYear, rating, cast, categories)
    try:
        results = get_documents(db, "movies", query, MOVIE_SEARCH_PROJECTION)
    except Exception:
        logger.exception("Error searching movies with %s", query)
        raise InternalError()
    return {"results": serialize_doc(results)}


@app.get("/movies/{movie_id}")
def get_movie(movie_id: str, db: Database = Depends(get_db)):
    try:
        movie = db["movies"].find_one({"_id": to_object_id(movie_id)}, {"_id": 0})
    except Exception:
        logger.exception("Error fetching movie %s", movie_id)
        raise InternalError()
    if not movie:
        raise NotFoundError("Movie not found")
    return {"movie": serialize_doc(movie)}


@app.post("/movies", status_code=201)
def create_movie(payload: Optional[MovieRequest] = None, db: Database = Depends(get_db)):
    try:
        movie = compose_movie(db, payload or MovieRequest())
        result = create_document(db, "movies", movie, exclude_none=False)
    except ApiError:
        raise
    except Exception:
        logger.exception("Error creating movie")
        raise InternalError()
    logger.info("Created movie %s (%s)", result.inserted_id, movie.title)
    return {"message": "New movie has been created", "movieId": str(result.inserted_id)}


@app.put("/movies/{movie_id}")
def update_movie(movie_id: str, payload: Optional[MovieRequest] = None, db: Database = Depends(get_db)):
    try:
        movie = compose_movie(db, payload or MovieRequest())
        result = db["movies"].update_one({"_id": to_object_id(movie_id)}, {"$set": movie.model_dump()})
    except ApiError:
        raise
    except Exception:
        logger.exception("Error updating movie %s", movie_id)
        raise InternalError()
    # no match means nothing was updated
    if result.matched_count == 0:
        raise NotFoundError("Movie not found")
    logger.info("Updated movie %s", movie_id)
    return {"message": "Movie updated"}


@app.delete("/movies/{movie_id}")
def delete_movie(movie_id: str, db: Database = Depends(get_db)):
    try:
        result = db["movies"].delete_one({"_id": to_object_id(movie_id)})
    except Exception:
        logger.exception("Error deleting movie %s", movie_id)
        raise InternalError()
    if result.deleted_count == 0:
        raise NotFoundError("Movie not found")
    logger.info("Deleted movie %s", movie_id)
    return {"message": "Movie has been deleted successfully"}


# -----------------------------
# Users & Auth
# -----------------------------
@app.post("/users")
def register(payload: Optional[RegisterRequest] = None, db: Database = Depends(get_db)):
    payload = payload or RegisterRequest()
    if not payload.email or not payload.password:
        raise ValidationError("Please provide user name and password")
    try:
        if db["users"].find_one({"email": payload.email}):
            raise ConflictError("Email already in use")
        user = User(email=payload.email, password=hash_password(payload.password), role=payload.role)
        result = create_document(db, "users", user)
    except ApiError:
        raise
    except Exception:
        logger.exception("Error registering %s", payload.email)
        raise InternalError()
    logger.info("Registered user %s", payload.email)
    # the store acknowledgment is returned as-is
    return {
        "message": "New user account has been created",
        "result": {"acknowledged": result.acknowledged, "insertedId": str(result.inserted_id)},
    }


@app.post("/login")
def login(payload: Optional[LoginRequest] = None, db: Database = Depends(get_db)):
    payload = payload or LoginRequest()
    if not payload.email or not payload.password:
        raise ValidationError("Please provide email and password", key="message")
    try:
        user = db["users"].find_one({"email": payload.email})
        # unknown email and wrong password both get a bare 401
        if not user or not verify_password(payload.password, user.get("password", "")):
            raise AuthError(status_code=401)
        token = create_access_token(user["_id"], user["email"], user.get("role"))
    except ApiError:
        raise
    except Exception:
        logger.exception("Error logging in %s", payload.email)
        raise InternalError()
    return {"accessToken": token}


@app.get("/user")
def get_current_user(claims: Dict[str, Any] = Depends(verify_token)):
    return {"user": claims}


@app.get("/users")
def list_users(claims: Dict[str, Any] = Depends(verify_token), db: Database = Depends(get_db)):
    if claims.get("role") != "admin":
        raise AuthError("Forbidden: Admins only", key="message")
    try:
        users = get_documents(db, "users", {}, USER_PUBLIC_PROJECTION)
    except Exception:
        logger.exception("Error listing users")
        raise InternalError("Server error", key="message")
    return {"users": serialize_doc(users)}


def run():
    uvicorn.run(app, host="0.0.0.0", port=PORT)


if __name__ == "__main__":
    run()
