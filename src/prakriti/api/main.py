"""FastAPI application for the Prakriti Mitra API."""

from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI, Header, HTTPException
from pydantic import BaseModel

from prakriti import __version__
from prakriti.auth import check_admin_credentials
from prakriti.chat import ChatBridge
from prakriti.config import PrakritiConfig
from prakriti.data import CROPS, DAILY_TIP, FAQS, NATURAL_INPUTS, get_crop, get_natural_input
from prakriti.errors import HandbookError, NotFoundError, ValidationError
from prakriti.handbook import ContentRepository
from prakriti.models import (
    FAQ,
    Category,
    ChatTurn,
    Crop,
    Handbook,
    Item,
    NaturalInput,
)

# Single repository instance owned by the API process
repository = ContentRepository()
chat_bridge: Optional[ChatBridge] = None


def get_repository() -> ContentRepository:
    """Get the handbook repository."""
    return repository


def get_chat_bridge() -> ChatBridge:
    """Get the chat bridge, creating it from config on first use."""
    global chat_bridge
    if chat_bridge is None:
        chat_bridge = ChatBridge.from_config(PrakritiConfig.load())
    return chat_bridge


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown."""
    yield
    if chat_bridge is not None:
        await chat_bridge.aclose()


app = FastAPI(
    title="Prakriti Mitra API",
    description="Natural farming reference data, handbook and AI assistant",
    version=__version__,
    lifespan=lifespan,
)


@app.get("/")
def root() -> dict:
    """Root endpoint with API info."""
    return {
        "name": "Prakriti Mitra API",
        "version": __version__,
        "description": "Natural farming reference data, handbook and AI assistant",
        "docs_url": "/docs",
    }


@app.get("/health")
def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "healthy"}


# Reference data endpoints

@app.get("/crops", response_model=list[Crop])
def list_crops() -> list[Crop]:
    """List crop reference records."""
    return list(CROPS)


@app.get("/crops/{crop_id}", response_model=Crop)
def get_crop_detail(crop_id: str) -> Crop:
    """Get a crop by id."""
    crop = get_crop(crop_id)
    if not crop:
        raise HTTPException(status_code=404, detail="Crop not found")
    return crop


@app.get("/inputs", response_model=list[NaturalInput])
def list_inputs() -> list[NaturalInput]:
    """List natural-input (kashayam) reference records."""
    return list(NATURAL_INPUTS)


@app.get("/inputs/{input_id}", response_model=NaturalInput)
def get_input_detail(input_id: str) -> NaturalInput:
    """Get a natural input by id."""
    natural_input = get_natural_input(input_id)
    if not natural_input:
        raise HTTPException(status_code=404, detail="Natural input not found")
    return natural_input


@app.get("/faqs", response_model=list[FAQ])
def list_faqs() -> list[FAQ]:
    """List frequently asked questions."""
    return list(FAQS)


@app.get("/tip")
def daily_tip() -> dict:
    """Today's farming tip."""
    return {"tip": DAILY_TIP}


# Auth

class LoginRequest(BaseModel):
    """Admin login request."""
    email: str
    password: str


class LoginResponse(BaseModel):
    """Admin login result."""
    is_admin: bool


@app.post("/auth/login", response_model=LoginResponse)
def login(request: LoginRequest) -> LoginResponse:
    """Check admin credentials."""
    return LoginResponse(is_admin=check_admin_credentials(request.email, request.password))


def require_admin(email: Optional[str], password: Optional[str]) -> None:
    """Reject the request unless the admin headers match."""
    if not check_admin_credentials(email or "", password or ""):
        raise HTTPException(status_code=401, detail="Admin credentials required")


# Handbook endpoints

class NameRequest(BaseModel):
    """Request carrying a category or item name."""
    name: str


def apply_change(change: Callable[[], Handbook]) -> Handbook:
    """Run a repository mutation, mapping handbook errors to HTTP errors."""
    try:
        return change()
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except HandbookError as e:
        raise HTTPException(status_code=409, detail=e.message)


@app.get("/handbook", response_model=Handbook)
def get_handbook() -> Handbook:
    """Get the full handbook snapshot."""
    return get_repository().snapshot


@app.get("/handbook/categories/{category_id}", response_model=Category)
def get_handbook_category(category_id: str) -> Category:
    """Get one handbook category with its items."""
    category = get_repository().snapshot.get_category(category_id)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


@app.get("/handbook/categories/{category_id}/items/{item_id}", response_model=Item)
def get_handbook_item(category_id: str, item_id: str) -> Item:
    """Get one handbook item with its sections."""
    item = get_repository().snapshot.get_item(category_id, item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Item not found")
    return item


@app.post("/handbook/categories", response_model=Handbook)
def create_category(
    request: NameRequest,
    x_admin_email: Optional[str] = Header(default=None),
    x_admin_password: Optional[str] = Header(default=None),
) -> Handbook:
    """Add a category at the end of the handbook."""
    require_admin(x_admin_email, x_admin_password)
    return apply_change(lambda: get_repository().add_category(request.name))


@app.put("/handbook/categories/{category_id}", response_model=Handbook)
def rename_category(
    category_id: str,
    request: NameRequest,
    x_admin_email: Optional[str] = Header(default=None),
    x_admin_password: Optional[str] = Header(default=None),
) -> Handbook:
    """Rename a category."""
    require_admin(x_admin_email, x_admin_password)
    return apply_change(lambda: get_repository().rename_category(category_id, request.name))


@app.delete("/handbook/categories/{category_id}", response_model=Handbook)
def delete_category(
    category_id: str,
    x_admin_email: Optional[str] = Header(default=None),
    x_admin_password: Optional[str] = Header(default=None),
) -> Handbook:
    """Delete a category and everything in it."""
    require_admin(x_admin_email, x_admin_password)
    return apply_change(lambda: get_repository().delete_category(category_id))


@app.post("/handbook/categories/{category_id}/items", response_model=Handbook)
def create_item(
    category_id: str,
    request: NameRequest,
    x_admin_email: Optional[str] = Header(default=None),
    x_admin_password: Optional[str] = Header(default=None),
) -> Handbook:
    """Add an empty item to a category."""
    require_admin(x_admin_email, x_admin_password)
    return apply_change(lambda: get_repository().add_item(category_id, request.name))


@app.put("/handbook/categories/{category_id}/items/{item_id}", response_model=Handbook)
def update_item(
    category_id: str,
    item_id: str,
    item: Item,
    x_admin_email: Optional[str] = Header(default=None),
    x_admin_password: Optional[str] = Header(default=None),
) -> Handbook:
    """Replace an item wholesale (name, image, sections).

    The item id in the path wins over any id in the body.
    """
    require_admin(x_admin_email, x_admin_password)
    updated = item.model_copy(update={"id": item_id})
    return apply_change(lambda: get_repository().update_item(category_id, updated))


@app.delete("/handbook/categories/{category_id}/items/{item_id}", response_model=Handbook)
def delete_item(
    category_id: str,
    item_id: str,
    x_admin_email: Optional[str] = Header(default=None),
    x_admin_password: Optional[str] = Header(default=None),
) -> Handbook:
    """Delete a single item."""
    require_admin(x_admin_email, x_admin_password)
    return apply_change(lambda: get_repository().delete_item(category_id, item_id))


@app.post("/handbook/reset", response_model=Handbook)
def reset_handbook(
    x_admin_email: Optional[str] = Header(default=None),
    x_admin_password: Optional[str] = Header(default=None),
) -> Handbook:
    """Restore the seed handbook."""
    require_admin(x_admin_email, x_admin_password)
    return get_repository().reset()


# Chat

class ChatRequest(BaseModel):
    """Chat request: the new message plus all prior turns."""
    message: str
    history: list[ChatTurn] = []


class ChatResponse(BaseModel):
    """Chat reply (the apology text when the model call failed)."""
    reply: str


@app.post("/chat", response_model=ChatResponse)
async def chat(request: ChatRequest) -> ChatResponse:
    """Ask the Prakriti Mitra assistant."""
    if not request.message.strip():
        raise HTTPException(status_code=400, detail="Message must not be empty")
    reply = await get_chat_bridge().send(request.message, request.history)
    return ChatResponse(reply=reply)
