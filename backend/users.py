"""
Demonstration users

Sample data for the storefront, kept in process memory and reset on
restart. Routes talk to a ``UserStore`` so the backing store can be swapped
through FastAPI's dependency overrides.
"""
from __future__ import annotations
import threading
import uuid
from typing import Any, Optional, Protocol

from fastapi import APIRouter, Depends, HTTPException

from backend.schemas import User

router = APIRouter(prefix="/users", tags=["Users"])

DEFAULT_USERS: list[dict[str, Any]] = [
    {"userId": "f52e9da6-5962-4e19-b601-62af23d826dc", "firstName": "Steven", "lastName": "Audrey"},
    {"userId": "72c9e37f-f0aa-4c47-8e16-f5edcf230c9a", "firstName": "Lennart", "lastName": "Reckschmidt"},
    {"userId": "4299e898-198e-46cb-8363-8ce729ca94e9", "firstName": "Maryna", "lastName": "Kyrylyuk"},
    {"userId": "a3f45265-f720-424e-871c-ccdc33abf211", "firstName": "Yohana", "lastName": "Priskila"},
]


class UserStore(Protocol):
    def list(self) -> list[dict[str, Any]]: ...
    def get(self, user_id: str) -> Optional[dict[str, Any]]: ...
    def put(self, user: dict[str, Any]) -> dict[str, Any]: ...
    def delete(self, user_id: str) -> bool: ...
    def clear(self) -> None: ...
    def reset(self) -> None: ...


class InMemoryUserStore:
    def __init__(self, defaults: Optional[list[dict[str, Any]]] = None):
        self._defaults = [dict(u) for u in (DEFAULT_USERS if defaults is None else defaults)]
        self._lock = threading.Lock()
        self._users: dict[str, dict[str, Any]] = {}
        self.reset()

    def list(self) -> list[dict[str, Any]]:
        with self._lock:
            return [dict(u) for u in self._users.values()]

    def get(self, user_id: str) -> Optional[dict[str, Any]]:
        with self._lock:
            user = self._users.get(user_id)
            return dict(user) if user else None

    def put(self, user: dict[str, Any]) -> dict[str, Any]:
        with self._lock:
            self._users[user["userId"]] = dict(user)
            return dict(user)

    def delete(self, user_id: str) -> bool:
        with self._lock:
            return self._users.pop(user_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._users.clear()

    def reset(self) -> None:
        with self._lock:
            self._users = {u["userId"]: dict(u) for u in self._defaults}

_store = InMemoryUserStore()

def get_user_store() -> UserStore:
    return _store

# ---------- Routes ----------

@router.get("")
@router.get("/", include_in_schema=False)
def list_users(store: UserStore = Depends(get_user_store)):
    return store.list()

@router.get("/{user_id}")
def get_user(user_id: str, store: UserStore = Depends(get_user_store)):
    user = store.get(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found.")
    return user

@router.post("", status_code=201)
@router.post("/", status_code=201, include_in_schema=False)
def create_user(payload: User, store: UserStore = Depends(get_user_store)):
    return store.put({"userId": str(uuid.uuid4()), **payload.model_dump(exclude_none=True)})

@router.post("/default")
def restore_default_users(store: UserStore = Depends(get_user_store)):
    store.reset()
    return store.list()

@router.put("/{user_id}")
def update_user(user_id: str, payload: User, store: UserStore = Depends(get_user_store)):
    user = store.get(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found.")
    return store.put({**user, **payload.model_dump(exclude_unset=True), "userId": user_id})

@router.delete("")
@router.delete("/", include_in_schema=False)
def delete_all_users(store: UserStore = Depends(get_user_store)):
    store.clear()
    return store.list()

@router.delete("/{user_id}")
def delete_user(user_id: str, store: UserStore = Depends(get_user_store)):
    if not store.delete(user_id):
        raise HTTPException(status_code=404, detail="User not found.")
    return store.list()
