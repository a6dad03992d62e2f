"""
api/routes/v1/todos.py -- Owner-scoped Todo routes.

Routes:
  POST   /todos              -- create a todo owned by the caller
  GET    /todos              -- list the caller's todos
  GET    /todos/{todo_id}    -- fetch one todo
  PATCH  /todos/{todo_id}    -- change title / content / completed
  DELETE /todos/{todo_id}    -- delete a todo

Ownership:
  Every handler that takes a todo_id goes through _load_owned(), which asks
  AuthorizationGuard before returning the row. A todo owned by someone else
  raises the same ResourceNotFound as a missing id, so both produce an
  identical 404 and other users' ids cannot be probed.
"""

from fastapi import APIRouter, Depends, Request, Response

from api.models import TodoCreate, TodoResponse, TodoUpdate
from auth.dependencies import get_current_user
from auth.errors import ResourceNotFound
from auth.guard import AuthorizationGuard
from auth.models import UserIdentity
from todos.models import Todo
from todos.store import TodoStore

# All todo routes require authentication.
router = APIRouter(dependencies=[Depends(get_current_user)])


def _load_owned(request: Request, todo_id: int, user: UserIdentity) -> Todo:
    store: TodoStore = request.app.state.todo_store
    guard: AuthorizationGuard = request.app.state.guard
    todo = store.get(todo_id)
    if todo is None:
        raise ResourceNotFound()
    guard.require_owner(user, todo.owner_id)
    return todo


@router.post("/todos", response_model=TodoResponse, status_code=201)
def create_todo(
    request: Request,
    body: TodoCreate,
    user: UserIdentity = Depends(get_current_user),
) -> TodoResponse:
    """Create a todo. The owner is always the authenticated caller."""
    store: TodoStore = request.app.state.todo_store
    todo = store.create(Todo(owner_id=user.id, title=body.title, content=body.content))
    return TodoResponse.from_todo(todo)


@router.get("/todos", response_model=list[TodoResponse])
def list_todos(request: Request, user: UserIdentity = Depends(get_current_user)) -> list[TodoResponse]:
    store: TodoStore = request.app.state.todo_store
    return [TodoResponse.from_todo(t) for t in store.list_for_owner(user.id)]


@router.get("/todos/{todo_id}", response_model=TodoResponse)
def get_todo(request: Request, todo_id: int, user: UserIdentity = Depends(get_current_user)) -> TodoResponse:
    return TodoResponse.from_todo(_load_owned(request, todo_id, user))


@router.patch("/todos/{todo_id}", response_model=TodoResponse)
def update_todo(
    request: Request,
    todo_id: int,
    body: TodoUpdate,
    user: UserIdentity = Depends(get_current_user),
) -> TodoResponse:
    """Apply the fields present in the body. Ownership is checked before any write."""
    _load_owned(request, todo_id, user)
    store: TodoStore = request.app.state.todo_store
    store.update(todo_id, **body.model_dump(exclude_none=True))
    updated = store.get(todo_id)
    if updated is None:
        raise ResourceNotFound()
    return TodoResponse.from_todo(updated)


@router.delete("/todos/{todo_id}", status_code=204)
def delete_todo(request: Request, todo_id: int, user: UserIdentity = Depends(get_current_user)) -> Response:
    _load_owned(request, todo_id, user)
    store: TodoStore = request.app.state.todo_store
    store.delete(todo_id)
    return Response(status_code=204)
