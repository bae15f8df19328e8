"""Wrappers for form handlers.

A form action takes the previous `ActionState` and the submitted form and
returns a new state. These wrappers validate the form against a pydantic
schema first, and optionally insist on a signed in user.
"""

import functools
from typing import Any, Awaitable, Callable, Mapping, TypeAlias, TypeVar

from pydantic import BaseModel, ValidationError

from domain.models import User


ActionState: TypeAlias = dict[str, Any]
FormData: TypeAlias = Mapping[str, Any]
GetUser: TypeAlias = Callable[[], Awaitable[User | None]]

S = TypeVar("S", bound=BaseModel)
T = TypeVar("T")


class NotAuthenticated(Exception):
    pass


def first_error(e: ValidationError) -> str:
    errors = e.errors()
    if not errors:
        return str(e)
    return errors[0]["msg"]


def _validate(schema: type[S], form_data: FormData) -> S | ActionState:
    try:
        return schema.model_validate(dict(form_data))
    except ValidationError as e:
        return {"error": first_error(e)}


def validated_action(
    schema: type[S],
    action: Callable[[S, FormData], Awaitable[T]],
) -> Callable[[ActionState, FormData], Awaitable[T | ActionState]]:
    @functools.wraps(action)
    async def wrapper(prev_state: ActionState, form_data: FormData) -> T | ActionState:
        data = _validate(schema, form_data)
        if not isinstance(data, schema):
            return data
        return await action(data, form_data)

    return wrapper


def validated_action_with_user(
    schema: type[S],
    action: Callable[[S, FormData, User], Awaitable[T]],
    *,
    get_user: GetUser,
) -> Callable[[ActionState, FormData], Awaitable[T | ActionState]]:
    @functools.wraps(action)
    async def wrapper(prev_state: ActionState, form_data: FormData) -> T | ActionState:
        user = await get_user()
        if user is None:
            raise NotAuthenticated("User is not authenticated")

        data = _validate(schema, form_data)
        if not isinstance(data, schema):
            return data
        return await action(data, form_data, user)

    return wrapper
