"""Test fixtures for routegen tests.

This module provides sample controller sources and small in-memory
declaration objects implementing the extractor's protocols.
"""

import dataclasses

from routegen.ir import ImportRef

DECORATORS_SOURCE = '''
def _marker(*args, **kwargs):
    def decorate(target):
        return target

    return decorate


Controller = Get = Post = Put = Delete = Patch = _marker


class Param:
    def __init__(self, name: str):
        self.name = name


class Params:
    pass


class Body:
    pass


class QueryParams:
    pass
'''

MODELS_SOURCE = '''
from pydantic import BaseModel


class User(BaseModel):
    id: int
    name: str


class CreateUserDto(BaseModel):
    name: str


class UserQuery(BaseModel):
    search: str | None = None


class OrgParams(BaseModel):
    org_id: int


class MemberParams(OrgParams):
    member_id: str
'''

USERS_CONTROLLER_SOURCE = '''
from typing import Annotated, Awaitable

from app.decorators import Body, Controller, Delete, Get, Param, Post, QueryParams
from app.models import CreateUserDto, User, UserQuery


@Controller('/users')
class UsersController:
    @Get('/:id')
    def getUser(self, id: Annotated[int, Param('id')]) -> Awaitable[User]:
        ...

    @Get()
    async def listUsers(self, query: Annotated[UserQuery, QueryParams()]) -> list[User]:
        ...

    @Post()
    def createUser(self, payload: Annotated[CreateUserDto, Body()]) -> Awaitable[None]:
        ...

    @Delete('/:id')
    async def deleteUser(self, id: int = Param('id')) -> None:
        ...

    def helper(self) -> int:
        return 1
'''

MEMBERS_CONTROLLER_SOURCE = '''
from typing import Annotated

from .decorators import Body, Controller, Get, Params, Patch
from .models import MemberParams, User


@Controller('orgs/:org_id/members')
class MembersController:
    @Get('/:member_id')
    async def getMember(self, params: Annotated[MemberParams, Params()]) -> User:
        ...

    @Patch('/:member_id')
    async def renameMember(
        self,
        params: Annotated[MemberParams, Params()],
        name: Annotated[str, Body()],
    ) -> User:
        ...
'''

BROKEN_CONTROLLER_SOURCE = '''
from typing import Annotated

from app.decorators import Controller, Get, Param


@Controller('/orgs')
class OrgsController:
    @Get('/:orgId')
    async def getOrg(self, id: Annotated[int, Param('id')]) -> dict:
        ...
'''

APP_SOURCES = {
    'app/__init__.py': '',
    'app/decorators.py': DECORATORS_SOURCE,
    'app/models.py': MODELS_SOURCE,
    'app/users_controller.py': USERS_CONTROLLER_SOURCE,
    'app/members_controller.py': MEMBERS_CONTROLLER_SOURCE,
}


# =============================================================================
# In-memory declarations
# =============================================================================


@dataclasses.dataclass(frozen=True)
class FakeAnnotation:
    name: str
    arguments: tuple[str, ...] = ()


@dataclasses.dataclass
class FakeType:
    text: str
    imports: tuple[ImportRef, ...] = ()
    wrapped: 'FakeType | None' = None
    void: bool = False
    properties: dict[str, 'FakeType'] = dataclasses.field(default_factory=dict)

    def unwrap_async(self) -> 'FakeType':
        return self.wrapped if self.wrapped is not None else self

    def is_void(self) -> bool:
        return self.void

    def get_property(self, name: str) -> 'FakeType | None':
        return self.properties.get(name)


VOID = FakeType('void', void=True)


def promise_of(inner: FakeType) -> FakeType:
    return FakeType(f'Promise<{inner.text}>', wrapped=inner)


@dataclasses.dataclass
class FakeParameter:
    name: str
    type: FakeType
    annotations: tuple[FakeAnnotation, ...] = ()


@dataclasses.dataclass
class FakeMethod:
    name: str
    annotations: tuple[FakeAnnotation, ...] = ()
    return_type: FakeType = dataclasses.field(default_factory=lambda: VOID)
    parameters: tuple[FakeParameter, ...] = ()


@dataclasses.dataclass
class FakeClass:
    name: str
    annotations: tuple[FakeAnnotation, ...] = ()
    methods: tuple[FakeMethod, ...] = ()


@dataclasses.dataclass
class FakeUnit:
    name: str
    classes: tuple[FakeClass, ...] = ()


def controller(path: str | None = None) -> FakeAnnotation:
    return FakeAnnotation('Controller', (f"'{path}'",) if path is not None else ())


def verb(name: str, path: str | None = None) -> FakeAnnotation:
    return FakeAnnotation(name, (f"'{path}'",) if path is not None else ())


def param(name: str) -> FakeAnnotation:
    return FakeAnnotation('Param', (f"'{name}'",))
