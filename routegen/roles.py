"""Annotation role table.

Maps the fixed, case-sensitive annotation vocabulary to the role each
annotation plays during extraction. Names missing from the table are not
errors: they simply carry no routing meaning.
"""

import dataclasses
import enum

from routegen.ir import Verb

__all__ = [
    'RoleKind',
    'Role',
    'ANNOTATION_ROLES',
    'CONTROLLER',
    'PARAM',
    'PARAMS',
    'BODY',
    'QUERY_PARAMS',
    'lookup_role',
    'verb_for',
]

CONTROLLER = 'Controller'
PARAM = 'Param'
PARAMS = 'Params'
BODY = 'Body'
QUERY_PARAMS = 'QueryParams'


class RoleKind(enum.Enum):
    CONTROLLER = 'controller'
    ROUTE = 'route'
    PATH_PARAM = 'path_param'
    PATH_PARAMS = 'path_params'
    BODY = 'body'
    QUERY_PARAMS = 'query_params'


@dataclasses.dataclass(frozen=True)
class Role:
    kind: RoleKind
    verb: Verb | None = None


ANNOTATION_ROLES: dict[str, Role] = {
    CONTROLLER: Role(RoleKind.CONTROLLER),
    'Get': Role(RoleKind.ROUTE, Verb.GET),
    'Post': Role(RoleKind.ROUTE, Verb.POST),
    'Put': Role(RoleKind.ROUTE, Verb.PUT),
    'Delete': Role(RoleKind.ROUTE, Verb.DELETE),
    'Patch': Role(RoleKind.ROUTE, Verb.PATCH),
    PARAM: Role(RoleKind.PATH_PARAM),
    PARAMS: Role(RoleKind.PATH_PARAMS),
    BODY: Role(RoleKind.BODY),
    QUERY_PARAMS: Role(RoleKind.QUERY_PARAMS),
}


def lookup_role(name: str) -> Role | None:
    return ANNOTATION_ROLES.get(name)


def verb_for(name: str) -> Verb | None:
    role = ANNOTATION_ROLES.get(name)
    if role is None or role.kind is not RoleKind.ROUTE:
        return None
    return role.verb
