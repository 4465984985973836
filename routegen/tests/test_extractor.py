"""Tests for RouteExtractor against in-memory declarations."""

import pytest

from routegen.exceptions import (
    DuplicateClientError,
    ExtractionError,
    ParameterNotFoundError,
)
from routegen.extractor import RouteExtractor
from routegen.ir import (
    ImportRef,
    LiteralSegment,
    ParameterSegment,
    QueryParameters,
    RequestBody,
    ResponseBody,
    TypeExpr,
    Verb,
)

from .fixtures import (
    VOID,
    FakeAnnotation,
    FakeClass,
    FakeMethod,
    FakeParameter,
    FakeType,
    FakeUnit,
    controller,
    param,
    promise_of,
    verb,
)

NUMBER = FakeType('number')
USER = FakeType('User', imports=(ImportRef('app.models', 'User'),))


def _unit(*methods, base_path='/users', name='UsersController', file='users_controller.py'):
    return FakeUnit(
        file,
        (FakeClass(name, (controller(base_path),), tuple(methods)),),
    )


def _single_route(*methods, **kwargs):
    route_files = RouteExtractor().extract([_unit(*methods, **kwargs)])
    return route_files[0].route_classes[0].routes[0]


class TestFileFilter:
    """Tests for selecting controller units."""

    def test_units_without_controllers_are_dropped(self):
        units = [
            FakeUnit('models.py', (FakeClass('User'),)),
            FakeUnit('empty.py'),
            _unit(),
        ]
        route_files = RouteExtractor().extract(units)
        assert len(route_files) == 1
        assert route_files[0].base_file_name == 'users'

    def test_only_controller_classes_are_extracted(self):
        unit = FakeUnit(
            'users_controller.py',
            (
                FakeClass('Helper'),
                FakeClass('UsersController', (controller('/users'),)),
            ),
        )
        route_file = RouteExtractor().extract_file(unit)
        assert [c.base_name for c in route_file.route_classes] == ['Users']

    def test_unrecognized_class_annotations_are_ignored(self):
        unit = FakeUnit('x_controller.py', (FakeClass('X', (FakeAnnotation('Injectable'),)),))
        assert RouteExtractor().extract([unit]) == []

    def test_annotation_names_are_case_sensitive(self):
        unit = FakeUnit(
            'x_controller.py',
            (FakeClass('XController', (FakeAnnotation('controller', ("'/x'",)),)),),
        )
        assert RouteExtractor().extract([unit]) == []

        route_files = RouteExtractor().extract([_unit(FakeMethod('m', (verb('get'),)))])
        assert route_files[0].route_classes[0].routes == ()


class TestNames:
    """Tests for file and class name derivation."""

    def test_api_name_comes_from_configuration(self):
        route_files = RouteExtractor(api_name='backend').extract([_unit()])
        assert route_files[0].api_name == 'backend'

    def test_file_suffix_is_stripped(self):
        assert RouteExtractor().base_file_name('users_controller.py') == 'users'

    def test_custom_file_suffix(self):
        extractor = RouteExtractor(file_suffix='.controller.ts')
        assert extractor.base_file_name('users.controller.ts') == 'users'

    def test_unconventional_file_name_falls_back_to_stem(self):
        assert RouteExtractor().base_file_name('routes.py') == 'routes'

    @pytest.mark.parametrize(
        'class_name,base_name,client_name',
        [
            ('UsersController', 'Users', 'UsersClient'),
            ('OrgMembersController', 'OrgMembers', 'OrgMembersClient'),
            ('Health', 'Health', 'HealthClient'),
        ],
    )
    def test_controller_suffix_is_stripped(self, class_name, base_name, client_name):
        route_file = RouteExtractor().extract_file(_unit(name=class_name))
        route_class = route_file.route_classes[0]
        assert route_class.base_name == base_name
        assert route_class.client_name == client_name

    def test_duplicate_client_names_are_rejected(self):
        unit = FakeUnit(
            'users_controller.py',
            (
                FakeClass('UsersController', (controller('/a'),)),
                FakeClass('Users', (controller('/b'),)),
            ),
        )
        with pytest.raises(DuplicateClientError) as exc_info:
            RouteExtractor().extract([unit])
        assert exc_info.value.client_name == 'UsersClient'
        assert exc_info.value.file_name == 'users_controller.py'


class TestPathParsing:
    """Tests for route path segmentation."""

    def test_get_user_scenario(self):
        route = _single_route(
            FakeMethod(
                'getUser',
                (verb('Get', '/:id'),),
                promise_of(USER),
                (FakeParameter('id', NUMBER, (param('id'),)),),
            )
        )
        assert route.name == 'getUser'
        assert route.verb is Verb.GET
        assert route.path_segments == (
            LiteralSegment(''),
            LiteralSegment('users'),
            ParameterSegment('id', TypeExpr('number')),
        )
        assert route.response_body == ResponseBody(
            TypeExpr('User', (ImportRef('app.models', 'User'),))
        )
        assert route.request_body is None
        assert route.query_parameters is None

    @pytest.mark.parametrize(
        'base_path,route_path',
        [
            ('/users', '/:id'),
            ('users', ':id'),
            ('', ''),
            ('/a/b/', '/c'),
            ('orgs/:id/members', ''),
        ],
    )
    def test_segments_mirror_split_path(self, base_path, route_path):
        route = _single_route(
            FakeMethod(
                'm',
                (verb('Get', route_path),),
                parameters=(FakeParameter('id', NUMBER, (param('id'),)),),
            ),
            base_path=base_path,
        )
        parts = (base_path + route_path).split('/')
        assert len(route.path_segments) == len(parts)
        for segment, part in zip(route.path_segments, parts):
            if part.startswith(':'):
                assert segment == ParameterSegment(part[1:], TypeExpr('number'))
            else:
                assert segment == LiteralSegment(part)

    def test_missing_controller_argument_means_empty_base_path(self):
        unit = FakeUnit(
            'a_controller.py',
            (
                FakeClass(
                    'AController',
                    (controller(),),
                    (FakeMethod('ping', (verb('Get', 'ping'),)),),
                ),
            ),
        )
        route = RouteExtractor().extract([unit])[0].route_classes[0].routes[0]
        assert route.path_segments == (LiteralSegment('ping'),)

    def test_non_literal_argument_contributes_nothing(self):
        route = _single_route(
            FakeMethod('m', (FakeAnnotation('Get', ('PATHS.users',)),)),
        )
        assert route.path_segments == (LiteralSegment(''), LiteralSegment('users'))

    def test_double_quoted_literal(self):
        route = _single_route(
            FakeMethod('m', (FakeAnnotation('Get', ('"/all"',)),)),
        )
        assert route.path == '/users/all'

    def test_parameter_constraint_is_dropped(self):
        route = _single_route(
            FakeMethod(
                'm',
                (verb('Get', r'/:id(\d+)'),),
                parameters=(FakeParameter('id', NUMBER, (param('id'),)),),
            ),
        )
        assert route.path_segments[-1] == ParameterSegment('id', TypeExpr('number'))

    @pytest.mark.parametrize(
        'route_path,suffix',
        [
            ('/:name.json', '.json'),
            ('/:name-raw', '-raw'),
            (r'/:name(\w+).txt', '.txt'),
        ],
    )
    def test_text_after_parameter_is_kept_as_suffix(self, route_path, suffix):
        route = _single_route(
            FakeMethod(
                'm',
                (verb('Get', route_path),),
                parameters=(
                    FakeParameter('name', FakeType('string'), (param('name'),)),
                ),
            ),
        )
        assert route.path_segments[-1] == ParameterSegment(
            'name', TypeExpr('string'), suffix
        )
        assert route.path == f'/users/:name{suffix}'

    def test_colon_inside_segment_is_literal(self):
        route = _single_route(FakeMethod('m', (verb('Post', '/v1:batch'),)))
        assert route.path_segments[-1] == LiteralSegment('v1:batch')


class TestRouteSelection:
    """Tests for picking routed methods and their verb."""

    @pytest.mark.parametrize('name', ['Get', 'Post', 'Put', 'Delete', 'Patch'])
    def test_every_verb_annotation(self, name):
        route = _single_route(FakeMethod('m', (verb(name),)))
        assert route.verb is Verb[name.upper()]

    def test_methods_without_verb_are_skipped(self):
        unit = _unit(
            FakeMethod('helper'),
            FakeMethod('decorated', (FakeAnnotation('UseGuards', ('AuthGuard',)),)),
            FakeMethod('list', (verb('Get'),)),
        )
        routes = RouteExtractor().extract([unit])[0].route_classes[0].routes
        assert [r.name for r in routes] == ['list']

    def test_first_verb_annotation_wins(self):
        route = _single_route(FakeMethod('m', (verb('Put', '/a'), verb('Patch', '/b'))))
        assert route.verb is Verb.PUT
        assert route.path == '/users/a'

    def test_routes_keep_declaration_order(self):
        unit = _unit(
            FakeMethod('b', (verb('Get'),)),
            FakeMethod('a', (verb('Post'),)),
            FakeMethod('c', (verb('Delete'),)),
        )
        routes = RouteExtractor().extract([unit])[0].route_classes[0].routes
        assert [r.name for r in routes] == ['b', 'a', 'c']

    def test_duplicate_route_names_are_rejected(self):
        unit = _unit(
            FakeMethod('m', (verb('Get'),)),
            FakeMethod('m', (verb('Post'),)),
        )
        with pytest.raises(ExtractionError) as exc_info:
            RouteExtractor().extract([unit])
        assert "Route 'm' is declared more than once" in str(exc_info.value)
        assert 'UsersController' in str(exc_info.value)

    def test_repeated_name_without_verb_is_not_a_route(self):
        unit = _unit(
            FakeMethod('m', (verb('Get'),)),
            FakeMethod('m'),
        )
        routes = RouteExtractor().extract([unit])[0].route_classes[0].routes
        assert [r.name for r in routes] == ['m']


class TestParameterTypes:
    """Tests for resolving path parameter types."""

    def test_params_binding_uses_property_type(self):
        params_type = FakeType(
            'OrgParams', properties={'orgId': FakeType('string'), 'id': NUMBER}
        )
        route = _single_route(
            FakeMethod(
                'm',
                (verb('Get', '/:orgId/:id'),),
                parameters=(
                    FakeParameter('params', params_type, (FakeAnnotation('Params'),)),
                ),
            ),
        )
        assert route.path_parameters == (
            ParameterSegment('orgId', TypeExpr('string')),
            ParameterSegment('id', TypeExpr('number')),
        )

    def test_param_binding_with_other_name_is_skipped(self):
        route = _single_route(
            FakeMethod(
                'm',
                (verb('Get', '/:b'),),
                parameters=(
                    FakeParameter('a', FakeType('A'), (param('a'),)),
                    FakeParameter('b', FakeType('B'), (param('b'),)),
                ),
            ),
        )
        assert route.path_parameters == (ParameterSegment('b', TypeExpr('B')),)

    def test_params_without_property_keeps_scanning(self):
        route = _single_route(
            FakeMethod(
                'm',
                (verb('Get', '/:id'),),
                parameters=(
                    FakeParameter('params', FakeType('Empty'), (FakeAnnotation('Params'),)),
                    FakeParameter('id', NUMBER, (param('id'),)),
                ),
            ),
        )
        assert route.path_parameters == (ParameterSegment('id', TypeExpr('number')),)

    def test_missing_binding_raises_parameter_not_found(self):
        method = FakeMethod(
            'getOrg',
            (verb('Get', '/:orgId'),),
            parameters=(FakeParameter('id', NUMBER, (param('id'),)),),
        )
        with pytest.raises(ParameterNotFoundError) as exc_info:
            RouteExtractor().extract([_unit(method, name='OrgsController')])
        error = exc_info.value
        assert error.route_name == 'getOrg'
        assert error.parameter_name == 'orgId'
        assert error.class_name == 'OrgsController'
        assert 'orgId' in str(error)
        assert 'getOrg' in str(error)

    def test_unannotated_parameter_does_not_bind(self):
        method = FakeMethod(
            'm', (verb('Get', '/:id'),), parameters=(FakeParameter('id', NUMBER),)
        )
        with pytest.raises(ParameterNotFoundError):
            RouteExtractor().extract([_unit(method)])


class TestBodies:
    """Tests for request body, response body and query parameters."""

    def test_post_with_body_and_void_response(self):
        dto = FakeType('CreateUserDto')
        route = _single_route(
            FakeMethod(
                'createUser',
                (verb('Post'),),
                promise_of(VOID),
                (FakeParameter('payload', dto, (FakeAnnotation('Body'),)),),
            ),
        )
        assert route.verb is Verb.POST
        assert route.request_body == RequestBody('payload', TypeExpr('CreateUserDto'))
        assert route.response_body is None
        assert route.query_parameters is None

    def test_async_body_type_is_unwrapped_once(self):
        inner = FakeType('Dto')
        route = _single_route(
            FakeMethod(
                'm',
                (verb('Put'),),
                parameters=(
                    FakeParameter('body', promise_of(promise_of(inner)), (FakeAnnotation('Body'),)),
                ),
            ),
        )
        assert route.request_body.type == TypeExpr('Promise<Dto>')

    def test_first_body_parameter_wins(self):
        route = _single_route(
            FakeMethod(
                'm',
                (verb('Post'),),
                parameters=(
                    FakeParameter('first', FakeType('A'), (FakeAnnotation('Body'),)),
                    FakeParameter('second', FakeType('B'), (FakeAnnotation('Body'),)),
                ),
            ),
        )
        assert route.request_body.binding_name == 'first'

    def test_synchronous_return_type_is_kept(self):
        route = _single_route(FakeMethod('m', (verb('Get'),), USER))
        assert route.response_body.type.text == 'User'

    def test_unwrapped_void_suppresses_response(self):
        route = _single_route(FakeMethod('m', (verb('Delete'),), VOID))
        assert route.response_body is None

    def test_query_parameters(self):
        query = FakeType('UserQuery')
        route = _single_route(
            FakeMethod(
                'm',
                (verb('Get'),),
                parameters=(
                    FakeParameter('filters', query, (FakeAnnotation('QueryParams'),)),
                ),
            ),
        )
        assert route.query_parameters == QueryParameters('filters', TypeExpr('UserQuery'))
