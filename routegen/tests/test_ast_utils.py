"""Test suite for ast_utils module.

This module tests the AST helper functions and the ImportCollector used to
build generated client modules.
"""

import ast

import pytest

from routegen.ast_utils import (
    ImportCollector,
    _all,
    _assign,
    _async_method,
    _call,
    _class,
    _dict,
    _fstring,
    _name,
    _type,
)
from routegen.ir import ImportRef, TypeExpr


def _unparse(statement):
    return ast.unparse(ast.fix_missing_locations(statement))


class TestNameFunction:
    """Tests for _name() function."""

    def test_name_has_load_context(self):
        """Test that the Name node has Load context."""
        result = _name('bar')
        assert result.id == 'bar'
        assert isinstance(result.ctx, ast.Load)


class TestAssignFunction:
    """Tests for _assign() function."""

    def test_target_gets_store_context(self):
        """Test that the target Name is converted to Store context."""
        result = _assign(_name('url'), ast.Constant(value='/users'))
        assert isinstance(result.targets[0].ctx, ast.Store)
        assert _unparse(result) == "url = '/users'"


class TestDictFunction:
    """Tests for _dict() function."""

    def test_entries_in_order(self):
        result = _dict([('url', _name('url')), ('method', ast.Constant(value='GET'))])
        assert ast.unparse(result) == "{'url': url, 'method': 'GET'}"

    def test_spread_comes_first(self):
        result = _dict([('url', _name('url'))], spread=_name('options'))
        assert ast.unparse(result) == "{**options, 'url': url}"


class TestFstringFunction:
    """Tests for _fstring() function."""

    def test_plain_text_collapses_to_constant(self):
        """Test that text without expressions is a plain string."""
        result = _fstring(['', '/', 'users'])
        assert isinstance(result, ast.Constant)
        assert result.value == '/users'

    def test_adjacent_text_is_merged(self):
        result = _fstring(['', '/', 'users', '/', _name('id')])
        assert isinstance(result, ast.JoinedStr)
        assert len(result.values) == 2
        assert ast.unparse(result) == "f'/users/{id}'"

    def test_expression_only(self):
        assert ast.unparse(_fstring([_name('id')])) == "f'{id}'"

    def test_empty(self):
        assert ast.unparse(_fstring([])) == "''"


class TestAsyncMethodFunction:
    """Tests for _async_method() function."""

    def test_self_is_first_argument(self):
        method = _async_method(
            'ping',
            [ast.arg(arg='options', annotation=_name('RequestOptions'))],
            [ast.Return(value=ast.Await(value=_call(_name('request'))))],
            returns=ast.Constant(value=None),
        )
        assert _unparse(method) == (
            'async def ping(self, options: RequestOptions) -> None:\n'
            '    return await request()'
        )


class TestClassAndAll:
    """Tests for _class() and _all()."""

    def test_empty_class_gets_pass(self):
        assert _unparse(_class('EmptyClient', [])) == 'class EmptyClient:\n    pass'

    def test_all_is_a_tuple(self):
        assert _unparse(_all(['AClient', 'BClient'])) == "__all__ = ('AClient', 'BClient')"


class TestTypeFunction:
    """Tests for _type() function."""

    @pytest.mark.parametrize(
        'text', ['int', 'list[User]', 'dict[str, int | None]', "Literal['a', 'b']"]
    )
    def test_round_trips_text(self, text):
        assert ast.unparse(_type(TypeExpr(text))) == text

    def test_invalid_text_raises_syntax_error(self):
        with pytest.raises(SyntaxError):
            _type(TypeExpr('Promise<User>'))


class TestImportCollector:
    """Tests for ImportCollector."""

    def _render(self, collector):
        return [_unparse(statement) for statement in collector.to_ast()]

    def test_deduplicates_and_sorts_names(self):
        collector = ImportCollector()
        collector.add_import('app.models', 'User')
        collector.add_import('app.models', 'CreateUserDto')
        collector.add_import('app.models', 'User')
        assert self._render(collector) == ['from app.models import CreateUserDto, User']

    def test_category_order(self):
        """Test stdlib, then third-party, then relative imports."""
        collector = ImportCollector()
        collector.add_import('.models', 'User')
        collector.add_import('pydantic', 'BaseModel')
        collector.add_import('typing', 'Any')
        collector.add_module('datetime')
        assert self._render(collector) == [
            'import datetime',
            'from typing import Any',
            'from pydantic import BaseModel',
            'from .models import User',
        ]

    def test_add_ref(self):
        collector = ImportCollector()
        collector.add_refs(
            [
                ImportRef('app.models', 'User', 'U'),
                ImportRef('app.models', None, 'models'),
                ImportRef('builtins', 'int'),
            ]
        )
        assert self._render(collector) == [
            'import app.models as models',
            'from app.models import User as U',
        ]

